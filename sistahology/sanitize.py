"""HTML sanitization for admin-authored CMS content.

Blog posts and page sections are written in the rich-text editor and may
carry the editor's styling classes and inline SVG icons. Everything outside
``ADMIN_CONTENT_POLICY`` is removed before the markup is stored or rendered.
"""

import re

import nh3

from .models import SanitizationPolicy


_TEXT_CLASSES = frozenset({
    'text-sistah-pink', 'text-sistah-rose', 'text-sistah-purple',
    'text-white', 'text-white/80', 'text-white/90', 'text-pink-300',
})

_TYPE_CLASSES = frozenset({
    'text-sm', 'text-lg', 'text-xl', 'text-5xl', 'md:text-xl', 'md:text-7xl', 'text-center',
    'font-semibold', 'font-bold', 'font-extrabold', 'italic', 'underline',
    'leading-tight', 'leading-relaxed', 'tracking-tight', 'drop-shadow-2xl',
})

_SPACING_CLASSES = frozenset({
    'my-4', 'my-6', 'my-8', 'mt-4', 'mt-6', 'mt-8', 'mt-12', 'mb-4', 'mb-6', 'mb-8',
    'pt-4', 'pt-6', 'pt-8', 'pb-4', 'pb-6', 'pb-8', 'space-y-2', 'space-y-5',
})

# Gradient call-to-action button used by the home page hero.
_BUTTON_CLASSES = frozenset({
    'bg-gradient-to-r', 'from-pink-500', 'via-pink-500', 'to-pink-600',
    'hover:from-pink-600', 'hover:via-rose-600', 'hover:to-pink-700',
    'px-8', 'py-3', 'md:px-10', 'md:py-4', 'rounded-full', 'shadow-2xl',
    'transform', 'hover:scale-105', 'transition-all', 'duration-300', 'inline-block',
})

_LIST_CLASSES = frozenset({'list-disc', 'list-decimal', 'list-inside', 'ml-6', 'pl-6'})

_BLOCK_CLASSES = _TEXT_CLASSES | _TYPE_CLASSES | _SPACING_CLASSES

ADMIN_CONTENT_POLICY = SanitizationPolicy(
    tags=frozenset({
        'h1', 'h2', 'h3', 'p', 'em', 'strong',
        'span', 'a', 'br', 'div', 'ul', 'ol', 'li',
        'svg', 'path',
    }),
    attributes={
        'a': frozenset({'href', 'target', 'rel', 'class'}),
        'span': frozenset({'class'}),
        'div': frozenset({'class'}),
        'p': frozenset({'class'}),
        'h1': frozenset({'class'}),
        'h2': frozenset({'class'}),
        'h3': frozenset({'class'}),
        'ul': frozenset({'class'}),
        'ol': frozenset({'class'}),
        'li': frozenset({'class'}),
        'strong': frozenset({'class'}),
        'em': frozenset({'class'}),
        'svg': frozenset({
            'class', 'viewBox', 'width', 'height', 'fill', 'stroke',
            'stroke-width', 'stroke-linecap', 'stroke-linejoin',
        }),
        'path': frozenset({'d', 'fill', 'stroke', 'stroke-width'}),
    },
    allowed_classes={
        'span': _TEXT_CLASSES | _TYPE_CLASSES,
        'div': _BLOCK_CLASSES | {
            'hero-content', 'h-1', 'w-20', 'rounded-full', 'overflow-hidden',
            'bg-pink-300', 'bg-pink-400', 'bg-pink-500',
            'bg-gradient-to-r', 'from-pink-300', 'to-pink-300',
            'border-t', 'border-b', 'border-white/20', 'border-pink-300',
            'flex', 'justify-center', 'items-center', 'space-x-4',
        },
        'h1': _BLOCK_CLASSES,
        'h2': _BLOCK_CLASSES,
        'h3': _BLOCK_CLASSES,
        'p': _BLOCK_CLASSES,
        'ul': _BLOCK_CLASSES | _LIST_CLASSES,
        'ol': _BLOCK_CLASSES | _LIST_CLASSES,
        'li': _BLOCK_CLASSES | _LIST_CLASSES,
        'strong': _TEXT_CLASSES | _TYPE_CLASSES,
        'em': _TEXT_CLASSES | _TYPE_CLASSES,
        'a': _TEXT_CLASSES | _TYPE_CLASSES | _BUTTON_CLASSES,
        'svg': frozenset({'w-8', 'h-8', 'text-pink-300', 'floating-flower'}),
    },
)

# nh3 serializes every attribute as name="value" with '"' escaped, so a
# quoted value never contains a bare double quote.
_ANCHOR_RE = re.compile(r'<a((?:\s+[^\s="/>]+="[^"]*")*)\s*>')
_ATTR_RE = re.compile(r'([^\s="/>]+)="([^"]*)"')


def _ensure_noopener(match: re.Match) -> str:
    attrs = dict(_ATTR_RE.findall(match.group(1)))
    if attrs.get('target') != '_blank':
        return match.group(0)

    rel = attrs.get('rel', '').split()
    if 'noopener' in rel:
        return match.group(0)
    rel.append('noopener')
    attrs['rel'] = ' '.join(rel)

    rendered = ''.join(f' {name}="{value}"' for name, value in attrs.items())
    return f'<a{rendered}>'


class ContentSanitizer:
    """
    Allow-list HTML cleaner.

    Attributes:
        policy (SanitizationPolicy): Tags, attributes, classes and URL schemes
            that survive cleaning.
    """

    def __init__(self, policy: SanitizationPolicy = ADMIN_CONTENT_POLICY):
        self.policy = policy
        self._options = policy.nh3_options()

    def sanitize(self, html: str | None) -> str:
        """
        Clean ``html`` against the policy.

        Disallowed tags are unwrapped (``script`` and ``style`` are removed
        together with their content), disallowed attributes, class tokens and
        URL schemes are dropped, and links opening a new tab get
        ``rel="noopener"``. Malformed markup is parsed leniently; this never
        raises for text input.

        Args:
            html: Raw markup. ``None`` is treated as empty.

        Returns:
            str: Sanitized markup.
        """
        if not html:
            return ''
        cleaned = nh3.clean(str(html), **self._options)
        return _ANCHOR_RE.sub(_ensure_noopener, cleaned)

    __call__ = sanitize


_admin_sanitizer = ContentSanitizer()


def sanitize_html(html: str | None) -> str:
    return _admin_sanitizer.sanitize(html)
