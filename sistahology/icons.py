"""Admin-selectable icons.

Site sections store an icon by name. Names resolve against a closed set of
variants; anything unknown falls back to ``Icon.HEART``.
"""

import enum
import logging
import re
from functools import partial
from html import escape
from typing import Callable, Optional

logger = logging.getLogger("sistahology.icons")


class Icon(str, enum.Enum):
    HEART = "Heart"
    USERS = "Users"
    SPARKLES = "Sparkles"
    BOOK_OPEN = "BookOpen"
    LOCK = "Lock"
    SEARCH = "Search"
    CALENDAR = "Calendar"
    MAIL = "Mail"
    PHONE = "Phone"
    MAP_PIN = "MapPin"
    STAR = "Star"
    FLOWER_2 = "Flower2"
    GIFT = "Gift"
    SMILE = "Smile"
    TRENDING_UP = "TrendingUp"
    TARGET = "Target"
    AWARD = "Award"
    ZAP = "Zap"
    COFFEE = "Coffee"
    SUN = "Sun"

    @property
    def slug(self) -> str:
        """Kebab-case name used by Lucide's ``data-lucide`` attribute."""
        return re.sub(r'(?<=[a-z0-9])(?=[A-Z])|(?<=[a-z])(?=[0-9])', '-', self.value).lower()


FALLBACK_ICON = Icon.HEART
ICON_NAMES = frozenset(icon.value for icon in Icon)

IconRenderer = Callable[[Optional[str], bool], str]


def _lucide_placeholder(icon: Icon, class_name: Optional[str], filled: bool) -> str:
    attrs = [f'data-lucide="{icon.slug}"']
    if class_name:
        attrs.append(f'class="{escape(class_name)}"')
    if filled:
        attrs.append('fill="currentColor"')
    return f'<i {" ".join(attrs)}></i>'


RENDERERS: dict[Icon, IconRenderer] = {icon: partial(_lucide_placeholder, icon) for icon in Icon}


def is_known_icon(name: object) -> bool:
    return isinstance(name, str) and name in ICON_NAMES


def resolve_icon(name: Optional[str]) -> Icon:
    if is_known_icon(name):
        return Icon(name)
    logger.debug("Unknown icon %r, using %s", name, FALLBACK_ICON.value)
    return FALLBACK_ICON


def render_icon(name: Optional[str], class_name: Optional[str] = None, filled: bool = False) -> str:
    return RENDERERS[resolve_icon(name)](class_name, filled)
