import datetime
import re
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


FieldValue = Union[str, int, float, bool, datetime.date, datetime.datetime, None]


class ValidationRule(BaseModel):
    """Declarative checks for a single form field.

    Checks run in a fixed order (required, min length, max length, pattern,
    custom) and stop at the first failure.
    """

    required: bool = False
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[re.Pattern] = None
    custom: Optional[Callable[[Any], bool]] = None
    message: Optional[str] = None

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @field_validator('pattern', mode='before')
    @classmethod
    def _compile_pattern(cls, value: Any) -> Any:
        if isinstance(value, str):
            return re.compile(value)
        return value


class ValidationErrorDetail(BaseModel):
    field: str
    message: str
    input_value: Any
    sanitized_value: Any | None = None


class FormState(BaseModel):
    values: dict[str, Any]
    errors: dict[str, str] = {}
    touched: dict[str, bool] = {}
    is_submitting: bool = False

    @property
    def is_valid(self) -> bool:
        # Only reflects errors already computed.
        return not self.errors


class FormSubmission(BaseModel):
    is_valid: bool
    values: dict[str, Any] = {}
    errors: list[ValidationErrorDetail] = []
    sanitized_data: dict[str, Any] = {}


class SanitizationPolicy(BaseModel):
    tags: frozenset[str]
    attributes: dict[str, frozenset[str]] = Field(default_factory=dict)
    allowed_classes: dict[str, frozenset[str]] = Field(default_factory=dict)
    url_schemes: frozenset[str] = frozenset({'http', 'https', 'mailto'})
    clean_content_tags: frozenset[str] = frozenset({'script', 'style'})
    strip_comments: bool = True

    model_config = ConfigDict(frozen=True)

    def nh3_options(self) -> dict[str, Any]:
        """Keyword arguments for ``nh3.clean``.

        ammonia refuses ``class`` in a tag's attribute list when that tag also
        has a class allow-list, and refuses ``rel`` while ``link_rel`` is set,
        so ``class`` is only granted through ``allowed_classes`` and ``rel``
        handling is left to the caller.
        """
        attributes = {
            tag: set(attrs) - {'class'} if tag in self.allowed_classes else set(attrs)
            for tag, attrs in self.attributes.items()
        }
        return {
            'tags': set(self.tags),
            'clean_content_tags': set(self.clean_content_tags),
            'attributes': attributes,
            'allowed_classes': {tag: set(classes) for tag, classes in self.allowed_classes.items()},
            'url_schemes': set(self.url_schemes),
            'strip_comments': self.strip_comments,
            'link_rel': None,
        }
