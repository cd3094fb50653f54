"""Rule sets for the application's forms."""

from typing import Any, Mapping, NamedTuple

from .core import FormController
from .icons import is_known_icon
from .models import FieldValue, ValidationRule

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class FormSchema(NamedTuple):
    initial_values: Mapping[str, FieldValue]
    rules: Mapping[str, ValidationRule]

    def controller(self, **kwargs: Any) -> FormController:
        return FormController(self.initial_values, self.rules, **kwargs)


_EMAIL = ValidationRule(required=True, pattern=EMAIL_PATTERN, message="Please enter a valid email address")

CONTACT_FORM = FormSchema(
    initial_values={"name": "", "email": "", "subject": "", "message": ""},
    rules={
        "name": ValidationRule(required=True, max_length=100),
        "email": _EMAIL,
        "subject": ValidationRule(required=True, max_length=200),
        "message": ValidationRule(required=True, max_length=5000),
    },
)

# Password confirmation is a cross-field check left to the caller.
REGISTER_FORM = FormSchema(
    initial_values={"name": "", "email": "", "password": "", "confirm_password": ""},
    rules={
        "name": ValidationRule(required=True),
        "email": _EMAIL,
        "password": ValidationRule(required=True, min_length=6),
        "confirm_password": ValidationRule(required=True),
    },
)

LOGIN_FORM = FormSchema(
    initial_values={"email": "", "password": ""},
    rules={
        "email": _EMAIL,
        "password": ValidationRule(required=True),
    },
)

RESET_PASSWORD_FORM = FormSchema(
    initial_values={"password": "", "confirm_password": ""},
    rules={
        "password": ValidationRule(
            required=True, min_length=8, message="Password must be at least 8 characters"
        ),
        "confirm_password": ValidationRule(required=True),
    },
)

SECTION_ICON_RULE = ValidationRule(custom=is_known_icon, message="Please choose an icon from the list")

JOURNAL_FORM = FormSchema(
    initial_values={"journal_name": "", "color": "#FF69B4", "icon": ""},
    rules={
        "journal_name": ValidationRule(
            required=True, max_length=50, message="Journal name must be between 1 and 50 characters"
        ),
        "color": ValidationRule(pattern=HEX_COLOR_PATTERN, message="Color must be a hex value like #FF69B4"),
    },
)

ENTRY_FORM = FormSchema(
    initial_values={"journal_id": "", "entry_date": None, "content": ""},
    rules={
        "journal_id": ValidationRule(required=True, message="Please select a journal"),
        "entry_date": ValidationRule(required=True, message="Please pick a date"),
        "content": ValidationRule(required=True, message="Entry content cannot be empty"),
    },
)
