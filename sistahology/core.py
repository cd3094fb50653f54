import datetime
import inspect
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from multidict import MultiMapping

from .models import FieldValue, FormState, ValidationRule
from .notify import Notifier, ToastKey

logger = logging.getLogger("sistahology.forms")

SubmitAction = Callable[[dict[str, FieldValue]], Union[Awaitable[None], None]]
ErrorHandler = Callable[[Exception], None]

_BOOL_MAP = {
    "true": True, "1": True, "yes": True, "on": True,
    "false": False, "0": False, "no": False, "off": False,
}


def _is_empty(value: Any) -> bool:
    if isinstance(value, str):
        return not value.strip()
    return not value


class FormController:
    """
    State for a single form: values, per-field errors, touched flags and the
    submission in flight.

    Args:
        initial_values: Field name to starting value. The key set is fixed for
            the lifetime of the controller.
        validation_rules: Field name to ``ValidationRule`` (or a dict of its
            fields). Fields without a rule are never validated.
        on_submit: Action called with the current values on a valid submit.
            May be a coroutine function.
        on_error: Receives the exception when ``on_submit`` fails.
        notifier: When given, a failed submit also raises an error toast.
    """

    def __init__(
        self,
        initial_values: Mapping[str, FieldValue],
        validation_rules: Optional[Mapping[str, Union[ValidationRule, Mapping[str, Any]]]] = None,
        on_submit: Optional[SubmitAction] = None,
        on_error: Optional[ErrorHandler] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.initial_values = dict(initial_values)
        self.rules = {
            name: rule if isinstance(rule, ValidationRule) else ValidationRule.model_validate(rule)
            for name, rule in (validation_rules or {}).items()
        }
        self.on_submit = on_submit
        self.on_error = on_error
        self.notifier = notifier
        self._values = dict(self.initial_values)
        self._errors: dict[str, str] = {}
        self._touched: dict[str, bool] = {}
        self._is_submitting = False

    @property
    def values(self) -> dict[str, FieldValue]:
        return dict(self._values)

    @property
    def errors(self) -> dict[str, str]:
        return dict(self._errors)

    @property
    def touched(self) -> dict[str, bool]:
        return dict(self._touched)

    @property
    def is_submitting(self) -> bool:
        return self._is_submitting

    @property
    def is_valid(self) -> bool:
        # Reflects errors already computed, not a fresh validation.
        return not self._errors

    @property
    def state(self) -> FormState:
        return FormState(
            values=self.values,
            errors=self.errors,
            touched=self.touched,
            is_submitting=self._is_submitting,
        )

    def _check_field(self, name: str) -> None:
        if name not in self._values:
            raise KeyError(f"Unknown form field: {name}")

    def validate_field(self, name: str, value: FieldValue) -> str:
        rule = self.rules.get(name)
        if rule is None:
            return ""

        if rule.required and _is_empty(value):
            return rule.message or f"{name} is required"

        if _is_empty(value):
            return ""

        if isinstance(value, str):
            if rule.min_length and len(value) < rule.min_length:
                return rule.message or f"{name} must be at least {rule.min_length} characters"
            if rule.max_length and len(value) > rule.max_length:
                return rule.message or f"{name} must be no more than {rule.max_length} characters"
            if rule.pattern is not None and not rule.pattern.search(value):
                return rule.message or f"{name} format is invalid"

        if rule.custom is not None:
            try:
                passed = rule.custom(value)
            except (TypeError, ValueError):
                # A predicate that cannot handle the value's type rejects it.
                logger.warning("Custom rule for %s failed on %r", name, value, exc_info=True)
                passed = False
            if not passed:
                return rule.message or f"{name} is invalid"

        return ""

    def validate_form(self) -> bool:
        errors = {}
        for name in self.rules:
            message = self.validate_field(name, self._values.get(name))
            if message:
                errors[name] = message
        self._errors = errors
        return not errors

    def handle_change(self, name: str, value: FieldValue) -> None:
        self._check_field(name)
        self._values[name] = value
        # Cleared optimistically; re-validated on blur or submit.
        self._errors.pop(name, None)

    set_field_value = handle_change

    def handle_blur(self, name: str) -> None:
        self._check_field(name)
        self._touched[name] = True
        self.set_field_error(name, self.validate_field(name, self._values[name]))

    def set_field_error(self, name: str, message: str) -> None:
        self._check_field(name)
        if message:
            self._errors[name] = message
        else:
            self._errors.pop(name, None)

    async def submit(self) -> bool:
        """
        Validate and run the submit action.

        Returns:
            bool: True when the action ran and completed. False when a submit
            was already in flight, the form was invalid, or the action failed.
        """
        if self._is_submitting:
            logger.debug("Submit ignored, previous submit still in flight")
            return False

        self._touched = {name: True for name in self.initial_values}
        if not self.validate_form():
            logger.debug("Submit blocked by validation errors: %s", sorted(self._errors))
            return False

        self._is_submitting = True
        try:
            if self.on_submit is not None:
                result = self.on_submit(self.values)
                if inspect.isawaitable(result):
                    await result
        except Exception as e:
            logger.exception("Form submission error")
            if self.on_error is not None:
                self.on_error(e)
            if self.notifier is not None:
                self.notifier.error(str(e) or "Something went wrong", key=ToastKey.FORM_SUBMIT_FAILED)
            return False
        finally:
            self._is_submitting = False
        return True

    handle_submit = submit

    def reset(self) -> None:
        self._values = dict(self.initial_values)
        self._errors = {}
        self._touched = {}
        self._is_submitting = False

    def load(self, data: Mapping[str, Any]) -> None:
        """Apply posted form data to the known fields.

        Text is coerced to the type of the field's initial value. With a
        ``MultiDict`` the last value of a repeated key wins, so a hidden
        ``false`` followed by a checked ``true`` reads as checked.
        """
        for name, initial in self.initial_values.items():
            if name not in data:
                continue
            if isinstance(data, MultiMapping):
                value = data.getall(name)[-1]
            else:
                value = data[name]
            self.handle_change(name, self._coerce(initial, value))

    def _coerce(self, initial: FieldValue, value: Any) -> Any:
        if not isinstance(value, str) or initial is None:
            return value
        if isinstance(initial, bool):
            return _BOOL_MAP.get(value.strip().lower(), value)
        try:
            if isinstance(initial, int):
                return int(value) if value.strip() else None
            if isinstance(initial, float):
                return float(value) if value.strip() else None
            if isinstance(initial, datetime.datetime):
                return datetime.datetime.fromisoformat(value) if value.strip() else None
            if isinstance(initial, datetime.date):
                return datetime.date.fromisoformat(value) if value.strip() else None
        except ValueError:
            # Left as text for the field's rules to report.
            return value
        return value
