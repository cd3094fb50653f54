# sistahology/fastapi.py
import logging
from typing import Iterable, Optional

from fastapi import Depends, Request
from multidict import MultiDict

from .config import get_settings
from .forms import FormSchema
from .models import FormSubmission, SanitizationPolicy, ValidationErrorDetail
from .sanitize import ADMIN_CONTENT_POLICY, ContentSanitizer

logger = logging.getLogger("sistahology.api")


class FormDependency:
    """
    FastAPI dependency that loads a posted form into a controller, sanitizes
    its rich-text fields and validates it.

    Attributes:
        schema (FormSchema): Initial values and rules of the form
        html_fields (set[str]): Fields holding admin-authored HTML
        sanitizer (ContentSanitizer): Cleaner applied to ``html_fields``
        max_field_size (int): Size limit for sanitized HTML fields, from
            settings unless given
    """

    def __init__(
        self,
        schema: FormSchema,
        html_fields: Iterable[str] = (),
        policy: SanitizationPolicy = ADMIN_CONTENT_POLICY,
        max_field_size: Optional[int] = None,
    ):
        self.schema = schema
        self.html_fields = set(html_fields)
        self.sanitizer = ContentSanitizer(policy)
        self.max_field_size = get_settings().max_field_size if max_field_size is None else max_field_size

    async def __call__(self, request: Request) -> FormSubmission:
        """
        Run the form pipeline for an incoming request.

        Args:
            request: FastAPI request object

        Returns:
            FormSubmission with the loaded values and any field errors
        """
        data = await get_request_data(request)
        controller = self.schema.controller()
        controller.load(data)

        raw_values = controller.values
        sanitized = {}
        size_errors = []
        for field in self.html_fields & set(raw_values):
            raw = raw_values[field]
            clean = self.sanitizer.sanitize(raw)
            sanitized[field] = clean
            controller.handle_change(field, clean)
            if self.max_field_size and len(clean) > self.max_field_size:
                size_errors.append(ValidationErrorDetail(
                    field=field,
                    message=f"Field exceeds maximum size {self.max_field_size}",
                    input_value=raw,
                    sanitized_value=clean,
                ))

        is_valid = controller.validate_form() and not size_errors
        errors = [
            ValidationErrorDetail(
                field=field,
                message=message,
                input_value=raw_values.get(field),
                sanitized_value=sanitized.get(field),
            )
            for field, message in controller.errors.items()
        ] + size_errors

        if not is_valid:
            logger.info("Rejected form %s: %s", request.url.path, sorted(e.field for e in errors))

        return FormSubmission(
            is_valid=is_valid,
            values=controller.values,
            errors=errors,
            sanitized_data=sanitized,
        )


async def get_request_data(request: Request) -> dict | MultiDict:
    """
    Extract request data from different content types.

    Handles:
    - JSON payloads (application/json)
    - Form data (x-www-form-urlencoded)
    - Multipart form data (multipart/form-data)

    Args:
        request: FastAPI request object

    Returns:
        dict for JSON, MultiDict for form posts, empty dict otherwise
    """
    content_type = request.headers.get('content-type', '')

    if content_type.startswith('application/json'):
        try:
            body = await request.json()
        except ValueError:
            # JSONDecodeError and UnicodeDecodeError; an unreadable body is an empty form.
            logger.info("Malformed JSON body on %s", request.url.path)
            return {}
        return body if isinstance(body, dict) else {}

    if content_type.startswith(('application/x-www-form-urlencoded', 'multipart/form-data')):
        form_data = await request.form()
        return MultiDict(form_data.multi_items())

    return {}


def form_dependency(
    schema: FormSchema,
    html_fields: Iterable[str] = (),
    policy: SanitizationPolicy = ADMIN_CONTENT_POLICY,
    max_field_size: Optional[int] = None,
):
    """
    Create a FastAPI dependency for a form endpoint.

    Usage:
    @app.post("/contact")
    async def contact(result: FormSubmission = form_dependency(CONTACT_FORM)):
        ...

    Args:
        schema: Form schema to validate against
        html_fields: Fields to pass through the HTML sanitizer
        policy: Sanitization policy for ``html_fields``
        max_field_size: Size limit for sanitized HTML fields (0 disables)

    Returns:
        FastAPI dependency
    """
    return Depends(FormDependency(schema, html_fields, policy, max_field_size))
