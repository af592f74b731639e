"""
Schema-driven request validation.

Every schema is a pydantic model plus a table of user-facing messages keyed
by field and pydantic error type. ``validate`` runs the model over untrusted
input, collects every violation in a single pass and never raises for bad
input; only an unknown schema name is a programming error.
"""
import re
from typing import Any, NamedTuple

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.core.errors import ValidationError
from app.models.enums import GalleryCategory
from app.schemas.admin import AdminCreate, AdminLogin, AdminStatusUpdate, PasswordChange
from app.schemas.gallery import GalleryCreate, GalleryQuery, GalleryUpdate
from app.schemas.notice import NoticeCreate, NoticeQuery

OBJECT_ID = re.compile(r"^[0-9a-f]{32}$")

CATEGORY_LIST = ", ".join(c.value for c in GalleryCategory)

# Generic wording per pydantic error type, formatted with the field label
# and the error's ctx (min_length, le, ...)
TEMPLATES = {
    "missing": "{label} is required",
    "string_type": "{label} must be a string",
    "string_too_short": "{label} must be at least {min_length} characters long",
    "string_too_long": "{label} cannot exceed {max_length} characters",
    "int_type": "{label} must be a number",
    "int_parsing": "{label} must be a number",
    "int_from_float": "{label} must be an integer",
    "greater_than_equal": "{label} must be at least {ge}",
    "less_than_equal": "{label} cannot exceed {le}",
    "bool_type": "{label} must be true or false",
    "bool_parsing": "{label} must be true or false",
    "datetime_type": "Please provide a valid date",
    "datetime_parsing": "Please provide a valid date",
    "datetime_from_date_parsing": "Please provide a valid date",
    "enum": "{label} must be one of: {expected}",
    "model_type": "Request body must be an object",
}

EMAIL_MESSAGES = {"value_error": "Please provide a valid email address"}


class Schema(NamedTuple):
    model: type[BaseModel]
    # field -> {error type -> message}
    messages: dict = {}


SCHEMAS: dict[str, Schema] = {
    "signin": Schema(AdminLogin, {"email": EMAIL_MESSAGES}),
    "notice": Schema(NoticeCreate),
    "admin_registration": Schema(
        AdminCreate,
        {
            "email": EMAIL_MESSAGES,
            "role": {"enum": "Role must be either admin or super_admin"},
        },
    ),
    "pagination": Schema(
        NoticeQuery,
        {"search": {"string_too_long": "Search term cannot exceed 100 characters"}},
    ),
    "gallery": Schema(
        GalleryCreate,
        {
            "title": {"string_too_short": "Title is required"},
            "category": {"enum": f"Category must be one of: {CATEGORY_LIST}"},
        },
    ),
    "gallery_update": Schema(
        GalleryUpdate,
        {"category": {"enum": f"Category must be one of: {CATEGORY_LIST}"}},
    ),
    "gallery_query": Schema(
        GalleryQuery,
        {"category": {"enum": f"Category must be one of: {CATEGORY_LIST}"}},
    ),
    "password_change": Schema(PasswordChange),
    "admin_status": Schema(AdminStatusUpdate),
}


class ValidationResult(NamedTuple):
    value: Any
    errors: list

    @property
    def ok(self) -> bool:
        return not self.errors


def _label(field: str) -> str:
    return field.replace("_", " ").capitalize()


def _message(schema: Schema, field: str, error: dict) -> str:
    kind = error["type"]
    override = schema.messages.get(field, {}).get(kind)
    if override:
        return override

    ctx = error.get("ctx") or {}
    if kind == "value_error" and "error" in ctx:
        return str(ctx["error"])

    template = TEMPLATES.get(kind)
    if template:
        try:
            return template.format(label=_label(field), **ctx)
        except KeyError:
            pass
    return error["msg"]


def validate(schema_name: str, data: Any) -> ValidationResult:
    schema = SCHEMAS[schema_name]

    try:
        value = schema.model.model_validate(data if data is not None else {})
    except PydanticValidationError as exc:
        errors = []
        for error in exc.errors():
            field = str(error["loc"][0]) if error["loc"] else "body"
            errors.append((field, _message(schema, field, error)))
        return ValidationResult(None, errors)

    return ValidationResult(value, [])


def validate_or_raise(schema_name: str, data: Any):
    result = validate(schema_name, data)
    if not result.ok:
        raise ValidationError("Validation error", result.errors)
    return result.value


def is_valid_object_id(value: str) -> bool:
    return isinstance(value, str) and bool(OBJECT_ID.match(value))


def ensure_object_id(value: str) -> str:
    if not is_valid_object_id(value):
        raise ValidationError("Invalid ID format", [("id", "The provided ID is not valid")])
    return value
