"""Field-level validation for single-property edits.

Editors change one property at a time. Each value is checked against the
matching pydantic model field (type and constraints) and converted back to
its JSON form before it is stored in the document.
"""

from __future__ import annotations

from functools import cache
from typing import TYPE_CHECKING, Annotated, Any

from pydantic import TypeAdapter, ValidationError

from screenmap.document.errors import DocumentValidationError, UnknownFieldError

if TYPE_CHECKING:
    from pydantic import BaseModel


def format_validation_errors(exc: ValidationError) -> list[str]:
    """Flatten a pydantic ValidationError into ``location: message`` strings."""
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "<root>"
        messages.append(f"{loc}: {err['msg']}")
    return messages


def field_names(model: type[BaseModel]) -> list[str]:
    """Return the declared field names of a record type, sorted."""
    return sorted(model.model_fields)


@cache
def _adapter(model: type[BaseModel], name: str) -> TypeAdapter[Any]:
    info = model.model_fields[name]
    field_type: Any = info.annotation
    if info.metadata:
        field_type = Annotated[(field_type, *info.metadata)]
    return TypeAdapter(field_type)


def coerce_field(model: type[BaseModel], name: str, value: Any) -> Any:
    """Validate *value* for field *name* of *model* and return its JSON form.

    ``None`` is accepted only for optional fields and means "remove the key".

    Args:
        model: Record type owning the field (Trigger, Option, ...).
        name: Field name.
        value: Proposed value.

    Returns:
        JSON-compatible value to store, or None for an optional field reset.

    Raises:
        UnknownFieldError: If *model* has no field *name*.
        DocumentValidationError: If the value does not fit the field.
    """
    if name not in model.model_fields:
        raise UnknownFieldError(model.__name__, name, allowed=field_names(model))

    adapter = _adapter(model, name)
    try:
        validated = adapter.validate_python(value)
    except ValidationError as e:
        raise DocumentValidationError(
            format_validation_errors(e), source=f"{model.__name__}.{name}"
        ) from e

    if validated is None:
        return None
    return adapter.dump_python(validated, mode="json", exclude_none=True)
