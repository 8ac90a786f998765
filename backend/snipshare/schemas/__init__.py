"""
SnipShare — Pydantic Form and View Schemas
===========================================

What:  Pydantic models for submitted forms and for the data handed to templates.
Why:   Form rules live in one declarative place; services receive already
       validated, stripped values.
How:   `validate_form()` runs a schema and turns pydantic's error list into a
       single ValidationError carrying one readable message per failed rule.
"""

from typing import Any, Dict, List, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from snipshare.exceptions import ValidationError

FormT = TypeVar("FormT", bound=BaseModel)


def _messages(exc: PydanticValidationError) -> List[str]:
    messages = []
    for err in exc.errors():
        # Our validators raise ValueError with a finished sentence; pydantic
        # wraps those as "Value error, <sentence>". Use the sentence as-is.
        if err.get("type") == "value_error" and "error" in err.get("ctx", {}):
            messages.append(str(err["ctx"]["error"]))
        else:
            field = ".".join(str(part) for part in err.get("loc", ()))
            messages.append(f"{field}: {err.get('msg')}")
    return messages


def validate_form(schema: Type[FormT], data: Dict[str, Any]) -> FormT:
    """
    Validate raw form data against `schema`.

    Raises:
        ValidationError: with every failed rule in `.errors`
    """
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        errors = _messages(exc)
        raise ValidationError(message=errors[0], errors=errors)
