from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic_core import PydanticCustomError

INTERNAL_SERVER_ERROR = "Internal server error"

# (field, pydantic error type) -> message returned to the client
ERROR_MESSAGES: Dict[tuple, str] = {
    ("name", "missing"): "Name is required",
    ("name", "string_type"): "Name must be a string",
    ("name", "string_too_short"): "Name must contain at least 1 character",
    ("age", "missing"): "Age is required",
    ("age", "float_type"): "Age must be a number",
    ("age", "finite_number"): "Age must be a number",
    ("age", "greater_than_equal"): "Age must be equal or higher than 17",
    ("available", "bool_type"): "Available must be a boolean",
    ("", "model_type"): "Request body must be a JSON object",
    ("", "model_attributes_type"): "Request body must be a JSON object",
    ("", "dict_type"): "Request body must be a JSON object",
}


class Player(BaseModel):
    id: str = Field(..., description="Unique player identifier")
    name: str = Field(..., description="Player name")
    age: float = Field(..., description="Player age")
    available: bool = Field(..., description="Whether the player is available")


class PlayerCreate(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore")

    name: str = Field(..., min_length=1, description="Player name")
    age: float = Field(
        ..., ge=17, allow_inf_nan=False, description="Player age, 17 or older"
    )


class PlayerUpdate(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore")

    # Omitted fields stay None without validation; an explicit null is rejected.
    name: str = Field(None, min_length=1, description="Player name")
    age: float = Field(
        None, ge=17, allow_inf_nan=False, description="Player age, 17 or older"
    )
    available: bool = Field(None, description="Whether the player is available")

    @model_validator(mode="after")
    def check_at_least_one_field(self) -> "PlayerUpdate":
        if not self.model_fields_set:
            raise PydanticCustomError(
                "at_least_one_field", "At least one field must be provided"
            )
        return self


@dataclass
class ValidationResult:
    data: Dict[str, Any] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def first_error(self) -> Optional[str]:
        return self.errors[0] if self.errors else None


def error_messages(exc: ValidationError) -> List[str]:
    """Turns pydantic error details into human-readable messages, in order."""
    messages = []
    for err in exc.errors():
        loc = err["loc"][0] if err["loc"] else ""
        messages.append(ERROR_MESSAGES.get((loc, err["type"]), err["msg"]))
    return messages


def _validate(schema: type[BaseModel], body: Any) -> ValidationResult:
    try:
        parsed = schema.model_validate(body)
    except ValidationError as e:
        return ValidationResult(errors=error_messages(e))
    return ValidationResult(data=parsed.model_dump(exclude_unset=True))


def validate_create(body: Any) -> ValidationResult:
    return _validate(PlayerCreate, body)


def validate_update(body: Any) -> ValidationResult:
    return _validate(PlayerUpdate, body)


class Envelope(BaseModel):
    success: bool
    data: Optional[Dict[str, Any]] = None
    message: Optional[str] = None
    error: Optional[str] = None


def envelope(
    status_code: int,
    *,
    success: bool,
    data: Optional[Dict[str, Any]] = None,
    message: Optional[str] = None,
    error: Optional[str] = None,
) -> JSONResponse:
    body = Envelope(success=success, data=data, message=message, error=error)
    return JSONResponse(
        status_code=status_code, content=jsonable_encoder(body, exclude_none=True)
    )
