"""Request payload schemas.

Incoming JSON uses the dashboard's camelCase keys; the models expose
snake_case attributes matching the database columns.
"""
from __future__ import annotations

from typing import Annotated, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
OptionalText = Optional[Annotated[str, StringConstraints(strip_whitespace=True)]]


class Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class LoginRequest(Payload):
    username: RequiredText
    password: Annotated[str, StringConstraints(min_length=1)]


class UserCreate(Payload):
    username: RequiredText
    password: Annotated[str, StringConstraints(min_length=1)]
    role: RequiredText = "admin"


class UserUpdate(Payload):
    username: OptionalText = None
    password: Optional[str] = None
    role: OptionalText = None


class ClientCreate(Payload):
    name: RequiredText
    alias: OptionalText = None
    phone: OptionalText = None
    email: OptionalText = None
    notes: Optional[str] = None


class ClientUpdate(Payload):
    name: Optional[RequiredText] = None
    alias: OptionalText = None
    phone: OptionalText = None
    email: OptionalText = None
    notes: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name_not_null(cls, value):
        if value is None:
            raise ValueError("name cannot be empty")
        return value


class BarberCreate(Payload):
    name: RequiredText


class BarberUpdate(Payload):
    name: Optional[RequiredText] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name_not_null(cls, value):
        if value is None:
            raise ValueError("name cannot be empty")
        return value


class CutCreate(Payload):
    client_id: int = Field(alias="clientId")
    barber_id: int = Field(alias="barberId")
    service: RequiredText
    date: RequiredText
    detail: Optional[str] = None
    nota: Optional[str] = None
    metodo_pago: OptionalText = Field(default=None, alias="metodoPago")


class CutUpdate(Payload):
    client_id: Optional[int] = Field(default=None, alias="clientId")
    barber_id: Optional[int] = Field(default=None, alias="barberId")
    service: Optional[RequiredText] = None
    date: Optional[RequiredText] = None
    detail: Optional[str] = None
    nota: Optional[str] = None
    metodo_pago: OptionalText = Field(default=None, alias="metodoPago")

    @field_validator("client_id", "barber_id", "service", "date", mode="before")
    @classmethod
    def _required_not_null(cls, value):
        if value is None:
            raise ValueError("field cannot be null")
        return value


SchemaT = TypeVar("SchemaT", bound=BaseModel)


def parse_payload(schema: type[SchemaT], payload: object) -> SchemaT:
    """Validate ``payload`` against ``schema`` or raise a 400 ``ValidationError``."""
    if not isinstance(payload, dict):
        raise ValidationError("request body must be a JSON object")
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as exc:
        details = {
            ".".join(str(part) for part in error["loc"]) or "body": error["msg"]
            for error in exc.errors()
        }
        fields = ", ".join(details)
        raise ValidationError(f"invalid or missing fields: {fields}", details=details) from exc
