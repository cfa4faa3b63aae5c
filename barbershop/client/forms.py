"""Form validation run before anything is sent to the API."""
from __future__ import annotations

from typing import Annotated, Callable, Optional, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

SERVICES = ("Corte", "Corte + Barba", "Barba")
PAYMENT_METHODS = ("efectivo", "transferencia")


def _as_text(value) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _required(message: str) -> Callable[[object], str]:
    def check(value) -> str:
        text = _as_text(value)
        if not text.strip():
            raise PydanticCustomError("required", message)
        return text

    return check


def _positive_id(message: str) -> Callable[[object], int]:
    def check(value) -> int:
        text = _as_text(value).strip()
        if not text.isdigit() or int(text) <= 0:
            raise PydanticCustomError("required", message)
        return int(text)

    return check


def _one_of(choices: tuple[str, ...], message: str) -> Callable[[object], str]:
    def check(value) -> str:
        text = _as_text(value)
        if text not in choices:
            raise PydanticCustomError("choice", message)
        return text

    return check


def _phone(value) -> str:
    text = _as_text(value).strip()
    if not text:
        return ""
    if len(text) < 6:
        raise PydanticCustomError("too_short", "Teléfono muy corto")
    if len(text) > 30:
        raise PydanticCustomError("too_long", "Teléfono demasiado largo")
    return text


def _email(value) -> str:
    text = _as_text(value).strip()
    if not text:
        return ""
    try:
        validate_email(text)
    except PydanticCustomError:
        raise PydanticCustomError("email", "Email inválido") from None
    return text


def _notes(value) -> str:
    text = _as_text(value)
    if len(text) > 255:
        raise PydanticCustomError("too_long", "Máx. 255 caracteres")
    return text


class FormModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class LoginForm(FormModel):
    username: Annotated[str, BeforeValidator(_required("El usuario es requerido"))] = Field(
        default="", validate_default=True
    )
    password: Annotated[str, BeforeValidator(_required("La contraseña es requerida"))] = Field(
        default="", validate_default=True
    )


class AddCutForm(FormModel):
    client_name: Annotated[str, BeforeValidator(_required("El nombre del cliente es obligatorio"))] = Field(
        default="", alias="clientName", validate_default=True
    )
    phone: Optional[str] = ""
    barber_id: Annotated[int, BeforeValidator(_positive_id("Seleccione un barbero"))] = Field(
        default=0, alias="barberId", validate_default=True
    )
    service: Annotated[str, BeforeValidator(_one_of(SERVICES, "El servicio es obligatorio"))] = Field(
        default="", validate_default=True
    )
    detail: Optional[str] = ""
    nota: Optional[str] = ""
    metodo_pago: Annotated[
        str, BeforeValidator(_one_of(PAYMENT_METHODS, "El método de pago es obligatorio"))
    ] = Field(default="", alias="metodoPago", validate_default=True)

    def cut_payload(self, client_id: int, date: str) -> dict[str, object]:
        return {
            "clientId": client_id,
            "barberId": self.barber_id,
            "service": self.service,
            "date": date,
            "detail": self.detail or "",
            "nota": self.nota or "",
            "metodoPago": self.metodo_pago,
        }


class EditCutForm(FormModel):
    service: Annotated[str, BeforeValidator(_required("El servicio es obligatorio"))] = Field(
        default="", validate_default=True
    )
    metodo_pago: Annotated[str, BeforeValidator(_required("El método de pago es obligatorio"))] = Field(
        default="", alias="metodoPago", validate_default=True
    )
    detail: Optional[str] = ""
    nota: Optional[str] = ""

    def payload(self) -> dict[str, object]:
        return {
            "service": self.service,
            "metodoPago": self.metodo_pago,
            "detail": self.detail or "",
            "nota": self.nota or "",
        }


class ClientForm(FormModel):
    name: Annotated[str, BeforeValidator(_required("El nombre es obligatorio"))] = Field(
        default="", validate_default=True
    )
    phone: Annotated[str, BeforeValidator(_phone)] = ""
    email: Annotated[str, BeforeValidator(_email)] = ""
    notes: Annotated[str, BeforeValidator(_notes)] = ""

    def payload(self) -> dict[str, object]:
        return {
            "name": self.name.strip(),
            "phone": self.phone,
            "email": self.email,
            "notes": self.notes,
        }


class BarberForm(FormModel):
    name: Annotated[str, BeforeValidator(_required("El nombre es obligatorio"))] = Field(
        default="", validate_default=True
    )

    def payload(self) -> dict[str, object]:
        return {"name": self.name.strip()}


FormT = TypeVar("FormT", bound=FormModel)


def validate_form(form: type[FormT], data: dict) -> tuple[Optional[FormT], dict[str, str]]:
    """Return ``(form, {})`` when valid, else ``(None, {field: message})``.

    Field names in the error map use the form's wire names (``clientName``,
    ``metodoPago``), one message per field.
    """
    try:
        return form.model_validate(data or {}), {}
    except PydanticValidationError as exc:
        wire_names = {name: field.alias or name for name, field in form.model_fields.items()}
        errors: dict[str, str] = {}
        for error in exc.errors():
            name = str(error["loc"][0]) if error["loc"] else "form"
            name = wire_names.get(name, name)
            errors.setdefault(name, error["msg"])
        return None, errors
