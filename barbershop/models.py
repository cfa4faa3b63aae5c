"""Database models for the barbershop backend."""
from __future__ import annotations

from datetime import datetime, timezone

from .extensions import db


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(150), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(50), nullable=False, default="admin", server_default="admin")
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)
    updated_at = db.Column(db.DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    def to_dict_basic(self) -> dict[str, object]:
        """Public view of the user; the password hash never leaves the server."""
        return {
            "id": self.id,
            "username": self.username,
            "role": self.role,
        }

    def to_dict(self) -> dict[str, object]:
        data = self.to_dict_basic()
        data["createdAt"] = _iso(self.created_at)
        return data


class Client(db.Model):
    __tablename__ = "clients"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    alias = db.Column(db.String(100))
    phone = db.Column(db.String(30))
    email = db.Column(db.String(255))
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)
    updated_at = db.Column(db.DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    cuts = db.relationship(
        "Cut",
        back_populates="client",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "alias": self.alias,
            "phone": self.phone,
            "email": self.email,
            "notes": self.notes,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class Barber(db.Model):
    __tablename__ = "barbers"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)
    updated_at = db.Column(db.DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    cuts = db.relationship(
        "Cut",
        back_populates="barber",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class Cut(db.Model):
    """A recorded service: one client, one barber, optional notes and photos."""

    __tablename__ = "cuts"

    id = db.Column(db.Integer, primary_key=True)
    service = db.Column(db.String(100), nullable=False)
    # Stored as the string the dashboard sends (YYYY-MM-DD).
    date = db.Column(db.String(30), nullable=False, index=True)
    detail = db.Column(db.Text)
    nota = db.Column(db.Text)
    metodo_pago = db.Column(db.String(50))
    client_id = db.Column(
        db.Integer, db.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    barber_id = db.Column(
        db.Integer, db.ForeignKey("barbers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)
    updated_at = db.Column(db.DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    client = db.relationship("Client", back_populates="cuts")
    barber = db.relationship("Barber", back_populates="cuts")
    photos = db.relationship(
        "CutPhoto",
        back_populates="cut",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CutPhoto.id",
    )

    def to_dict(self, include_related: bool = True) -> dict[str, object]:
        data: dict[str, object] = {
            "id": self.id,
            "service": self.service,
            "date": self.date,
            "detail": self.detail,
            "nota": self.nota,
            "metodoPago": self.metodo_pago,
            "clientId": self.client_id,
            "barberId": self.barber_id,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
        if include_related:
            data["Client"] = self.client.to_dict() if self.client else None
            data["Barber"] = self.barber.to_dict() if self.barber else None
            data["photos"] = [photo.to_dict() for photo in self.photos]
        return data


class CutPhoto(db.Model):
    __tablename__ = "cut_photos"

    id = db.Column(db.Integer, primary_key=True)
    # URL path under the public uploads prefix, e.g. /uploads/1700000000000-foto.jpg
    path = db.Column(db.String(500), nullable=False)
    cut_id = db.Column(
        db.Integer, db.ForeignKey("cuts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    cut = db.relationship("Cut", back_populates="photos")

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "path": self.path,
            "cutId": self.cut_id,
            "createdAt": _iso(self.created_at),
        }
