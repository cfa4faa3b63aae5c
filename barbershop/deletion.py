"""Explicit cascade deletes.

Rows go first (photos, then cuts, then the owner) inside the caller's
transaction; photo files are removed only after the commit succeeds.
"""
from __future__ import annotations

from .extensions import db
from .models import Barber, Client, Cut
from .storage import remove_photo


def _delete_photos(cut: Cut) -> list[str]:
    paths = []
    for photo in list(cut.photos):
        paths.append(photo.path)
        db.session.delete(photo)
    return paths


def delete_cut(cut: Cut) -> list[str]:
    paths = _delete_photos(cut)
    db.session.delete(cut)
    return paths


def _delete_cuts(cuts: list[Cut]) -> list[str]:
    paths: list[str] = []
    for cut in cuts:
        paths.extend(delete_cut(cut))
    return paths


def delete_client(client: Client) -> list[str]:
    paths = _delete_cuts(list(client.cuts))
    db.session.delete(client)
    return paths


def delete_barber(barber: Barber) -> list[str]:
    paths = _delete_cuts(list(barber.cuts))
    db.session.delete(barber)
    return paths


def remove_files(paths: list[str]) -> int:
    """Remove photo files once their rows are gone; returns how many existed."""
    return sum(1 for path in paths if remove_photo(path))
