"""Disk-backed storage for uploaded cut photos."""
from __future__ import annotations

import os
import time

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename


def upload_dir() -> str:
    folder = current_app.config["UPLOAD_FOLDER"]
    os.makedirs(folder, exist_ok=True)
    return folder


def url_prefix() -> str:
    return current_app.config.get("UPLOAD_URL_PREFIX", "/uploads").rstrip("/")


def unique_filename(original: str) -> str:
    """Millisecond timestamp prefix plus a sanitised original name.

    ``secure_filename`` turns whitespace into underscores and strips
    path separators, so the result always stays inside the upload folder.
    """
    cleaned = secure_filename(original or "") or "photo"
    return f"{int(time.time() * 1000)}-{cleaned}"


def save_photo(file: FileStorage) -> str:
    """Write ``file`` to the upload folder and return its public URL path."""
    filename = unique_filename(file.filename)
    file.save(os.path.join(upload_dir(), filename))
    current_app.logger.info("Stored photo %s", filename)
    return f"{url_prefix()}/{filename}"


def path_on_disk(url_path: str) -> str | None:
    """Map a stored ``/uploads/<name>`` path back to its file, if it belongs to us."""
    prefix = url_prefix() + "/"
    if not url_path or not url_path.startswith(prefix):
        return None
    filename = os.path.basename(url_path[len(prefix):])
    if not filename:
        return None
    return os.path.join(current_app.config["UPLOAD_FOLDER"], filename)


def remove_photo(url_path: str) -> bool:
    """Delete the file behind ``url_path``. A missing file is not an error."""
    filepath = path_on_disk(url_path)
    if filepath is None:
        current_app.logger.warning("Photo path outside upload folder: %s", url_path)
        return False
    try:
        if os.path.exists(filepath):
            os.remove(filepath)
            return True
    except OSError as exc:
        current_app.logger.warning(f"Failed to delete photo file {filepath}: {exc}")
    return False
