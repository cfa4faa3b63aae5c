"""Public file serving: stored photos and the built dashboard."""
from __future__ import annotations

import os

from flask import Blueprint, abort, current_app, send_from_directory

from .errors import NotFoundError

bp_web = Blueprint("web", __name__)


@bp_web.get("/uploads/<path:filename>")
def uploaded_photo(filename: str):
    return send_from_directory(current_app.config["UPLOAD_FOLDER"], filename)


def _frontend_dir() -> str | None:
    dist = current_app.config.get("FRONTEND_DIST")
    if dist and os.path.isdir(dist) and os.path.isfile(os.path.join(dist, "index.html")):
        return dist
    return None


@bp_web.get("/", defaults={"path": ""})
@bp_web.get("/<path:path>")
def frontend(path: str):
    """Serve the dashboard bundle, falling back to index.html for client-side routes."""
    if path == "api" or path.startswith("api/"):
        raise NotFoundError("unknown API route")

    dist = _frontend_dir()
    if dist is None:
        abort(404)

    if path and os.path.isfile(os.path.join(dist, path)):
        return send_from_directory(dist, path)
    return send_from_directory(dist, "index.html")
