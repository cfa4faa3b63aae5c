"""Routes for cuts and their photo gallery."""
from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from .auth import protect_blueprint
from .deletion import delete_cut as purge_cut
from .deletion import remove_files
from .errors import InvalidReferenceError
from .extensions import db
from .models import Barber, Client, Cut, CutPhoto
from .schemas import CutCreate, CutUpdate, parse_payload
from .storage import remove_photo, save_photo

bp_cuts = Blueprint("cuts", __name__, url_prefix="/api/cuts")
protect_blueprint(bp_cuts)


def _check_references(client_id: int | None, barber_id: int | None) -> None:
    missing = {}
    if client_id is not None and db.session.get(Client, client_id) is None:
        missing["clientId"] = f"client {client_id} does not exist"
    if barber_id is not None and db.session.get(Barber, barber_id) is None:
        missing["barberId"] = f"barber {barber_id} does not exist"
    if missing:
        raise InvalidReferenceError("cut references unknown records", details=missing)


def _cut_query():
    return Cut.query.options(
        selectinload(Cut.client),
        selectinload(Cut.barber),
        selectinload(Cut.photos),
    )


@bp_cuts.get("")
def list_cuts() -> tuple[list[dict[str, object]], int]:
    """Return cuts newest first with their client, barber and photos.
    ---
    tags:
      - Cuts
    parameters:
      - name: date
        in: query
        type: string
        description: Exact date match (YYYY-MM-DD)
      - name: service
        in: query
        type: string
        description: Exact service match
      - name: clientId
        in: query
        type: integer
      - name: barberId
        in: query
        type: integer
    responses:
      200:
        description: List of cuts
      500:
        description: Database error
    """
    date = (request.args.get("date") or "").strip()
    service = (request.args.get("service") or "").strip()

    client_id = request.args.get("clientId", type=int)
    barber_id = request.args.get("barberId", type=int)

    try:
        cut_query = _cut_query()
        if date:
            cut_query = cut_query.filter(Cut.date == date)
        if service:
            cut_query = cut_query.filter(Cut.service == service)
        if client_id is not None:
            cut_query = cut_query.filter(Cut.client_id == client_id)
        if barber_id is not None:
            cut_query = cut_query.filter(Cut.barber_id == barber_id)
        cuts = cut_query.order_by(Cut.created_at.desc(), Cut.id.desc()).all()
    except SQLAlchemyError as exc:
        current_app.logger.exception("Failed to fetch cuts", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    return jsonify([cut.to_dict() for cut in cuts]), 200


@bp_cuts.get("/<int:cut_id>")
def get_cut(cut_id: int) -> tuple[dict[str, object], int]:
    cut = _cut_query().filter(Cut.id == cut_id).first()
    if cut is None:
        return jsonify({"error": "not_found", "message": "Cut not found"}), 404
    return jsonify(cut.to_dict()), 200


@bp_cuts.post("")
def create_cut() -> tuple[dict[str, object], int]:
    """Record a cut for an existing client and barber.
    ---
    tags:
      - Cuts
    parameters:
      - in: body
        name: body
        required: true
        schema:
          properties:
            clientId:
              type: integer
            barberId:
              type: integer
            service:
              type: string
            date:
              type: string
            detail:
              type: string
            nota:
              type: string
            metodoPago:
              type: string
          required:
            - clientId
            - barberId
            - service
            - date
    responses:
      201:
        description: Cut created
      400:
        description: Missing fields or unknown client/barber
      500:
        description: Database error
    """
    data = parse_payload(CutCreate, request.get_json(silent=True))
    _check_references(data.client_id, data.barber_id)

    try:
        cut = Cut(**data.model_dump())
        db.session.add(cut)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to create cut", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    return jsonify(cut.to_dict()), 201


@bp_cuts.put("/<int:cut_id>")
def update_cut(cut_id: int) -> tuple[dict[str, object], int]:
    """Partially update a cut.
    ---
    tags:
      - Cuts
    responses:
      200:
        description: Cut updated
      400:
        description: Invalid fields
      404:
        description: Cut not found
      500:
        description: Database error
    """
    data = parse_payload(CutUpdate, request.get_json(silent=True))

    cut = db.session.get(Cut, cut_id)
    if cut is None:
        return jsonify({"error": "not_found", "message": "Cut not found"}), 404

    changes = data.model_dump(exclude_unset=True)
    _check_references(changes.get("client_id"), changes.get("barber_id"))

    try:
        for field, value in changes.items():
            setattr(cut, field, value)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to update cut", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    return jsonify({"updated": True, "cut": cut.to_dict()}), 200


@bp_cuts.delete("/<int:cut_id>")
def delete_cut(cut_id: int) -> tuple[dict[str, object], int]:
    try:
        cut = db.session.get(Cut, cut_id)
        if cut is None:
            return jsonify({"error": "not_found", "message": "Cut not found"}), 404

        photo_paths = purge_cut(cut)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to delete cut", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    remove_files(photo_paths)
    return jsonify({"deleted": 1}), 200


# --- Photos ---

@bp_cuts.post("/<int:cut_id>/photo")
def upload_cut_photo(cut_id: int) -> tuple[dict[str, object], int]:
    """Attach one uploaded photo to a cut.
    ---
    tags:
      - Photos
    consumes:
      - multipart/form-data
    parameters:
      - in: path
        name: cut_id
        required: true
        schema:
          type: integer
      - in: formData
        name: photo
        type: file
        required: true
        description: The image file to store.
    responses:
      201:
        description: Photo stored
      400:
        description: No file provided
      404:
        description: Cut not found
      500:
        description: Database error
    """
    cut = db.session.get(Cut, cut_id)
    if cut is None:
        return jsonify({"error": "not_found", "message": "Cut not found"}), 404

    if "photo" not in request.files:
        return jsonify({"error": "no_file_provided", "message": "photo field is required"}), 400

    file = request.files["photo"]
    if not file.filename:
        return jsonify({"error": "no_file_selected", "message": "photo has no filename"}), 400

    try:
        path = save_photo(file)
    except OSError as exc:
        current_app.logger.exception("Failed to store uploaded photo", exc_info=exc)
        return jsonify({"error": "upload_failed"}), 500

    try:
        photo = CutPhoto(cut_id=cut.id, path=path)
        db.session.add(photo)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        remove_photo(path)
        current_app.logger.exception("Failed to record uploaded photo", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    return jsonify(photo.to_dict()), 201


@bp_cuts.get("/<int:cut_id>/photos")
def list_cut_photos(cut_id: int) -> tuple[list[dict[str, object]], int]:
    cut = db.session.get(Cut, cut_id)
    if cut is None:
        return jsonify({"error": "not_found", "message": "Cut not found"}), 404
    return jsonify([photo.to_dict() for photo in cut.photos]), 200


@bp_cuts.delete("/<int:cut_id>/photos/<int:photo_id>")
def delete_cut_photo(cut_id: int, photo_id: int) -> tuple[dict[str, object], int]:
    """Delete one photo of a cut and its file.
    ---
    tags:
      - Photos
    responses:
      200:
        description: Photo deleted
      404:
        description: Photo not found for this cut
      500:
        description: Database error
    """
    try:
        photo = CutPhoto.query.filter_by(id=photo_id, cut_id=cut_id).first()
        if photo is None:
            return jsonify({"error": "not_found", "message": "Photo not found"}), 404

        remove_photo(photo.path)
        db.session.delete(photo)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to delete cut photo", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    return jsonify({"deleted": True}), 200
