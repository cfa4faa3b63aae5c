"""HTTP routes for the barbershop backend."""
from __future__ import annotations

from flask import Blueprint, Flask, current_app, g, jsonify, request
from sqlalchemy import func, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from .auth import admin_required, build_token
from .deletion import delete_barber as purge_barber
from .deletion import delete_client as purge_client
from .deletion import remove_files
from .errors import AuthenticationError, ConflictError
from .extensions import db
from .models import Barber, Client, Cut, User
from .schemas import (BarberCreate, BarberUpdate, ClientCreate, ClientUpdate,
                      LoginRequest, UserCreate, UserUpdate, parse_payload)

bp = Blueprint("api", __name__, url_prefix="/api")


@bp.get("/health")
def health_check() -> tuple[dict[str, str], int]:
    """
    Expose a simple uptime check endpoint.
    ---
    tags:
      - Health
    responses:
      200:
        description: Service is healthy and running.
        schema:
          type: object
          properties:
            status:
              type: string
              example: ok
    """
    return jsonify({"status": "ok"}), 200


@bp.get("/db-health")
def database_health() -> tuple[dict[str, str], int]:
    """Check connectivity to the configured database.
    ---
    tags:
      - Health
    responses:
      200:
        description: Database connection is ok.
      500:
        description: Database connection failed.
    """
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        current_app.logger.exception("Database connectivity check failed", exc_info=exc)
        return jsonify({"database": "unavailable"}), 500

    return jsonify({"database": "ok"}), 200


# --- Authentication ---

@bp.post("/login")
def login() -> tuple[dict[str, object], int]:
    """Authenticate a user by username/password and return a session token.
    ---
    tags:
      - Authentication
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            username:
              type: string
            password:
              type: string
          required:
            - username
            - password
    responses:
      200:
        description: Login successful, returns token and user
      400:
        description: Missing username or password
      401:
        description: Invalid username or password
    """
    data = parse_payload(LoginRequest, request.get_json(silent=True))

    user = User.query.filter_by(username=data.username).first()

    # Same answer for an unknown user and a wrong password.
    if user is None or not check_password_hash(user.password_hash, data.password):
        current_app.logger.info("Failed login for username %r", data.username)
        raise AuthenticationError("invalid username or password")

    token = build_token(user)
    return jsonify({"token": token, "user": user.to_dict_basic()}), 200


@bp.get("/me")
@admin_required
def whoami() -> tuple[dict[str, object], int]:
    """Return the identity carried by the bearer token."""
    payload = g.current_user
    return jsonify({
        "id": payload.get("id"),
        "username": payload.get("username"),
        "role": payload.get("role"),
    }), 200


# --- User management (admin only) ---

@bp.post("/users")
@admin_required
def create_user() -> tuple[dict[str, object], int]:
    """Create a user with a hashed password.
    ---
    tags:
      - Users
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            username:
              type: string
            password:
              type: string
            role:
              type: string
              default: admin
    responses:
      201:
        description: User created
      400:
        description: Missing username or password
      409:
        description: Username already exists
      500:
        description: Database error
    """
    data = parse_payload(UserCreate, request.get_json(silent=True))

    if User.query.filter_by(username=data.username).first():
        raise ConflictError("username is already in use")

    try:
        user = User(
            username=data.username,
            password_hash=generate_password_hash(data.password),
            role=data.role,
        )
        db.session.add(user)
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise ConflictError("username is already in use") from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to create user", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    return jsonify(user.to_dict()), 201


@bp.get("/users")
@admin_required
def list_users() -> tuple[list[dict[str, object]], int]:
    """List users newest first, without password hashes."""
    try:
        users = User.query.order_by(User.created_at.desc(), User.id.desc()).all()
    except SQLAlchemyError as exc:
        current_app.logger.exception("Failed to list users", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    return jsonify([user.to_dict() for user in users]), 200


@bp.get("/users/<int:user_id>")
@admin_required
def get_user(user_id: int) -> tuple[dict[str, object], int]:
    user = db.session.get(User, user_id)
    if user is None:
        return jsonify({"error": "not_found", "message": "User not found"}), 404
    return jsonify(user.to_dict()), 200


@bp.put("/users/<int:user_id>")
@admin_required
def update_user(user_id: int) -> tuple[dict[str, object], int]:
    """Selectively overwrite username, role and password.
    ---
    tags:
      - Users
    responses:
      200:
        description: User updated
      404:
        description: User not found
      409:
        description: Username already exists
    """
    data = parse_payload(UserUpdate, request.get_json(silent=True))

    user = db.session.get(User, user_id)
    if user is None:
        return jsonify({"error": "not_found", "message": "User not found"}), 404

    if data.username and data.username != user.username:
        if User.query.filter_by(username=data.username).first():
            raise ConflictError("username is already in use")
        user.username = data.username
    if data.role:
        user.role = data.role
    if data.password:
        user.password_hash = generate_password_hash(data.password)

    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to update user", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    return jsonify({"updated": 1, "user": user.to_dict()}), 200


@bp.delete("/users/<int:user_id>")
@admin_required
def delete_user(user_id: int) -> tuple[dict[str, object], int]:
    try:
        user = db.session.get(User, user_id)
        if user is None:
            return jsonify({"error": "not_found", "message": "User not found"}), 404

        db.session.delete(user)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to delete user", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    return jsonify({"deleted": 1}), 200


# --- Clients ---

@bp.get("/clients")
@admin_required
def list_clients() -> tuple[list[dict[str, object]], int]:
    """Return clients newest first, optionally filtered by name.
    ---
    tags:
      - Clients
    parameters:
      - name: query
        in: query
        type: string
        description: Search by client name (partial match, case-insensitive)
    responses:
      200:
        description: List of clients
      500:
        description: Database error
    """
    query = (request.args.get("query") or "").strip()

    try:
        client_query = Client.query
        if query:
            client_query = client_query.filter(Client.name.ilike(f"%{query}%"))
        clients = client_query.order_by(Client.created_at.desc(), Client.id.desc()).all()
    except SQLAlchemyError as exc:
        current_app.logger.exception("Failed to fetch clients", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    return jsonify([client.to_dict() for client in clients]), 200


@bp.get("/clients/<int:client_id>")
@admin_required
def get_client(client_id: int) -> tuple[dict[str, object], int]:
    """Client details with their cut history, latest date first."""
    client = db.session.get(Client, client_id)
    if client is None:
        return jsonify({"error": "not_found", "message": "Client not found"}), 404

    cuts = sorted(client.cuts, key=lambda cut: (cut.date, cut.id), reverse=True)
    data = client.to_dict()
    data["cuts"] = [cut.to_dict() for cut in cuts]
    return jsonify(data), 200


@bp.post("/clients")
@admin_required
def create_client() -> tuple[dict[str, object], int]:
    """Create a client.
    ---
    tags:
      - Clients
    parameters:
      - in: body
        name: body
        required: true
        schema:
          properties:
            name:
              type: string
            alias:
              type: string
            phone:
              type: string
            email:
              type: string
            notes:
              type: string
    responses:
      201:
        description: Client created
      400:
        description: Name is required
      500:
        description: Database error
    """
    data = parse_payload(ClientCreate, request.get_json(silent=True))

    try:
        client = Client(**data.model_dump())
        db.session.add(client)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to create client", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    return jsonify(client.to_dict()), 201


@bp.put("/clients/<int:client_id>")
@admin_required
def update_client(client_id: int) -> tuple[dict[str, object], int]:
    data = parse_payload(ClientUpdate, request.get_json(silent=True))

    try:
        client = db.session.get(Client, client_id)
        if client is None:
            return jsonify({"error": "not_found", "message": "Client not found"}), 404

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(client, field, value)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to update client", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    return jsonify({"updated": 1, "client": client.to_dict()}), 200


@bp.delete("/clients/<int:client_id>")
@admin_required
def delete_client(client_id: int) -> tuple[dict[str, object], int]:
    """Delete a client together with its cuts and their photos.
    ---
    tags:
      - Clients
    responses:
      200:
        description: Client deleted
      404:
        description: Client not found
      500:
        description: Database error
    """
    try:
        client = db.session.get(Client, client_id)
        if client is None:
            return jsonify({"error": "not_found", "message": "Client not found"}), 404

        photo_paths = purge_client(client)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to delete client", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    remove_files(photo_paths)
    return jsonify({"deleted": 1}), 200


# --- Barbers ---

@bp.get("/barbers")
@admin_required
def list_barbers() -> tuple[list[dict[str, object]], int]:
    try:
        barbers = Barber.query.order_by(Barber.created_at.desc(), Barber.id.desc()).all()
    except SQLAlchemyError as exc:
        current_app.logger.exception("Failed to fetch barbers", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    return jsonify([barber.to_dict() for barber in barbers]), 200


@bp.get("/barbers/<int:barber_id>")
@admin_required
def get_barber(barber_id: int) -> tuple[dict[str, object], int]:
    barber = db.session.get(Barber, barber_id)
    if barber is None:
        return jsonify({"error": "not_found", "message": "Barber not found"}), 404

    data = barber.to_dict()
    data["cutCount"] = (
        db.session.query(func.count(Cut.id)).filter(Cut.barber_id == barber_id).scalar() or 0
    )
    return jsonify(data), 200


@bp.post("/barbers")
@admin_required
def create_barber() -> tuple[dict[str, object], int]:
    data = parse_payload(BarberCreate, request.get_json(silent=True))

    try:
        barber = Barber(name=data.name)
        db.session.add(barber)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to create barber", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    return jsonify(barber.to_dict()), 201


@bp.put("/barbers/<int:barber_id>")
@admin_required
def update_barber(barber_id: int) -> tuple[dict[str, object], int]:
    data = parse_payload(BarberUpdate, request.get_json(silent=True))

    try:
        barber = db.session.get(Barber, barber_id)
        if barber is None:
            return jsonify({"error": "not_found", "message": "Barber not found"}), 404

        if data.name is not None:
            barber.name = data.name
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to update barber", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    return jsonify({"updated": 1, "barber": barber.to_dict()}), 200


@bp.delete("/barbers/<int:barber_id>")
@admin_required
def delete_barber(barber_id: int) -> tuple[dict[str, object], int]:
    """Delete a barber together with their cuts and those cuts' photos."""
    try:
        barber = db.session.get(Barber, barber_id)
        if barber is None:
            return jsonify({"error": "not_found", "message": "Barber not found"}), 404

        photo_paths = purge_barber(barber)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to delete barber", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    remove_files(photo_paths)
    return jsonify({"deleted": 1}), 200


def register_routes(app: Flask) -> None:
    from .routes_cuts import bp_cuts
    from .web import bp_web

    app.register_blueprint(bp)
    app.register_blueprint(bp_cuts)
    app.register_blueprint(bp_web)
