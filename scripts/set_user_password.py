"""Utility to create a user or reset its password for local development."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from werkzeug.security import generate_password_hash

# Ensure the project root is on sys.path so ``barbershop`` can be imported when the script is executed directly.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from barbershop import create_app
from barbershop.extensions import db
from barbershop.models import User


def set_password(username: str, password: str, role: str = "admin") -> None:
    app = create_app()

    with app.app_context():
        user = User.query.filter_by(username=username).first()
        if user is None:
            user = User(username=username, role=role, password_hash="")
            db.session.add(user)
            print(f"Created new {role} user: {username}")
        elif user.role != role:
            print(f"Updating user role from '{user.role}' to '{role}'")
            user.role = role

        user.password_hash = generate_password_hash(password)
        db.session.commit()

        print(f"Password for {role} user '{username}' has been set successfully.")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Set a user password for local testing.")
    parser.add_argument("username", help="Login name")
    parser.add_argument("password", help="Plain-text password to hash and store")
    parser.add_argument(
        "--role",
        default="admin",
        help="User role (default: admin; only admin can use the dashboard)"
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    set_password(args.username, args.password, args.role)


if __name__ == "__main__":
    main()
