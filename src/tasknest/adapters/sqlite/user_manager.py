"""User accounts and API tokens for the SQLite store.

A user is created together with its Inbox project. Only the SHA-256 digest
of the API token is stored; the token itself is shown once, at creation.
"""

from __future__ import annotations

import secrets
import sqlite3

from tasknest.adapters.sqlite.project_repository import INBOX_COLOR, INBOX_NAME
from tasknest.adapters.sqlite.utils import generate_uuid, hash_token, row_to_dict
from tasknest.exceptions import ValidationError
from tasknest.models import User
from tasknest.utils.dates import to_storage, utc_now


def generate_token() -> str:
    """Generate a new opaque API token."""
    return secrets.token_urlsafe(32)


def create_user(
    connection: sqlite3.Connection, email: str, name: str | None = None
) -> tuple[User, str]:
    """Create a user and its Inbox project.

    Args:
        connection: Database connection
        email: Unique email address
        name: Optional display name

    Returns:
        Tuple of (User, plain API token)

    Raises:
        ValidationError: If the email is blank or already registered
    """
    email = email.strip().lower()
    if not email:
        raise ValidationError("Email is required")

    cursor = connection.execute("SELECT 1 FROM users WHERE email = ?", (email,))
    if cursor.fetchone():
        raise ValidationError(f"User already exists: {email}")

    user_id = generate_uuid()
    token = generate_token()
    now = to_storage(utc_now())

    connection.execute(
        """INSERT INTO users (id, email, name, token_hash, created_at)
           VALUES (?, ?, ?, ?, ?)""",
        (user_id, email, name, hash_token(token), now),
    )
    connection.execute(
        """INSERT INTO projects (id, name, color, is_favorite, is_inbox, owner_id,
               created_at, updated_at)
           VALUES (?, ?, ?, 0, 1, ?, ?, ?)""",
        (generate_uuid(), INBOX_NAME, INBOX_COLOR, user_id, now, now),
    )
    connection.commit()

    return User(id=user_id, email=email, name=name, created_at=now), token


def get_user_by_token(connection: sqlite3.Connection, token: str) -> User | None:
    """Resolve an API token to its user.

    Returns:
        The User, or None if the token is unknown
    """
    if not token:
        return None

    cursor = connection.execute(
        "SELECT id, email, name, created_at FROM users WHERE token_hash = ?",
        (hash_token(token),),
    )
    row = cursor.fetchone()
    if not row:
        return None
    return User(**row_to_dict(row))


def rotate_token(connection: sqlite3.Connection, email: str) -> str | None:
    """Issue a new token for a user, invalidating the old one.

    Returns:
        The new token, or None if no user has that email
    """
    token = generate_token()
    cursor = connection.execute(
        "UPDATE users SET token_hash = ? WHERE email = ?",
        (hash_token(token), email.strip().lower()),
    )
    connection.commit()
    if cursor.rowcount == 0:
        return None
    return token
