"""Service for handling authentication-related operations."""

from __future__ import annotations

from tasknest.exceptions import Unauthorized
from tasknest.services.config_service import get_config_service


class AuthService:
    """Service for handling authentication-related operations."""

    @staticmethod
    def is_authenticated() -> bool:
        """Check if an API token has been saved."""
        return AuthService.get_token() is not None

    @staticmethod
    def get_token() -> str | None:
        """The saved API token, if any."""
        credentials = get_config_service().load_credentials()
        if not credentials:
            return None
        return credentials.get("token") or None

    @staticmethod
    def require_token() -> str:
        """The saved API token.

        Raises:
            Unauthorized: If not logged in
        """
        token = AuthService.get_token()
        if token is None:
            raise Unauthorized("Not logged in. Run: tasknest login <token>")
        return token
