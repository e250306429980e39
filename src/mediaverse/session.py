"""Session state consulted by the storage router."""

import logging
from typing import Any, Optional, Protocol

logger = logging.getLogger(__name__)


class SessionState(Protocol):
    """What the storage router needs to know about the current session."""

    def is_authenticated(self) -> bool: ...

    def is_remote_available(self) -> bool: ...

    def user_id(self) -> Optional[str]: ...


class LocalSession:
    """Session used when no remote backend is configured."""

    def is_authenticated(self) -> bool:
        return False

    def is_remote_available(self) -> bool:
        return False

    def user_id(self) -> Optional[str]:
        return None


class SupabaseSession:
    """Session backed by Supabase auth."""

    def __init__(self, client: Optional[Any]):
        """Wrap a Supabase client; None means the backend is not configured."""
        self.client = client

    def is_remote_available(self) -> bool:
        return self.client is not None

    def is_authenticated(self) -> bool:
        return self.user_id() is not None

    def user_id(self) -> Optional[str]:
        if self.client is None:
            return None
        try:
            session = self.client.auth.get_session()
        except Exception as e:
            logger.warning(f"Could not read Supabase session: {e}")
            return None
        if session is None or session.user is None:
            return None
        return session.user.id

    def sign_up(self, email: str, password: str) -> Optional[str]:
        """Register a new user and return its id."""
        if self.client is None:
            logger.error("Supabase not configured")
            return None
        response = self.client.auth.sign_up({"email": email, "password": password})
        user = response.user
        logger.info(f"Registered Supabase user {email}")
        return user.id if user else None

    def sign_in(self, email: str, password: str) -> Optional[str]:
        """Sign in with email and password and return the user id."""
        if self.client is None:
            logger.error("Supabase not configured")
            return None
        response = self.client.auth.sign_in_with_password({"email": email, "password": password})
        user = response.user
        logger.info(f"Signed in to Supabase as {email}")
        return user.id if user else None

    def sign_out(self) -> None:
        if self.client is None:
            return
        self.client.auth.sign_out()
        logger.info("Signed out of Supabase")
