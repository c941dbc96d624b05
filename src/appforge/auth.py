"""Authentication collaborator consumed by the project store callers."""

from collections.abc import Callable
from typing import Protocol

from pydantic import BaseModel
import structlog

from appforge.config import Settings
from appforge.errors import AuthenticationError

logger = structlog.get_logger(__name__)


class User(BaseModel):
    id: str
    email: str | None = None


AuthListener = Callable[[User | None], None]


class AuthProvider(Protocol):
    def current_user(self) -> User:
        """Return the authenticated user or raise AuthenticationError."""
        ...

    def on_auth_state_change(self, callback: AuthListener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        ...


class StaticAuthProvider:
    """Auth provider holding one user, set from configuration or by sign-in/out."""

    def __init__(self, user: User | None = None) -> None:
        self._user = user
        self._listeners: list[AuthListener] = []

    @classmethod
    def from_settings(cls, settings: Settings) -> "StaticAuthProvider":
        if not settings.user_id:
            return cls()
        return cls(User(id=settings.user_id, email=settings.user_email))

    def current_user(self) -> User:
        if self._user is None:
            raise AuthenticationError("Not signed in. Set APPFORGE_USER_ID.")
        return self._user

    def on_auth_state_change(self, callback: AuthListener) -> Callable[[], None]:
        self._listeners.append(callback)
        callback(self._user)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._user)

    def sign_in(self, user: User) -> None:
        self._user = user
        logger.info("user_signed_in", user_id=user.id)
        self._notify()

    def sign_out(self) -> None:
        if self._user is not None:
            logger.info("user_signed_out", user_id=self._user.id)
        self._user = None
        self._notify()
