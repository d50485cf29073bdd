from __future__ import annotations

from typing import Any, Callable, Dict, Literal, Optional, Protocol

from pydantic import BaseModel, Field

AuthEvent = Literal["INITIAL_SESSION", "SIGNED_IN", "SIGNED_OUT", "TOKEN_REFRESHED", "USER_UPDATED"]


class AuthUser(BaseModel):
    """The identity provider's view of a user."""
    id: str = Field(description="Auth user identifier")
    email: Optional[str] = Field(default=None, description="Login email address")
    email_confirmed: bool = Field(default=False, description="Whether the email address has been confirmed")
    user_metadata: Dict[str, Any] = Field(default_factory=dict, description="Metadata stored at sign up")


class AuthSession(BaseModel):
    """A server-issued session for an authenticated user."""
    access_token: str = Field(description="Bearer token for the session")
    user: AuthUser = Field(description="User the session belongs to")


AuthListener = Callable[[AuthEvent, Optional[AuthSession]], None]


class IdentityProvider(Protocol):
    """
    Contract for the external identity service.

    Failures of sign_up / sign_in raise AuthenticationError with the provider's
    message; AuthState and the login/signup pages translate those messages.
    """

    def sign_up(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> AuthUser:
        ...

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        ...

    def sign_out(self) -> None:
        ...

    def get_session(self) -> Optional[AuthSession]:
        ...

    def on_auth_state_change(self, listener: AuthListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        ...

    def delete_user(self, user_id: str) -> None:
        """Remove an auth user (admin operation, used to undo a half-finished sign up)."""
        ...
