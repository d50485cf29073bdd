from __future__ import annotations

import hashlib
import hmac
import secrets
import threading
import uuid
from typing import Any, Callable, Dict, List, Optional

from supabase import AuthError, Client

from steelops.errors import AuthenticationError
from steelops.logging import get_logger
from .interface import AuthEvent, AuthListener, AuthSession, AuthUser

logger = get_logger(__name__)


# ---------- Supabase Auth ----------

def _to_user(user) -> AuthUser:
    return AuthUser(
        id=str(user.id),
        email=user.email,
        email_confirmed=bool(getattr(user, "email_confirmed_at", None)),
        user_metadata=dict(user.user_metadata or {}),
    )


def _to_session(session) -> Optional[AuthSession]:
    if session is None or session.user is None:
        return None
    return AuthSession(access_token=session.access_token, user=_to_user(session.user))


class SupabaseIdentityProvider:
    """IdentityProvider backed by Supabase Auth (GoTrue)."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def sign_up(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> AuthUser:
        try:
            response = self.client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {"data": metadata or {}},
            })
        except AuthError as e:
            raise AuthenticationError(e.message) from e
        if response.user is None:
            raise AuthenticationError("Sign up did not return a user")
        return _to_user(response.user)

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        try:
            response = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except AuthError as e:
            raise AuthenticationError(e.message) from e
        session = _to_session(response.session)
        if session is None:
            raise AuthenticationError("Sign in did not return a session")
        return session

    def sign_out(self) -> None:
        try:
            self.client.auth.sign_out()
        except AuthError as e:
            raise AuthenticationError(e.message) from e

    def get_session(self) -> Optional[AuthSession]:
        try:
            return _to_session(self.client.auth.get_session())
        except AuthError as e:
            raise AuthenticationError(e.message) from e

    def on_auth_state_change(self, listener: AuthListener) -> Callable[[], None]:
        def _callback(event, session) -> None:
            listener(str(event), _to_session(session))

        subscription = self.client.auth.on_auth_state_change(_callback)
        return subscription.unsubscribe

    def delete_user(self, user_id: str) -> None:
        try:
            self.client.auth.admin.delete_user(user_id)
        except AuthError as e:
            raise AuthenticationError(e.message) from e


# ---------- Local development ----------

def _hash_password(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, 100_000)


class LocalUserDirectory:
    """
    Process-wide user store for local development.

    Shared by every LocalIdentityProvider so an account created in one browser
    session can sign in from another. Nothing is written to disk.
    """

    def __init__(self, require_email_confirmation: bool = False) -> None:
        self.require_email_confirmation = require_email_confirmation
        self._lock = threading.Lock()
        self._users: Dict[str, Dict[str, Any]] = {}

    def register(self, email: str, password: str, metadata: Dict[str, Any]) -> AuthUser:
        key = email.strip().lower()
        if len(password) < 6:
            raise AuthenticationError("password_too_short: Password should be at least 6 characters.")
        with self._lock:
            if key in self._users:
                raise AuthenticationError("User already registered")
            salt = secrets.token_bytes(16)
            record = {
                "user": AuthUser(
                    id=str(uuid.uuid4()),
                    email=key,
                    email_confirmed=not self.require_email_confirmation,
                    user_metadata=dict(metadata),
                ),
                "salt": salt,
                "hash": _hash_password(password, salt),
            }
            self._users[key] = record
        return record["user"]

    def authenticate(self, email: str, password: str) -> AuthUser:
        record = self._users.get(email.strip().lower())
        if record is None or not hmac.compare_digest(record["hash"], _hash_password(password, record["salt"])):
            raise AuthenticationError("Invalid login credentials")
        if not record["user"].email_confirmed:
            raise AuthenticationError("Email not confirmed")
        return record["user"]

    def confirm_email(self, email: str) -> None:
        with self._lock:
            record = self._users[email.strip().lower()]
            record["user"] = record["user"].model_copy(update={"email_confirmed": True})

    def delete(self, user_id: str) -> None:
        with self._lock:
            for key, record in list(self._users.items()):
                if record["user"].id == user_id:
                    del self._users[key]
                    return
        raise AuthenticationError("User not found")


class LocalIdentityProvider:
    """IdentityProvider holding one browser session against a LocalUserDirectory."""

    def __init__(self, directory: LocalUserDirectory) -> None:
        self.directory = directory
        self._session: Optional[AuthSession] = None
        self._listeners: List[AuthListener] = []

    def _emit(self, event: AuthEvent) -> None:
        for listener in list(self._listeners):
            listener(event, self._session)

    def sign_up(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> AuthUser:
        return self.directory.register(email, password, metadata or {})

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        user = self.directory.authenticate(email, password)
        self._session = AuthSession(access_token=secrets.token_urlsafe(32), user=user)
        logger.debug(f"Local session opened for {user.email}")
        self._emit("SIGNED_IN")
        return self._session

    def sign_out(self) -> None:
        self._session = None
        self._emit("SIGNED_OUT")

    def get_session(self) -> Optional[AuthSession]:
        return self._session

    def on_auth_state_change(self, listener: AuthListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def delete_user(self, user_id: str) -> None:
        self.directory.delete(user_id)
