from __future__ import annotations

from typing import Callable, List, Optional

from steelops.data.interface import DataAccess
from steelops.data.models import UserProfile, UserProfileCreate
from steelops.errors import AuthenticationError, DataAccessError
from steelops.logging import get_logger
from .interface import AuthEvent, AuthSession, AuthUser, IdentityProvider

logger = get_logger(__name__)

StateListener = Callable[["AuthState"], None]


class AuthState:
    """Mirror of the current session and profile row for one browser session.

    Created by the app context at start up and injected into every page; call
    ``start()`` once to load the existing session and subscribe to session
    changes, and ``close()`` to unsubscribe. Listeners registered with
    ``subscribe()`` are called after every change.

    Everything here is pass-through to the identity provider and the users
    table; the only local rule is that a sign out always clears local state,
    even when the remote call fails.
    """

    def __init__(
        self,
        identity: IdentityProvider,
        data_access: DataAccess,
        log_sessions: bool = True,
        user_agent: Optional[str] = None,
    ) -> None:
        self.identity = identity
        self.data_access = data_access
        self.log_sessions = log_sessions
        self.user_agent = user_agent
        self.user: Optional[AuthUser] = None
        self.profile: Optional[UserProfile] = None
        self.session_id: Optional[str] = None
        self.loading = True
        self._listeners: List[StateListener] = []
        self._unsubscribe: Optional[Callable[[], None]] = None

    # ---------- lifecycle ----------

    def start(self) -> "AuthState":
        if self._unsubscribe is not None:
            return self
        try:
            session = self.identity.get_session()
        except AuthenticationError as e:
            logger.error(f"Error getting initial session: {e}")
            session = None
        logger.debug(f"Initial session user: {session.user.email if session else None}")
        self._apply_session(session)
        self._unsubscribe = self.identity.on_auth_state_change(self._handle_auth_change)
        self.loading = False
        self._notify()
        return self

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._listeners.clear()

    def __enter__(self) -> "AuthState":
        return self.start()

    def __exit__(self, *exc) -> None:
        self.close()

    # ---------- observers ----------

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def role(self) -> Optional[str]:
        return self.profile.role if self.profile else None

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ---------- session tracking ----------

    def _apply_session(self, session: Optional[AuthSession]) -> None:
        self.user = session.user if session else None
        self.profile = self._fetch_profile(self.user.id) if self.user else None

    def _fetch_profile(self, user_id: str) -> Optional[UserProfile]:
        try:
            profile = self.data_access.get_user_profile(user_id)
        except DataAccessError as e:
            logger.error(f"Error fetching user profile: {e}")
            return None
        logger.debug(f"User profile fetched: {profile.role if profile else None}")
        return profile

    def _handle_auth_change(self, event: AuthEvent, session: Optional[AuthSession]) -> None:
        logger.info(f"Auth state changed: {event} {session.user.email if session else None}")
        if session is not None:
            self._apply_session(session)
            if event == "SIGNED_IN":
                self._log_login()
        else:
            if event == "SIGNED_OUT" and self.session_id:
                self._log_logout(self.session_id)
            self._clear()
        self.loading = False
        self._notify()

    def _log_login(self) -> None:
        if not self.log_sessions or self.user is None or self.profile is None:
            return
        try:
            self.session_id = self.data_access.log_user_login(self.user.id, self.profile.role, self.user_agent)
            logger.info(f"Login logged with session ID: {self.session_id}")
        except DataAccessError as e:
            logger.error(f"Error logging login: {e}")

    def _log_logout(self, session_id: str) -> None:
        if not self.log_sessions:
            return
        try:
            self.data_access.log_user_logout(session_id)
            logger.info(f"Logout logged for session: {session_id}")
        except DataAccessError as e:
            logger.error(f"Error logging logout: {e}")

    def _clear(self) -> None:
        self.user = None
        self.profile = None
        self.session_id = None

    # ---------- actions ----------

    def sign_up(self, employee_id: str, email: str, password: str, role: str) -> AuthUser:
        logger.info(f"Starting signup for: {email} with role: {role}")
        try:
            existing = self.data_access.find_user(email, employee_id)
        except DataAccessError as e:
            logger.error(f"Error checking existing accounts: {e}")
            raise AuthenticationError(f"Could not check existing accounts: {e.message}") from e
        if existing is not None:
            if existing.email == email:
                raise AuthenticationError("An account with this email already exists")
            raise AuthenticationError("An account with this employee ID already exists")

        user = self.identity.sign_up(email, password, {"employee_id": employee_id, "role": role})
        logger.info(f"Auth user created: {user.email}")

        try:
            self.data_access.create_user_profile(
                UserProfileCreate(id=user.id, employee_id=employee_id, email=email, role=role)
            )
        except DataAccessError as e:
            logger.error(f"Profile creation error: {e}")
            try:
                self.identity.delete_user(user.id)
            except AuthenticationError as cleanup_error:
                logger.error(f"Failed to clean up auth user {user.id}: {cleanup_error}")
            raise AuthenticationError(f"Failed to create user profile: {e.message}") from e
        return user

    def sign_in(self, email: str, password: str) -> AuthSession:
        logger.info(f"Starting signin for: {email}")
        try:
            session = self.identity.sign_in_with_password(email, password)
        except AuthenticationError:
            self._clear()
            self._notify()
            raise
        # Providers normally report SIGNED_IN through the subscription; cover those that do not
        if self.user is None or self.user.id != session.user.id:
            self._handle_auth_change("SIGNED_IN", session)
        return session

    def sign_out(self) -> None:
        logger.info("Starting logout process")
        if self.session_id:
            self._log_logout(self.session_id)
        self._clear()
        self._notify()
        try:
            self.identity.sign_out()
        except AuthenticationError as e:
            # Local state is already cleared
            logger.error(f"Error signing out: {e}")
        logger.info("Logout completed")
