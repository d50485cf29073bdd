"""Per-browser-session wiring of config, backends and state holders.

Shared resources (the data access layer, the local user directory) are cached
process-wide with ``st.cache_resource``; everything tied to one visitor (the
identity session, auth state, cart and checkout) lives in ``st.session_state``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import streamlit as st

from steelops.auth.interface import IdentityProvider
from steelops.auth.providers import LocalIdentityProvider, LocalUserDirectory
from steelops.auth.state import AuthState
from steelops.config import AppConfig, get_config
from steelops.data.interface import DataAccess
from steelops.data.util import get_data_access
from steelops.logging import get_logger
from steelops.services.chat import GREETING, ChatClient, ChatMessage, get_chat_client
from steelops.services.checkout import CheckoutFlow
from steelops.services.payment import PaymentGateway, get_payment_gateway

logger = get_logger(__name__)

SESSION_KEY = "steelops_ctx"


@dataclass
class AppContext:
    config: AppConfig
    data_access: DataAccess
    auth: AuthState
    gateway: PaymentGateway
    chat: ChatClient
    checkout: CheckoutFlow
    chat_history: List[ChatMessage] = field(
        default_factory=lambda: [ChatMessage(role="assistant", content=GREETING)]
    )

    @property
    def user_id(self) -> Optional[str]:
        return self.auth.user.id if self.auth.user else None

    def _sync_checkout_user(self, auth: AuthState) -> None:
        self.checkout.user_id = auth.user.id if auth.user else None

    def close(self) -> None:
        """Stop listening for auth changes; the context is unusable afterwards."""
        self.auth.close()


def build_context(
    config: AppConfig,
    data_access: DataAccess,
    identity: IdentityProvider,
    gateway: PaymentGateway,
    chat: ChatClient,
    user_agent: Optional[str] = None,
) -> AppContext:
    auth = AuthState(identity, data_access, log_sessions=config.log_sessions, user_agent=user_agent)
    checkout = CheckoutFlow(
        data_access,
        gateway,
        max_otp_attempts=config.otp_max_attempts,
        delivery_days=config.order_delivery_days,
    )
    ctx = AppContext(config=config, data_access=data_access, auth=auth, gateway=gateway,
                     chat=chat, checkout=checkout)
    auth.subscribe(ctx._sync_checkout_user)
    auth.start()
    return ctx


@st.cache_resource
def _shared_data_access() -> DataAccess:
    return get_data_access()


@st.cache_resource
def _shared_user_directory() -> LocalUserDirectory:
    return LocalUserDirectory()


@st.cache_resource
def _shared_payment_gateway() -> PaymentGateway:
    return get_payment_gateway()


def _session_identity(config: AppConfig) -> IdentityProvider:
    if config.auth_provider == "supabase":
        from steelops.auth.providers import SupabaseIdentityProvider
        from steelops.supabase.client import get_supabase_connection
        return SupabaseIdentityProvider(get_supabase_connection().create_session_client())
    return LocalIdentityProvider(_shared_user_directory())


def _user_agent() -> Optional[str]:
    try:
        return st.context.headers.get("User-Agent")
    except AttributeError:
        return None


def get_app_context() -> AppContext:
    """Return this browser session's context, building it on the first run."""
    ctx = st.session_state.get(SESSION_KEY)
    if ctx is None:
        config = get_config()
        ctx = build_context(
            config,
            _shared_data_access(),
            _session_identity(config),
            _shared_payment_gateway(),
            get_chat_client(),
            user_agent=_user_agent(),
        )
        st.session_state[SESSION_KEY] = ctx
        logger.debug("Created app context for new browser session")
    return ctx
