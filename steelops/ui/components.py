from __future__ import annotations

from typing import Callable, Optional

import streamlit as st
from pydantic import ValidationError

from steelops.errors import ChatError, SteelOpsError
from steelops.logging import get_logger
from steelops.services.chat import ChatMessage
from .context import AppContext

logger = get_logger(__name__)

FLASH_KEY = "steelops_flash"
ERRORS_KEY = "steelops_page_errors"
PAGE_KEY = "steelops_current_page"


def flash(message: str, kind: str = "success") -> None:
    """Queue a banner for the next run (survives st.rerun)."""
    st.session_state[FLASH_KEY] = (kind, message)


def show_flash() -> None:
    kind, message = st.session_state.pop(FLASH_KEY, (None, None))
    if message:
        getattr(st, kind, st.info)(message)


def validation_message(error: ValidationError) -> str:
    """First problem of a pydantic validation error, worded for a form."""
    first = error.errors()[0]
    field = " ".join(str(part) for part in first.get("loc", ())).replace("_", " ")
    message = first.get("msg", "Invalid value").removeprefix("Value error, ")
    return f"{field.capitalize()}: {message}" if field else message


# -----------------------------------------------------------------------------
# Page errors
# -----------------------------------------------------------------------------
def _page_errors() -> dict:
    return st.session_state.setdefault(ERRORS_KEY, {})


def current_page() -> str:
    return st.session_state.get(PAGE_KEY, "app")


def dismiss_error(page: str) -> None:
    _page_errors().pop(page, None)


def _error_banner(page: str, message: str, key: str) -> None:
    text, close = st.columns([20, 1])
    text.error(message)
    close.button("✕", key=key, help="Dismiss", on_click=dismiss_error, args=(page,))


def show_error(message: str) -> None:
    """Show an error banner that stays on this page until dismissed."""
    page = current_page()
    _page_errors()[page] = message
    _error_banner(page, message, key=f"dismiss_new_{page}")


def show_page_error() -> None:
    """Re-show the error kept for the current page by an earlier run."""
    page = current_page()
    message = _page_errors().get(page)
    if message:
        _error_banner(page, message, key=f"dismiss_{page}")


def run_action(action: Callable[[], object], success: Optional[str] = None) -> bool:
    """Run a page action, showing application errors in an error banner.

    Returns True when the action completed.
    """
    try:
        action()
    except SteelOpsError as e:
        logger.error(f"{current_page()}: {type(e).__name__}: {e}")
        show_error(str(e))
        return False
    except ValidationError as e:
        message = validation_message(e)
        logger.error(f"{current_page()}: invalid form input: {message}")
        show_error(message)
        return False
    dismiss_error(current_page())
    if success:
        flash(success)
    return True


def require_login(ctx: AppContext, what: str) -> bool:
    if ctx.auth.is_authenticated:
        return True
    st.warning(f"Please log in to access {what}.")
    if st.button("Go to Login", key=f"login_gate_{what}"):
        st.switch_page(st.session_state["steelops_pages"]["login"])
    return False


def money(ctx: AppContext, amount: float) -> str:
    return f"{ctx.config.currency_symbol}{amount:,.0f}"


# -----------------------------------------------------------------------------
# Sidebar
# -----------------------------------------------------------------------------
def render_sidebar_account(ctx: AppContext) -> None:
    with st.sidebar:
        st.markdown("---")
        if ctx.auth.is_authenticated:
            label = ctx.auth.profile.employee_id if ctx.auth.profile else ctx.auth.user.email
            st.caption(f"Signed in as **{label}**")
            if ctx.auth.role:
                st.caption(f"Role: {ctx.auth.role.title()}")
            if st.button("Logout", use_container_width=True):
                ctx.auth.sign_out()
                ctx.checkout.reset()
                ctx.checkout.cart.clear()
                st.rerun()
        else:
            st.caption("Not signed in")


def render_chatbot(ctx: AppContext) -> None:
    with st.sidebar.expander("RINL Assistant", expanded=False):
        for msg in ctx.chat_history[-10:]:
            speaker = "Assistant" if msg.role == "assistant" else "You"
            st.markdown(f"**{speaker}:** {msg.content}")
        if not ctx.chat.configured:
            st.caption("Set CHAT_API_KEY to enable the assistant.")
            return
        with st.form("chat_form", clear_on_submit=True):
            text = st.text_input("Ask a question", placeholder="Type your message...")
            sent = st.form_submit_button("Send")
        if sent and text.strip():
            ctx.chat_history.append(ChatMessage(role="user", content=text.strip()))
            with st.spinner("Thinking..."):
                try:
                    reply = ctx.chat.reply(ctx.chat_history[1:])
                except ChatError as e:
                    logger.error(f"Chat assistant error: {e}")
                    reply = f"⚠️ AI failed to respond. {e}"
            ctx.chat_history.append(ChatMessage(role="assistant", content=reply))
            st.rerun()
