import streamlit as st

from steelops.auth.messages import login_error_message, validate_login_form
from steelops.errors import AuthenticationError, SteelOpsError
from steelops.logging import get_logger
from ..components import dismiss_error, flash, show_error
from ..context import AppContext

logger = get_logger(__name__)


def render(ctx: AppContext) -> None:
    st.title("Sign In")

    if ctx.auth.is_authenticated:
        st.success(f"You are signed in as {ctx.auth.user.email}.")
        return

    with st.form("login_form"):
        email = st.text_input("Email Address")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign In", use_container_width=True)

    if submitted:
        problem = validate_login_form(email.strip(), password)
        if problem:
            show_error(problem)
            return
        try:
            ctx.auth.sign_in(email.strip(), password)
        except AuthenticationError as e:
            logger.error(f"Login error: {e}")
            show_error(login_error_message(str(e)))
            return
        except SteelOpsError as e:
            logger.error(f"Login failed: {e}")
            show_error("Unable to reach the account service. Please try again later.")
            return
        dismiss_error("login")
        flash("Login successful!")
        st.switch_page(st.session_state["steelops_pages"]["home"])

    st.caption("Don't have an account?")
    if st.button("Create an account"):
        st.switch_page(st.session_state["steelops_pages"]["signup"])
