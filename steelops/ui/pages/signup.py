import streamlit as st

from steelops.auth.messages import ROLES, signup_error_message, validate_signup_form
from steelops.errors import AuthenticationError, SteelOpsError
from steelops.logging import get_logger
from ..components import dismiss_error, flash, show_error
from ..context import AppContext

logger = get_logger(__name__)


def render(ctx: AppContext) -> None:
    st.title("Create Account")

    with st.form("signup_form"):
        employee_id = st.text_input("Employee ID")
        email = st.text_input("Email Address")
        role = st.selectbox("Role", list(ROLES), format_func=ROLES.get, index=None, placeholder="Select your role")
        password = st.text_input("Password", type="password")
        confirm_password = st.text_input("Confirm Password", type="password")
        submitted = st.form_submit_button("Create Account", use_container_width=True)

    if submitted:
        problem = validate_signup_form(employee_id, email, password, confirm_password, role or "")
        if problem:
            show_error(problem)
            return
        try:
            user = ctx.auth.sign_up(employee_id.strip(), email.strip(), password, role)
        except AuthenticationError as e:
            logger.error(f"Signup error: {e}")
            show_error(signup_error_message(str(e)))
            return
        except SteelOpsError as e:
            logger.error(f"Signup failed: {e}")
            show_error("Unable to reach the account service. Please try again later.")
            return
        dismiss_error("signup")
        if user.email_confirmed:
            flash("Account created successfully! You can now sign in.")
        else:
            flash("Account created! Please check your email to confirm your address before signing in.")
        st.switch_page(st.session_state["steelops_pages"]["login"])

    st.caption("Already have an account?")
    if st.button("Sign in"):
        st.switch_page(st.session_state["steelops_pages"]["login"])
