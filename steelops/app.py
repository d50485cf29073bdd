"""Streamlit entry point: page routing, sidebar and per-session context."""
import streamlit as st

from steelops.config import get_config
from steelops.logging import get_logger
from steelops.ui.components import PAGE_KEY, render_chatbot, render_sidebar_account, show_flash, show_page_error
from steelops.ui.context import AppContext, get_app_context
from steelops.ui.pages import (
    about,
    contact,
    home,
    inventory,
    login,
    materials_request,
    production,
    signup,
    vendor_management,
)

logger = get_logger(__name__)

# name -> (module, title, url path, icon)
OPERATIONS = {
    "home": (home, "Home", "home", ":material/home:"),
    "about": (about, "About", "about", ":material/info:"),
    "inventory": (inventory, "Inventory", "inventory", ":material/inventory_2:"),
    "production": (production, "Production", "production", ":material/factory:"),
    "materials_request": (materials_request, "Materials Request", "materials-request", ":material/local_shipping:"),
    "vendor_management": (vendor_management, "Vendor Management", "vendor-management", ":material/storefront:"),
    "contact": (contact, "Contact", "contact", ":material/call:"),
}
ACCOUNT = {
    "login": (login, "Login", "login", ":material/login:"),
    "signup": (signup, "Sign Up", "signup", ":material/person_add:"),
}


def _bind(name: str, module, ctx: AppContext):
    """Page callable with the session context bound in."""
    def page() -> None:
        st.session_state[PAGE_KEY] = name
        show_page_error()
        module.render(ctx)

    page.__name__ = name
    return page


def build_pages(ctx: AppContext) -> dict:
    pages = {}
    for name, (module, title, url_path, icon) in {**OPERATIONS, **ACCOUNT}.items():
        pages[name] = st.Page(_bind(name, module, ctx), title=title, url_path=url_path,
                              icon=icon, default=(name == "home"))
    return pages


def main() -> None:
    config = get_config()
    st.set_page_config(page_title=config.app_title, layout="wide")

    try:
        ctx = get_app_context()
    except (FileNotFoundError, RuntimeError) as e:
        # missing sample data or backend credentials
        logger.error(f"Could not start the dashboard: {e}")
        st.error(str(e))
        st.stop()
    pages = build_pages(ctx)
    st.session_state["steelops_pages"] = pages

    nav = st.navigation({
        "Operations": [pages[name] for name in OPERATIONS],
        "Account": [pages[name] for name in ACCOUNT],
    })

    render_sidebar_account(ctx)
    render_chatbot(ctx)
    show_flash()
    logger.debug(f"Rendering page: {nav.title}")
    nav.run()


if __name__ == "__main__":
    main()
