import streamlit as st

from ..context import AppContext


def render(ctx: AppContext) -> None:
    st.title("Contact Us")
    c1, c2 = st.columns(2)
    with c1:
        st.markdown("### Contact Information")
        st.write("Rashtriya Ispat Nigam Limited")
        st.write("Visakhapatnam Steel Plant, Visakhapatnam - 530031, Andhra Pradesh")
        st.write("Phone: +91 (891) 2565-000")
        st.write("Email: info@rinl.co.in")
    with c2:
        st.markdown("### Business Hours")
        st.write("Monday - Friday: 8:00 AM - 6:00 PM")
        st.write("Saturday: 9:00 AM - 4:00 PM")
        st.write("Sunday: Emergency Operations Only")
