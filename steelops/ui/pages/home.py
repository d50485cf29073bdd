import streamlit as st

from ..context import AppContext

STATS = [
    ("Daily Steel Production", "2,500 tons"),
    ("Molten Iron Output", "1,800 tons"),
    ("Active Employees", "850"),
    ("Quality Standards Met", "99%"),
]

PARTNERS = [
    ("Industrial Steel Corp", "+1 (555) 123-4567"),
    ("MetalWorks International", "+1 (555) 987-6543"),
    ("Steel Dynamics Ltd", "+1 (555) 456-7890"),
]


def render(ctx: AppContext) -> None:
    st.title(ctx.config.app_title)
    st.caption("Visakhapatnam Steel Plant operations dashboard")

    st.markdown("### Daily Production Overview")
    st.write("Real-time insights into our steel production capabilities and operational excellence")
    for col, (label, value) in zip(st.columns(len(STATS)), STATS):
        col.metric(label, value)

    st.markdown("### Our Strategic Partners")
    for col, (name, contact) in zip(st.columns(len(PARTNERS)), PARTNERS):
        with col:
            st.markdown(f"**{name}**")
            st.caption(contact)

    st.markdown("### Get in Touch")
    c1, c2 = st.columns(2)
    with c1:
        st.markdown("**Contact Information**")
        st.write("+91 (891) 2565-000")
        st.write("info@rinl.co.in")
    with c2:
        st.markdown("**Business Hours**")
        st.write("Monday - Friday: 8:00 AM - 6:00 PM")
        st.write("Saturday: 9:00 AM - 4:00 PM")
        st.write("Sunday: Emergency Operations Only")
