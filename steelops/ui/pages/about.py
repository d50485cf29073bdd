import streamlit as st

from ..context import AppContext

RAW_MATERIALS = [
    ("Iron Ore", "High-grade iron ore for steel production"),
    ("Coal", "Coking coal for blast furnace operations"),
    ("Limestone", "Flux material for steel making process"),
    ("Dolomite", "Refractory material for furnace lining"),
]

PRODUCTS = [
    ("Hot Rolled Coils", "High-quality hot rolled steel coils"),
    ("Cold Rolled Sheets", "Precision cold rolled steel sheets"),
    ("Wire Rods", "Steel wire rods for various applications"),
    ("Structural Steel", "Beams, angles, and channels"),
    ("Plates", "Heavy steel plates for construction"),
    ("Pipes & Tubes", "Seamless and welded steel pipes"),
]

VALUES = [
    ("Innovation", "Continuously advancing steel production technology and processes"),
    ("People First", "Prioritizing safety, development, and well-being of our workforce"),
    ("Quality", "Delivering products that exceed industry standards and expectations"),
    ("Sustainability", "Committed to environmental responsibility and sustainable practices"),
]

LEADERSHIP = [
    ("Atul Bhatt", "Chairman & Managing Director"),
    ("P.K. Rath", "Director (Operations)"),
    ("K. Rajeev Kumar", "Director (Finance)"),
]


def _cards(rows, per_row: int = 3) -> None:
    for start in range(0, len(rows), per_row):
        for col, (title, text) in zip(st.columns(per_row), rows[start:start + per_row]):
            with col:
                st.markdown(f"**{title}**")
                st.caption(text)


def render(ctx: AppContext) -> None:
    st.title("About RINL")
    st.write(
        "Rashtriya Ispat Nigam Limited - Leading India's steel industry with innovative technology, "
        "sustainable practices, and unwavering commitment to excellence since 1982."
    )

    st.markdown("### Our Story")
    st.write(
        "Established in 1982, Rashtriya Ispat Nigam Limited (RINL) is India's premier steel "
        "manufacturing company. Located in Visakhapatnam, Andhra Pradesh, we have grown to become "
        "one of the country's most trusted names in steel production."
    )
    st.write(
        "Today, we operate state-of-the-art facilities that produce over 7.3 million tons of "
        "high-quality steel annually, serving industries ranging from construction and automotive "
        "to shipbuilding and infrastructure development."
    )

    st.markdown("### Raw Materials")
    _cards(RAW_MATERIALS, per_row=4)
    st.markdown("### Steel Products")
    _cards(PRODUCTS)
    st.markdown("### Our Values")
    _cards(VALUES, per_row=4)
    st.markdown("### Leadership Team")
    _cards(LEADERSHIP)
