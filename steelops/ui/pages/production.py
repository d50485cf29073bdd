from datetime import date

import pandas as pd
import plotly.express as px
import streamlit as st

from steelops.data.models import SHIFTS, ProductionRecordCreate
from steelops.errors import DataAccessError
from steelops.logging import get_logger
from steelops.services.production import (
    PRODUCT_BREAKDOWN,
    ProductionService,
    current_stats,
    efficiency_trend,
    monthly_average,
    production_insights,
)
from ..components import run_action
from ..context import AppContext

logger = get_logger(__name__)

px.defaults.template = "plotly_white"


def _update_form(service: ProductionService) -> None:
    with st.expander("Update Production Data"):
        with st.form("production_update", clear_on_submit=True):
            c1, c2 = st.columns(2)
            day = c1.date_input("Date", value=date.today())
            shift = c2.selectbox("Shift", SHIFTS)
            steel = c1.number_input("Steel Production (tons)", min_value=0.0, step=10.0)
            iron = c2.number_input("Molten Iron (tons)", min_value=0.0, step=10.0)
            efficiency = c1.number_input("Efficiency (%)", min_value=0.0, max_value=100.0, step=0.1)
            quality = c2.number_input("Quality Rate (%)", min_value=0.0, max_value=100.0, step=0.1)
            uptime = c1.number_input("Uptime (hours)", min_value=0.0, max_value=24.0, step=0.1)
            downtime = c2.number_input("Downtime (hours)", min_value=0.0, max_value=24.0, step=0.1)
            reason = st.text_input("Downtime Reason")
            energy = st.number_input("Energy Consumption (kWh)", min_value=0.0, step=100.0)
            notes = st.text_area("Notes")
            submitted = st.form_submit_button("Save Production Data")

        if submitted:
            ok = run_action(
                lambda: service.add_record(ProductionRecordCreate(
                    date=day,
                    shift=shift,
                    steel_production=steel,
                    molten_iron=iron,
                    efficiency=efficiency,
                    quality_rate=quality,
                    uptime_hours=uptime,
                    downtime_hours=downtime,
                    downtime_reason=reason.strip() or None,
                    energy_consumption=energy or None,
                    notes=notes.strip() or None,
                )),
                success="Production data updated successfully!",
            )
            if ok:
                st.rerun()


def _records_table(service: ProductionService, records: list) -> None:
    c1, c2, c3 = st.columns(3)
    start = c1.date_input("From", value=None, key="production_from")
    end = c2.date_input("To", value=None, key="production_to")
    shifts = c3.multiselect("Shift", SHIFTS, key="production_shifts")
    if start or end or shifts:
        try:
            records = service.recent_records(start_date=start, end_date=end, shift=shifts)
        except DataAccessError as e:
            logger.error(f"Error filtering production data: {e}")
            st.error("Failed to load production data.")
            return
    if not records:
        st.info("No production records match the selected filters.")
        return
    table = pd.DataFrame([r.model_dump() for r in records]).drop(columns=["id", "operator_id"])
    st.dataframe(table, hide_index=True, use_container_width=True)


def render(ctx: AppContext) -> None:
    st.title("Production Dashboard")

    service = ProductionService(ctx.data_access, ctx.user_id, row_limit=ctx.config.production_row_limit)
    try:
        records = service.recent_records()
    except DataAccessError as e:
        logger.error(f"Error fetching production data: {e}")
        st.error("Failed to load production data. Using default data.")
        records = []

    if ctx.auth.is_authenticated:
        _update_form(service)

    # -----------------------------------------------------------------------------
    # Stats cards (latest record)
    # -----------------------------------------------------------------------------
    stats = current_stats(records)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Daily Output", f"{stats['daily_output']:.1f} tons")
    c2.metric("Efficiency", f"{stats['efficiency']:.1f}%")
    c3.metric("Uptime", f"{stats['uptime']:.1f} hrs")
    c4.metric("Quality Rate", f"{stats['quality_rate']:.1f}%")

    if not records:
        st.info("No production data recorded yet.")
        return

    # -----------------------------------------------------------------------------
    # Charts
    # -----------------------------------------------------------------------------
    left, right = st.columns(2)
    with left:
        st.markdown("### Monthly Production vs Target")
        monthly = monthly_average(records, target=ctx.config.production_target_tons)
        long = monthly.melt(id_vars="month", value_vars=["production", "target"], var_name="series", value_name="tons")
        st.plotly_chart(px.bar(long, x="month", y="tons", color="series", barmode="group"), use_container_width=True)
    with right:
        st.markdown("### Efficiency Trend")
        trend = efficiency_trend(records)
        st.plotly_chart(px.line(trend, x="day", y="efficiency", markers=True, hover_data=["date"]),
                        use_container_width=True)

    left, right = st.columns(2)
    with left:
        st.markdown("### Production Breakdown by Product")
        st.plotly_chart(px.pie(PRODUCT_BREAKDOWN, names="product", values="share"), use_container_width=True)
    with right:
        st.markdown("### Production Insights")
        for line in production_insights(records):
            st.write(f"- {line}")

    # -----------------------------------------------------------------------------
    # Recent records
    # -----------------------------------------------------------------------------
    with st.expander("Recent production records"):
        _records_table(service, records)
