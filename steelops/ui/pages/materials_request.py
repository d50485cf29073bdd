import pandas as pd
import streamlit as st

from steelops.data.models import MATERIALS, PRIORITIES, REQUEST_STATUSES, REQUEST_UNITS, MaterialRequestCreate
from steelops.errors import DataAccessError
from steelops.logging import get_logger
from steelops.services.materials import MaterialsService, RequestNotFoundError, status_counts
from ..components import dismiss_error, flash, require_login, run_action, show_error
from ..context import AppContext

logger = get_logger(__name__)

TRACK_KEY = "steelops_tracked_request"


def _new_request_form(service: MaterialsService) -> None:
    with st.expander("New Material Request", expanded=False):
        with st.form("material_request", clear_on_submit=True):
            material = st.selectbox("Material", MATERIALS, index=None, placeholder="Select Material")
            c1, c2 = st.columns(2)
            quantity = c1.number_input("Quantity", min_value=0, step=1)
            unit = c2.selectbox("Unit", REQUEST_UNITS)
            priority = c1.selectbox("Priority", PRIORITIES, index=PRIORITIES.index("Medium"))
            required_date = c2.date_input("Required Date", value=None)
            notes = st.text_area("Notes", placeholder="Additional specifications or requirements...")
            submitted = st.form_submit_button("Submit Request")

        if submitted:
            created = []
            ok = run_action(lambda: created.append(service.submit_request(MaterialRequestCreate(
                material=material or "",
                quantity=int(quantity),
                unit=unit,
                priority=priority,
                required_date=required_date,
                notes=notes.strip() or None,
            ))))
            if ok:
                flash(f"Request {created[0].request_id} submitted successfully!")
                st.rerun()


def _tracking(service: MaterialsService) -> None:
    st.markdown("### Track Request")
    with st.form("track_request"):
        request_id = st.text_input("Request ID", placeholder="Enter Request ID (e.g., REQ123456)")
        track = st.form_submit_button("Track")
    if track:
        try:
            st.session_state[TRACK_KEY] = service.track_request(request_id)
        except RequestNotFoundError as e:
            logger.info(f"Tracking lookup found nothing: {request_id!r}")
            st.session_state.pop(TRACK_KEY, None)
            show_error(str(e))
        except DataAccessError as e:
            logger.error(f"Error tracking request: {e}")
            st.session_state.pop(TRACK_KEY, None)
            show_error("Request not found")
        else:
            dismiss_error("materials_request")

    found = st.session_state.get(TRACK_KEY)
    if found is not None:
        c1, c2, c3 = st.columns(3)
        c1.metric("Status", found.status)
        c2.metric("Priority", found.priority)
        c3.metric("Est. Delivery", found.estimated_delivery.strftime("%d/%m/%Y") if found.estimated_delivery else "TBD")
        st.caption(
            f"{found.request_id}: {found.quantity} {found.unit} of {found.material}, "
            f"requested on {found.request_date.strftime('%d/%m/%Y')}"
        )


def render(ctx: AppContext) -> None:
    st.title("Materials Request")
    if not require_login(ctx, "materials requests"):
        return

    service = MaterialsService(ctx.data_access, ctx.user_id, delivery_days=ctx.config.request_delivery_days)
    try:
        requests = service.list_requests()
    except DataAccessError as e:
        logger.error(f"Error fetching requests: {e}")
        st.error("Failed to load material requests. Please check your connection.")
        return

    # -----------------------------------------------------------------------------
    # Summary cards
    # -----------------------------------------------------------------------------
    counts = status_counts(requests)
    for col, (label, value) in zip(st.columns(len(counts)), counts.items()):
        col.metric(label, value)

    _new_request_form(service)
    _tracking(service)

    # -----------------------------------------------------------------------------
    # All requests
    # -----------------------------------------------------------------------------
    st.markdown("### Recent Requests")
    c1, c2 = st.columns([3, 1])
    statuses = c1.multiselect("Status", REQUEST_STATUSES, key="request_statuses")
    mine_only = c2.toggle("My requests only", key="request_mine_only")
    if statuses or mine_only:
        try:
            requests = service.list_requests(status=statuses, mine_only=mine_only)
        except DataAccessError as e:
            logger.error(f"Error filtering requests: {e}")
            st.error("Failed to load material requests. Please check your connection.")
            return
    if not requests:
        st.info("No material requests found.")
        return
    table = pd.DataFrame([r.model_dump() for r in requests])[
        ["request_id", "material", "quantity", "unit", "priority", "status", "request_date", "estimated_delivery"]
    ]
    st.dataframe(table, hide_index=True, use_container_width=True)
