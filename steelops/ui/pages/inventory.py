import pandas as pd
import streamlit as st

from steelops.data.models import (
    INVENTORY_CATEGORIES,
    INVENTORY_STATUSES,
    INVENTORY_UNITS,
    InventoryFilters,
    InventoryItemCreate,
)
from steelops.errors import DataAccessError
from steelops.logging import get_logger
from steelops.services.inventory import InventoryService, edited_rows, status_counts
from ..components import flash, run_action
from ..context import AppContext

logger = get_logger(__name__)

TABLE_COLUMNS = ["item_id", "name", "category", "quantity", "unit", "status", "location", "updated_at"]


def _add_item_form(service: InventoryService) -> None:
    with st.expander("Add New Item"):
        with st.form("add_inventory_item", clear_on_submit=True):
            c1, c2 = st.columns(2)
            item_id = c1.text_input("Item ID", placeholder="e.g., STL001")
            name = c2.text_input("Product Name")
            category = c1.selectbox("Category", INVENTORY_CATEGORIES)
            unit = c2.selectbox("Unit", INVENTORY_UNITS)
            quantity = c1.number_input("Quantity", min_value=0, step=1)
            status = c2.selectbox("Status", INVENTORY_STATUSES)
            location = c1.text_input("Location", placeholder="e.g., Warehouse A")
            supplier = c2.text_input("Supplier")
            cost = c1.number_input("Cost per Unit", min_value=0.0, step=100.0)
            submitted = st.form_submit_button("Add Item")

        if submitted:
            ok = run_action(
                lambda: service.add_item(InventoryItemCreate(
                    item_id=item_id.strip(),
                    name=name.strip(),
                    category=category,
                    quantity=int(quantity),
                    unit=unit,
                    status=status,
                    location=location.strip() or None,
                    supplier=supplier.strip() or None,
                    cost_per_unit=cost or None,
                )),
                success="Inventory item added successfully!",
            )
            if ok:
                st.rerun()


def _edit_table(service: InventoryService, table: pd.DataFrame) -> None:
    edited = st.data_editor(
        table,
        column_config={
            "id": None,
            "quantity": st.column_config.NumberColumn("quantity", min_value=0, step=1, required=True),
            "status": st.column_config.SelectboxColumn("status", options=INVENTORY_STATUSES, required=True),
        },
        disabled=[c for c in table.columns if c not in ("quantity", "status")],
        hide_index=True,
        use_container_width=True,
        # edits are positional, so a different row set gets a fresh editor
        key=f"inventory_editor_{hash(tuple(table['id']))}",
    )
    if st.button("Save Changes"):
        updates = []
        if not run_action(lambda: updates.extend(edited_rows(table, edited))):
            return
        for row_id, quantity, status in updates:
            if not run_action(lambda r=row_id, q=quantity, s=status: service.update_item(r, q, s)):
                return
        if updates:
            flash(f"Updated {len(updates)} item(s).")
            st.rerun()


def render(ctx: AppContext) -> None:
    st.title("Inventory Management")

    service = InventoryService(ctx.data_access, ctx.user_id)
    try:
        items = service.list_items()
    except DataAccessError as e:
        logger.error(f"Error fetching inventory: {e}")
        st.error("Failed to load inventory data. Please check your connection.")
        return

    # -----------------------------------------------------------------------------
    # Summary cards
    # -----------------------------------------------------------------------------
    counts = status_counts(items)
    for col, (label, value) in zip(st.columns(len(counts)), counts.items()):
        col.metric(label, f"{value:,}")

    if ctx.auth.is_authenticated:
        _add_item_form(service)

    # -----------------------------------------------------------------------------
    # Inventory table
    # -----------------------------------------------------------------------------
    st.markdown("### Current Inventory")
    c1, c2, c3 = st.columns([2, 1, 1])
    search = c1.text_input("Search", placeholder="Item ID or name", key="inventory_search")
    categories = c2.multiselect("Category", INVENTORY_CATEGORIES, key="inventory_categories")
    statuses = c3.multiselect("Status", INVENTORY_STATUSES, key="inventory_statuses")
    if search.strip() or categories or statuses:
        filters = InventoryFilters(search=search.strip() or None, category=categories or None, status=statuses or None)
        try:
            items = service.list_items(filters)
        except DataAccessError as e:
            logger.error(f"Error filtering inventory: {e}")
            st.error("Failed to load inventory data. Please check your connection.")
            return
    if not items:
        st.info("No inventory items found.")
        return
    table = pd.DataFrame([i.model_dump() for i in items])[["id"] + TABLE_COLUMNS]

    if ctx.auth.is_authenticated:
        _edit_table(service, table)
    else:
        st.dataframe(table[TABLE_COLUMNS], hide_index=True, use_container_width=True)
        st.caption("Log in to add or update inventory.")
