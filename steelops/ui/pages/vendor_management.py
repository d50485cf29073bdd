from datetime import date, timedelta

import pandas as pd
import streamlit as st

from steelops.data.models import VendorOrderFilters
from steelops.errors import CheckoutError, DataAccessError, PaymentGatewayError
from steelops.logging import get_logger
from steelops.services.catalog import STEEL_PRODUCTS, VENDORS, Product, average_vendor_rating
from steelops.services.checkout import CheckoutFlow, CheckoutStep
from steelops.services.payment import PaymentDetails
from ..components import dismiss_error, money, require_login, run_action, show_error
from ..context import AppContext

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Browsing
# -----------------------------------------------------------------------------
def _vendors() -> None:
    st.markdown("### Vendor Directory")
    c1, c2, c3 = st.columns(3)
    c1.metric("Active Vendors", sum(1 for v in VENDORS if v.status == "Active"))
    c2.metric("Average Rating", f"{average_vendor_rating():.1f}")
    c3.metric("Products", len(STEEL_PRODUCTS))
    table = pd.DataFrame([v.model_dump() for v in VENDORS]).drop(columns=["id"])
    st.dataframe(table, hide_index=True, use_container_width=True)


def _product_card(ctx: AppContext, flow: CheckoutFlow, product: Product) -> None:
    with st.container(border=True):
        st.markdown(f"**{product.name}**")
        st.caption(product.description)
        st.write(f"{money(ctx, product.price)} {product.unit}")
        with st.form(f"product_{product.id}"):
            quantity = st.number_input("Quantity (tons)", min_value=0, value=1, step=1)
            specs = st.text_input("Specifications", placeholder="Grade, dimensions, finish...")
            delivery = st.date_input("Delivery Date", value=None, min_value=date.today() + timedelta(days=1))
            add = st.form_submit_button("Add to Cart")
            buy = st.form_submit_button("Buy Now", type="primary")
        if add and run_action(lambda: flow.add_to_cart(product, int(quantity), specs, delivery),
                              success=f"{product.name} added to cart"):
            st.rerun()
        if buy and run_action(lambda: flow.buy_now(product, int(quantity), specs, delivery)):
            st.rerun()


def _catalog(ctx: AppContext, flow: CheckoutFlow) -> None:
    head, cart_col = st.columns([4, 1])
    head.markdown("### Steel Products")
    if cart_col.button(f"🛒 Cart ({len(flow.cart)})", use_container_width=True):
        flow.view_cart()
        st.rerun()
    for start in range(0, len(STEEL_PRODUCTS), 3):
        for col, product in zip(st.columns(3), STEEL_PRODUCTS[start:start + 3]):
            with col:
                _product_card(ctx, flow, product)


# -----------------------------------------------------------------------------
# Cart
# -----------------------------------------------------------------------------
def _cart(ctx: AppContext, flow: CheckoutFlow) -> None:
    st.markdown("### Shopping Cart")
    if flow.cart.is_empty():
        st.info("Your cart is empty")
    for index, item in enumerate(flow.cart):
        with st.container(border=True):
            c1, c2, c3, c4 = st.columns([3, 2, 2, 1])
            c1.markdown(f"**{item.name}**")
            if item.specifications:
                c1.caption(item.specifications)
            if item.delivery_date:
                c1.caption(f"Delivery: {item.delivery_date.strftime('%d/%m/%Y')}")
            qty = c2.number_input("Quantity", min_value=0, value=item.quantity, step=1, key=f"cart_qty_{hash(item.key)}")
            c3.write(money(ctx, item.line_total))
            if qty != item.quantity:
                flow.cart.update_quantity(index, int(qty))
                st.rerun()
            if c4.button("Remove", key=f"cart_remove_{hash(item.key)}"):
                flow.cart.remove(index)
                st.rerun()

    st.markdown(f"**Total items:** {flow.cart.item_count} tons &nbsp;&nbsp; **Total:** {money(ctx, flow.cart.total)}")
    c1, c2 = st.columns(2)
    if c1.button("Continue Shopping"):
        flow.close_cart()
        st.rerun()
    if c2.button("Proceed to Checkout", type="primary") and run_action(flow.checkout):
        st.rerun()


# -----------------------------------------------------------------------------
# Payment and OTP
# -----------------------------------------------------------------------------
def _order_summary(ctx: AppContext, flow: CheckoutFlow) -> None:
    with st.container(border=True):
        st.markdown("**Order Summary**")
        for item in flow.cart:
            st.write(f"{item.name} × {item.quantity} {item.unit}: {money(ctx, item.line_total)}")
        st.markdown(f"**Total: {money(ctx, flow.cart.total)}**")


def _payment(ctx: AppContext, flow: CheckoutFlow) -> None:
    st.markdown("### Payment Details")
    _order_summary(ctx, flow)
    with st.form("payment_form"):
        card = st.text_input("Card Number", placeholder="1234 5678 9012 3456", max_chars=19)
        c1, c2 = st.columns(2)
        expiry = c1.text_input("Expiry Date", placeholder="MM/YY", max_chars=5)
        cvv = c2.text_input("CVV", type="password", max_chars=4)
        name = st.text_input("Cardholder Name")
        pay = st.form_submit_button(f"Pay {money(ctx, flow.cart.total)}", type="primary")
    if pay:
        details = PaymentDetails.from_form(card, expiry, cvv, name)
        with st.spinner("Processing payment..."):
            ok = run_action(lambda: flow.submit_payment(details))
        if ok:
            st.rerun()
    if st.button("Back to Products"):
        flow.cancel_payment()
        st.rerun()


def _otp(ctx: AppContext, flow: CheckoutFlow) -> None:
    st.markdown("### OTP Verification")
    st.info("A one-time password has been sent to the mobile number registered with your card.")
    st.caption(f"Amount: {money(ctx, flow.challenge.amount)} · Attempts remaining: {flow.remaining_attempts}")
    with st.form("otp_form", clear_on_submit=True):
        code = st.text_input("Enter OTP", max_chars=6, placeholder="6-digit code")
        verify = st.form_submit_button("Verify & Pay", type="primary")
    if verify:
        try:
            with st.spinner("Verifying..."):
                flow.verify_otp(code)
        except (CheckoutError, PaymentGatewayError) as e:
            logger.error(f"OTP verification failed: {e}")
            show_error(str(e))
            if flow.step != CheckoutStep.OTP_VERIFICATION:
                # flow fell back to the payment form; the banner is kept for the next run
                st.rerun()
        else:
            dismiss_error("vendor_management")
            st.rerun()
    if st.button("Cancel"):
        flow.cancel_otp()
        st.rerun()


def _success(ctx: AppContext, flow: CheckoutFlow) -> None:
    receipt = flow.receipt
    st.success("Order placed successfully!")
    with st.container(border=True):
        c1, c2, c3 = st.columns(3)
        c1.metric("Order ID", receipt.order_id)
        c2.metric("Total Paid", money(ctx, receipt.total))
        c3.metric("Estimated Delivery", receipt.estimated_delivery.strftime("%d/%m/%Y"))
        st.caption(f"{receipt.item_count} item(s) · Status: {receipt.status}")
    if st.button("Continue Shopping", type="primary"):
        flow.reset()
        st.rerun()


# -----------------------------------------------------------------------------
# Order history
# -----------------------------------------------------------------------------
def _orders(ctx: AppContext) -> None:
    head, sort_col = st.columns([4, 1])
    head.markdown("### My Orders")
    oldest_first = sort_col.toggle("Oldest first", key="orders_oldest_first")
    filters = VendorOrderFilters(user_id=ctx.user_id, order_by="created_at_asc" if oldest_first else "created_at_desc")
    try:
        orders = ctx.data_access.list_vendor_orders(filters)
    except DataAccessError as e:
        logger.error(f"Error fetching orders: {e}")
        st.error("Failed to load your orders.")
        return
    if not orders:
        st.info("You have not placed any orders yet.")
        return
    table = pd.DataFrame([o.model_dump() for o in orders])[
        ["order_id", "product", "quantity", "unit", "total_amount", "delivery_date", "status", "payment_status", "created_at"]
    ]
    st.dataframe(table, hide_index=True, use_container_width=True)


STEP_VIEWS = {
    CheckoutStep.CART: _cart,
    CheckoutStep.PAYMENT: _payment,
    CheckoutStep.OTP_VERIFICATION: _otp,
    CheckoutStep.SUCCESS: _success,
}


def render(ctx: AppContext) -> None:
    st.title("Vendor Management")
    if not require_login(ctx, "vendor management"):
        return

    flow = ctx.checkout
    view = STEP_VIEWS.get(flow.step)
    if view is not None:
        view(ctx, flow)
        return

    _vendors()
    _catalog(ctx, flow)
    _orders(ctx)
