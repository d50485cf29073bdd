"""Vendor checkout: cart, card payment, OTP confirmation and order persistence.

One ``CheckoutFlow`` lives in each browser session. The vendor page renders
whatever ``flow.step`` says and calls the matching action; every action
either moves the flow to its next step or raises a ``CheckoutError`` whose
message is shown as-is.
"""
from __future__ import annotations

import re
import time
from datetime import date, timedelta
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from steelops.data.interface import DataAccess
from steelops.data.models import VendorOrder, VendorOrderCreate
from steelops.errors import (
    CheckoutError,
    DataAccessError,
    InvalidOtpError,
    OtpAttemptsExceededError,
    PaymentGatewayError,
)
from steelops.logging import get_logger
from .cart import Cart, CartItem
from .catalog import Product
from .payment import PaymentChallenge, PaymentDetails, PaymentGateway, validate_payment_details

logger = get_logger(__name__)

OTP_RE = re.compile(r"^\d{6}$")


class CheckoutStep(str, Enum):
    BROWSING = "browsing"
    CART = "cart"
    PAYMENT = "payment"
    OTP_VERIFICATION = "otp_verification"
    SUCCESS = "success"


class OrderReceipt(BaseModel):
    """Summary shown on the confirmation screen."""
    order_id: str = Field(description="Receipt number, ORD<epoch-ms>")
    item_count: int = Field(description="Number of order lines")
    total: float = Field(description="Amount charged")
    status: str = Field(default="Processing", description="Fulfilment status of the lines")
    estimated_delivery: date = Field(description="Estimated delivery date")
    lines: List[VendorOrder] = Field(default_factory=list, description="Persisted order lines")


def _epoch_ms() -> int:
    return int(time.time() * 1000)


class CheckoutFlow:
    def __init__(
        self,
        data_access: DataAccess,
        gateway: PaymentGateway,
        user_id: Optional[str] = None,
        max_otp_attempts: int = 3,
        delivery_days: int = 7,
    ) -> None:
        self.data_access = data_access
        self.gateway = gateway
        self.user_id = user_id
        self.max_otp_attempts = max_otp_attempts
        self.delivery_days = delivery_days
        self.cart = Cart()
        self.step = CheckoutStep.BROWSING
        self.challenge: Optional[PaymentChallenge] = None
        self.otp_attempts = 0
        self.receipt: Optional[OrderReceipt] = None

    @property
    def remaining_attempts(self) -> int:
        return self.max_otp_attempts - self.otp_attempts

    # ---------- browsing / cart ----------

    def add_to_cart(self, product: Product, quantity: int, specifications: str = "",
                    delivery_date: Optional[date] = None) -> CartItem:
        item = CartItem.from_product(product, quantity, specifications, delivery_date)
        self.cart.add(item)
        logger.debug(f"Added {quantity} x {product.name} to cart")
        return item

    def buy_now(self, product: Product, quantity: int, specifications: str = "",
                delivery_date: Optional[date] = None) -> None:
        self.cart.replace(CartItem.from_product(product, quantity, specifications, delivery_date))
        self.step = CheckoutStep.PAYMENT

    def view_cart(self) -> None:
        self.step = CheckoutStep.CART

    def close_cart(self) -> None:
        self.step = CheckoutStep.BROWSING

    def checkout(self) -> None:
        if self.cart.is_empty():
            raise CheckoutError("Your cart is empty")
        self.step = CheckoutStep.PAYMENT

    # ---------- payment ----------

    def submit_payment(self, details: PaymentDetails) -> PaymentChallenge:
        if self.cart.is_empty():
            raise CheckoutError("Your cart is empty")
        if not self.user_id:
            raise CheckoutError("You must be logged in to place an order")
        validate_payment_details(details)
        reference = f"ORD{_epoch_ms()}"
        self.challenge = self.gateway.authorize(details, self.cart.total, reference)
        self.otp_attempts = 0
        self.step = CheckoutStep.OTP_VERIFICATION
        logger.info(f"Payment {self.challenge.challenge_id} awaiting OTP for {self.cart.total:.2f}")
        return self.challenge

    def cancel_payment(self) -> None:
        self._void_challenge()
        self.step = CheckoutStep.BROWSING

    # ---------- OTP ----------

    def verify_otp(self, code: str) -> OrderReceipt:
        code = (code or "").strip()
        if not OTP_RE.match(code):
            raise CheckoutError("Please enter a valid 6-digit OTP")
        if self.challenge is None or self.step != CheckoutStep.OTP_VERIFICATION:
            raise CheckoutError("No payment is awaiting verification")

        if not self.gateway.confirm(self.challenge.challenge_id, code):
            self.otp_attempts += 1
            if self.otp_attempts >= self.max_otp_attempts:
                logger.warning(f"OTP attempts exhausted for payment {self.challenge.challenge_id}")
                self._void_challenge()
                self.step = CheckoutStep.PAYMENT
                raise OtpAttemptsExceededError()
            raise InvalidOtpError(self.remaining_attempts)

        return self._place_orders()

    def cancel_otp(self) -> None:
        self._void_challenge()
        self.step = CheckoutStep.PAYMENT

    # ---------- orders ----------

    def _place_orders(self) -> OrderReceipt:
        if not self.user_id:
            self._fail_to_payment()
            raise CheckoutError("You must be logged in to place an order")

        stamp = _epoch_ms()
        seen: Dict[str, int] = {}
        lines = []
        for item in self.cart:
            seen[item.product_id] = seen.get(item.product_id, 0) + 1
            order_id = f"ORD{stamp}-{item.product_id}"
            if seen[item.product_id] > 1:
                # same product again with other specifications or delivery date
                order_id += f"-{seen[item.product_id]}"
            lines.append(VendorOrderCreate(
                order_id=order_id,
                product=item.name,
                quantity=item.quantity,
                unit=item.unit,
                unit_price=item.price,
                total_amount=item.line_total,
                specifications=item.specifications or None,
                delivery_date=item.delivery_date,
                user_id=self.user_id,
            ))
        try:
            saved = self.data_access.create_vendor_orders(lines)
        except DataAccessError as e:
            logger.error(f"Error saving order: {e}")
            self._fail_to_payment()
            raise CheckoutError(f"Payment processing failed: {e.message}") from e

        try:
            self.gateway.capture(self.challenge.challenge_id)
        except PaymentGatewayError as e:
            logger.error(
                f"Orders {[o.order_id for o in saved]} saved but payment {self.challenge.challenge_id} "
                f"was not captured: {e}"
            )
            self._fail_to_payment()
            raise CheckoutError(str(e)) from e

        self.receipt = OrderReceipt(
            order_id=f"ORD{stamp}",
            item_count=len(saved),
            total=self.cart.total,
            estimated_delivery=date.today() + timedelta(days=self.delivery_days),
            lines=saved,
        )
        logger.info(f"Order {self.receipt.order_id} placed with {len(saved)} line(s)")
        self.cart.clear()
        self.challenge = None
        self.otp_attempts = 0
        self.step = CheckoutStep.SUCCESS
        return self.receipt

    def _fail_to_payment(self) -> None:
        self._void_challenge()
        self.step = CheckoutStep.PAYMENT

    def _void_challenge(self) -> None:
        if self.challenge is not None:
            try:
                self.gateway.void(self.challenge.challenge_id)
            except PaymentGatewayError as e:
                logger.error(f"Could not void payment {self.challenge.challenge_id}: {e}")
        self.challenge = None
        self.otp_attempts = 0

    def reset(self) -> None:
        """Continue shopping after a completed order."""
        self._void_challenge()
        self.receipt = None
        self.step = CheckoutStep.BROWSING
