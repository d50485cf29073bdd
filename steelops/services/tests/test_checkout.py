from datetime import date, timedelta

import pytest

from steelops.data.backends.csv_backend import CsvDataAccess
from steelops.data.models import VendorOrderFilters
from steelops.errors import (
    CheckoutError,
    DataAccessError,
    InvalidOtpError,
    OtpAttemptsExceededError,
    PaymentGatewayError,
)
from steelops.services.catalog import get_product
from steelops.services.checkout import CheckoutFlow, CheckoutStep
from steelops.services.payment import HttpPaymentGateway, PaymentDetails, SimulatedPaymentGateway

CARD = PaymentDetails(card_number="4111 1111 1111 1111", expiry="12/30", cvv="123", cardholder_name="R. Rao")
WRONG = "000000"


class RecordingGateway(SimulatedPaymentGateway):
    def __init__(self):
        self.codes = {}
        self.voided = []
        self.captured = []
        super().__init__(deliver=lambda challenge, otp: self.codes.update({challenge.challenge_id: otp}))

    def capture(self, challenge_id):
        super().capture(challenge_id)
        self.captured.append(challenge_id)

    def void(self, challenge_id):
        self.voided.append(challenge_id)
        super().void(challenge_id)


@pytest.fixture
def da(tmp_path):
    return CsvDataAccess(tmp_path)


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def flow(da, gateway):
    return CheckoutFlow(da, gateway, user_id="buyer-1")


def _code(flow, gateway):
    return gateway.codes[flow.challenge.challenge_id]


def test_checkout_requires_items(flow):
    with pytest.raises(CheckoutError, match="Your cart is empty"):
        flow.checkout()
    assert flow.step == CheckoutStep.BROWSING


def test_successful_order(flow, gateway, da):
    flow.add_to_cart(get_product("1"), 2, "Grade A")
    flow.view_cart()
    flow.checkout()
    assert flow.step == CheckoutStep.PAYMENT

    challenge = flow.submit_payment(CARD)
    assert challenge.amount == 90000
    assert flow.step == CheckoutStep.OTP_VERIFICATION

    receipt = flow.verify_otp(_code(flow, gateway))
    assert flow.step == CheckoutStep.SUCCESS
    assert gateway.captured == [challenge.challenge_id]
    assert receipt.total == 90000
    assert receipt.item_count == 1
    assert receipt.estimated_delivery == date.today() + timedelta(days=7)
    assert flow.cart.is_empty()

    (order,) = da.list_vendor_orders(VendorOrderFilters(user_id="buyer-1"))
    assert order.order_id == f"{receipt.order_id}-1"
    assert order.payment_status == "Paid"
    assert order.status == "Processing"
    assert order.total_amount == 90000
    assert order.specifications == "Grade A"

    flow.reset()
    assert flow.step == CheckoutStep.BROWSING
    assert flow.receipt is None


def test_buy_now_replaces_cart(flow):
    flow.add_to_cart(get_product("2"), 5)
    flow.buy_now(get_product("3"), 1)
    assert [item.product_id for item in flow.cart] == ["3"]
    assert flow.step == CheckoutStep.PAYMENT


def test_otp_format_is_not_an_attempt(flow):
    flow.buy_now(get_product("1"), 1)
    flow.submit_payment(CARD)
    with pytest.raises(CheckoutError, match="Please enter a valid 6-digit OTP"):
        flow.verify_otp("12ab")
    assert flow.otp_attempts == 0


def test_three_wrong_codes_return_to_payment(flow, gateway, da):
    flow.buy_now(get_product("1"), 1)
    challenge = flow.submit_payment(CARD)

    with pytest.raises(InvalidOtpError, match="Invalid OTP. 2 attempts remaining."):
        flow.verify_otp(WRONG)
    with pytest.raises(InvalidOtpError) as exc:
        flow.verify_otp(WRONG)
    assert exc.value.remaining_attempts == 1
    with pytest.raises(OtpAttemptsExceededError, match="Maximum OTP attempts exceeded"):
        flow.verify_otp(WRONG)

    assert flow.step == CheckoutStep.PAYMENT
    assert flow.otp_attempts == 0
    assert flow.challenge is None
    assert gateway.voided == [challenge.challenge_id]
    assert len(flow.cart) == 1
    assert da.list_vendor_orders() == []


def test_correct_code_after_a_mistake(flow, gateway):
    flow.buy_now(get_product("1"), 1)
    flow.submit_payment(CARD)
    with pytest.raises(InvalidOtpError):
        flow.verify_otp(WRONG)
    flow.verify_otp(_code(flow, gateway))
    assert flow.step == CheckoutStep.SUCCESS


def test_failed_insert_persists_nothing(flow, gateway, da, monkeypatch):
    flow.add_to_cart(get_product("1"), 1)
    flow.add_to_cart(get_product("2"), 1)
    flow.checkout()
    challenge = flow.submit_payment(CARD)

    def fail(orders):
        raise DataAccessError("connection reset")

    monkeypatch.setattr(da, "create_vendor_orders", fail)
    with pytest.raises(CheckoutError, match="connection reset"):
        flow.verify_otp(_code(flow, gateway))
    assert flow.step == CheckoutStep.PAYMENT
    assert gateway.voided == [challenge.challenge_id]
    assert gateway.captured == []
    assert len(flow.cart) == 2


def test_same_product_twice_gets_distinct_order_ids(flow, gateway, da):
    flow.add_to_cart(get_product("1"), 1, "Grade A")
    flow.add_to_cart(get_product("1"), 1, "Grade B")
    flow.checkout()
    flow.submit_payment(CARD)
    receipt = flow.verify_otp(_code(flow, gateway))
    ids = sorted(o.order_id for o in da.list_vendor_orders())
    assert ids == [f"{receipt.order_id}-1", f"{receipt.order_id}-1-2"]


def test_cancel_otp_and_payment(flow, gateway):
    flow.buy_now(get_product("1"), 1)
    first = flow.submit_payment(CARD)
    flow.cancel_otp()
    assert flow.step == CheckoutStep.PAYMENT
    assert gateway.voided == [first.challenge_id]
    flow.cancel_payment()
    assert flow.step == CheckoutStep.BROWSING
    assert len(flow.cart) == 1


def test_capture_failure_returns_to_payment(flow, gateway, monkeypatch):
    flow.buy_now(get_product("1"), 1)
    challenge = flow.submit_payment(CARD)

    def decline(challenge_id):
        raise PaymentGatewayError("Payment processing failed: card declined")

    monkeypatch.setattr(gateway, "capture", decline)
    with pytest.raises(CheckoutError, match="card declined"):
        flow.verify_otp(_code(flow, gateway))
    assert flow.step == CheckoutStep.PAYMENT
    assert gateway.voided == [challenge.challenge_id]
    assert flow.receipt is None


def test_signed_out_buyer_is_stopped_before_authorization(da, gateway):
    flow = CheckoutFlow(da, gateway, user_id=None)
    flow.buy_now(get_product("1"), 1)
    with pytest.raises(CheckoutError, match="logged in"):
        flow.submit_payment(CARD)
    assert flow.step == CheckoutStep.PAYMENT
    assert flow.challenge is None
    assert gateway.codes == {}
    assert da.list_vendor_orders() == []


def test_user_signing_out_mid_payment_is_not_charged(flow, gateway, da):
    flow.buy_now(get_product("1"), 1)
    challenge = flow.submit_payment(CARD)
    flow.user_id = None
    with pytest.raises(CheckoutError, match="logged in"):
        flow.verify_otp(_code(flow, gateway))
    assert gateway.captured == []
    assert gateway.voided == [challenge.challenge_id]
    assert da.list_vendor_orders() == []


class FakeResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self.ok = status_code < 400
        self.reason = "error"
        self._body = body

    def json(self):
        return self._body


class FakeSession:
    def __init__(self, responses):
        self.headers = {}
        self.responses = list(responses)
        self.paths = []

    def post(self, url, json=None, timeout=None):
        self.paths.append(url.removeprefix("https://pay.example.com"))
        return self.responses.pop(0)


def test_http_payment_is_captured_only_after_orders_are_saved(da):
    session = FakeSession([
        FakeResponse(200, {"id": "pi_1", "status": "requires_confirmation"}),
        FakeResponse(200, {"id": "pi_1", "status": "requires_capture"}),
        FakeResponse(200, {"id": "pi_1", "status": "succeeded"}),
    ])
    flow = CheckoutFlow(da, HttpPaymentGateway("https://pay.example.com", "sk_test", session=session), user_id="buyer-1")
    flow.buy_now(get_product("1"), 2)
    flow.submit_payment(CARD)
    flow.verify_otp("123456")

    assert session.paths == ["/payment_intents", "/payment_intents/pi_1/confirm", "/payment_intents/pi_1/capture"]
    (order,) = da.list_vendor_orders()
    assert order.total_amount == 90000


def test_http_payment_is_cancelled_when_orders_cannot_be_saved(da, monkeypatch):
    session = FakeSession([
        FakeResponse(200, {"id": "pi_1", "status": "requires_confirmation"}),
        FakeResponse(200, {"id": "pi_1", "status": "requires_capture"}),
        FakeResponse(200, {"id": "pi_1", "status": "canceled"}),
    ])
    flow = CheckoutFlow(da, HttpPaymentGateway("https://pay.example.com", "sk_test", session=session), user_id="buyer-1")
    flow.buy_now(get_product("1"), 1)
    flow.submit_payment(CARD)

    def fail(orders):
        raise DataAccessError("connection reset")

    monkeypatch.setattr(da, "create_vendor_orders", fail)
    with pytest.raises(CheckoutError, match="connection reset"):
        flow.verify_otp("123456")
    assert session.paths == ["/payment_intents", "/payment_intents/pi_1/confirm", "/payment_intents/pi_1/cancel"]
    assert flow.step == CheckoutStep.PAYMENT
