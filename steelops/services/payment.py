"""Card input helpers and the payment gateways used by the checkout flow.

The one-time password for a payment is issued and verified by the gateway.
The dashboard only forwards what the buyer typed; it never generates, stores
or displays the code itself.
"""
from __future__ import annotations

import hmac
import re
import secrets
import threading
import time
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Protocol

import requests
from pydantic import BaseModel, Field

from steelops.config import get_config
from steelops.errors import PaymentGatewayError, PaymentValidationError
from steelops.logging import get_logger

logger = get_logger(__name__)

EXPIRY_RE = re.compile(r"^\d{2}/\d{2}$")
OTP_LENGTH = 6


# ---------- card input ----------

def format_card_number(value: str) -> str:
    """Group digits in blocks of 4, keeping at most 16 digits."""
    digits = re.sub(r"\D", "", value or "")
    if len(digits) < 4:
        return digits
    digits = digits[:16]
    return " ".join(digits[i:i + 4] for i in range(0, len(digits), 4))


def format_expiry(value: str) -> str:
    """Insert '/' after the month: '1226' -> '12/26'."""
    digits = re.sub(r"\D", "", value or "")
    if len(digits) >= 2:
        return digits[:2] + "/" + digits[2:4]
    return digits


class PaymentDetails(BaseModel):
    card_number: str = ""
    expiry: str = ""
    cvv: str = ""
    cardholder_name: str = ""

    @classmethod
    def from_form(cls, card_number: str, expiry: str, cvv: str, cardholder_name: str) -> "PaymentDetails":
        """Build details from raw form input.

        Input is only reformatted when it already has the right number of digits,
        so an overlong card number or expiry reaches validation as typed.
        """
        card_number = (card_number or "").strip()
        expiry = (expiry or "").strip()
        if len(re.sub(r"\D", "", card_number)) == 16:
            card_number = format_card_number(card_number)
        if len(re.sub(r"\D", "", expiry)) == 4:
            expiry = format_expiry(expiry)
        return cls(card_number=card_number, expiry=expiry, cvv=(cvv or "").strip(), cardholder_name=cardholder_name or "")

    @property
    def card_digits(self) -> str:
        return self.card_number.replace(" ", "")

    @property
    def last4(self) -> str:
        return self.card_digits[-4:]


def validate_payment_details(details: PaymentDetails) -> None:
    """Raise PaymentValidationError with the first problem found."""
    digits = details.card_digits
    if len(digits) != 16 or not digits.isdigit():
        raise PaymentValidationError("Please enter a valid 16-digit card number")
    if not EXPIRY_RE.match(details.expiry or "") or not 1 <= int(details.expiry[:2]) <= 12:
        raise PaymentValidationError("Please enter expiry date in MM/YY format")
    if not details.cvv.isdigit() or not 3 <= len(details.cvv) <= 4:
        raise PaymentValidationError("Please enter a valid CVV (3-4 digits)")
    if not details.cardholder_name.strip():
        raise PaymentValidationError("Please enter cardholder name")


# ---------- gateways ----------

class PaymentChallenge(BaseModel):
    """An authorized payment waiting for the buyer's one-time password."""
    challenge_id: str = Field(description="Gateway identifier of the pending payment")
    amount: float = Field(description="Authorized amount")
    reference: str = Field(description="Merchant reference for the payment")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class PaymentGateway(Protocol):
    def authorize(self, details: PaymentDetails, amount: float, reference: str) -> PaymentChallenge:
        """Authorize the amount and send a one-time password to the card holder."""
        ...

    def confirm(self, challenge_id: str, otp: str) -> bool:
        """Return True if the OTP matches, False otherwise. Nothing is captured yet."""
        ...

    def capture(self, challenge_id: str) -> None:
        """Collect a confirmed payment once its orders are saved."""
        ...

    def void(self, challenge_id: str) -> None:
        """Release an authorization that was not captured."""
        ...


OtpDelivery = Callable[[PaymentChallenge, str], None]


def _log_delivery(challenge: PaymentChallenge, otp: str) -> None:
    # Stands in for the SMS/email a real issuer would send
    logger.info(f"Simulated OTP for payment {challenge.reference} ({challenge.challenge_id}): {otp}")


class SimulatedPaymentGateway:
    """In-process gateway for development and demos.

    Codes are generated with ``secrets`` and handed to ``deliver`` (by default
    the application log), which stands in for the issuer's SMS/email channel.
    """

    def __init__(self, deliver: Optional[OtpDelivery] = None, latency_seconds: float = 0.0) -> None:
        self.deliver = deliver or _log_delivery
        self.latency_seconds = latency_seconds
        self._lock = threading.Lock()
        self._pending: Dict[str, Dict[str, object]] = {}

    def _wait(self) -> None:
        if self.latency_seconds > 0:
            time.sleep(self.latency_seconds)

    def authorize(self, details: PaymentDetails, amount: float, reference: str) -> PaymentChallenge:
        validate_payment_details(details)
        self._wait()
        otp = f"{secrets.randbelow(900_000) + 100_000}"
        challenge = PaymentChallenge(challenge_id=f"pay_{uuid.uuid4().hex[:16]}", amount=amount, reference=reference)
        with self._lock:
            self._pending[challenge.challenge_id] = {"otp": otp, "status": "authorized"}
        logger.info(f"Authorized {amount:.2f} on card ending {details.last4} for {reference}")
        self.deliver(challenge, otp)
        return challenge

    def confirm(self, challenge_id: str, otp: str) -> bool:
        self._wait()
        with self._lock:
            pending = self._pending.get(challenge_id)
            if pending is None or pending["status"] != "authorized":
                raise PaymentGatewayError("Payment session expired. Please restart the payment process.")
            if not hmac.compare_digest(str(pending["otp"]), otp):
                return False
            pending["status"] = "confirmed"
        logger.info(f"OTP confirmed for payment {challenge_id}")
        return True

    def capture(self, challenge_id: str) -> None:
        with self._lock:
            pending = self._pending.get(challenge_id)
            if pending is None or pending["status"] != "confirmed":
                raise PaymentGatewayError("Payment session expired. Please restart the payment process.")
            del self._pending[challenge_id]
        logger.info(f"Captured payment {challenge_id}")

    def void(self, challenge_id: str) -> None:
        with self._lock:
            self._pending.pop(challenge_id, None)
        logger.info(f"Voided payment {challenge_id}")


class HttpPaymentGateway:
    """Client for a REST payment-intent API (create, confirm with OTP, capture, cancel).

    Card data goes straight to the gateway; only the intent id is kept.
    """

    def __init__(self, base_url: str, api_key: str, timeout: float = 30.0, currency: str = "INR",
                 session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.currency = currency
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })

    def _post(self, path: str, payload: dict) -> requests.Response:
        try:
            return self.session.post(f"{self.base_url}{path}", json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Payment gateway unreachable: {e}")
            raise PaymentGatewayError("Payment processing failed. Please try again.") from e

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            return response.json().get("error", {}).get("message") or response.reason
        except ValueError:
            return response.reason

    def authorize(self, details: PaymentDetails, amount: float, reference: str) -> PaymentChallenge:
        validate_payment_details(details)
        month, year = details.expiry.split("/")
        response = self._post("/payment_intents", {
            "amount": int(round(amount * 100)),
            "currency": self.currency,
            "reference": reference,
            "confirmation_method": "otp",
            "capture_method": "manual",
            "card": {
                "number": details.card_digits,
                "exp_month": int(month),
                "exp_year": 2000 + int(year),
                "cvc": details.cvv,
                "name": details.cardholder_name.strip(),
            },
        })
        if not response.ok:
            message = self._error_message(response)
            logger.error(f"Payment authorization failed ({response.status_code}): {message}")
            raise PaymentGatewayError(f"Payment processing failed: {message}")
        return PaymentChallenge(challenge_id=response.json()["id"], amount=amount, reference=reference)

    def confirm(self, challenge_id: str, otp: str) -> bool:
        response = self._post(f"/payment_intents/{challenge_id}/confirm", {"otp": otp})
        if response.ok:
            status = response.json().get("status")
            if status == "requires_capture":
                return True
            logger.error(f"Unexpected payment status after confirmation: {status}")
            raise PaymentGatewayError(f"OTP verification failed: unexpected payment status {status}")
        if response.status_code in (400, 402):
            try:
                code = response.json().get("error", {}).get("code")
            except ValueError:
                code = None
            if code == "invalid_otp":
                return False
        message = self._error_message(response)
        logger.error(f"Payment confirmation failed ({response.status_code}): {message}")
        raise PaymentGatewayError(f"OTP verification failed: {message}")

    def capture(self, challenge_id: str) -> None:
        response = self._post(f"/payment_intents/{challenge_id}/capture", {})
        if not response.ok:
            message = self._error_message(response)
            logger.error(f"Payment capture failed ({response.status_code}): {message}")
            raise PaymentGatewayError(f"Payment processing failed: {message}")

    def void(self, challenge_id: str) -> None:
        response = self._post(f"/payment_intents/{challenge_id}/cancel", {})
        if not response.ok:
            raise PaymentGatewayError(f"Could not cancel payment: {self._error_message(response)}")


def get_payment_gateway(deliver: Optional[OtpDelivery] = None) -> PaymentGateway:
    config = get_config()
    if config.payment_gateway == "simulated":
        return SimulatedPaymentGateway(deliver=deliver, latency_seconds=config.payment_latency_seconds)
    if config.payment_gateway == "http":
        if not (config.payment_gateway_url and config.payment_gateway_key):
            raise RuntimeError("Missing payment gateway configuration values.")
        return HttpPaymentGateway(
            config.payment_gateway_url,
            config.payment_gateway_key,
            timeout=config.http_timeout_seconds,
        )
    raise ValueError(f"Unknown payment gateway: {config.payment_gateway}")
