"""
Razorpay gateway client and payment signature checks.

The workflow only depends on the ``PaymentGateway`` contract, so tests (and any
other provider) can stand in for ``RazorpayGateway``.
"""
import hashlib
import hmac
import logging
from dataclasses import dataclass
from typing import Protocol

from enroll_service import errors

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayOrder:
    order_id: str
    amount: int
    currency: str
    receipt: str


class PaymentGateway(Protocol):
    def create_order(self, amount_minor_units: int, currency: str, receipt: str,
                     auto_capture: bool = True) -> GatewayOrder:
        ...


class RazorpayGateway:
    def __init__(self, key_id: str, key_secret: str, client=None):
        self.key_id = key_id
        if client is None:
            import razorpay  # the SDK is only needed once a real gateway is built
            client = razorpay.Client(auth=(key_id, key_secret))
        self.client = client

    def create_order(self, amount_minor_units: int, currency: str, receipt: str,
                     auto_capture: bool = True) -> GatewayOrder:
        data = {
            "amount": amount_minor_units,
            "currency": currency,
            "receipt": receipt,
            "payment_capture": 1 if auto_capture else 0,
        }
        try:
            order = self.client.order.create(data=data)
        except Exception as exc:
            logger.error("Razorpay order creation failed receipt=%s: %s", receipt, exc)
            raise errors.GatewayError("Payment gateway order creation failed") from exc

        order_id = order.get("id") if isinstance(order, dict) else None
        if not order_id:
            raise errors.GatewayError("Payment gateway returned no order id")

        logger.info("Razorpay order created id=%s amount=%s receipt=%s", order_id, amount_minor_units, receipt)
        return GatewayOrder(order_id=order_id, amount=amount_minor_units, currency=currency, receipt=receipt)


def compute_signature(order_id: str, payment_id: str, secret: str) -> str:
    message = f"{order_id}|{payment_id}"
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


def signature_matches(order_id: str, payment_id: str, signature: str, secret: str) -> bool:
    expected = compute_signature(order_id, payment_id, secret)
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))
