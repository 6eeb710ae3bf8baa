import hashlib
import hmac
from typing import Optional

from gatepass.config import settings
from gatepass.exceptions import PaymentConfigurationError, ValidationError


class PaymentVerifier:
    """Checks that a payment confirmation was signed by the gateway.

    The gateway signs ``order_id|payment_id`` with HMAC-SHA256 using the
    merchant secret and hands the hex digest to the browser; the browser posts
    it back to us together with both identifiers.
    """

    def __init__(self, secret: Optional[str] = None):
        secret = settings.RAZORPAY_KEY_SECRET if secret is None else secret
        if not secret:
            raise PaymentConfigurationError("Payment gateway secret is not configured")
        self._secret = secret.encode()

    def expected_signature(self, order_id: str, payment_id: str) -> str:
        message = f"{order_id}|{payment_id}".encode()
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()

    def verify(self, order_id: str, payment_id: str, signature: str) -> bool:
        for name, value in (("order_id", order_id), ("payment_id", payment_id), ("signature", signature)):
            if not value or not value.strip():
                raise ValidationError(f"{name} is required")

        expected = self.expected_signature(order_id, payment_id)
        return hmac.compare_digest(expected.encode(), signature.encode())
