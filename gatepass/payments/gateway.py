import time
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx
from loguru import logger

from gatepass.config import settings
from gatepass.exceptions import PaymentGatewayError
from gatepass.payments.currency import to_minor_units
from gatepass.payments.schemas import GatewayOrder


class RazorpayGateway:
    """Thin async client for the gateway's Orders API"""

    def __init__(
        self,
        key_id: Optional[str] = None,
        key_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        currency: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.key_id = key_id or settings.RAZORPAY_KEY_ID
        self._key_secret = key_secret or settings.RAZORPAY_KEY_SECRET
        self.base_url = (base_url or settings.RAZORPAY_API_URL).rstrip("/")
        self.currency = currency or settings.CURRENCY
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            auth=(self.key_id, self._key_secret),
            timeout=settings.GATEWAY_TIMEOUT_SECONDS,
            transport=self._transport,
        )

    async def create_order(self, amount: Decimal, receipt: Optional[str] = None) -> GatewayOrder:
        """Create an order for ``amount`` major units and return the gateway's view of it."""
        payload: Dict[str, Any] = {
            "amount": to_minor_units(amount, self.currency),
            "currency": self.currency,
            "receipt": receipt or f"receipt_{int(time.time() * 1000)}",
            "payment_capture": 1,
        }

        try:
            async with self._client() as client:
                response = await client.post("/orders", json=payload)
                response.raise_for_status()
            data = response.json()
            order = GatewayOrder(
                id=data["id"],
                amount=data.get("amount", payload["amount"]),
                currency=data.get("currency", self.currency),
                receipt=data.get("receipt", payload["receipt"]),
                key_id=self.key_id,
            )
        except httpx.HTTPStatusError as e:
            logger.error("Gateway rejected order creation: {} {}", e.response.status_code, e.response.text)
            raise PaymentGatewayError("Order creation failed") from e
        except httpx.HTTPError as e:
            logger.error("Gateway unreachable during order creation: {}", e)
            raise PaymentGatewayError("Order creation failed") from e
        except (ValueError, KeyError, TypeError) as e:
            logger.error("Gateway returned an unreadable order: {}", response.text[:200])
            raise PaymentGatewayError("Order creation failed") from e

        logger.info("Gateway order {} created for {} {}", order.id, order.amount, order.currency)
        return order


def get_payment_gateway() -> RazorpayGateway:
    return RazorpayGateway()
