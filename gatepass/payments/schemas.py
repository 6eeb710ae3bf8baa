from decimal import Decimal

from pydantic import Field

from gatepass.schemas import CamelModel


class OrderRequest(CamelModel):
    """Amount in major currency units"""
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)


class GatewayOrder(CamelModel):
    """Order reference issued by the gateway; amount is in minor units"""
    id: str
    amount: int
    currency: str
    receipt: str
    key_id: str


class OrderResponse(GatewayOrder):
    status: str = "success"
