from decimal import Decimal
from typing import Dict, List

from pydantic import Field

from gatepass.bookings.schemas import BookingRead
from gatepass.pricing.schemas import Prices
from gatepass.schemas import Amount, CamelModel


class AdminLogin(CamelModel):
    """Admin login request"""
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AdminLoginResponse(CamelModel):
    """Admin login response"""
    status: str = "success"
    token: str
    token_type: str = "bearer"
    expires_in: int


class TierSummary(CamelModel):
    revenue: Amount = Decimal("0")
    tickets: int = 0
    bookings: int = 0


class BookingReport(CamelModel):
    """Ledger plus dashboard aggregates"""
    status: str = "success"
    total_revenue: Amount
    total_tickets: int
    total_bookings: int
    day_pass_revenue: Amount
    season_pass_revenue: Amount
    tiers: Dict[str, TierSummary]
    prices: Prices
    bookings: List[BookingRead]


class BulkDeleteResponse(CamelModel):
    status: str = "success"
    message: str
    deleted: int
