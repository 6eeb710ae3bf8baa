from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from gatepass.schemas import Amount, CamelModel, TicketTier


class Prices(CamelModel):
    """Current per-tier prices"""
    day_pass: Amount
    season_pass: Amount
    updated_at: Optional[datetime] = None

    def price_for(self, tier: TicketTier) -> Decimal:
        if tier == TicketTier.SEASON_PASS:
            return self.season_pass
        return self.day_pass


class PriceUpdateRequest(CamelModel):
    """Admin request to replace both tier prices"""
    day_pass: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    season_pass: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)


class PriceUpdateResponse(CamelModel):
    status: str = "success"
    message: str = "Prices updated successfully"
    prices: Prices
