"""
Pricing Module

Holds the current per-tier ticket prices. The public price list is read by the
booking page; the admin dashboard replaces both prices at once.
"""

from .router import router
from .service import PricingService
from .schemas import Prices, PriceUpdateRequest

__all__ = [
    "router",
    "PricingService",
    "Prices",
    "PriceUpdateRequest",
]
