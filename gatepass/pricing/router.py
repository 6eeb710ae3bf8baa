from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from gatepass.database import get_db
from gatepass.pricing.schemas import Prices
from gatepass.pricing.service import PricingService

router = APIRouter()


@router.get("/prices", response_model=Prices, response_model_exclude_none=True)
async def get_prices(db: AsyncSession = Depends(get_db)):
    """Public price list used by the booking page"""
    return await PricingService(db).get_prices()
