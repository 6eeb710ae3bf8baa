from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gatepass.config import settings
from gatepass.models import Pricing
from gatepass.pricing.schemas import Prices, PriceUpdateRequest

PRICING_ROW_ID = 1


class PricingService:
    """Read and upsert the singleton pricing record"""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def default_prices() -> Prices:
        return Prices(
            day_pass=settings.DEFAULT_DAY_PASS_PRICE,
            season_pass=settings.DEFAULT_SEASON_PASS_PRICE,
        )

    async def get_prices(self) -> Prices:
        """Current prices, falling back to the defaults when the store is empty or unreadable."""
        try:
            pricing = await self.db.get(Pricing, PRICING_ROW_ID)
        except SQLAlchemyError:
            logger.exception("Pricing lookup failed, serving default prices")
            # A failed statement aborts the transaction on PostgreSQL
            await self.db.rollback()
            return self.default_prices()

        if pricing is None:
            return self.default_prices()

        # A zeroed column falls back to its own default
        return Prices(
            day_pass=pricing.day_pass or settings.DEFAULT_DAY_PASS_PRICE,
            season_pass=pricing.season_pass or settings.DEFAULT_SEASON_PASS_PRICE,
            updated_at=pricing.updated_at,
        )

    async def update_prices(self, update: PriceUpdateRequest) -> Prices:
        """Upsert both prices; validation happens on the request model."""
        result = await self.db.execute(select(Pricing).where(Pricing.id == PRICING_ROW_ID))
        pricing = result.scalar_one_or_none()

        if pricing is None:
            pricing = Pricing(id=PRICING_ROW_ID, day_pass=update.day_pass, season_pass=update.season_pass)
            self.db.add(pricing)
        else:
            pricing.day_pass = update.day_pass
            pricing.season_pass = update.season_pass

        await self.db.commit()
        await self.db.refresh(pricing)

        logger.info("Prices updated: day pass {} season pass {}", pricing.day_pass, pricing.season_pass)
        return Prices(
            day_pass=pricing.day_pass,
            season_pass=pricing.season_pass,
            updated_at=pricing.updated_at,
        )
