from decimal import Decimal
from typing import Dict

from loguru import logger
from sqlalchemy import delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gatepass.admin.schemas import BookingReport, TierSummary
from gatepass.bookings.schemas import BookingRead
from gatepass.models import Booking
from gatepass.pricing.service import PricingService
from gatepass.schemas import TicketTier


class AdminReportService:
    """Dashboard view of the booking ledger"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def tier_summaries(self) -> Dict[str, TierSummary]:
        result = await self.db.execute(
            select(
                Booking.ticket_type,
                func.coalesce(func.sum(Booking.total_amount), 0),
                func.coalesce(func.sum(Booking.quantity), 0),
                func.count(Booking.id),
            ).group_by(Booking.ticket_type)
        )

        summaries = {tier.value: TierSummary() for tier in TicketTier}
        for ticket_type, revenue, tickets, bookings in result.all():
            tier = TicketTier.from_display_name(ticket_type)
            key = tier.value if tier else ticket_type
            summaries[key] = TierSummary(
                revenue=Decimal(str(revenue)),
                tickets=int(tickets),
                bookings=int(bookings),
            )
        return summaries

    async def build_report(self) -> BookingReport:
        result = await self.db.execute(select(Booking).order_by(desc(Booking.timestamp), desc(Booking.id)))
        bookings = [BookingRead.model_validate(b) for b in result.scalars().all()]

        tiers = await self.tier_summaries()
        prices = await PricingService(self.db).get_prices()

        return BookingReport(
            total_revenue=sum((t.revenue for t in tiers.values()), Decimal("0")),
            total_tickets=sum(t.tickets for t in tiers.values()),
            total_bookings=len(bookings),
            day_pass_revenue=tiers[TicketTier.DAY_PASS.value].revenue,
            season_pass_revenue=tiers[TicketTier.SEASON_PASS.value].revenue,
            tiers=tiers,
            prices=prices,
            bookings=bookings,
        )

    async def delete_all_bookings(self) -> int:
        """Irreversibly clear the ledger"""
        result = await self.db.execute(delete(Booking))
        await self.db.commit()
        logger.warning("Admin cleared the booking ledger ({} bookings deleted)", result.rowcount)
        return result.rowcount
