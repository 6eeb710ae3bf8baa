from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gatepass.models import Booking
from gatepass.schemas import TicketTier

SERIAL_DIGITS = 4


def format_serial(tier: TicketTier, number: int) -> str:
    return f"{tier.serial_prefix}-{number:0{SERIAL_DIGITS}d}"


def parse_serial_number(serial: Optional[str]) -> int:
    """Counter part of a serial such as ``DP-0042``; 0 when it cannot be read."""
    if not serial or "-" not in serial:
        return 0
    try:
        return int(serial.rsplit("-", 1)[1])
    except ValueError:
        return 0


class SerialAllocator:
    """Derives the next human-readable serial for a tier: DP-0001, DP-0002, ...

    Allocation is not atomic with the insert that follows it. Two requests can
    read the same "last" serial; the unique index on ``bookings.serial_number``
    rejects the second insert and the caller retries with ``after`` set to the
    serial that collided.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _last_number(self, tier: TicketTier) -> int:
        # Zero-padded counters under one prefix sort by length, then text
        result = await self.db.execute(
            select(Booking.serial_number)
            .where(Booking.serial_number.like(f"{tier.serial_prefix}-%"))
            .order_by(func.length(Booking.serial_number).desc(), Booking.serial_number.desc())
            .limit(1)
        )
        return parse_serial_number(result.scalar_one_or_none())

    async def allocate(self, tier: TicketTier, after: Optional[str] = None) -> str:
        number = max(await self._last_number(tier), parse_serial_number(after)) + 1
        return format_serial(tier, number)
