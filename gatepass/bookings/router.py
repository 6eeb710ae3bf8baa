from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from gatepass.bookings.ticket_service import TicketService, verify_ticket_token
from gatepass.config import settings
from gatepass.database import get_db
from gatepass.exceptions import AuthorizationError

router = APIRouter()


async def render_ticket_response(ticket_service: TicketService, serial_number: str) -> Response:
    """Regenerate the ticket PDF from the stored booking"""
    booking = await ticket_service.get_booking_or_404(serial_number)
    pdf = await run_in_threadpool(ticket_service.generate_pdf_ticket, booking)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="ticket-{booking.serial_number}.pdf"'},
    )


@router.get("/download-ticket/{serial_number}")
async def download_ticket(
    serial_number: str,
    token: Optional[str] = Query(None, description="Signed ticket link token"),
    db: AsyncSession = Depends(get_db),
):
    """Download a ticket PDF by serial number"""
    if token is not None:
        verify_ticket_token(token, serial_number)
    elif settings.REQUIRE_TICKET_TOKEN:
        raise AuthorizationError("Ticket link token required")

    return await render_ticket_response(TicketService(db), serial_number)
