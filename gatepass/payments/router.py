from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from gatepass.bookings.booking_service import BookingService
from gatepass.bookings.notifications import TicketMailer, get_mailer
from gatepass.bookings.schemas import BookingConfirmation, PaymentConfirmationRequest
from gatepass.bookings.ticket_service import ticket_url
from gatepass.database import get_db
from gatepass.payments.gateway import RazorpayGateway, get_payment_gateway
from gatepass.payments.schemas import OrderRequest, OrderResponse

router = APIRouter()


@router.post("/create-order", response_model=OrderResponse)
async def create_order(
    request: OrderRequest,
    gateway: RazorpayGateway = Depends(get_payment_gateway),
):
    """Ask the gateway for an order reference the checkout can pay against"""
    order = await gateway.create_order(request.amount)
    return OrderResponse(**order.model_dump())


@router.post("/verify-payment", response_model=BookingConfirmation)
async def verify_payment(
    request: PaymentConfirmationRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    mailer: TicketMailer = Depends(get_mailer),
):
    """Verify the gateway confirmation and issue the ticket"""
    booking_service = BookingService(db)
    booking = await booking_service.confirm_payment(request)

    # Rendering and mailing happen after the response is sent
    background_tasks.add_task(booking_service.deliver_ticket, booking, mailer)

    return BookingConfirmation(booking=booking, ticket_url=ticket_url(booking.serial_number))
