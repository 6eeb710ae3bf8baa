from typing import Optional

from fastapi.concurrency import run_in_threadpool
from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gatepass.bookings.notifications import TicketMailer
from gatepass.bookings.schemas import BookingRead, BookingState, PaymentConfirmationRequest
from gatepass.bookings.serials import SerialAllocator
from gatepass.bookings.ticket_service import TicketService, ticket_url
from gatepass.config import settings
from gatepass.exceptions import BookingConflictError, PaymentVerificationError, SerialAllocationError
from gatepass.models import Booking
from gatepass.payments.signature import PaymentVerifier
from gatepass.pricing.service import PricingService


class BookingService:
    """Turns a gateway payment confirmation into an issued ticket.

    ``confirm_payment`` runs the economically binding part: verify the
    signature, allocate a serial and commit the booking row. Once that commit
    succeeds the booking stands. ``deliver_ticket`` renders the PDF and mails
    the customer afterwards; its failures are logged and never undo the
    booking, since everything it produces can be re-derived from the row.
    """

    def __init__(
        self,
        db: AsyncSession,
        verifier: Optional[PaymentVerifier] = None,
        allocator: Optional[SerialAllocator] = None,
        ticket_service: Optional[TicketService] = None,
    ):
        self.db = db
        self.verifier = verifier or PaymentVerifier()
        self.allocator = allocator or SerialAllocator(db)
        self.ticket_service = ticket_service or TicketService(db)

    async def get_booking_by_payment_id(self, payment_id: str) -> Optional[Booking]:
        result = await self.db.execute(select(Booking).where(Booking.payment_id == payment_id))
        return result.scalar_one_or_none()

    async def confirm_payment(self, request: PaymentConfirmationRequest) -> BookingRead:
        log = logger.bind(order_id=request.order_id, payment_id=request.payment_id)
        log.info("Booking {}: order {} payment {}", BookingState.RECEIVED.value, request.order_id, request.payment_id)

        if not self.verifier.verify(request.order_id, request.payment_id, request.signature):
            log.warning("Booking {}: signature mismatch for payment {}", BookingState.REJECTED.value, request.payment_id)
            raise PaymentVerificationError("Payment verification failed")
        log.info("Booking {}", BookingState.SIGNATURE_VERIFIED.value)

        if await self.get_booking_by_payment_id(request.payment_id) is not None:
            log.warning("Payment {} already has a booking", request.payment_id)
            raise BookingConflictError("A booking already exists for this payment")

        await self._check_amount(request)

        tier = request.ticket_type
        collided: Optional[str] = None
        for attempt in range(1, settings.SERIAL_ALLOCATION_ATTEMPTS + 1):
            serial_number = await self.allocator.allocate(tier, after=collided)
            log.info("Booking {}: {} (attempt {})", BookingState.SERIAL_ALLOCATED.value, serial_number, attempt)

            booking = Booking(
                serial_number=serial_number,
                payment_id=request.payment_id,
                order_id=request.order_id,
                full_name=request.full_name,
                email=request.email,
                phone=request.phone,
                ticket_type=tier.display_name,
                quantity=request.quantity,
                total_amount=request.total_amount,
            )
            self.db.add(booking)

            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                if await self.get_booking_by_payment_id(request.payment_id) is not None:
                    log.warning("Payment {} was booked by a concurrent request", request.payment_id)
                    raise BookingConflictError("A booking already exists for this payment")
                log.warning("Serial {} already taken, allocating another", serial_number)
                collided = serial_number
                continue
            except SQLAlchemyError:
                await self.db.rollback()
                log.exception("Booking {}: could not persist payment {}", BookingState.FAILED.value, request.payment_id)
                raise

            await self.db.refresh(booking)
            log.info("Booking {}: {}", BookingState.PERSISTED.value, serial_number)
            return BookingRead.model_validate(booking)

        log.error(
            "Booking {}: no free serial after {} attempts",
            BookingState.FAILED.value,
            settings.SERIAL_ALLOCATION_ATTEMPTS,
        )
        raise SerialAllocationError("Could not allocate a ticket serial number")

    async def deliver_ticket(self, booking: BookingRead, mailer: TicketMailer) -> bool:
        """Render the ticket and mail it. Best effort; returns whether the mail went out."""
        log = logger.bind(serial_number=booking.serial_number)
        log.info("Booking {}: {}", BookingState.ARTIFACT_REQUESTED.value, booking.serial_number)

        pdf = None
        try:
            pdf = await run_in_threadpool(self.ticket_service.generate_pdf_ticket, booking)
        except Exception:
            log.exception("Ticket rendering failed for {}, mailing the download link only", booking.serial_number)

        sent = False
        try:
            sent = await mailer.send_booking_confirmation(booking, ticket_url(booking.serial_number), pdf)
        except Exception:
            log.exception("Confirmation mail for {} failed", booking.serial_number)

        if sent:
            log.info("Booking {}: {}", BookingState.NOTIFICATION_SENT.value, booking.serial_number)
        log.info("Booking {}: {}", BookingState.COMPLETED.value, booking.serial_number)
        return sent

    async def _check_amount(self, request: PaymentConfirmationRequest) -> None:
        """Warn when the charged amount differs from the current list price."""
        prices = await PricingService(self.db).get_prices()
        expected = prices.price_for(request.ticket_type) * request.quantity
        if expected != request.total_amount:
            logger.warning(
                "Payment {} charged {} for {} x {}, list price is {}",
                request.payment_id,
                request.total_amount,
                request.quantity,
                request.ticket_type.display_name,
                expected,
            )
