from email.message import EmailMessage
from html import escape
from typing import Optional
import smtplib

from fastapi.concurrency import run_in_threadpool
from loguru import logger

from gatepass.bookings.schemas import BookingRead
from gatepass.config import settings


class TicketMailer:
    """Sends the booking confirmation email with the ticket PDF attached.

    Delivery goes through SMTP in a worker thread so the event loop keeps
    serving requests. When no SMTP host is configured the mailer is disabled
    and ``send_booking_confirmation`` returns False without trying.
    """

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: Optional[bool] = None,
        sender: Optional[str] = None,
    ):
        self.host = host if host is not None else settings.SMTP_HOST
        self.port = port or settings.SMTP_PORT
        self.username = username if username is not None else settings.SMTP_USERNAME
        self.password = password if password is not None else settings.SMTP_PASSWORD
        self.use_tls = settings.SMTP_USE_TLS if use_tls is None else use_tls
        self.sender = sender or settings.MAIL_FROM

    @property
    def enabled(self) -> bool:
        return bool(self.host)

    def build_message(self, booking: BookingRead, ticket_url: str, pdf: Optional[bytes] = None) -> EmailMessage:
        event = settings.EVENT_NAME
        message = EmailMessage()
        message["Subject"] = f"Ticket Confirmation - {event}"
        message["From"] = f'"{event}" <{self.sender}>'
        message["To"] = booking.email

        message.set_content(
            f"Hi {booking.full_name},\n\n"
            f"Thank you for booking your tickets for {event}.\n\n"
            f"Ticket Serial: {booking.serial_number}\n"
            f"Ticket Type: {booking.ticket_type}\n"
            f"Quantity: {booking.quantity}\n"
            f"Payment ID: {booking.payment_id}\n\n"
            f"Download your ticket: {ticket_url}\n\n"
            "Please show this serial number along with valid ID proof at the entry gate.\n"
        )
        message.add_alternative(
            f"<h2>{escape(event)} Booking Confirmed</h2>"
            f"<p>Hi <strong>{escape(booking.full_name)}</strong>,</p>"
            f"<p>Thank you for booking your tickets for <strong>{escape(event)}</strong>.</p>"
            "<h3>Your Ticket Details</h3>"
            "<ul>"
            f"<li><strong>Ticket Serial:</strong> {escape(booking.serial_number)}</li>"
            f"<li><strong>Ticket Type:</strong> {escape(booking.ticket_type)}</li>"
            f"<li><strong>Quantity:</strong> {booking.quantity}</li>"
            f"<li><strong>Payment ID:</strong> {escape(booking.payment_id)}</li>"
            "</ul>"
            f'<p><a href="{escape(ticket_url)}">Download your ticket</a></p>'
            "<p>Please show this serial number along with valid ID proof at the entry gate.</p>",
            subtype="html",
        )

        if pdf is not None:
            message.add_attachment(
                pdf,
                maintype="application",
                subtype="pdf",
                filename=f"ticket-{booking.serial_number}.pdf",
            )
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password or "")
            smtp.send_message(message)

    async def send_booking_confirmation(
        self, booking: BookingRead, ticket_url: str, pdf: Optional[bytes] = None
    ) -> bool:
        if not self.enabled:
            logger.info("Mail disabled, skipping confirmation for {}", booking.serial_number)
            return False

        message = self.build_message(booking, ticket_url, pdf)
        await run_in_threadpool(self._deliver, message)
        logger.info("Confirmation mail for {} sent to {}", booking.serial_number, booking.email)
        return True


def get_mailer() -> TicketMailer:
    return TicketMailer()
