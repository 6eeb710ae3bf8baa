from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from gatepass.bookings.notifications import TicketMailer
from gatepass.bookings.schemas import BookingRead


@pytest.fixture
def booking():
    return BookingRead(
        serial_number="DP-0001",
        payment_id="pay_1",
        order_id="order_1",
        full_name="Asha <Nair>",
        email="asha@example.com",
        phone="9876543210",
        ticket_type="Day Pass",
        quantity=2,
        total_amount=Decimal("398"),
        timestamp="2025-01-01T10:00:00Z",
    )


@pytest.fixture
def mailer():
    return TicketMailer(host="smtp.test", port=2525, username="mailer", password="secret", use_tls=True, sender="tickets@test.example")


def test_message_contents(mailer, booking):
    message = mailer.build_message(booking, "http://testserver/ticket", pdf=b"%PDF-1.4 fake")

    assert message["To"] == "asha@example.com"
    assert "DP-0001" in message.get_body(("plain",)).get_content()
    assert "Asha &lt;Nair&gt;" in message.get_body(("html",)).get_content()
    attachments = list(message.iter_attachments())
    assert [a.get_filename() for a in attachments] == ["ticket-DP-0001.pdf"]
    assert attachments[0].get_content() == b"%PDF-1.4 fake"


def test_message_without_pdf_has_no_attachment(mailer, booking):
    message = mailer.build_message(booking, "http://testserver/ticket")
    assert list(message.iter_attachments()) == []


@pytest.mark.asyncio
async def test_sends_over_smtp(mailer, booking):
    with patch("gatepass.bookings.notifications.smtplib.SMTP") as smtp_class:
        smtp = smtp_class.return_value.__enter__.return_value

        sent = await mailer.send_booking_confirmation(booking, "http://testserver/ticket", b"%PDF")

    assert sent is True
    smtp_class.assert_called_once_with("smtp.test", 2525, timeout=30)
    smtp.starttls.assert_called_once()
    smtp.login.assert_called_once_with("mailer", "secret")
    smtp.send_message.assert_called_once()


@pytest.mark.asyncio
async def test_disabled_without_host(booking):
    mailer = TicketMailer(host="")
    with patch("gatepass.bookings.notifications.smtplib.SMTP", MagicMock()) as smtp_class:
        sent = await mailer.send_booking_confirmation(booking, "http://testserver/ticket")

    assert sent is False
    smtp_class.assert_not_called()
