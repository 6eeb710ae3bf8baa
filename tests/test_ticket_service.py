import json
from decimal import Decimal

import pytest

from gatepass.bookings.schemas import BookingRead, ScanStatus
from gatepass.bookings.ticket_service import (
    TicketService,
    build_qr_payload,
    create_ticket_token,
    parse_qr_payload,
    verify_ticket_token,
)
from gatepass.config import settings
from gatepass.exceptions import AuthorizationError, NotFoundError, ValidationError
from gatepass.models import Booking


@pytest.fixture
def booking():
    return BookingRead(
        serial_number="SP-0007",
        payment_id="pay_7",
        order_id="order_7",
        full_name="Ravi <Kumar>",
        email="ravi@example.com",
        phone="+91 98765 43210",
        ticket_type="Season Pass",
        quantity=3,
        total_amount=Decimal("2097"),
        timestamp="2025-01-01T10:00:00Z",
    )


async def store(db, booking: BookingRead) -> Booking:
    row = Booking(**booking.model_dump(exclude={"timestamp", "used_at"}))
    db.add(row)
    await db.commit()
    return row


class TestQRPayload:
    def test_payload_is_stable_json(self, booking):
        payload = build_qr_payload(booking)
        assert payload == build_qr_payload(booking)
        assert json.loads(payload) == {
            "paymentId": "pay_7",
            "quantity": 3,
            "serialNumber": "SP-0007",
            "ticketType": "Season Pass",
        }

    def test_parse_json_text(self, booking):
        parsed = parse_qr_payload(build_qr_payload(booking))
        assert parsed.serial_number == "SP-0007"
        assert parsed.payment_id == "pay_7"

    def test_parse_bare_serial(self):
        assert parse_qr_payload("  DP-0001 ").serial_number == "DP-0001"

    def test_parse_object(self):
        assert parse_qr_payload({"serial_number": "DP-0001"}).serial_number == "DP-0001"

    @pytest.mark.parametrize("raw", ["", "   ", "[1, 2]", {"paymentId": "pay_1"}])
    def test_unusable_payload_is_validation_error(self, raw):
        with pytest.raises(ValidationError):
            parse_qr_payload(raw)


class TestTicketLinks:
    def test_token_round_trip(self):
        verify_ticket_token(create_ticket_token("DP-0001"), "DP-0001")

    def test_token_bound_to_serial(self):
        with pytest.raises(AuthorizationError):
            verify_ticket_token(create_ticket_token("DP-0001"), "DP-0002")

    def test_garbage_token_rejected(self):
        with pytest.raises(AuthorizationError):
            verify_ticket_token("not-a-token", "DP-0001")


class TestTicketRendering:
    def test_pdf_ticket(self, booking):
        pdf = TicketService().generate_pdf_ticket(booking)
        assert pdf.startswith(b"%PDF")

    def test_qr_image_is_png(self, booking):
        image = TicketService().generate_qr_code_image(booking)
        assert image.read(8) == b"\x89PNG\r\n\x1a\n"

    @pytest.mark.asyncio
    async def test_missing_ticket_is_not_found(self, db_session):
        with pytest.raises(NotFoundError):
            await TicketService(db_session).get_booking_or_404("DP-9999")


class TestVerifyScan:
    @pytest.mark.asyncio
    async def test_valid_ticket(self, db_session, booking):
        await store(db_session, booking)

        result = await TicketService(db_session).verify_scan(build_qr_payload(booking))

        assert result.status == ScanStatus.VALID
        assert result.booking.serial_number == "SP-0007"
        assert result.booking.full_name == "Ravi <Kumar>"

    @pytest.mark.asyncio
    async def test_unknown_serial(self, db_session):
        result = await TicketService(db_session).verify_scan("DP-0404")

        assert result.status == ScanStatus.INVALID
        assert result.reason == "not_found"
        assert result.booking is None

    @pytest.mark.asyncio
    async def test_payment_mismatch(self, db_session, booking):
        await store(db_session, booking)
        forged = {"serialNumber": "SP-0007", "paymentId": "pay_forged"}

        result = await TicketService(db_session).verify_scan(forged)

        assert result.status == ScanStatus.INVALID
        assert result.reason == "mismatch"

    @pytest.mark.asyncio
    async def test_scans_are_repeatable_by_default(self, db_session, booking):
        await store(db_session, booking)
        service = TicketService(db_session)

        first = await service.verify_scan("SP-0007")
        second = await service.verify_scan("SP-0007")

        assert first.status == second.status == ScanStatus.VALID
        assert second.booking.used_at is None

    @pytest.mark.asyncio
    async def test_single_use_rejects_second_scan(self, db_session, booking, monkeypatch):
        monkeypatch.setattr(settings, "SINGLE_USE_TICKETS", True)
        await store(db_session, booking)
        service = TicketService(db_session)

        first = await service.verify_scan("SP-0007")
        second = await service.verify_scan("SP-0007")

        assert first.status == ScanStatus.VALID
        assert first.booking.used_at is not None
        assert second.status == ScanStatus.USED
        assert second.reason == "already_used"
        assert second.used_at is not None
