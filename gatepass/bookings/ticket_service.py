from datetime import datetime, timezone
from io import BytesIO
from typing import Any, Dict, Optional, Union
import json
from xml.sax.saxutils import escape

import jwt
import qrcode
from loguru import logger
from pydantic import ValidationError as PydanticValidationError
from qrcode import constants
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from gatepass.bookings.schemas import BookingRead, QRPayload, ScanResult, ScanStatus
from gatepass.config import settings
from gatepass.exceptions import AuthorizationError, NotFoundError, ValidationError
from gatepass.models import Booking

TICKET_TOKEN_PURPOSE = "ticket"


def build_qr_payload(booking: BookingRead) -> str:
    """JSON encoded in the ticket QR code; sorted keys keep it byte-stable."""
    data = {
        "serialNumber": booking.serial_number,
        "paymentId": booking.payment_id,
        "ticketType": booking.ticket_type,
        "quantity": booking.quantity,
    }
    return json.dumps(data, separators=(",", ":"), sort_keys=True)


def parse_qr_payload(raw: Union[str, Dict[str, Any]]) -> QRPayload:
    """Accepts the scanner's decoded text (JSON or a bare serial) or an already-parsed object."""
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            raise ValidationError("QR data is empty")
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            data = {"serialNumber": text}
        if isinstance(data, str):
            data = {"serialNumber": data}
    else:
        data = raw

    if not isinstance(data, dict):
        raise ValidationError("QR data is not a ticket payload")

    try:
        return QRPayload.model_validate(data)
    except PydanticValidationError:
        raise ValidationError("QR data does not contain a serial number")


def create_ticket_token(serial_number: str) -> str:
    """Capability token for downloading one ticket without admin credentials"""
    payload = {
        "sub": serial_number,
        "purpose": TICKET_TOKEN_PURPOSE,
        "iat": datetime.now(timezone.utc),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_ticket_token(token: str, serial_number: str) -> None:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.PyJWTError:
        raise AuthorizationError("Invalid ticket link")
    if payload.get("purpose") != TICKET_TOKEN_PURPOSE or payload.get("sub") != serial_number:
        raise AuthorizationError("Invalid ticket link")


def ticket_url(serial_number: str) -> str:
    base = settings.PUBLIC_BASE_URL.rstrip("/")
    token = create_ticket_token(serial_number)
    return f"{base}{settings.API_PREFIX}/public/download-ticket/{serial_number}?token={token}"


class TicketService:
    """Renders ticket PDFs and checks scanned tickets at the gate"""

    def __init__(self, db: Optional[AsyncSession] = None):
        self.db = db

    async def get_booking(self, serial_number: str) -> Optional[Booking]:
        result = await self.db.execute(select(Booking).where(Booking.serial_number == serial_number))
        return result.scalar_one_or_none()

    async def get_booking_or_404(self, serial_number: str) -> BookingRead:
        booking = await self.get_booking(serial_number)
        if booking is None:
            raise NotFoundError("Ticket not found")
        return BookingRead.model_validate(booking)

    def generate_qr_code_image(self, booking: BookingRead) -> BytesIO:
        """PNG of the verification QR code"""
        qr = qrcode.QRCode(
            version=None,
            error_correction=constants.ERROR_CORRECT_H,
            box_size=10,
            border=1,
        )
        qr.add_data(build_qr_payload(booking))
        qr.make(fit=True)

        qr_image = qr.make_image(fill_color="black", back_color="white")
        buffer = BytesIO()
        qr_image.save(buffer, format="PNG")
        buffer.seek(0)
        return buffer

    def generate_pdf_ticket(self, booking: BookingRead) -> bytes:
        """Render the printable ticket. Same booking in, same document out."""

        from reportlab.lib import colors
        from reportlab.lib.enums import TA_CENTER
        from reportlab.lib.pagesizes import A4
        from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
        from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=50,
            rightMargin=50,
            topMargin=50,
            bottomMargin=50,
            title=f"Ticket {booking.serial_number}",
            invariant=1,
        )
        styles = getSampleStyleSheet()
        centered = ParagraphStyle("Centered", parent=styles["Normal"], alignment=TA_CENTER)
        heading = ParagraphStyle(
            "Section", parent=styles["Heading3"], textColor=colors.HexColor("#0e2b64")
        )
        story = []

        # Header
        story.append(Paragraph(escape(settings.EVENT_NAME.upper()), styles["Title"]))
        story.append(Paragraph("OFFICIAL TICKET", centered))
        story.append(Spacer(1, 20))

        sections = [
            ("TICKET INFORMATION", [
                ["Serial Number:", booking.serial_number],
                ["Ticket Type:", booking.ticket_type],
                ["Quantity:", str(booking.quantity)],
                ["Total Amount:", f"{settings.CURRENCY} {booking.total_amount:.2f}"],
            ]),
            ("CUSTOMER INFORMATION", [
                ["Name:", booking.full_name],
                ["Email:", booking.email],
                ["Phone:", booking.phone],
            ]),
            ("PAYMENT INFORMATION", [
                ["Payment ID:", booking.payment_id],
                ["Booking Date:", booking.timestamp.strftime("%Y-%m-%d %H:%M")],
            ]),
        ]

        for title, rows in sections:
            story.append(Paragraph(title, heading))
            table = Table(rows, colWidths=[120, 300])
            table.setStyle(TableStyle([
                ('TEXTCOLOR', (0, 0), (-1, -1), colors.black),
                ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
                ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
                ('FONTNAME', (1, 0), (1, -1), 'Helvetica'),
                ('FONTSIZE', (0, 0), (-1, -1), 11),
                ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
            ]))
            story.append(table)
            story.append(Spacer(1, 12))

        # QR Code
        story.append(Paragraph("VERIFICATION QR CODE", ParagraphStyle("QRHeading", parent=heading, alignment=TA_CENTER)))
        story.append(Image(self.generate_qr_code_image(booking), width=200, height=200))
        story.append(Spacer(1, 16))

        # Footer
        footer = ParagraphStyle("Footer", parent=centered, fontSize=9, textColor=colors.HexColor("#666666"))
        story.append(Paragraph("Please present this ticket at the venue for entry.", footer))
        story.append(Paragraph("Keep this ticket safe and do not share it with others.", footer))

        doc.build(story)
        return buffer.getvalue()

    async def verify_scan(self, raw: Union[str, Dict[str, Any]]) -> ScanResult:
        """Gate check of a scanned QR payload against the ledger"""

        payload = parse_qr_payload(raw)
        booking = await self.get_booking(payload.serial_number)

        if booking is None:
            logger.info("Scan rejected: {} not found", payload.serial_number)
            return ScanResult(
                status=ScanStatus.INVALID,
                reason="not_found",
                message="Invalid ticket: ticket not found",
            )

        if payload.payment_id is not None and payload.payment_id != booking.payment_id:
            logger.warning("Scan rejected: payment id mismatch for {}", payload.serial_number)
            return ScanResult(
                status=ScanStatus.INVALID,
                reason="mismatch",
                message="Invalid ticket: payment details do not match",
            )

        if settings.SINGLE_USE_TICKETS:
            # Only the first scan finds used_at unset
            result = await self.db.execute(
                update(Booking)
                .where(Booking.id == booking.id, Booking.used_at.is_(None))
                .values(used_at=datetime.now(timezone.utc))
            )
            await self.db.commit()
            await self.db.refresh(booking)
            if result.rowcount == 0:
                logger.info("Scan rejected: {} already used", booking.serial_number)
                return ScanResult(
                    status=ScanStatus.USED,
                    reason="already_used",
                    message="Ticket already used",
                    booking=BookingRead.model_validate(booking),
                    used_at=booking.used_at,
                )

        logger.info("Scan accepted for {}", booking.serial_number)
        return ScanResult(
            status=ScanStatus.VALID,
            message="Valid ticket",
            booking=BookingRead.model_validate(booking),
        )
