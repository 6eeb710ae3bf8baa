"""
Booking & Ticketing Module

Issues tickets for confirmed payments and serves them back out.

Key Components:
- booking_service.py: payment confirmation -> serial -> persisted booking, then ticket delivery
- serials.py: per-tier human-readable serial numbers (DP-0001, SP-0001, ...)
- ticket_service.py: PDF tickets with verification QR codes, gate-scan checks, signed ticket links
- notifications.py: confirmation email with the ticket attached
- router.py: public ticket download
- schemas.py: Pydantic models for bookings, QR payloads and scan results
"""

from .router import router
from .booking_service import BookingService
from .serials import SerialAllocator
from .ticket_service import TicketService
from .notifications import TicketMailer
from .schemas import (
    BookingConfirmation, BookingRead, BookingState, PaymentConfirmationRequest,
    QRPayload, ScanRequest, ScanResult, ScanStatus
)

__all__ = [
    "router",
    "BookingService",
    "SerialAllocator",
    "TicketService",
    "TicketMailer",
    "BookingConfirmation",
    "BookingRead",
    "BookingState",
    "PaymentConfirmationRequest",
    "QRPayload",
    "ScanRequest",
    "ScanResult",
    "ScanStatus",
]
