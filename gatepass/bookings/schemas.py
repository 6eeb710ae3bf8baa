from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import AliasChoices, EmailStr, Field, field_validator

from gatepass.schemas import Amount, CamelModel, TicketTier


class BookingState(str, Enum):
    """Stages a payment confirmation passes through on its way to an issued ticket"""
    RECEIVED = "received"
    SIGNATURE_VERIFIED = "signature_verified"
    SERIAL_ALLOCATED = "serial_allocated"
    PERSISTED = "persisted"
    ARTIFACT_REQUESTED = "artifact_requested"
    NOTIFICATION_SENT = "notification_sent"
    COMPLETED = "completed"
    REJECTED = "rejected"
    FAILED = "failed"


class ScanStatus(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    USED = "used"


# Booking Request Models
class PaymentConfirmationRequest(CamelModel):
    """Gateway confirmation plus the booking details collected on the checkout form"""
    order_id: str = Field(..., min_length=1, alias="order_id")
    payment_id: str = Field(..., min_length=1, max_length=128, alias="payment_id")
    signature: str = Field(..., min_length=1, alias="signature")
    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(..., max_length=32, pattern=r"^\+?[0-9(][0-9 ().\-]{4,28}[0-9]$")
    ticket_type: TicketTier = Field(
        ...,
        alias="selectedTicketType",
        validation_alias=AliasChoices("selectedTicketType", "ticketType", "ticket_type"),
    )
    quantity: int = Field(..., gt=0, le=100)
    total_amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)

    @field_validator("order_id", "payment_id", "signature", "full_name", "phone", mode="before")
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("must not be blank")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("ticket_type", mode="before")
    @classmethod
    def normalize_ticket_type(cls, v):
        if isinstance(v, TicketTier):
            return v
        tier = TicketTier.normalize(v) if isinstance(v, str) else None
        if tier is None:
            allowed = ", ".join(t.value for t in TicketTier)
            raise ValueError(f"ticket type must be one of: {allowed}")
        return tier


# Booking Response Models
class BookingRead(CamelModel):
    """Public fields of an issued booking"""
    serial_number: str
    payment_id: str
    order_id: str
    full_name: str
    email: str
    phone: str
    ticket_type: str
    quantity: int
    total_amount: Amount
    timestamp: datetime
    used_at: Optional[datetime] = None


class BookingConfirmation(CamelModel):
    status: str = "success"
    message: str = "Booking confirmed"
    booking: BookingRead
    ticket_url: str


# Ticket Verification Models
class QRPayload(CamelModel):
    """Data encoded in the ticket's QR code"""
    serial_number: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("serialNumber", "serial_number", "serial"),
    )
    payment_id: Optional[str] = Field(None, validation_alias=AliasChoices("paymentId", "payment_id"))
    ticket_type: Optional[str] = Field(None, validation_alias=AliasChoices("ticketType", "ticket_type"))
    quantity: Optional[int] = None


class ScanRequest(CamelModel):
    qr_data: Union[str, Dict[str, Any]]


class ScanResult(CamelModel):
    status: ScanStatus
    reason: Optional[str] = None
    message: str
    booking: Optional[BookingRead] = None
    used_at: Optional[datetime] = None
