from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Numeric, String

from gatepass.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ================================
# Bookings
# ================================
class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_bookings_quantity_positive"),
        CheckConstraint("total_amount > 0", name="ck_bookings_total_amount_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    serial_number = Column(String(32), unique=True, nullable=False, index=True)
    payment_id = Column(String(128), unique=True, nullable=False, index=True)
    order_id = Column(String(128), nullable=False)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=False)
    ticket_type = Column(String(50), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    used_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Booking {self.serial_number} payment={self.payment_id}>"


# ================================
# Pricing (singleton row)
# ================================
class Pricing(Base):
    __tablename__ = "pricing"

    id = Column(Integer, primary_key=True)
    day_pass = Column(Numeric(10, 2), nullable=False)
    season_pass = Column(Numeric(10, 2), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
