# app/models/booking_session.py
"""
Booking session - short-lived record of a guest's selections before payment.

Lifecycle: created -> paid -> confirmed, or created -> abandoned.
"""
import enum
import uuid

from sqlalchemy import Column, String, Integer, Numeric, Date, DateTime, ForeignKey, JSON, Uuid
from sqlalchemy.sql import func

from app.models.base import Base


class BookingSessionStatus(str, enum.Enum):
    CREATED = "created"
    PAID = "paid"  # payment intent bound, waiting for the webhook
    CONFIRMED = "confirmed"
    ABANDONED = "abandoned"


class BookingSession(Base):
    __tablename__ = "booking_sessions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    host_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    guest_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Selections
    selected_date = Column(Date, nullable=False)
    selected_time = Column(String(5), nullable=False)  # HH:MM
    selected_duration = Column(Integer, nullable=False)
    selected_services = Column(JSON, default=dict)  # {"screen_sharing": true, ...}
    call_language = Column(String(10), nullable=True)

    # Price snapshot taken when the session was created
    base_price = Column(Numeric(10, 2), nullable=False)
    services_total = Column(Numeric(10, 2), nullable=False, default=0)
    total_price = Column(Numeric(10, 2), nullable=False)
    service_fees = Column(JSON, default=dict)  # fee charged per enabled service
    currency = Column(String(3), default="EUR", nullable=False)

    status = Column(String(20), default=BookingSessionStatus.CREATED.value, nullable=False, index=True)
    payment_intent_id = Column(String, nullable=True, unique=True)
    checkout_claimed_at = Column(DateTime(timezone=True), nullable=True)

    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    paid_at = Column(DateTime(timezone=True), nullable=True)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    abandoned_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<BookingSession(id={self.id}, status={self.status})>"
