from sqlalchemy import Column, String, Integer, Text, Numeric, Date, DateTime, ForeignKey, JSON, Uuid
from sqlalchemy.sql import func
from .base import Base
import enum
import uuid


class BookingStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # References
    host_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    guest_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    booking_session_id = Column(Uuid, ForeignKey("booking_sessions.id"), nullable=True, unique=True)

    # Booking details
    scheduled_date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)  # HH:MM format
    duration = Column(Integer, nullable=False)  # minutes
    price = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), default="EUR", nullable=False)
    call_language = Column(String(10), nullable=True)
    services = Column(JSON, default=dict)
    notes = Column(Text, nullable=True)

    # Status tracking
    status = Column(String(20), default=BookingStatus.CONFIRMED.value, nullable=False)

    # Video call
    agora_channel_name = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by = Column(String(10), nullable=True)  # host, guest

    def is_participant(self, user_id) -> bool:
        return user_id in (self.host_id, self.guest_id)

    def __repr__(self):
        return f"<Booking(id={self.id}, {self.scheduled_date} {self.start_time}, status={self.status})>"
