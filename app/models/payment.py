# app/models/payment.py
"""Stripe payments and the invoices issued for them"""
from sqlalchemy import Column, String, Integer, Numeric, Date, DateTime, ForeignKey, Uuid
from sqlalchemy.sql import func
import enum
import uuid
from app.models.base import Base


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class StripePayment(Base):
    __tablename__ = "stripe_payments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    booking_session_id = Column(Uuid, ForeignKey("booking_sessions.id"), nullable=False, index=True)
    booking_id = Column(Uuid, ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True)

    stripe_payment_intent_id = Column(String, nullable=False, unique=True)
    stripe_customer_id = Column(String, nullable=True)

    # Amount breakdown
    amount = Column(Numeric(10, 2), nullable=False)
    host_amount = Column(Numeric(10, 2), nullable=False)
    commission_amount = Column(Numeric(10, 2), nullable=False)
    vat_amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), default="EUR", nullable=False)

    # Add-on fees
    screen_sharing_fee = Column(Numeric(10, 2), default=0)
    translation_fee = Column(Numeric(10, 2), default=0)
    recording_fee = Column(Numeric(10, 2), default=0)
    transcription_fee = Column(Numeric(10, 2), default=0)

    status = Column(String(20), default=PaymentStatus.PENDING.value, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    invoice_number = Column(String(30), nullable=False, unique=True)  # DIAL-2025-00001
    payment_id = Column(Uuid, ForeignKey("stripe_payments.id", ondelete="CASCADE"), nullable=True)
    booking_id = Column(Uuid, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)  # guest
    host_id = Column(Uuid, ForeignKey("users.id"), nullable=False)

    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), default="EUR", nullable=False)
    issue_date = Column(Date, nullable=False)
    download_count = Column(Integer, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def to_dict(self):
        return {
            "id": str(self.id),
            "invoiceNumber": self.invoice_number,
            "bookingId": str(self.booking_id),
            "hostId": str(self.host_id),
            "amount": str(self.amount),
            "currency": self.currency,
            "issueDate": self.issue_date.isoformat(),
            "downloadCount": self.download_count or 0,
        }
