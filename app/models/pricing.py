# app/models/pricing.py
"""
Host pricing - one row per offered duration.
duration=0 is the free consultation.
"""
from sqlalchemy import Column, String, Numeric, Integer, ForeignKey, Boolean, DateTime, UniqueConstraint, Uuid
from sqlalchemy.sql import func
import uuid
from app.models.base import Base


class HostPricing(Base):
    __tablename__ = "host_pricing"
    __table_args__ = (
        UniqueConstraint("user_id", "duration", name="uq_host_pricing_user_duration"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    duration = Column(Integer, nullable=False)  # minutes
    price = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), default="EUR", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_custom = Column(Boolean, default=False, nullable=False)

    # Add-on services the host offers with this option
    includes_screen_sharing = Column(Boolean, default=False, nullable=False)
    includes_translation = Column(Boolean, default=False, nullable=False)
    includes_recording = Column(Boolean, default=False, nullable=False)
    includes_transcription = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<HostPricing(user_id={self.user_id}, duration={self.duration}, price={self.price})>"
