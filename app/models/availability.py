from sqlalchemy import Column, String, Integer, Boolean, Date, DateTime, ForeignKey, CheckConstraint, Uuid
from sqlalchemy.sql import func
from app.models.base import Base
import uuid


class HostAvailability(Base):
    """
    A host availability window.
    Recurs weekly when date is null, otherwise applies to that date only.
    """
    __tablename__ = "host_availability"
    __table_args__ = (
        CheckConstraint("day_of_week IS NULL OR (day_of_week >= 0 AND day_of_week <= 6)", name="ck_host_availability_dow"),
        CheckConstraint("start_time < end_time", name="ck_host_availability_window"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    date = Column(Date, nullable=True)  # Specific date, null for recurring
    day_of_week = Column(Integer, nullable=True)  # 0=Sunday, 6=Saturday
    start_time = Column(String(5), nullable=False)  # HH:MM format
    end_time = Column(String(5), nullable=False)  # HH:MM format

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        when = self.date.isoformat() if self.date else f"dow={self.day_of_week}"
        return f"<HostAvailability({when} {self.start_time}-{self.end_time})>"
