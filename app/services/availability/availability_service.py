# ===== app/services/availability/availability_service.py =====
from typing import List, Dict, Optional, Iterable
from datetime import date, timedelta
from uuid import UUID
from sqlalchemy.orm import Session
from app.config.settings import settings
from app.models.availability import HostAvailability
from app.models.booking import Booking, BookingStatus
import logging

logger = logging.getLogger(__name__)


def to_minutes(hhmm: str) -> int:
    """'09:30' -> 570"""
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def to_label(minutes: int) -> str:
    """570 -> '09:30'"""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def day_of_week(target: date) -> int:
    """Weekday index with 0 = Sunday, 6 = Saturday"""
    return (target.weekday() + 1) % 7


class AvailabilityService:
    """Host availability windows and the bookable slots derived from them"""

    # ------------------------------------------------------------------
    # Pure rules
    # ------------------------------------------------------------------

    @staticmethod
    def resolve_windows(target: date, records: Iterable[HostAvailability]) -> List[HostAvailability]:
        """
        Windows that apply on the target date.
        A date-specific record shadows every weekly record for that date.
        """
        active = [r for r in records if r.is_active]

        specific = [r for r in active if r.date == target]
        if specific:
            return specific

        weekday = day_of_week(target)
        return [r for r in active if r.date is None and r.day_of_week == weekday]

    @staticmethod
    def generate_slots(start_time: str, end_time: str, increment: int) -> List[str]:
        """Slot labels inside [start, end) such that every slot fits fully in the window"""
        if increment <= 0:
            raise ValueError("Slot increment must be positive")

        start = to_minutes(start_time)
        end = to_minutes(end_time)

        slots = []
        current = start
        while current + increment <= end:
            slots.append(to_label(current))
            current += increment
        return slots

    @staticmethod
    def slots_for_date(
            target: date,
            records: Iterable[HostAvailability],
            increment: Optional[int] = None,
            duration: Optional[int] = None
    ) -> List[str]:
        """
        All slot labels for a date across its windows, de-duplicated and sorted.
        With a duration, a slot is kept only if the whole call fits in its window.
        """
        increment = increment or settings.SLOT_INCREMENT_MINUTES
        labels = set()

        for window in AvailabilityService.resolve_windows(target, records):
            window_end = to_minutes(window.end_time)
            for label in AvailabilityService.generate_slots(window.start_time, window.end_time, increment):
                if duration and to_minutes(label) + duration > window_end:
                    continue
                labels.add(label)

        return sorted(labels)

    @staticmethod
    def available_dates(
            records: Iterable[HostAvailability],
            start: date,
            end: date,
            increment: Optional[int] = None,
            duration: Optional[int] = None
    ) -> List[date]:
        """Dates in [start, end] that have at least one slot"""
        records = list(records)
        dates = []
        current = start
        while current <= end:
            if AvailabilityService.slots_for_date(current, records, increment, duration):
                dates.append(current)
            current += timedelta(days=1)
        return dates

    @staticmethod
    def overlaps(slot: str, duration: int, booking_start: str, booking_duration: int) -> bool:
        slot_start = to_minutes(slot)
        booked_start = to_minutes(booking_start)
        return slot_start < booked_start + booking_duration and booked_start < slot_start + duration

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @staticmethod
    def get_host_availability(db: Session, user_id: UUID, active_only: bool = False) -> List[HostAvailability]:
        query = db.query(HostAvailability).filter(HostAvailability.user_id == user_id)
        if active_only:
            query = query.filter(HostAvailability.is_active == True)
        return query.order_by(
            HostAvailability.date,
            HostAvailability.day_of_week,
            HostAvailability.start_time
        ).all()

    @staticmethod
    def create_availability(
            db: Session,
            user_id: UUID,
            start_time: str,
            end_time: str,
            day_of_week: Optional[int] = None,
            specific_date: Optional[date] = None,
            is_active: bool = True
    ) -> HostAvailability:
        if start_time >= end_time:
            raise ValueError("startTime must be before endTime")
        if specific_date is None and day_of_week is None:
            raise ValueError("Either date or dayOfWeek is required")

        record = HostAvailability(
            user_id=user_id,
            date=specific_date,
            day_of_week=None if specific_date is not None else day_of_week,
            start_time=start_time,
            end_time=end_time,
            is_active=is_active
        )
        db.add(record)
        db.commit()
        db.refresh(record)

        logger.info(f"Created availability {record.id} for host {user_id}")
        return record

    @staticmethod
    def delete_availability(db: Session, user_id: UUID, availability_id: UUID) -> bool:
        """Returns False when the record does not exist or belongs to another host"""
        record = db.query(HostAvailability).filter(
            HostAvailability.id == availability_id,
            HostAvailability.user_id == user_id
        ).first()

        if not record:
            return False

        db.delete(record)
        db.commit()
        logger.info(f"Deleted availability {availability_id} for host {user_id}")
        return True

    @staticmethod
    def get_booked_intervals(db: Session, host_id: UUID, target: date) -> List[Booking]:
        return db.query(Booking).filter(
            Booking.host_id == host_id,
            Booking.scheduled_date == target,
            Booking.status.in_([BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value])
        ).all()

    @staticmethod
    def is_slot_booked(db: Session, host_id: UUID, target: date, slot: str, duration: int) -> bool:
        # Free consultations still occupy one increment
        span = duration or settings.SLOT_INCREMENT_MINUTES
        for booking in AvailabilityService.get_booked_intervals(db, host_id, target):
            booked_span = booking.duration or settings.SLOT_INCREMENT_MINUTES
            if AvailabilityService.overlaps(slot, span, booking.start_time, booked_span):
                return True
        return False

    @staticmethod
    def get_slots_with_status(
            db: Session,
            host_id: UUID,
            target: date,
            duration: Optional[int] = None
    ) -> List[Dict]:
        """Slot listing for the booking calendar; booked slots stay visible but unavailable"""
        records = AvailabilityService.get_host_availability(db, host_id, active_only=True)
        labels = AvailabilityService.slots_for_date(target, records, duration=duration)
        if not labels:
            return []

        bookings = AvailabilityService.get_booked_intervals(db, host_id, target)
        span = duration or settings.SLOT_INCREMENT_MINUTES

        slots = []
        for label in labels:
            taken = any(
                AvailabilityService.overlaps(
                    label, span, b.start_time, b.duration or settings.SLOT_INCREMENT_MINUTES
                )
                for b in bookings
            )
            slots.append({"time": label, "available": not taken})

        logger.debug(f"Host {host_id} has {len(slots)} slots on {target}")
        return slots

    @staticmethod
    def get_available_dates(
            db: Session,
            host_id: UUID,
            start: date,
            end: date,
            duration: Optional[int] = None
    ) -> List[date]:
        if end < start:
            raise ValueError("end must not be before start")
        if (end - start).days > settings.AVAILABLE_DATES_MAX_DAYS:
            raise ValueError(f"Date range cannot exceed {settings.AVAILABLE_DATES_MAX_DAYS} days")

        records = AvailabilityService.get_host_availability(db, host_id, active_only=True)
        return AvailabilityService.available_dates(records, start, end, duration=duration)
