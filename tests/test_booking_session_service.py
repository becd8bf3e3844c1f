"""Booking session lifecycle and the checkout claim."""

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.models import Booking, BookingSessionStatus
from app.services.booking.booking_session_service import BookingSessionService
from app.services.booking.exceptions import (
    BookingNotFoundError,
    BookingValidationError,
    InvalidSessionTransition,
    SessionExpiredError,
    SlotUnavailableError,
)

from conftest import future_date


def create(db, host, guest=None, **overrides):
    params = dict(
        host_id=host.id,
        selected_date=future_date(),
        selected_time="09:00",
        selected_duration=30,
        selected_services={"screen_sharing": True, "translation": False},
        guest=guest,
    )
    params.update(overrides)
    return BookingSessionService.create_session(db, **params)


class TestCreateSession:

    def test_snapshots_price(self, db, bookable_host, guest):
        session = create(db, bookable_host, guest)

        assert session.status == BookingSessionStatus.CREATED.value
        assert session.base_price == Decimal("100.00")
        assert session.services_total == Decimal("10.00")
        assert session.total_price == Decimal("110.00")
        assert session.guest_id == guest.id
        assert session.service_fees == {"screen_sharing": "10.00"}

    def test_anonymous_session_has_no_guest(self, db, bookable_host):
        session = create(db, bookable_host)
        assert session.guest_id is None

    def test_unknown_host(self, db, bookable_host):
        with pytest.raises(BookingNotFoundError):
            create(db, bookable_host, host_id=uuid.uuid4())

    def test_host_cannot_book_self(self, db, bookable_host):
        with pytest.raises(BookingValidationError):
            create(db, bookable_host, bookable_host)

    def test_past_date_rejected(self, db, bookable_host):
        with pytest.raises(BookingValidationError):
            create(db, bookable_host, selected_date=datetime.now(timezone.utc).date() - timedelta(days=1))

    def test_time_outside_availability_rejected(self, db, bookable_host):
        with pytest.raises(BookingValidationError):
            create(db, bookable_host, selected_time="13:00")

    def test_slot_where_duration_does_not_fit_rejected(self, db, bookable_host):
        # window ends at 12:00
        with pytest.raises(BookingValidationError):
            create(db, bookable_host, selected_time="11:45")

    def test_duration_not_offered_rejected(self, db, bookable_host):
        with pytest.raises(BookingValidationError):
            create(db, bookable_host, selected_duration=45)

    def test_already_booked_slot_rejected(self, db, bookable_host, guest):
        db.add(Booking(
            host_id=bookable_host.id,
            guest_id=guest.id,
            scheduled_date=future_date(),
            start_time="09:00",
            duration=30,
            price=Decimal("100"),
            status="confirmed",
        ))
        db.commit()

        with pytest.raises(SlotUnavailableError):
            create(db, bookable_host, guest, selected_time="09:15")

        # After the booking ends the host is free again
        assert create(db, bookable_host, guest, selected_time="09:30")


class TestLiveSession:

    def test_unknown_session(self, db):
        with pytest.raises(BookingNotFoundError):
            BookingSessionService.get_live_session(db, uuid.uuid4())

    def test_expired_created_session_is_abandoned(self, db, bookable_host, guest):
        session = create(db, bookable_host, guest)
        session.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
        db.commit()

        with pytest.raises(SessionExpiredError):
            BookingSessionService.get_live_session(db, session.id)

        db.refresh(session)
        assert session.status == BookingSessionStatus.ABANDONED.value
        assert session.abandoned_at is not None

        with pytest.raises(SessionExpiredError):
            BookingSessionService.get_live_session(db, session.id)


class TestTransitions:

    def test_created_to_paid_to_confirmed(self, db, bookable_host, guest):
        session = create(db, bookable_host, guest)
        BookingSessionService.mark_paid(db, session, "pi_1")
        assert session.status == "paid"
        assert session.payment_intent_id == "pi_1"
        BookingSessionService.mark_confirmed(db, session)
        assert session.status == "confirmed"

    def test_created_cannot_skip_to_confirmed(self, db, bookable_host, guest):
        session = create(db, bookable_host, guest)
        with pytest.raises(InvalidSessionTransition):
            BookingSessionService.mark_confirmed(db, session)

    def test_terminal_states(self, db, bookable_host, guest):
        session = create(db, bookable_host, guest)
        BookingSessionService.transition(db, session, BookingSessionStatus.ABANDONED)
        with pytest.raises(InvalidSessionTransition):
            BookingSessionService.mark_paid(db, session, "pi_2")


class TestCheckoutClaim:

    def test_only_one_claim_wins(self, db, bookable_host, guest):
        session = create(db, bookable_host, guest)
        assert BookingSessionService.claim_for_checkout(db, session.id) is True
        assert BookingSessionService.claim_for_checkout(db, session.id) is False

    def test_released_claim_can_be_retaken(self, db, bookable_host, guest):
        session = create(db, bookable_host, guest)
        assert BookingSessionService.claim_for_checkout(db, session.id)
        BookingSessionService.release_claim(db, session.id)
        assert BookingSessionService.claim_for_checkout(db, session.id)

    def test_stale_claim_can_be_retaken(self, db, bookable_host, guest):
        session = create(db, bookable_host, guest)
        session.checkout_claimed_at = datetime.now(timezone.utc) - timedelta(minutes=10)
        db.commit()
        assert BookingSessionService.claim_for_checkout(db, session.id)

    def test_paid_session_cannot_be_claimed(self, db, bookable_host, guest):
        session = create(db, bookable_host, guest)
        BookingSessionService.mark_paid(db, session, "pi_3")
        assert BookingSessionService.claim_for_checkout(db, session.id) is False


class TestExpireStale:

    def test_only_expired_created_sessions(self, db, bookable_host, guest):
        stale = create(db, bookable_host, guest)
        fresh = create(db, bookable_host, guest, selected_time="10:00")
        paid = create(db, bookable_host, guest, selected_time="11:00")
        BookingSessionService.mark_paid(db, paid, "pi_4")

        past = datetime.now(timezone.utc) - timedelta(minutes=5)
        stale.expires_at = past
        paid.expires_at = past
        db.commit()

        assert BookingSessionService.expire_stale_sessions(db) == 1

        db.expire_all()
        assert stale.status == "abandoned"
        assert fresh.status == "created"
        assert paid.status == "paid"

    def test_celery_task_runs_expiry(self, db, bookable_host, guest):
        from app.tasks.booking_tasks import expire_stale_booking_sessions

        session = create(db, bookable_host, guest)
        session.expires_at = datetime.now(timezone.utc) - timedelta(minutes=5)
        db.commit()

        result = expire_stale_booking_sessions.apply().get()
        assert result == {"status": "success", "expired": 1}

    def test_session_mid_checkout_is_not_expired(self, db, bookable_host, guest):
        session = create(db, bookable_host, guest)
        assert BookingSessionService.claim_for_checkout(db, session.id)
        session.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
        db.commit()

        assert BookingSessionService.expire_stale_sessions(db) == 0
        assert BookingSessionService.get_live_session(db, session.id).status == "created"

        BookingSessionService.mark_paid(db, session, "pi_mid_checkout")
        assert session.status == "paid"

    def test_stale_claim_does_not_keep_session_alive(self, db, bookable_host, guest):
        session = create(db, bookable_host, guest)
        session.checkout_claimed_at = datetime.now(timezone.utc) - timedelta(minutes=10)
        session.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
        db.commit()

        assert BookingSessionService.expire_stale_sessions(db) == 1


class TestBindGuest:

    def test_first_payer_wins(self, db, bookable_host, guest):
        session = create(db, bookable_host)
        other = uuid.uuid4()

        assert BookingSessionService.bind_guest(db, session.id, guest.id) is True
        assert BookingSessionService.bind_guest(db, session.id, other) is False

        db.expire_all()
        assert BookingSessionService.get_session(db, session.id).guest_id == guest.id
