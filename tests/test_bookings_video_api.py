"""Bookings, invoices and video-call endpoints."""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import patch

import pytest

from app.config.settings import settings
from app.models import Booking
from app.services.availability.availability_service import AvailabilityService
from app.services.payment.invoice_service import InvoiceService

from conftest import auth_headers, future_date, make_user


def make_booking(db, host, guest, status="confirmed", scheduled_date=None, start_time="10:00"):
    booking = Booking(
        host_id=host.id,
        guest_id=guest.id,
        scheduled_date=scheduled_date or future_date(),
        start_time=start_time,
        duration=30,
        price=Decimal("110.00"),
        currency="EUR",
        services={"screen_sharing": True},
        status=status,
    )
    db.add(booking)
    db.flush()
    booking.agora_channel_name = f"booking_{booking.id}"
    db.commit()
    db.refresh(booking)
    return booking


@pytest.fixture
def booking(db, host, guest):
    return make_booking(db, host, guest)


class TestBookingsAPI:

    def test_list_by_role(self, client, db, host, guest, booking):
        other_host = make_user(db, "other-host@example.com", role="host")
        make_booking(db, other_host, host, start_time="11:00")

        as_host = client.get("/api/bookings/user?role=host", headers=auth_headers(host)).json()
        as_guest = client.get("/api/bookings/user?role=guest", headers=auth_headers(host)).json()
        everything = client.get("/api/bookings/user", headers=auth_headers(host)).json()

        assert [b["id"] for b in as_host] == [str(booking.id)]
        assert len(as_guest) == 1 and as_guest[0]["hostId"] == str(other_host.id)
        assert len(everything) == 2

    def test_invalid_role_filter(self, client, guest):
        assert client.get("/api/bookings/user?role=admin", headers=auth_headers(guest)).status_code == 422

    def test_get_booking_for_participants_only(self, client, db, host, guest, booking):
        resp = client.get(f"/api/bookings/{booking.id}", headers=auth_headers(guest))
        assert resp.status_code == 200
        body = resp.json()
        assert body["agoraChannelName"] == f"booking_{booking.id}"
        assert Decimal(body["price"]) == Decimal("110.00")

        outsider = make_user(db, "outsider@example.com")
        assert client.get(f"/api/bookings/{booking.id}", headers=auth_headers(outsider)).status_code == 403
        assert client.get(f"/api/bookings/{uuid.uuid4()}", headers=auth_headers(guest)).status_code == 404

    def test_cancel_once(self, client, db, booking, guest):
        with patch("app.services.email.email_service.EmailService.send_email", return_value=True) as send_email:
            resp = client.put(f"/api/bookings/{booking.id}/cancel", json={"reason": "Conflict"},
                              headers=auth_headers(guest))

        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "cancelled"
        assert body["cancelledBy"] == "guest"
        assert send_email.call_count == 2

        again = client.put(f"/api/bookings/{booking.id}/cancel", headers=auth_headers(guest))
        assert again.status_code == 409

    def test_host_cancel(self, client, booking, host):
        resp = client.put(f"/api/bookings/{booking.id}/cancel", headers=auth_headers(host))
        assert resp.json()["cancelledBy"] == "host"

    def test_cancelled_booking_frees_the_slot(self, client, db, booking, host):
        assert AvailabilityService.is_slot_booked(db, host.id, booking.scheduled_date, "10:00", 30)

        client.put(f"/api/bookings/{booking.id}/cancel", headers=auth_headers(host))

        db.expire_all()
        assert db.get(Booking, booking.id).status == "cancelled"
        assert not AvailabilityService.is_slot_booked(db, host.id, booking.scheduled_date, "10:00", 30)


class TestInvoicesAPI:

    def test_invoices_visible_to_both_parties(self, client, db, host, guest, booking):
        invoice = InvoiceService.issue_for_booking(db, booking)

        for user in (guest, host):
            resp = client.get("/api/invoices", headers=auth_headers(user))
            assert resp.status_code == 200
            body = resp.json()
            assert body["total"] == 1
            assert body["invoices"][0]["invoiceNumber"] == invoice.invoice_number

        outsider = make_user(db, "outsider@example.com")
        assert client.get("/api/invoices", headers=auth_headers(outsider)).json()["total"] == 0

    def test_download_counts_and_hides_from_outsiders(self, client, db, host, guest, booking):
        invoice = InvoiceService.issue_for_booking(db, booking)
        url = f"/api/invoices/{invoice.id}/download"

        first = client.get(url, headers=auth_headers(guest))
        assert first.status_code == 200
        assert first.json()["invoiceNumber"] == invoice.invoice_number
        assert first.json()["downloadCount"] == 1

        assert client.get(url, headers=auth_headers(host)).json()["downloadCount"] == 2

        outsider = make_user(db, "outsider@example.com")
        assert client.get(url, headers=auth_headers(outsider)).status_code == 404
        assert client.get(f"/api/invoices/{uuid.uuid4()}/download", headers=auth_headers(guest)).status_code == 404

        db.expire_all()
        assert db.get(type(invoice), invoice.id).download_count == 2

    def test_numbering_is_sequential(self, db, host, guest):
        first = InvoiceService.issue_for_booking(db, make_booking(db, host, guest, start_time="09:00"))
        second = InvoiceService.issue_for_booking(db, make_booking(db, host, guest, start_time="09:30"))

        year = datetime.now(timezone.utc).year
        assert first.invoice_number.endswith("-00001")
        assert second.invoice_number.endswith("-00002")
        assert second.invoice_number.startswith("DIAL-")
        assert InvoiceService.next_invoice_number(db, year + 1) == f"DIAL-{year + 1}-00001"

    def test_issue_is_idempotent(self, db, booking):
        assert InvoiceService.issue_for_booking(db, booking).id == InvoiceService.issue_for_booking(db, booking).id


class TestVideoCallAPI:

    def test_token_without_credentials_is_empty(self, client, booking, guest):
        resp = client.post("/api/video-call/token", json={"bookingId": str(booking.id)},
                           headers=auth_headers(guest))
        assert resp.status_code == 200
        body = resp.json()
        assert body["token"] == ""
        assert body["channelName"] == f"booking_{booking.id}"
        assert body["uid"] == 0

    def test_token_with_credentials(self, client, booking, host, monkeypatch):
        monkeypatch.setattr(settings, "AGORA_APP_ID", "app-id")
        monkeypatch.setattr(settings, "AGORA_APP_CERTIFICATE", "app-cert")

        with patch("app.services.video.video_call_service.RtcTokenBuilder.buildTokenWithUid",
                   return_value="agora-token") as build:
            resp = client.post("/api/video-call/token", json={"bookingId": str(booking.id)},
                               headers=auth_headers(host))

        body = resp.json()
        assert body["token"] == "agora-token"
        assert body["appId"] == "app-id"
        app_id, cert, channel, uid, role, expires_at = build.call_args.args
        assert (app_id, cert, channel, uid, role) == ("app-id", "app-cert", f"booking_{booking.id}", 0, 1)
        assert expires_at == body["expiresAt"]

    def test_token_for_outsider_forbidden(self, client, db, booking):
        outsider = make_user(db, "outsider@example.com")
        resp = client.post("/api/video-call/token", json={"bookingId": str(booking.id)},
                           headers=auth_headers(outsider))
        assert resp.status_code == 403

    def test_end_call_completes_booking(self, client, db, booking, guest):
        resp = client.post(f"/api/video-call/end/{booking.id}", headers=auth_headers(guest))
        assert resp.status_code == 200
        assert resp.json()["status"] == "completed"

        assert client.post(f"/api/video-call/end/{booking.id}", headers=auth_headers(guest)).status_code == 409
        token = client.post("/api/video-call/token", json={"bookingId": str(booking.id)},
                            headers=auth_headers(guest))
        assert token.status_code == 409

    def test_no_token_for_cancelled_booking(self, client, db, host, guest):
        cancelled = make_booking(db, host, guest, status="cancelled")
        resp = client.post("/api/video-call/token", json={"bookingId": str(cancelled.id)},
                           headers=auth_headers(guest))
        assert resp.status_code == 409
