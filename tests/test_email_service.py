"""Booking email rendering."""

from unittest.mock import patch

from app.services.email.email_service import EmailService

MARKUP_NAME = '<a href="https://evil.example">Pay here</a>'


def rendered(send):
    """(subject, html, plain) of the single send_email call"""
    to_email, subject, html_content, plain_text = send.call_args.args
    return subject, html_content, plain_text


class TestBookingEmails:

    def test_confirmation_escapes_names_in_html(self):
        with patch.object(EmailService, "send_email", return_value=True) as send:
            EmailService.send_booking_confirmation_email(
                email="host@example.com",
                user_name="<b>Host</b>",
                counterpart_name=MARKUP_NAME,
                role="host",
                booking_id="b-1",
                scheduled_date="2030-01-07",
                start_time="09:00",
                duration=30,
                amount="110.00",
                currency="EUR",
            )

        subject, html_content, plain_text = rendered(send)
        assert 'href="https://evil.example"' not in html_content
        assert "&lt;a href=&quot;https://evil.example&quot;&gt;Pay here&lt;/a&gt;" in html_content
        assert "<b>Host</b>" not in html_content
        assert "View booking" in html_content
        assert MARKUP_NAME in plain_text
        assert subject == "New booking on 2030-01-07 at 09:00"

    def test_guest_confirmation_shows_amount(self):
        with patch.object(EmailService, "send_email", return_value=True) as send:
            EmailService.send_booking_confirmation_email(
                email="guest@example.com",
                user_name="Guest",
                counterpart_name="Host",
                role="guest",
                booking_id="b-1",
                scheduled_date="2030-01-07",
                start_time="09:00",
                duration=30,
                amount="110.00",
                currency="EUR",
            )

        _, html_content, _ = rendered(send)
        assert "Amount paid: 110.00 EUR." in html_content

    def test_cancellation_escapes_name(self):
        with patch.object(EmailService, "send_email", return_value=True) as send:
            EmailService.send_booking_cancelled_email(
                email="guest@example.com",
                user_name=MARKUP_NAME,
                booking_id="b-1",
                scheduled_date="2030-01-07",
                start_time="09:00",
                cancelled_by="host",
            )

        _, html_content, _ = rendered(send)
        assert 'href="https://evil.example"' not in html_content
        assert "cancelled by the host" in html_content

    def test_disabled_email_is_skipped(self):
        assert EmailService.send_email("guest@example.com", "Subject", "<p>Hi</p>") is False
