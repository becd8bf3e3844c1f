# ===== app/services/email/email_service.py =====
import smtplib
from html import escape
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import List, Optional
import logging

from app.config.settings import settings

logger = logging.getLogger(__name__)


def _layout(title: str, body_html: str) -> str:
    return f"""
        <!DOCTYPE html>
        <html>
        <head>
            <meta charset="UTF-8">
            <meta name="viewport" content="width=device-width, initial-scale=1.0">
        </head>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
            <div style="background-color: #008B9A; padding: 30px; text-align: center; border-radius: 10px 10px 0 0;">
                <h1 style="color: white; margin: 0; font-size: 28px;">{title}</h1>
            </div>
            <div style="background-color: #ffffff; padding: 30px; border: 1px solid #e0e0e0; border-top: none; border-radius: 0 0 10px 10px;">
                {body_html}
                <hr style="border: none; border-top: 1px solid #e0e0e0; margin: 30px 0;">
                <p style="font-size: 12px; color: #999; margin: 0;">Dialoom · {settings.FRONTEND_URL}</p>
            </div>
        </body>
        </html>
        """


class EmailService:
    """Service for sending emails via the SendGrid SMTP relay"""

    @staticmethod
    def _get_smtp_connection():
        """Create and return SMTP connection"""
        try:
            if settings.EMAIL_USE_TLS:
                server = smtplib.SMTP(settings.EMAIL_HOST, settings.EMAIL_PORT)
                server.starttls()
            else:
                server = smtplib.SMTP_SSL(settings.EMAIL_HOST, settings.EMAIL_PORT)

            if settings.EMAIL_USERNAME and settings.SENDGRID_API_KEY:
                server.login(settings.EMAIL_USERNAME, settings.SENDGRID_API_KEY)

            return server
        except Exception as e:
            logger.error(f"Failed to connect to SMTP server: {e}")
            raise

    @staticmethod
    def send_email(
            to_email: str,
            subject: str,
            html_content: str,
            plain_text: Optional[str] = None,
            bcc: Optional[List[str]] = None
    ) -> bool:
        """
        Send an email using SMTP

        Returns:
            bool: True if sent, False when email is disabled
        """
        if not settings.EMAIL_ENABLED:
            logger.info(f"Email disabled, skipping '{subject}' to {to_email}")
            return False

        try:
            msg = MIMEMultipart('alternative')
            msg['Subject'] = subject
            msg['From'] = f"{settings.EMAIL_FROM_NAME} <{settings.EMAIL_FROM_ADDRESS}>"
            msg['To'] = to_email

            if plain_text:
                msg.attach(MIMEText(plain_text, 'plain'))
            msg.attach(MIMEText(html_content, 'html'))

            recipients = [to_email] + list(bcc or [])

            server = EmailService._get_smtp_connection()
            server.sendmail(settings.EMAIL_FROM_ADDRESS, recipients, msg.as_string())
            server.quit()

            logger.info(f"Email sent successfully to {to_email}")
            return True

        except Exception as e:
            logger.error(f"Failed to send email to {to_email}: {e}")
            raise

    @staticmethod
    def send_booking_confirmation_email(
            email: str,
            user_name: str,
            counterpart_name: str,
            role: str,
            booking_id: str,
            scheduled_date: str,
            start_time: str,
            duration: int,
            amount: str,
            currency: str
    ) -> bool:
        """Booking confirmed; the guest sees what they paid, the host sees who booked"""
        booking_url = f"{settings.FRONTEND_URL}/dashboard?booking={booking_id}"

        if role == "host":
            subject = f"New booking on {scheduled_date} at {start_time}"
            intro = f"{counterpart_name or 'A guest'} has booked a {duration} minute call with you."
        else:
            subject = f"Your Dialoom call is confirmed - {scheduled_date} {start_time}"
            intro = (
                f"Your {duration} minute call with {counterpart_name or 'your host'} is confirmed. "
                f"Amount paid: {amount} {currency}."
            )

        # Names come from user-editable profile metadata
        html_name = escape(user_name or "there")
        html_when = f"<strong>{escape(scheduled_date)}</strong> at <strong>{escape(start_time)}</strong>"

        html_content = _layout("Booking Confirmed", f"""
                <h2 style="color: #333; margin-top: 0;">Hi {html_name}!</h2>
                <p style="font-size: 16px; color: #555;">{escape(intro)}</p>
                <p style="font-size: 16px; color: #555;">{html_when} (UTC)</p>
                <div style="text-align: center; margin: 30px 0;">
                    <a href="{escape(booking_url)}" style="background-color: #008B9A; color: white; padding: 14px 40px; text-decoration: none; border-radius: 5px; font-weight: bold; display: inline-block;">
                        View booking
                    </a>
                </div>
        """)

        plain_text = f"""
        Hi {user_name or 'there'}!

        {intro}
        When: {scheduled_date} at {start_time} (UTC)

        View your booking: {booking_url}
        """

        return EmailService.send_email(email, subject, html_content, plain_text)

    @staticmethod
    def send_booking_cancelled_email(
            email: str,
            user_name: str,
            booking_id: str,
            scheduled_date: str,
            start_time: str,
            cancelled_by: str
    ) -> bool:
        who = {"host": "the host", "guest": "the guest"}.get(cancelled_by, "a participant")
        subject = f"Booking cancelled - {scheduled_date} {start_time}"

        html_content = _layout("Booking Cancelled", f"""
                <h2 style="color: #333; margin-top: 0;">Hi {escape(user_name or "there")},</h2>
                <p style="font-size: 16px; color: #555;">
                    The call scheduled for <strong>{escape(scheduled_date)}</strong> at <strong>{escape(start_time)}</strong> was cancelled by {who}.
                </p>
                <p style="font-size: 14px; color: #777;">Booking reference: {escape(booking_id)}</p>
        """)

        plain_text = f"""
        Hi {user_name or 'there'},

        The call scheduled for {scheduled_date} at {start_time} was cancelled by {who}.
        Booking reference: {booking_id}
        """

        return EmailService.send_email(email, subject, html_content, plain_text)
