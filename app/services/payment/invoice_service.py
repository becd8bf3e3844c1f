# app/services/payment/invoice_service.py
"""Invoice issuing, numbered DIAL-<year>-<5 digit sequence>"""
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.booking import Booking
from app.models.payment import Invoice, StripePayment

logger = logging.getLogger(__name__)

INVOICE_PREFIX = "DIAL"


class InvoiceService:

    @staticmethod
    def next_invoice_number(db: Session, year: int) -> str:
        prefix = f"{INVOICE_PREFIX}-{year}-"
        last = db.query(Invoice.invoice_number).filter(
            Invoice.invoice_number.like(f"{prefix}%")
        ).order_by(Invoice.invoice_number.desc()).first()

        sequence = int(last[0].rsplit("-", 1)[1]) + 1 if last else 1
        return f"{prefix}{sequence:05d}"

    @staticmethod
    def issue_for_booking(db: Session, booking: Booking, payment: Optional[StripePayment] = None) -> Invoice:
        """One invoice per booking; re-issuing returns the existing one"""
        existing = db.query(Invoice).filter(Invoice.booking_id == booking.id).first()
        if existing:
            return existing

        today = datetime.now(timezone.utc).date()
        invoice = Invoice(
            invoice_number=InvoiceService.next_invoice_number(db, today.year),
            payment_id=payment.id if payment else None,
            booking_id=booking.id,
            user_id=booking.guest_id,
            host_id=booking.host_id,
            amount=booking.price,
            currency=booking.currency,
            issue_date=today,
        )
        db.add(invoice)
        db.commit()
        db.refresh(invoice)

        logger.info(f"Issued invoice {invoice.invoice_number} for booking {booking.id}")
        return invoice

    @staticmethod
    def register_download(db: Session, invoice_id: UUID, user_id: UUID) -> Optional[Invoice]:
        """Count a download by the guest or host of the invoice; None for anyone else"""
        invoice = db.query(Invoice).filter(
            Invoice.id == invoice_id,
            (Invoice.user_id == user_id) | (Invoice.host_id == user_id)
        ).first()
        if invoice is None:
            return None

        db.query(Invoice).filter(Invoice.id == invoice_id).update(
            {Invoice.download_count: func.coalesce(Invoice.download_count, 0) + 1},
            synchronize_session=False
        )
        db.commit()
        db.refresh(invoice)

        logger.info(f"Invoice {invoice.invoice_number} downloaded by {user_id} ({invoice.download_count})")
        return invoice

    @staticmethod
    def list_for_user(db: Session, user_id: UUID) -> List[Invoice]:
        return db.query(Invoice).filter(
            (Invoice.user_id == user_id) | (Invoice.host_id == user_id)
        ).order_by(Invoice.created_at.desc()).all()
