# app/api/v1/dashboard/bookings.py
"""
Bookings and invoices for the signed-in user
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional, Literal
from uuid import UUID
import logging

from app.api.dependencies import get_current_user
from app.api.v1.errors import to_http_exception
from app.config.database import get_db
from app.models.user import User
from app.schemas.booking import BookingResponse, BookingCancelRequest
from app.services.booking.booking_service import BookingService
from app.services.booking.exceptions import BookingError
from app.services.payment.invoice_service import InvoiceService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/bookings/user", response_model=List[BookingResponse])
def list_my_bookings(
        role: Optional[Literal["host", "guest"]] = Query(None),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    return BookingService.list_for_user(db, current_user.id, role)


@router.get("/bookings/{booking_id}", response_model=BookingResponse)
def get_booking(
        booking_id: UUID,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    try:
        return BookingService.get_for_participant(db, booking_id, current_user)
    except BookingError as e:
        raise to_http_exception(e)


@router.put("/bookings/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
        booking_id: UUID,
        data: Optional[BookingCancelRequest] = None,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    try:
        return BookingService.cancel(
            db, booking_id, current_user, reason=data.reason if data else None
        )
    except BookingError as e:
        raise to_http_exception(e)


@router.get("/invoices")
def list_my_invoices(
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    invoices = InvoiceService.list_for_user(db, current_user.id)
    return {"total": len(invoices), "invoices": [i.to_dict() for i in invoices]}


@router.get("/invoices/{invoice_id}/download")
def download_invoice(
        invoice_id: UUID,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """Invoice data for rendering; counts the download"""
    invoice = InvoiceService.register_download(db, invoice_id, current_user.id)
    if invoice is None:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice.to_dict()
