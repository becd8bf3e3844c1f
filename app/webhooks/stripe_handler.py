# app/webhooks/stripe_handler.py
"""Stripe webhook handler"""
import json
import logging

import stripe
from fastapi import APIRouter, Request, HTTPException, Depends
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.services.payment.stripe_service import StripeService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/webhook")
async def handle_stripe_webhook(request: Request, db: Session = Depends(get_db)):
    """Verify the Stripe signature and apply payment events"""
    payload = await request.body()
    signature = request.headers.get("stripe-signature")

    try:
        StripeService.construct_event(payload, signature)
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.warning(f"Rejected Stripe webhook: {e}")
        raise HTTPException(status_code=400, detail="Invalid webhook signature")

    # Signature checked above; read the event as plain JSON
    event = json.loads(payload)
    event_type = event.get("type")
    data_object = event.get("data", {}).get("object", {})

    if event_type == "payment_intent.succeeded":
        booking_id = StripeService.handle_payment_succeeded(db, data_object)
        logger.info(f"payment_intent.succeeded {data_object.get('id')} -> booking {booking_id}")
    elif event_type == "payment_intent.payment_failed":
        StripeService.handle_payment_failed(db, data_object)
    else:
        logger.info(f"Unhandled Stripe event type: {event_type}")

    return {"received": True}
