# app/webhooks/router.py
from fastapi import APIRouter

webhook_router = APIRouter()


# Import handlers inside a function to avoid circular imports
def register_handlers():
    from app.webhooks import stripe_handler
    webhook_router.include_router(stripe_handler.router)


register_handlers()
