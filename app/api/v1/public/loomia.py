# app/api/v1/public/loomia.py
"""
Loomia assistant endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from datetime import datetime, timezone
import logging

from app.api.dependencies import get_current_user, loomia_rate_limit
from app.models.user import User
from app.schemas.loomia import (
    LoomiaChatRequest,
    LoomiaChatResponse,
    ImproveDescriptionRequest,
    ImproveDescriptionResponse,
)
from app.services.ai.loomia_service import LoomiaService, LoomiaError

logger = logging.getLogger(__name__)
router = APIRouter()


def get_loomia_service() -> LoomiaService:
    return LoomiaService()


@router.post(
    "/loomia/chat",
    response_model=LoomiaChatResponse,
    dependencies=[Depends(loomia_rate_limit)]
)
def loomia_chat(
        data: LoomiaChatRequest,
        loomia: LoomiaService = Depends(get_loomia_service)
):
    if not data.message or not data.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")

    reply = loomia.chat(
        message=data.message.strip(),
        user_role=data.user_role,
        history=[turn.model_dump() for turn in data.conversation_history],
        language=data.language
    )
    return {"response": reply, "timestamp": datetime.now(timezone.utc)}


@router.post(
    "/loomia/improve-description",
    response_model=ImproveDescriptionResponse,
    dependencies=[Depends(loomia_rate_limit)]
)
def improve_description(
        data: ImproveDescriptionRequest,
        current_user: User = Depends(get_current_user),
        loomia: LoomiaService = Depends(get_loomia_service)
):
    description = (data.description or "").strip()
    if len(description) < 10:
        raise HTTPException(status_code=400, detail="Description must be at least 10 characters")

    try:
        improved = loomia.improve_description(description)
    except LoomiaError as e:
        raise HTTPException(status_code=502, detail=str(e))

    logger.info(f"Improved description for user {current_user.id}")
    return {"improved_description": improved}
