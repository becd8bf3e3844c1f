"""
Pydantic schemas for the Loomia assistant
"""
from datetime import datetime
from typing import List, Literal

from pydantic import Field

from app.schemas.common import CamelModel


class ChatTurn(CamelModel):
    role: str
    content: str


class LoomiaChatRequest(CamelModel):
    message: str = ""
    user_role: Literal["guest", "host", "admin"] = "guest"
    conversation_history: List[ChatTurn] = Field(default_factory=list)
    language: Literal["es", "en", "ca"] = "es"


class LoomiaChatResponse(CamelModel):
    response: str
    timestamp: datetime


class ImproveDescriptionRequest(CamelModel):
    description: str = Field(default="", max_length=5000)


class ImproveDescriptionResponse(CamelModel):
    improved_description: str
