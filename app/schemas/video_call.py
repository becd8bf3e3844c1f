from uuid import UUID

from app.schemas.common import CamelModel


class VideoTokenRequest(CamelModel):
    booking_id: UUID


class VideoTokenResponse(CamelModel):
    token: str
    channel_name: str
    app_id: str
    uid: int
    expires_at: int
