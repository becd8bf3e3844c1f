# ============================================================================
# FILE: app/api/dependencies.py
# Authentication dependencies for Supabase access tokens
# ============================================================================
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime, timezone
from jose import JWTError, jwt
from uuid import UUID
import logging

from app.config.database import get_db
from app.config.redis import get_redis, RedisKeys
from app.config.settings import settings
from app.models.user import User
from app.services.user.user_service import UserService

logger = logging.getLogger(__name__)

# ============================================================================
# Security Schemes
# ============================================================================

jwt_security = HTTPBearer(
    scheme_name="Supabase Bearer Token",
    description="Supabase session access token"
)

optional_jwt_security = HTTPBearer(auto_error=False)


# ============================================================================
# JWT Token Functions
# ============================================================================

def verify_access_token(token: str) -> dict:
    """
    Verify and decode a Supabase access token.

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.SUPABASE_JWT_AUDIENCE
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Could not validate credentials: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        UUID(payload.get("sub") or "")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID in token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return payload


# ============================================================================
# Authentication Dependencies
# ============================================================================

async def get_current_user(
        credentials: HTTPAuthorizationCredentials = Depends(jwt_security),
        db: Session = Depends(get_db)
) -> User:
    """
    Dependency to get the current authenticated user.

    Usage in routes:
        @router.get("/profile")
        async def get_profile(current_user: User = Depends(get_current_user)):
            return {"email": current_user.email}
    """
    payload = verify_access_token(credentials.credentials)
    user = UserService.get_or_create_from_claims(db, payload)

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user account"
        )

    return user


async def optional_current_user(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_jwt_security),
        db: Session = Depends(get_db)
) -> Optional[User]:
    """
    Returns User if a valid token was sent, None otherwise.
    Used by endpoints that also work anonymously.
    """
    if not credentials:
        return None

    try:
        payload = verify_access_token(credentials.credentials)
    except HTTPException:
        return None

    return UserService.get_or_create_from_claims(db, payload)


async def require_admin(
        current_user: User = Depends(get_current_user)
) -> User:
    """Platform admin: users.is_admin or an address listed in ADMIN_EMAILS"""
    if not UserService.is_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )

    return current_user


# ============================================================================
# Rate limiting
# ============================================================================

async def loomia_rate_limit(request: Request) -> None:
    """
    Fixed one-minute window per client IP.
    A Redis outage lets the request through.
    """
    limit = settings.LOOMIA_RATE_LIMIT_PER_MINUTE
    if not limit:
        return

    client = request.client.host if request.client else "unknown"
    minute = datetime.now(timezone.utc).strftime("%Y%m%d%H%M")
    key = RedisKeys.RATE_LIMIT_LOOMIA.format(client=client, minute=minute)

    try:
        redis_client = await get_redis()
        count = await redis_client.incr(key)
        if count == 1:
            await redis_client.expire(key, 60)
    except Exception as e:
        logger.warning(f"Loomia rate limit unavailable, allowing request: {e}")
        return

    if count > limit:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests, please slow down",
            headers={"Retry-After": "60"},
        )
