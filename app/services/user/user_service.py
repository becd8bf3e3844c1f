# ============================================================================
# FILE: app/services/user/user_service.py
# User lookup and first-login provisioning from Supabase identities
# ============================================================================
from sqlalchemy.orm import Session
from typing import Optional, Dict, Any
from uuid import UUID
from datetime import datetime, timezone
import logging

from app.config.settings import settings
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for user operations."""

    @staticmethod
    def get_user_by_id(db: Session, user_id: UUID) -> Optional[User]:
        """Get a user by their ID."""
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        """Get a user by their email."""
        return db.query(User).filter(User.email == email.lower().strip()).first()

    @staticmethod
    def get_or_create_from_claims(db: Session, claims: Dict[str, Any]) -> User:
        """
        Resolve the local user for a verified Supabase token.
        Looked up by sub first, then by email; created on first sight.
        """
        user_id = UUID(claims["sub"])
        email = (claims.get("email") or "").lower().strip() or None

        user = UserService.get_user_by_id(db, user_id)
        if user is None and email:
            user = UserService.get_user_by_email(db, email)

        if user is None:
            metadata = claims.get("user_metadata") or {}
            user = User(
                id=user_id,
                email=email,
                first_name=metadata.get("first_name") or metadata.get("firstName"),
                last_name=metadata.get("last_name") or metadata.get("lastName"),
                role=UserRole.GUEST.value,
                is_active=True,
            )
            db.add(user)
            logger.info(f"Provisioned user {user_id} from Supabase token")

        user.last_login_at = datetime.now(timezone.utc)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def is_admin(user: User) -> bool:
        admin_emails = {e.lower() for e in settings.ADMIN_EMAILS}
        return bool(user.is_admin) or (user.email or "").lower() in admin_emails

    @staticmethod
    def mark_as_host(db: Session, user: User) -> User:
        """Users become hosts once they publish availability or pricing"""
        if user.role == UserRole.GUEST.value:
            user.role = UserRole.HOST.value
            db.commit()
            db.refresh(user)
        return user
