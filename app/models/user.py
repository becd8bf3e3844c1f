# ============================================================================
# FILE: app/models/user.py
# Platform users, mirrored from Supabase auth on first authenticated request
# ============================================================================
from sqlalchemy import Column, String, Boolean, DateTime, Text, Uuid
from sqlalchemy.sql import func
import uuid
import enum
from app.models.base import Base


class UserRole(str, enum.Enum):
    """Marketplace roles."""
    GUEST = "guest"    # Books and pays for sessions
    HOST = "host"      # Verified expert offering sessions
    ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    # Same id as the Supabase auth user
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=True, index=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    profile_image_url = Column(String, nullable=True)
    title = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)

    role = Column(String(20), default=UserRole.GUEST.value, nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)

    # Stripe integration
    stripe_customer_id = Column(String, nullable=True)
    stripe_account_id = Column(String, nullable=True)  # Stripe Connect (hosts)
    stripe_onboarding_completed = Column(Boolean, default=False, nullable=False)

    # Status flags
    is_active = Column(Boolean, default=True, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    @property
    def display_name(self) -> str:
        full = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return full or (self.email or "")

    def to_public_dict(self):
        """Public profile fields only"""
        return {
            "id": str(self.id),
            "firstName": self.first_name,
            "lastName": self.last_name,
            "profileImageUrl": self.profile_image_url,
            "title": self.title,
            "description": self.description,
            "isVerified": self.is_verified,
        }

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
