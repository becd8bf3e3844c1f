"""Shared test fixtures and helpers."""

import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["EMAIL_ENABLED"] = "false"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"
os.environ["AGORA_APP_ID"] = ""
os.environ["AGORA_APP_CERTIFICATE"] = ""
os.environ["OPENAI_API_KEY"] = "sk-test"

import time
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

import fakeredis
import fakeredis.aioredis
import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.config.database import engine, SessionLocal
from app.main import app
from app.models import Base, User, HostAvailability, HostPricing


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    return TestClient(app)


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    """Every get_redis() call gets a client on one shared in-memory server"""
    server = fakeredis.FakeServer()

    async def _get_redis():
        return fakeredis.aioredis.FakeRedis(server=server)

    monkeypatch.setattr("app.api.dependencies.get_redis", _get_redis)
    monkeypatch.setattr("app.core.monitoring.get_redis", _get_redis)
    return server


# ============================================================================
# Helpers
# ============================================================================

def make_token(user_id, email: Optional[str] = None, expires_in: int = 3600, secret: str = "test-jwt-secret") -> str:
    """Supabase-style access token"""
    claims = {
        "sub": str(user_id),
        "aud": "authenticated",
        "role": "authenticated",
        "exp": int(time.time()) + expires_in,
    }
    if email:
        claims["email"] = email
    return jwt.encode(claims, secret, algorithm="HS256")


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {make_token(user.id, user.email)}"}


def make_user(db, email: str, **fields) -> User:
    user = User(id=uuid.uuid4(), email=email, first_name=email.split("@")[0].title(), **fields)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def day_of_week(d) -> int:
    return (d.weekday() + 1) % 7


def future_date(days: int = 7):
    return datetime.now(timezone.utc).date() + timedelta(days=days)


def add_weekly_window(db, host: User, target, start: str = "09:00", end: str = "12:00") -> HostAvailability:
    record = HostAvailability(
        user_id=host.id,
        day_of_week=day_of_week(target),
        start_time=start,
        end_time=end,
        is_active=True,
    )
    db.add(record)
    db.commit()
    return record


def add_pricing(db, host: User, duration: int = 30, price: str = "100.00", **flags) -> HostPricing:
    option = HostPricing(
        user_id=host.id,
        duration=duration,
        price=Decimal(price),
        currency="EUR",
        is_active=True,
        is_custom=False,
        includes_screen_sharing=flags.get("screen_sharing", False),
        includes_translation=flags.get("translation", False),
        includes_recording=flags.get("recording", False),
        includes_transcription=flags.get("transcription", False),
    )
    db.add(option)
    db.commit()
    return option


@pytest.fixture
def host(db):
    return make_user(db, "host@example.com", role="host")


@pytest.fixture
def guest(db):
    return make_user(db, "guest@example.com")


@pytest.fixture
def bookable_host(db, host):
    """Host with a weekly 09:00-12:00 window on future_date() and a 30 min option"""
    target = future_date()
    add_weekly_window(db, host, target, "09:00", "12:00")
    add_pricing(db, host, 30, "100.00", screen_sharing=True, translation=True)
    return host
