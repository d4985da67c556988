import os
import tempfile
from typing import Optional

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_DIR"] = os.path.join(tempfile.gettempdir(), "reporting-test-logs")
os.environ.setdefault("SUPABASE_URL", "https://auth.test")
os.environ.setdefault("SUPABASE_ANON_KEY", "anon-key")

import pytest
from fastapi import Header, HTTPException
from fastapi.testclient import TestClient

import models
from database import SessionLocal, engine
from dependencies import get_auth_identity
from identity import AuthIdentity, Caller
from main import app


@pytest.fixture(autouse=True)
def fresh_schema():
    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_profile(db):
    def _make(identity_id, role="staff", email=None):
        profile = models.Profile(
            id=identity_id,
            email=email or f"{identity_id}@example.com",
            role=role,
        )
        db.add(profile)
        db.commit()
        return Caller(id=profile.id, email=profile.email, role=profile.role)

    return _make


@pytest.fixture
def staff_a(make_profile):
    return make_profile("staff-a")


@pytest.fixture
def staff_b(make_profile):
    return make_profile("staff-b")


@pytest.fixture
def admin(make_profile):
    return make_profile("admin-1", role="admin")


def fake_identity(authorization: Optional[str] = Header(None)) -> AuthIdentity:
    # tests pass the identity id itself as the bearer token
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing token")
    identity_id = authorization.split(" ", 1)[1]
    return AuthIdentity(id=identity_id, email=f"{identity_id}@example.com")


@pytest.fixture
def client():
    app.dependency_overrides[get_auth_identity] = fake_identity
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def auth(identity_id):
    return {"Authorization": f"Bearer {identity_id}"}


SOCIAL = {
    "month": "2024-05",
    "follower_count": 1000,
    "post_count": 12,
    "highest_engagement_link": "https://example.com/best",
    "lowest_engagement_link": "https://example.com/worst",
}

MEDIA = {
    "month": "2024-05",
    "status": "positive",
    "subject": "New library opening",
    "access_link": "https://news.example.com/a",
    "sources": ["Daily", "", "Weekly"],
}

ANALYTICS = {
    "month": "2024-05",
    "visitor_count": 5000,
    "page_views": 12000,
    "bounce_rate": 42.5,
    "avg_session_duration": 3.2,
    "conversions": 40,
    "top_pages": ["/home", " ", "/about"],
}

RPA = {
    "month": "2024-05",
    "incoming_mail_count": 300,
    "distributed_mail_count": 280,
    "top_units": ["Finance", "HR", ""],
}
