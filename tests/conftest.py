"""
Pytest configuration and fixtures for the Trip Mate test suite.

Provides:
- Database fixtures (fresh in-memory SQLite per test)
- Trip / item fixtures
- Mocked MinIO client
- FastAPI test client bound to the test session
"""

import os
from datetime import datetime, timedelta
from io import BytesIO
from typing import Generator
from unittest.mock import MagicMock, patch

import pytest
from PIL import Image
from sqlalchemy.orm import Session, sessionmaker

# Set test environment before importing tripmate modules
os.environ["ENVIRONMENT"] = "development"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("GOOGLE_API_KEY", "test-key")
os.environ.setdefault("LOG_FORMAT", "console")
os.environ.setdefault("MINIO_PUBLIC_URL", "http://assets.test/tripmate-assets")

from tripmate.database import Base, build_engine, get_db
from tripmate.models import Trip, TripItem
from tripmate.schemas.trip import TripCreate
from tripmate.services.download_proxy import asset_cache
from tripmate.storage import trip_store
from tripmate.storage.item_feed import item_feed


# ─────────────────────────────────────────────────────────────────────────────
# Database Fixtures
# ─────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def engine():
    """Fresh in-memory database with all tables."""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine) -> Generator[Session, None, None]:
    """Database session for one test."""
    TestSession = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = TestSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def reset_process_state():
    """Live feed subscriptions and the download cache are process-wide."""
    yield
    item_feed.clear()
    asset_cache.clear()


# ─────────────────────────────────────────────────────────────────────────────
# Trip & Item Fixtures
# ─────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def sample_trip(db: Session) -> Trip:
    """Two-member trip with a 10,000k budget."""
    return trip_store.create_trip(
        db,
        TripCreate(
            trip_name="Da Lat 2025",
            total_budget=10000,
            start_date=datetime(2025, 3, 1),
            currency="VND",
            member_count=2,
            created_by="user-1",
        ),
    )


@pytest.fixture
def make_item(db: Session):
    """Factory inserting TripItem rows directly, bypassing the store."""
    base_time = datetime(2025, 3, 1, 12, 0, 0)
    counter = {"n": 0}

    def _make(trip_id: str, **overrides) -> TripItem:
        counter["n"] += 1
        values = {
            "trip_id": trip_id,
            "name": f"item-{counter['n']}",
            "amount": 0,
            "category": "food",
            "type": "memory",
            "description": "",
            "images": [],
            "created_by": "user-1",
            "timestamp": base_time + timedelta(minutes=counter["n"]),
        }
        values.update(overrides)
        item = TripItem(**values)
        db.add(item)
        db.commit()
        db.refresh(item)
        return item

    return _make


# ─────────────────────────────────────────────────────────────────────────────
# Object Storage
# ─────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def minio_client():
    """MagicMock standing in for the MinIO client; every call succeeds."""
    client = MagicMock()
    client.bucket_exists.return_value = True
    client.list_objects.return_value = []
    with patch("tripmate.storage.object_storage.get_minio_client", return_value=client):
        yield client


# ─────────────────────────────────────────────────────────────────────────────
# AI Gateway
# ─────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def mock_llm(mocker):
    """Chat model returned by the provider factory; set invoke.return_value per test."""
    llm = mocker.MagicMock()
    mocker.patch("tripmate.tools.extraction.image_analyzer.get_llm_for_analysis", return_value=llm)
    return llm


# ─────────────────────────────────────────────────────────────────────────────
# Images
# ─────────────────────────────────────────────────────────────────────────────

def make_image_bytes(size=(64, 48), color=(200, 120, 40), fmt="JPEG") -> bytes:
    image = Image.new("RGB", size, color)
    buffer = BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture
def image_factory():
    """make_image_bytes(size, color, fmt) for tests needing specific images."""
    return make_image_bytes


# ─────────────────────────────────────────────────────────────────────────────
# API Client
# ─────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def client(db: Session, minio_client):
    """FastAPI test client whose requests use the test session."""
    from fastapi.testclient import TestClient

    from tripmate.api.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
