"""Unit tests for the structlog setup and request context binding."""

import pytest
import structlog

from tripmate.config import settings
from tripmate.logging_config import (
    add_service_context,
    bind_request_context,
    trip_id_from_path,
)


@pytest.fixture(autouse=True)
def clean_context():
    yield
    structlog.contextvars.clear_contextvars()


class TestTripIdFromPath:

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("/trips/abc123", "abc123"),
            ("/trips/abc123/items/stream", "abc123"),
            ("/trips/default", None),
            ("/trips", None),
            ("/upload", None),
        ],
    )
    def test_paths(self, path, expected):
        assert trip_id_from_path(path) == expected


class TestBindRequestContext:

    def test_binds_trip_scoped_request(self):
        request_id = bind_request_context("POST", "/trips/t1/items", "req-42")

        assert request_id == "req-42"
        assert structlog.contextvars.get_contextvars() == {
            "request_id": "req-42",
            "method": "POST",
            "path": "/trips/t1/items",
            "trip_id": "t1",
        }

    def test_generates_request_id(self):
        request_id = bind_request_context("GET", "/health")

        context = structlog.contextvars.get_contextvars()
        assert len(request_id) == 32
        assert context["request_id"] == request_id
        assert "trip_id" not in context

    def test_previous_request_context_is_dropped(self):
        bind_request_context("GET", "/trips/t1")

        bind_request_context("GET", "/health")

        assert "trip_id" not in structlog.contextvars.get_contextvars()


class TestAddServiceContext:

    def test_stamps_service_and_environment(self):
        event = add_service_context(None, "info", {"event": "item_created"})

        assert event["service"] == "tripmate"
        assert event["environment"] == settings.environment

    def test_keeps_explicit_values(self):
        event = add_service_context(None, "info", {"event": "x", "service": "backfill"})

        assert event["service"] == "backfill"
