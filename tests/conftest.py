"""Shared fixtures for booking tests."""

import pytest

from app.core.catalog import Catalog
from app.services.booking_service import BookingEngine
from app.services.calendar_service import InMemoryCalendarService
from app.services.lock_manager import ResourceLockManager

SOPRACCIGLIA = "Trucco semipermanente - Sopracciglia"  # professional_1, 120 min


@pytest.fixture
def catalog() -> Catalog:
    return Catalog.default()


@pytest.fixture
def calendar() -> InMemoryCalendarService:
    return InMemoryCalendarService()


@pytest.fixture
def locks() -> ResourceLockManager:
    return ResourceLockManager()


@pytest.fixture
def engine(catalog, calendar, locks) -> BookingEngine:
    return BookingEngine(catalog=catalog, calendar=calendar, locks=locks, buffer_minutes=10)


@pytest.fixture
def payload() -> dict:
    return {
        "client_name": "Test Client",
        "client_phone": "1234567890",
        "client_email": "test@example.com",
        "procedure": SOPRACCIGLIA,
        "date": "2025-01-01",
        "start_time": "10:00",
        "timezone": "Europe/Rome",
    }
