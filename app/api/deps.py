from fastapi import Request

from app.core.catalog import Catalog
from app.services.booking_service import BookingEngine


def get_booking_engine(request: Request) -> BookingEngine:
    """The engine built at startup (see app.main.lifespan)."""
    return request.app.state.booking_engine


def get_catalog(request: Request) -> Catalog:
    return request.app.state.booking_engine.catalog
