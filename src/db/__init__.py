"""Database module for Cloudship shop and location persistence."""

from src.db.connection import (
    SessionLocal,
    close_db,
    engine,
    get_db,
    init_db,
)
from src.db.models import (
    Base,
    LocationSetting,
    Shop,
)

__all__ = [
    # Models
    "Base",
    "Shop",
    "LocationSetting",
    # Connection
    "engine",
    "SessionLocal",
    "get_db",
    "init_db",
    "close_db",
]
