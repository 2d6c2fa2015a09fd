"""Core application components."""

from .config import Settings, settings
from .database import AsyncSessionLocal, drop_db, engine, init_db
from .rate_limit import RateLimiter

__all__ = [
    "settings",
    "Settings",
    "engine",
    "AsyncSessionLocal",
    "init_db",
    "drop_db",
    "RateLimiter",
]
