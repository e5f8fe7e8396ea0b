"""Rate limiter — keyed by client IP, shared by every router."""

from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from afrisoutien.core.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
