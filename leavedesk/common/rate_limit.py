"""Rate limiting configuration using slowapi.

Module-level Limiter shared by routers (``@limiter.limit(...)``) and wired
into the FastAPI app in main.py. Limits are keyed by client IP.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from leavedesk.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED,
)

# Per-endpoint limits for the heavier operations
UPLOAD_LIMIT = "10/minute"
EXPORT_LIMIT = "20/minute"
