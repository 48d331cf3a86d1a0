# middleware/rate_limit.py
"""
Rate limiting using slowapi.

Only the expensive item-import endpoints are decorated:

    from middleware.rate_limit import limiter

    @router.post("/items/import")
    @limiter.limit(IMPORT_RATE_LIMIT)
    def import_items(request: Request, ...):
        ...
"""
import logging
import os

from slowapi import Limiter
from slowapi.util import get_remote_address

logger = logging.getLogger(__name__)

# ─── Limits ────────────────────────────────────────────────────────
# Env-overridable so they can be tuned per environment without a redeploy.
DEFAULT_RATE_LIMIT = os.getenv("RATE_LIMIT_DEFAULT", "60/minute")
IMPORT_RATE_LIMIT = os.getenv("RATE_LIMIT_IMPORT", "10/minute")
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "1").lower() in ("1", "true", "yes")

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[DEFAULT_RATE_LIMIT],
    storage_uri=os.getenv("REDIS_URL", "memory://"),
    strategy="fixed-window",
    enabled=RATE_LIMIT_ENABLED,
)

logger.info("rate_limit_configured enabled=%s import_limit=%s", RATE_LIMIT_ENABLED, IMPORT_RATE_LIMIT)
