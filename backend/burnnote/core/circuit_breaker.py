# burnnote/core/circuit_breaker.py

from slowapi import Limiter
from slowapi.util import get_remote_address

from burnnote.config import Settings

# Rate limit constants
# Decrypt attempts are online key guesses, so they get the tightest budget
DECRYPT_LIMIT = "10/minute"
CREATE_LIMIT = "30/minute"


def build_limiter(settings: Settings) -> Limiter:
    """One limiter per app, with its own counters and on/off switch."""
    return Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)
