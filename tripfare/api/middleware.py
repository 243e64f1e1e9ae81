"""Rate limiting shared by every router (slowapi, keyed by client address)."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from tripfare.config import settings

limiter = Limiter(key_func=get_remote_address)

# Applied per route: ``@limiter.limit(RATE_LIMIT)``
RATE_LIMIT = settings.rate_limit
