"""Per-client throttling for the credential endpoints.

Only routes decorated with ``@limiter.limit(settings.AUTH_RATE_LIMIT)`` are
throttled (``/api/auth/register`` and ``/api/auth/login``). No app-wide
default is installed, so leave and employee routes are never limited here.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Keyed by client IP; 429 responses come from the handler registered in main.py.
limiter = Limiter(key_func=get_remote_address)
