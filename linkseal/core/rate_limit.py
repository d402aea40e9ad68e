"""
Rate Limiting Configuration

This module provides rate limiting functionality for API endpoints.
Signing endpoints are limited more tightly than checks, since a client that
can mint signed links at will is the more attractive target.

Design Decisions:
- Uses slowapi for rate limiting (lightweight, FastAPI-compatible)
- Different limits for different endpoints
- IP-based limiting (can be extended to user-based)
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Initialize rate limiter
# Uses IP address for rate limiting
limiter = Limiter(key_func=get_remote_address)

# Rate limit configurations per endpoint
# Format: "count/period" (e.g., "30/minute" means 30 requests per minute)
RATE_LIMITS = {
    "protect": "30/minute",  # Signing: 30 per minute per IP
    "expire": "30/minute",  # Signing with a timestamp: 30 per minute per IP
    "verify": "120/minute",  # Checks: 120 per minute per IP
    "check": "120/minute",
}
