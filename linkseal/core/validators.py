"""
Input Validators

Argument checks shared by the signer and the expirer, plus format checks
for the two parameters they write to the wire.

Security Considerations:
- Relative URLs are rejected rather than resolved against an implicit base
- Hash values are restricted to [A-Za-z0-9] so they never need encoding
"""

import math
import re
from datetime import timedelta
from typing import Union
from urllib.parse import urlsplit

from linkseal.core.exceptions import InvalidArgumentError, InvalidStateError

HASH_VALUE_PATTERN = re.compile(r'^[A-Za-z0-9]+$')
TIMESTAMP_VALUE_PATTERN = re.compile(r'^[0-9]{14}$')


def is_absolute_url(url: str) -> bool:
    """
    Return True if url has both a scheme and an authority.

    Protocol-relative URLs (//host/path) and bare paths are relative: they
    cannot be interpreted without a base URL.
    """
    if not url or not isinstance(url, str):
        return False

    try:
        result = urlsplit(url.strip())
    except ValueError:
        return False

    return bool(result.scheme) and bool(result.netloc)


def require_absolute_url(url: str, argument: str = "url") -> str:
    """
    Check that a URL was supplied and is absolute.

    Args:
        url: The URL to check
        argument: Name reported in the error

    Returns:
        The URL, unchanged

    Raises:
        InvalidArgumentError: If no URL was supplied
        InvalidStateError: If the URL is relative
    """
    if url is None or not isinstance(url, str) or not url.strip():
        raise InvalidArgumentError(argument, "A URL is required")

    if not is_absolute_url(url):
        raise InvalidStateError(f"{argument} must be an absolute URL: {url}")

    return url


def require_parameter_name(name: str, argument: str) -> str:
    """Check that a query string parameter name is usable."""
    if not name or not isinstance(name, str):
        raise InvalidArgumentError(argument, "A parameter name is required")
    if any(char in name for char in "&=#?"):
        raise InvalidArgumentError(argument, f"Invalid parameter name '{name}'")
    return name


def require_window_seconds(valid_for: Union[int, float, timedelta]) -> float:
    """
    Normalise a validity window to a number of seconds.

    Accepts an int, a float or a timedelta. Booleans, negative or
    non-finite values and anything else are rejected.
    """
    if isinstance(valid_for, timedelta):
        seconds = valid_for.total_seconds()
    elif isinstance(valid_for, (int, float)) and not isinstance(valid_for, bool):
        try:
            seconds = float(valid_for)
        except OverflowError:
            raise InvalidArgumentError("valid_for_seconds", "The validity window is too large")
    else:
        raise InvalidArgumentError("valid_for_seconds", "A number of seconds is required")

    # NaN compares False with everything, which would never expire
    if not math.isfinite(seconds):
        raise InvalidArgumentError("valid_for_seconds", "The validity window must be finite")

    if seconds < 0:
        raise InvalidArgumentError("valid_for_seconds", "The validity window cannot be negative")

    return seconds


def is_valid_hash_value(value: str) -> bool:
    """Return True if value only uses characters that never need URL encoding."""
    return bool(value) and HASH_VALUE_PATTERN.match(value) is not None


def is_valid_timestamp_value(value: str) -> bool:
    """Return True if value is a 14 digit yyyyMMddHHmmss string."""
    return bool(value) and TIMESTAMP_VALUE_PATTERN.match(value) is not None
