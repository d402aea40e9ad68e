"""
URL Expiry Service

Adds the time a URL was issued to its query string, and later decides
whether the URL is older than a given validity window.

The expirer does no signing of its own. It relies on a UrlProtector (usually
a UrlSigner) to cover the timestamp, otherwise anyone could move the issue
time forward and keep a link alive.

Lifecycle of a URL:
    unprotected -> issued at T0 -> valid while now - T0 <= window -> expired

A URL that fails verification is treated as expired, whatever its
timestamp says. There is no way back from expired; a new URL must be issued.

Clock skew between the issuing and the checking process is not corrected:
both are assumed to share a trusted, synchronized clock.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from linkseal.core.exceptions import InvalidArgumentError
from linkseal.core.options import DEFAULT_TIME_PARAMETER, ExpiryOptions
from linkseal.core.validators import (
    is_valid_timestamp_value,
    require_absolute_url,
    require_parameter_name,
    require_window_seconds,
)
from linkseal.services.query_string import (
    add_query_parameter,
    parse_query_string,
    remove_query_parameter,
    split_url,
)
from linkseal.services.url_signer import UrlProtector

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


def _as_utc(moment: datetime) -> datetime:
    # Naive datetimes are taken to be UTC already
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """
    Format a moment as a 14 digit UTC timestamp.

    Example:
        format_timestamp(datetime(2016, 1, 1, tzinfo=timezone.utc)) -> "20160101000000"
    """
    moment = _as_utc(moment)
    # %Y is not zero-padded below year 1000 on every platform
    return f"{moment.year:04d}{moment:%m%d%H%M%S}"


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a 14 digit UTC timestamp, returning None if it is malformed."""
    if not value or not is_valid_timestamp_value(value):
        return None
    try:
        return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


class UrlExpirer:
    """Expires URLs a set time after they were issued."""

    def __init__(self, protector: UrlProtector, time_parameter: str = DEFAULT_TIME_PARAMETER):
        """
        Initialize the expirer.

        Args:
            protector: Signs and verifies URLs so the timestamp cannot be changed
            time_parameter: Name of the query parameter that stores the issue time

        Raises:
            InvalidArgumentError: If no protector is given or the parameter name is unusable
        """
        if protector is None:
            raise InvalidArgumentError("protector", "A URL protector is required")

        self._protector = protector
        self._time_parameter = require_parameter_name(time_parameter, "time_parameter")

    @classmethod
    def from_options(cls, protector: UrlProtector, options: ExpiryOptions) -> "UrlExpirer":
        """Create an expirer from an ExpiryOptions value object."""
        return cls(protector, time_parameter=options.time_parameter)

    @property
    def time_parameter(self) -> str:
        return self._time_parameter

    def expire(self, url: str, issued_at: Optional[datetime] = None) -> str:
        """
        Add an issue time to a URL and protect it.

        The validity window is not stored in the URL; it is chosen by whoever
        calls has_expired().

        Args:
            url: Absolute URL to make expirable
            issued_at: When the clock starts, defaults to now (UTC)

        Returns:
            The signed URL, with the timestamp ahead of the hash parameter

        Raises:
            InvalidArgumentError: If no URL is given, or its query cannot be signed
            InvalidStateError: If the URL is relative
        """
        require_absolute_url(url, "url")

        if issued_at is None:
            issued_at = datetime.now(timezone.utc)

        # An older timestamp would otherwise be joined with the new one
        expiring_url = add_query_parameter(
            remove_query_parameter(url, self._time_parameter),
            self._time_parameter,
            format_timestamp(issued_at),
        )

        return self._protector.protect(expiring_url)

    def has_expired(
        self,
        url: str,
        valid_for_seconds: Union[int, float, timedelta],
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Decide whether a URL created by expire() has expired.

        Args:
            url: Absolute URL to check
            valid_for_seconds: How long the URL stays valid after it was issued
            now: Current time, defaults to now (UTC)

        Returns:
            True if the URL was tampered with, has no usable timestamp, or is
            older than the window; False otherwise. A URL checked exactly at
            the end of its window is still valid.

        Raises:
            InvalidArgumentError: If no URL is given or the window is negative or not finite
            InvalidStateError: If the URL is relative
        """
        require_absolute_url(url, "url")
        window = require_window_seconds(valid_for_seconds)

        if not self._protector.verify(url):
            logger.debug("URL treated as expired: verification failed")
            return True

        issued_at = self.issued_at(url)
        if issued_at is None:
            logger.debug(f"URL treated as expired: missing or malformed '{self._time_parameter}'")
            return True

        current_time = _as_utc(now) if now is not None else datetime.now(timezone.utc)
        elapsed = (current_time - issued_at).total_seconds()

        if elapsed > window:
            logger.debug(f"URL expired: issued {elapsed:.0f}s ago, valid for {window:.0f}s")
            return True

        return False

    def issued_at(self, url: str) -> Optional[datetime]:
        """
        Read the issue time from a URL without verifying it.

        Returns:
            The UTC issue time, or None if the parameter is missing or malformed
        """
        require_absolute_url(url, "url")
        value = parse_query_string(split_url(url).query).get(self._time_parameter)
        return parse_timestamp(value)
