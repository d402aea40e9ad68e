"""
Tests for the URL expirer.

Expiry policy is tested against a fake protector that accepts everything,
then end to end with a real UrlSigner.
"""

from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlsplit

import pytest

from linkseal.core.exceptions import InvalidArgumentError, InvalidStateError
from linkseal.core.options import ExpiryOptions
from linkseal.services.query_string import parse_query_string
from linkseal.services.url_expirer import UrlExpirer, format_timestamp, parse_timestamp
from linkseal.services.url_signer import UrlSigner

URL = "https://example.org/protect-me?id=1"
ISSUED = datetime(2016, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
ONE_DAY = 86400


class FakeProtector:
    """Signs nothing and trusts everything."""

    def __init__(self, valid: bool = True):
        self.valid = valid
        self.protected = []

    def protect(self, url: str) -> str:
        self.protected.append(url)
        return url

    def verify(self, url: str) -> bool:
        return self.valid


@pytest.fixture
def expirer():
    return UrlExpirer(FakeProtector())


@pytest.fixture
def signed_expirer():
    return UrlExpirer(UrlSigner("abc123"))


class TestTimestampFormat:
    """Test the fixed-width UTC timestamp."""

    def test_format(self):
        assert format_timestamp(ISSUED) == "20160101000000"
        assert format_timestamp(datetime(2023, 12, 31, 23, 59, 58, 999999, tzinfo=timezone.utc)) == "20231231235958"

    def test_naive_datetime_is_utc(self):
        assert format_timestamp(datetime(2016, 1, 1)) == "20160101000000"

    def test_aware_datetime_is_converted(self):
        plus_two = timezone(timedelta(hours=2))
        assert format_timestamp(datetime(2016, 1, 1, 2, 0, 0, tzinfo=plus_two)) == "20160101000000"

    def test_years_before_1000_are_zero_padded(self):
        moment = datetime(999, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert format_timestamp(moment) == "09990102030405"
        assert parse_timestamp(format_timestamp(moment)) == moment

    def test_parse(self):
        assert parse_timestamp("20160101000000") == ISSUED

    @pytest.mark.parametrize("value", [None, "", "2016010100000", "201601010000000", "2016-01-01T000", "20161301000000"])
    def test_parse_malformed(self, value):
        assert parse_timestamp(value) is None


class TestExpire:
    """Test adding an issue time to URLs."""

    def test_adds_timestamp_then_protects(self):
        protector = FakeProtector()
        url = UrlExpirer(protector).expire(URL, ISSUED)
        assert url == "https://example.org/protect-me?id=1&t=20160101000000"
        assert protector.protected == [url]

    def test_defaults_to_now(self, expirer):
        before = datetime.now(timezone.utc).replace(microsecond=0)
        issued = expirer.issued_at(expirer.expire(URL))
        after = datetime.now(timezone.utc)
        assert before <= issued <= after

    def test_existing_timestamp_is_replaced(self, expirer):
        url = expirer.expire(URL + "&t=20000101000000", ISSUED)
        assert url == "https://example.org/protect-me?id=1&t=20160101000000"

    def test_custom_time_parameter(self):
        expirer = UrlExpirer.from_options(FakeProtector(), ExpiryOptions(time_parameter="issued"))
        assert expirer.expire(URL, ISSUED).endswith("&issued=20160101000000")

    def test_timestamp_is_signed(self, signed_expirer):
        """Timestamp sits before the hash, which covers it."""
        url = signed_expirer.expire(URL, ISSUED)
        assert list(parse_query_string(url.split("?", 1)[1])) == ["id", "t", "h"]
        forged = url.replace("t=20160101000000", "t=20160102000000")
        assert UrlSigner("abc123").verify(url)
        assert not UrlSigner("abc123").verify(forged)

    def test_missing_url_is_rejected(self, expirer):
        with pytest.raises(InvalidArgumentError):
            expirer.expire(None)

    def test_relative_url_is_rejected(self, expirer):
        with pytest.raises(InvalidStateError):
            expirer.expire("/protect-me?id=1")


class TestHasExpired:
    """Test the validity window."""

    def test_valid_url_is_allowed(self, expirer):
        url = expirer.expire(URL, ISSUED)
        assert expirer.has_expired(url, ONE_DAY, datetime(2016, 1, 2, 0, 0, 0)) is False

    def test_expired_url_is_disallowed(self, expirer):
        url = expirer.expire(URL, ISSUED)
        assert expirer.has_expired(url, ONE_DAY, datetime(2016, 1, 2, 0, 0, 1)) is True

    def test_boundary_is_inclusive(self, expirer):
        url = expirer.expire(URL, ISSUED)
        window = 300
        assert expirer.has_expired(url, window, ISSUED + timedelta(seconds=window)) is False
        assert expirer.has_expired(url, window, ISSUED + timedelta(seconds=window + 1)) is True

    def test_timedelta_window(self, expirer):
        url = expirer.expire(URL, ISSUED)
        assert expirer.has_expired(url, timedelta(days=1), ISSUED + timedelta(days=1)) is False
        assert expirer.has_expired(url, timedelta(hours=1), ISSUED + timedelta(days=1)) is True

    def test_zero_window(self, expirer):
        url = expirer.expire(URL, ISSUED)
        assert expirer.has_expired(url, 0, ISSUED) is False
        assert expirer.has_expired(url, 0, ISSUED + timedelta(seconds=1)) is True

    def test_future_timestamp_is_not_expired(self, expirer):
        url = expirer.expire(URL, ISSUED)
        assert expirer.has_expired(url, ONE_DAY, ISSUED - timedelta(hours=1)) is False

    def test_failed_verification_means_expired(self):
        """Fail closed, whatever the timestamp says."""
        expirer = UrlExpirer(FakeProtector(valid=False))
        url = expirer.expire(URL, ISSUED)
        assert expirer.has_expired(url, ONE_DAY, ISSUED) is True

    def test_missing_timestamp_means_expired(self, expirer):
        assert expirer.has_expired(URL, ONE_DAY, ISSUED) is True

    def test_malformed_timestamp_means_expired(self, expirer):
        assert expirer.has_expired(URL + "&t=yesterday", ONE_DAY, ISSUED) is True
        assert expirer.has_expired(URL + "&t=20160101000000&t=20160101000000", ONE_DAY, ISSUED) is True

    @pytest.mark.parametrize("window", [-1, "86400", None, True, float("nan"), float("inf"), 10 ** 400])
    def test_invalid_window_is_rejected(self, expirer, window):
        url = expirer.expire(URL, ISSUED)
        with pytest.raises(InvalidArgumentError):
            expirer.has_expired(url, window, ISSUED)

    def test_nan_window_fails_closed(self, expirer):
        """A window that compares False with everything is refused, never treated as endless."""
        url = expirer.expire(URL, ISSUED)
        with pytest.raises(InvalidArgumentError):
            expirer.has_expired(url, float("nan"), ISSUED + timedelta(days=3650))

    def test_relative_url_is_rejected(self, expirer):
        with pytest.raises(InvalidStateError):
            expirer.has_expired("/protect-me?id=1&t=20160101000000", ONE_DAY)

    def test_missing_url_is_rejected(self, expirer):
        with pytest.raises(InvalidArgumentError):
            expirer.has_expired("", ONE_DAY)


class TestWithSigner:
    """End to end with a real signer."""

    def test_scenario_within_window(self, signed_expirer):
        url = signed_expirer.expire(URL, ISSUED)
        now = datetime(2016, 1, 2, 0, 0, 0, tzinfo=timezone.utc)
        assert signed_expirer.has_expired(url, ONE_DAY, now) is False

    def test_scenario_after_window(self, signed_expirer):
        url = signed_expirer.expire(URL, ISSUED)
        now = datetime(2016, 1, 2, 0, 0, 1, tzinfo=timezone.utc)
        assert signed_expirer.has_expired(url, ONE_DAY, now) is True

    def test_tampered_url_is_expired_inside_window(self, signed_expirer):
        url = signed_expirer.expire(URL, ISSUED) + "&tampered-value"
        for seconds in (0, 60, ONE_DAY):
            assert signed_expirer.has_expired(url, ONE_DAY, ISSUED + timedelta(seconds=seconds)) is True

    def test_forged_timestamp_is_expired(self, signed_expirer):
        url = signed_expirer.expire(URL, ISSUED)
        forged = url.replace("t=20160101000000", "t=20991231000000")
        assert signed_expirer.has_expired(forged, ONE_DAY, datetime(2099, 12, 31)) is True

    def test_removed_timestamp_is_expired(self, signed_expirer):
        url = signed_expirer.expire(URL, ISSUED)
        assert signed_expirer.has_expired(url.replace("&t=20160101000000", ""), ONE_DAY, ISSUED) is True

    def test_expire_keeps_repeated_parameters(self, signed_expirer):
        url = signed_expirer.expire("https://example.org/search?tag=a&tag=b", ISSUED)
        assert parse_qs(urlsplit(url).query)["tag"] == ["a", "b"]
        assert signed_expirer.has_expired(url, ONE_DAY, ISSUED) is False

    def test_custom_parameter_names(self):
        expirer = UrlExpirer(UrlSigner("abc123", hash_parameter="sig"), time_parameter="issued")
        url = expirer.expire(URL, ISSUED)
        assert "&issued=20160101000000&sig=" in url
        assert expirer.has_expired(url, ONE_DAY, ISSUED + timedelta(hours=1)) is False


class TestConstruction:
    """Test configuration errors fail when the expirer is built."""

    def test_protector_is_required(self):
        with pytest.raises(InvalidArgumentError):
            UrlExpirer(None)

    def test_time_parameter_is_required(self):
        with pytest.raises(InvalidArgumentError):
            UrlExpirer(FakeProtector(), time_parameter="")
