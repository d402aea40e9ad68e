import pytest
from fastapi.testclient import TestClient

from linkseal.core.rate_limit import limiter
from linkseal.core.setting import Settings, get_settings
from linkseal.main import app

TEST_SALT = "abc123"


@pytest.fixture
def test_settings():
    return Settings(URL_SALT=TEST_SALT, DEFAULT_VALID_FOR_SECONDS=3600)


@pytest.fixture
def client(test_settings):
    """TestClient wired to fixed settings, with fresh rate limit counters."""
    app.dependency_overrides[get_settings] = lambda: test_settings
    limiter.reset()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
