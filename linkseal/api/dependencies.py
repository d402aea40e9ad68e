"""
Service Dependencies

Builds the signer and expirer for each request from the current settings.
Both are cheap to construct and immutable, so nothing is cached between
requests and tests can swap settings with app.dependency_overrides.
"""

import logging

from fastapi import Depends

from linkseal.core.exceptions import InvalidStateError, ServiceUnavailableError
from linkseal.core.setting import Settings, get_settings
from linkseal.services.url_expirer import UrlExpirer
from linkseal.services.url_signer import UrlSigner

logger = logging.getLogger(__name__)


def get_url_signer(settings: Settings = Depends(get_settings)) -> UrlSigner:
    """
    Provide a URL signer configured from settings.

    Raises:
        ServiceUnavailableError: If no salt has been configured (served as 503)
    """
    try:
        return UrlSigner.from_options(settings.signer_options())
    except InvalidStateError as e:
        logger.error(f"URL signing is not configured: {e}")
        raise ServiceUnavailableError("url-signer") from e


def get_url_expirer(
    signer: UrlSigner = Depends(get_url_signer),
    settings: Settings = Depends(get_settings),
) -> UrlExpirer:
    """Provide a URL expirer backed by the configured signer."""
    return UrlExpirer.from_options(signer, settings.expiry_options())
