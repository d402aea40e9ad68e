"""
FastAPI Endpoints for the Link Protection Service

This module defines all REST API endpoints with minimal logic.
Endpoints only handle:
- Request validation (Pydantic models)
- Rate limiting
- Error handling and HTTP responses
- Delegating to service layer

All signing and expiry logic is in services, which know nothing about HTTP.

Design Principles:
- Thin endpoints: Only validation and rate limiting
- Bad input (missing or relative URL) is a 400
- A URL that fails its check is a normal 200 answer with valid=false or
  expired=true, never an error status
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, status

from linkseal.api.dependencies import get_url_expirer, get_url_signer
from linkseal.api.schemas import (
    CheckRequest,
    CheckResponse,
    ExpireRequest,
    ExpireResponse,
    ProtectResponse,
    UrlRequest,
    VerifyResponse,
)
from linkseal.core.exceptions import InvalidArgumentError, InvalidStateError
from linkseal.core.rate_limit import RATE_LIMITS, limiter
from linkseal.core.setting import Settings, get_settings
from linkseal.services.url_expirer import UrlExpirer
from linkseal.services.url_signer import UrlSigner

router = APIRouter()


def bad_request(error: Exception) -> HTTPException:
    """Translate an argument error from the services into a 400."""
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=str(error)
    )


@router.post(
    "/protect",
    response_model=ProtectResponse,
    summary="Sign a URL",
    description="Adds a hash parameter that lets the service detect changes to the query string"
)
@limiter.limit(RATE_LIMITS["protect"])
async def protect_url(
    request: Request,  # Required for rate limiting (slowapi expects parameter named 'request')
    body: UrlRequest,
    signer: UrlSigner = Depends(get_url_signer)
) -> ProtectResponse:
    """
    Sign the query string of an absolute URL.

    Raises:
        HTTPException 400: If the URL is missing or relative
        HTTPException 503: If no salt is configured
    """
    try:
        protected_url = signer.protect(body.url)
    except (InvalidArgumentError, InvalidStateError) as e:
        raise bad_request(e)

    return ProtectResponse(url=body.url, protected_url=protected_url)


@router.post(
    "/verify",
    response_model=VerifyResponse,
    summary="Check a signed URL",
    description="Reports whether a URL's query string still matches its hash"
)
@limiter.limit(RATE_LIMITS["verify"])
async def verify_url(
    request: Request,
    body: UrlRequest,
    signer: UrlSigner = Depends(get_url_signer)
) -> VerifyResponse:
    """
    Verify a URL signed by /protect.

    Raises:
        HTTPException 400: If the URL is missing or relative
    """
    try:
        valid = signer.verify(body.url)
    except (InvalidArgumentError, InvalidStateError) as e:
        raise bad_request(e)

    return VerifyResponse(url=body.url, valid=valid)


@router.post(
    "/expire",
    response_model=ExpireResponse,
    summary="Create an expiring URL",
    description="Adds the issue time to a URL and signs it, so it can be expired later"
)
@limiter.limit(RATE_LIMITS["expire"])
async def expire_url(
    request: Request,
    body: ExpireRequest,
    expirer: UrlExpirer = Depends(get_url_expirer)
) -> ExpireResponse:
    """
    Add a timestamp to a URL and sign it.

    Raises:
        HTTPException 400: If the URL is missing or relative
    """
    issued_at = body.issued_at or datetime.now(timezone.utc)

    try:
        expiring_url = expirer.expire(body.url, issued_at)
    except (InvalidArgumentError, InvalidStateError) as e:
        raise bad_request(e)

    return ExpireResponse(
        url=body.url,
        expiring_url=expiring_url,
        issued_at=expirer.issued_at(expiring_url)
    )


@router.post(
    "/check",
    response_model=CheckResponse,
    summary="Check whether a URL has expired",
    description="Fails closed: a URL that was changed counts as expired"
)
@limiter.limit(RATE_LIMITS["check"])
async def check_url(
    request: Request,
    body: CheckRequest,
    expirer: UrlExpirer = Depends(get_url_expirer),
    settings: Settings = Depends(get_settings)
) -> CheckResponse:
    """
    Check an expiring URL against a validity window.

    Raises:
        HTTPException 400: If the URL is missing or relative
    """
    valid_for_seconds = body.valid_for_seconds
    if valid_for_seconds is None:
        valid_for_seconds = settings.DEFAULT_VALID_FOR_SECONDS

    try:
        expired = expirer.has_expired(body.url, valid_for_seconds)
    except (InvalidArgumentError, InvalidStateError) as e:
        raise bad_request(e)

    return CheckResponse(url=body.url, expired=expired, valid_for_seconds=valid_for_seconds)
