"""
API Request and Response Schemas

This module defines all Pydantic models for API requests and responses.
Separated from endpoints to keep concerns separated and enable reuse.

URLs are plain strings rather than HttpUrl: pydantic normalises HttpUrl
values, and any change to the query string would break the signature.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class UrlRequest(BaseModel):
    """Request model for endpoints that take a single URL."""
    url: str = Field(..., min_length=1, max_length=2048, description="Absolute URL")


class ProtectResponse(BaseModel):
    """Response model for the protect endpoint."""
    url: str = Field(..., description="The URL that was submitted")
    protected_url: str = Field(..., description="The URL with its hash parameter")


class VerifyResponse(BaseModel):
    """Response model for the verify endpoint."""
    url: str
    valid: bool


class ExpireRequest(UrlRequest):
    """Request model for the expire endpoint."""
    issued_at: Optional[datetime] = Field(
        default=None,
        description="Start of the validity window (defaults to now, UTC)"
    )


class ExpireResponse(BaseModel):
    """Response model for the expire endpoint."""
    url: str
    expiring_url: str
    issued_at: datetime


class CheckRequest(UrlRequest):
    """Request model for the expiry check endpoint."""
    valid_for_seconds: Optional[int] = Field(
        default=None,
        ge=0,
        description="Validity window in seconds (defaults to the configured window)"
    )


class CheckResponse(BaseModel):
    """Response model for the expiry check endpoint."""
    url: str
    expired: bool
    valid_for_seconds: int
