"""
Configuration Value Objects

Explicit, immutable configuration handed to each service's constructor.
Services never look configuration up on their own; whoever builds a signer
or expirer decides where the values come from (environment, tests, a
secrets store).
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

__all__ = ["SignatureScheme", "SignerOptions", "ExpiryOptions"]

DEFAULT_HASH_PARAMETER = "h"
DEFAULT_TIME_PARAMETER = "t"


class SignatureScheme(str, Enum):
    """Digest construction used to sign the canonical query string."""
    # SHA-1 over salt + query + salt; compatible with links already issued
    legacy_sha1 = "legacy-sha1"
    hmac_sha256 = "hmac-sha256"


class SignerOptions(BaseModel):
    """Settings for a URL signer."""
    model_config = ConfigDict(frozen=True)

    # Empty salts are rejected by UrlSigner with InvalidStateError
    salt: str = Field(..., description="Secret mixed into every digest")
    hash_parameter: str = Field(
        default=DEFAULT_HASH_PARAMETER,
        description="Query parameter carrying the digest"
    )
    scheme: SignatureScheme = Field(
        default=SignatureScheme.legacy_sha1,
        description="Digest construction"
    )
    sort_parameters: bool = Field(
        default=False,
        description="Sort parameters by name before hashing"
    )


class ExpiryOptions(BaseModel):
    """Settings for a URL expirer."""
    model_config = ConfigDict(frozen=True)

    time_parameter: str = Field(
        default=DEFAULT_TIME_PARAMETER,
        description="Query parameter carrying the issuance timestamp"
    )
