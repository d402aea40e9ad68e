"""
URL Signing Service

Protects the query string of an absolute URL against tampering by adding a
keyed hash of its canonical form as the last parameter.

Design Decisions:
- The digest covers every parameter except the hash itself, in the order
  they appear (or sorted by name when sort_parameters is set)
- The digest is base64 encoded, then stripped to [A-Za-z0-9] so the value
  never needs percent-encoding and survives e-mail clients and redirects
- A failed check is a normal outcome (stale or edited link), so verify()
  returns False instead of raising
- Argument mistakes (no URL, relative URL, empty salt) raise immediately

Why two schemes?
- legacy-sha1 hashes salt + query + salt with SHA-1, matching links that
  were issued before this service existed
- hmac-sha256 is a proper keyed MAC and should be used where no old links
  need to keep working
"""

import base64
import hashlib
import hmac
import logging
import re
from typing import Protocol, Union, runtime_checkable

from linkseal.core.exceptions import InvalidArgumentError, InvalidStateError
from linkseal.core.options import DEFAULT_HASH_PARAMETER, SignatureScheme, SignerOptions
from linkseal.core.validators import (
    is_valid_hash_value,
    require_absolute_url,
    require_parameter_name,
)
from linkseal.services.query_string import (
    drop_parameter_segments,
    find_stray_segments,
    parse_query_string,
    replace_query,
    serialize_query,
    split_url,
)

logger = logging.getLogger(__name__)

NON_ALPHANUMERIC = re.compile(r'[^A-Za-z0-9]')


@runtime_checkable
class UrlProtector(Protocol):
    """Anything that can sign an absolute URL and check the signature later."""

    def protect(self, url: str) -> str:
        ...

    def verify(self, url: str) -> bool:
        ...


class UrlSigner:
    """
    Signs query strings so that changes to them can be detected.

    Instances are immutable and hold no per-call state, so one signer can be
    shared freely between threads and requests.
    """

    def __init__(
        self,
        salt: str,
        hash_parameter: str = DEFAULT_HASH_PARAMETER,
        scheme: Union[SignatureScheme, str] = SignatureScheme.legacy_sha1,
        sort_parameters: bool = False,
    ):
        """
        Initialize the signer.

        Args:
            salt: Secret known only to trusted issuers and verifiers
            hash_parameter: Name of the query parameter that stores the hash
            scheme: Digest construction, see SignatureScheme
            sort_parameters: Sort parameters by name before hashing

        Raises:
            InvalidStateError: If the salt is empty
            InvalidArgumentError: If the parameter name is empty or unusable
        """
        if not salt:
            raise InvalidStateError("A non-empty salt is required to sign URLs")

        self._salt = salt
        self._hash_parameter = require_parameter_name(hash_parameter, "hash_parameter")
        self._scheme = SignatureScheme(scheme)
        self._sort_parameters = sort_parameters

    @classmethod
    def from_options(cls, options: SignerOptions) -> "UrlSigner":
        """Create a signer from a SignerOptions value object."""
        return cls(
            salt=options.salt,
            hash_parameter=options.hash_parameter,
            scheme=options.scheme,
            sort_parameters=options.sort_parameters,
        )

    @property
    def hash_parameter(self) -> str:
        return self._hash_parameter

    @property
    def scheme(self) -> SignatureScheme:
        return self._scheme

    def protect(self, url: str) -> str:
        """
        Sign a URL's query string so that it can be checked later.

        Any existing hash parameter is replaced. Every other parameter is
        kept exactly as written, including repeated names.

        Args:
            url: Absolute URL to protect

        Returns:
            The URL with the hash appended as its last query parameter

        Raises:
            InvalidArgumentError: If no URL is given, or the query has segments
                without a name/value pair, which the hash cannot cover
            InvalidStateError: If the URL is relative
        """
        require_absolute_url(url, "url")

        original_query = split_url(url).query

        stray = find_stray_segments(original_query)
        if stray:
            raise InvalidArgumentError(url, "Query segments without a value cannot be signed")

        digest = self.create_hash(self._canonical_query(original_query))

        query = drop_parameter_segments(original_query, self._hash_parameter)
        signed_parameter = f"{self._hash_parameter}={digest}"
        query = f"{query}&{signed_parameter}" if query else signed_parameter

        return replace_query(url, query)

    def verify(self, url: str) -> bool:
        """
        Check that a URL signed by protect() has not been changed.

        Args:
            url: Absolute URL to check

        Returns:
            True only if the hash matches the rest of the query exactly

        Raises:
            InvalidArgumentError: If no URL is given
            InvalidStateError: If the URL is relative
        """
        require_absolute_url(url, "url")

        query = split_url(url).query

        # A segment the parser skips would not be covered by the hash
        if find_stray_segments(query):
            logger.debug("URL rejected: query contains segments without a value")
            return False

        received_hash = parse_query_string(query).get(self._hash_parameter)
        if not received_hash:
            logger.debug("URL rejected: no hash parameter")
            return False

        if not is_valid_hash_value(received_hash):
            logger.debug("URL rejected: hash parameter is not alphanumeric")
            return False

        expected_hash = self.create_hash(self._canonical_query(query))

        if not hmac.compare_digest(expected_hash.encode("utf-8"), received_hash.encode("utf-8")):
            logger.debug("URL rejected: hash does not match query string")
            return False

        return True

    def create_hash(self, canonical_query: str) -> str:
        """
        Create the hash for a canonical query string.

        Returns:
            Base64 digest with every character outside [A-Za-z0-9] removed
        """
        data = canonical_query.lstrip("?").encode("utf-8")
        key = self._salt.encode("utf-8")

        if self._scheme is SignatureScheme.hmac_sha256:
            digest = hmac.new(key, data, hashlib.sha256).digest()
        else:
            digest = hashlib.sha1(key + data + key).digest()

        return NON_ALPHANUMERIC.sub("", base64.b64encode(digest).decode("ascii"))

    def _canonical_query(self, query: str) -> str:
        pairs = parse_query_string(query)
        if self._sort_parameters:
            pairs = dict(sorted(pairs.items()))
        return serialize_query(pairs, exclude=[self._hash_parameter])

    def __repr__(self) -> str:
        # The salt is never shown
        return (
            f"UrlSigner(hash_parameter={self._hash_parameter!r}, "
            f"scheme={self._scheme.value!r}, sort_parameters={self._sort_parameters!r})"
        )
