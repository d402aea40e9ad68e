"""
Services module for URL protection.

This module contains the framework-free core:
- query_string: canonical form of a query string
- UrlSigner: signs and verifies query strings with a keyed hash
- UrlExpirer: adds an issue time and checks it against a validity window
"""

from linkseal.services.query_string import parse_query_string, serialize_query
from linkseal.services.url_expirer import UrlExpirer
from linkseal.services.url_signer import UrlProtector, UrlSigner

__all__ = [
    "parse_query_string",
    "serialize_query",
    "UrlProtector",
    "UrlSigner",
    "UrlExpirer",
]
