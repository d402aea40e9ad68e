"""
Query String Canonicalization

This module translates between a raw query string and an ordered mapping,
and back again. Signing and verification both hash the output of
serialize_query(), so this is the one place that defines exactly which bytes
are signed.

Design Decisions:
- Order of first appearance is kept; it is part of what gets hashed
- Repeated names are joined with a comma instead of being overwritten
- Nothing is percent-decoded or re-encoded: values are hashed as they
  appear on the wire, so the same URL always produces the same string
- Segments without '=' (or with an empty name) carry no name/value pair and
  are ignored by the parser; find_stray_segments() reports them for callers
  that must not ignore them
"""

from typing import Dict, Iterable, List, Mapping, Optional
from urllib.parse import SplitResult, urlsplit, urlunsplit

__all__ = [
    "parse_query_string",
    "serialize_query",
    "find_stray_segments",
    "split_url",
    "replace_query",
    "add_query_parameter",
    "drop_parameter_segments",
    "remove_query_parameter",
]


def _segments(query: Optional[str]) -> List[str]:
    if not query:
        return []
    return query.lstrip("?").split("&")


def parse_query_string(query: Optional[str]) -> Dict[str, str]:
    """
    Split a query string into its name and value pairs.

    Args:
        query: Raw query string, with or without a leading '?'

    Returns:
        Dict of name to value in order of first appearance

    Example:
        parse_query_string("?a=1&b=2&a=3") -> {"a": "1,3", "b": "2"}
    """
    pairs: Dict[str, str] = {}

    for segment in _segments(query):
        name, separator, value = segment.partition("=")
        if not separator or not name:
            continue

        if name in pairs:
            pairs[name] += "," + value
        else:
            pairs[name] = value

    return pairs


def serialize_query(mapping: Mapping[str, str], exclude: Iterable[str] = ()) -> str:
    """
    Join name/value pairs back into a query string.

    Pairs are written in the mapping's own iteration order. Callers that
    need a stable result must pass a mapping whose order is authoritative,
    such as the result of parse_query_string().

    Args:
        mapping: Ordered name to value mapping
        exclude: Names to leave out

    Returns:
        Query string without a leading '?', empty if there is nothing to write
    """
    excluded = set(exclude)
    return "&".join(
        f"{name}={value}"
        for name, value in mapping.items()
        if name not in excluded
    )


def find_stray_segments(query: Optional[str]) -> List[str]:
    """
    List non-empty segments that parse_query_string() would ignore.

    Example:
        find_stray_segments("id=1&flag&=x&&") -> ["flag", "=x"]
    """
    stray = []
    for segment in _segments(query):
        if not segment:
            continue
        name, separator, _ = segment.partition("=")
        if not separator or not name:
            stray.append(segment)
    return stray


def split_url(url: str) -> SplitResult:
    """Split a URL into scheme, authority, path, query and fragment."""
    return urlsplit(url.strip())


def replace_query(url: str, query: str) -> str:
    """Return url with its query string replaced, keeping path and fragment."""
    parts = split_url(url)
    return urlunsplit(parts._replace(query=query))


def add_query_parameter(url: str, name: str, value: str) -> str:
    """
    Append a parameter as the last item of a URL's query string.

    The existing query is kept exactly as it is; a fragment, if any, stays
    at the end of the URL.
    """
    query = split_url(url).query
    addition = f"{name}={value}"
    return replace_query(url, f"{query}&{addition}" if query else addition)


def drop_parameter_segments(query: Optional[str], name: str) -> str:
    """
    Remove every segment for one parameter name from a raw query string.

    Other segments are kept exactly as they are, in their original order.
    Empty segments (from '&&' or a trailing '&') are dropped.

    Example:
        drop_parameter_segments("tag=a&h=x&tag=b", "h") -> "tag=a&tag=b"
    """
    return "&".join(
        segment
        for segment in _segments(query)
        if segment and segment.partition("=")[0] != name
    )


def remove_query_parameter(url: str, name: str) -> str:
    """
    Remove every occurrence of a parameter from a URL's query string.

    The remaining segments are left untouched, so repeated names stay
    repeated. Works on relative URLs as well as absolute ones.
    """
    query = split_url(url).query
    if not query:
        return url
    return replace_query(url, drop_parameter_segments(query, name))
