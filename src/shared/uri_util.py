"""
URI helpers for redirect and endpoint values.

URIs are carried as plain strings; these helpers extract the pieces the
message models need (scheme and query parameters) and build endpoint URLs.
"""

import re
from typing import Dict, Mapping, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit

# RFC 3986 section 3.1
SCHEME_PATTERN = re.compile(r'^[A-Za-z][A-Za-z0-9+.-]*$')


def get_scheme(uri: str) -> Optional[str]:
    """
    Return the scheme of a URI, or None if it has none.

    Args:
        uri: URI string to inspect

    Returns:
        Optional[str]: Lower-cased scheme, e.g. "https" or "com.example.app"
    """
    if not isinstance(uri, str) or ':' not in uri:
        return None

    scheme = uri.split(':', 1)[0]
    if not SCHEME_PATTERN.match(scheme):
        return None
    return scheme.lower()


def get_query_parameters(uri: str) -> Dict[str, str]:
    """
    Parse the query component of a URI into an ordered dictionary.

    When a parameter repeats, the first value wins. Parameters without a
    value are kept with an empty string.
    """
    query = urlsplit(uri).query
    params: Dict[str, str] = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        params.setdefault(key, value)
    return params


def append_query_parameters(uri: str, params: Mapping[str, str]) -> str:
    """Append form-encoded parameters to a URI, keeping any existing query."""
    if not params:
        return uri
    separator = '&' if urlsplit(uri).query else '?'
    return f"{uri}{separator}{urlencode(list(params.items()))}"
