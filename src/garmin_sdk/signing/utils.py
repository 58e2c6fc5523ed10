"""
Utility functions for OAuth1 request signing

This module provides RFC 3986 percent encoding, nonce and timestamp generation,
URL handling for the signature base string, and parsing of the form-encoded
credential responses.
"""

import re
import time
import secrets
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import quote, urlsplit, urlunsplit, parse_qsl

from ..exceptions import InvalidConfigurationError, ErrorCodes
from .types import ParameterList

# Unreserved characters per RFC 3986 section 2.3
_UNRESERVED = re.compile(r'^[A-Za-z0-9\-._~]+$')

_DEFAULT_PORTS = {"http": 80, "https": 443}

ParameterInput = Union[Mapping[str, object], Sequence[Tuple[str, object]], None]


def percent_encode(value: object) -> str:
    """
    Percent-encode a value the way OAuth1 requires.

    Letters, digits and ``-._~`` are left alone; every other byte of the UTF-8
    encoding is escaped. Space becomes ``%20``, never ``+``.

    Args:
        value: Value to encode (converted with str() unless bytes)

    Returns:
        str: Encoded value
    """
    if isinstance(value, bytes):
        return quote(value, safe='~')
    return quote(str(value), safe='~')


def generate_nonce() -> str:
    """
    Generate a nonce for replay protection.

    Returns:
        str: 32 hex characters from the operating system CSPRNG
    """
    return secrets.token_hex(16)


def generate_timestamp() -> str:
    """
    Generate the current UTC Unix timestamp.

    Returns:
        str: Seconds since epoch as a decimal string
    """
    return str(int(time.time()))


def validate_nonce(nonce: str) -> bool:
    """
    Validate a nonce: non-empty and made only of unreserved characters.

    Args:
        nonce: Nonce string to validate

    Returns:
        bool: True if the nonce can be sent unescaped
    """
    if not isinstance(nonce, str):
        return False
    return bool(_UNRESERVED.match(nonce))


def validate_timestamp(timestamp: str) -> bool:
    """
    Validate a timestamp string (positive integer seconds).

    Args:
        timestamp: Timestamp to validate

    Returns:
        bool: True if timestamp is valid
    """
    if not isinstance(timestamp, str) or not timestamp.isdigit():
        return False
    return int(timestamp) > 0


def as_parameter_list(parameters: ParameterInput) -> ParameterList:
    """
    Turn a mapping or a sequence of pairs into a list of string pairs.

    A mapping value that is a list or tuple expands into one pair per item, so
    repeated parameter names survive.

    Args:
        parameters: Mapping, sequence of (name, value) pairs, or None

    Returns:
        list: List of (name, value) string tuples
    """
    if not parameters:
        return []

    items = parameters.items() if isinstance(parameters, Mapping) else parameters
    result: ParameterList = []
    for name, value in items:
        if isinstance(value, (list, tuple)):
            result.extend((str(name), _to_text(item)) for item in value)
        else:
            result.append((str(name), _to_text(value)))
    return result


def _to_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, bytes):
        return value.decode('utf-8')
    return str(value)


def parse_url(url: str) -> Dict[str, object]:
    """
    Split a request URL into the parts needed for signing.

    Args:
        url: Absolute request URL

    Returns:
        dict: Dictionary with:
            - base_url: scheme://host[:port]/path as used in the base string
            - query_parameters: decoded query string pairs

    Raises:
        InvalidConfigurationError: If the URL is not absolute http(s)
    """
    parts = urlsplit(url)
    scheme = parts.scheme.lower()

    if scheme not in _DEFAULT_PORTS or not parts.hostname:
        raise InvalidConfigurationError(
            f"Invalid request URL: {url}",
            ErrorCodes.INVALID_URL,
            {"url": url}
        )

    host = parts.hostname.lower()
    try:
        port = parts.port
    except ValueError:
        raise InvalidConfigurationError(
            f"Invalid port in request URL: {url}",
            ErrorCodes.INVALID_URL,
            {"url": url}
        )

    netloc = host if port is None or port == _DEFAULT_PORTS[scheme] else f"{host}:{port}"
    base_url = urlunsplit((scheme, netloc, parts.path or "/", "", ""))

    return {
        "base_url": base_url,
        "query_parameters": parse_qsl(parts.query, keep_blank_values=True),
    }


def build_query_string(parameters: ParameterInput) -> str:
    """
    Encode query parameters with RFC 3986 rules, preserving caller order.

    Args:
        parameters: Query parameters

    Returns:
        str: Query string without the leading '?'
    """
    return "&".join(
        f"{percent_encode(name)}={percent_encode(value)}"
        for name, value in as_parameter_list(parameters)
    )


def append_query(url: str, query: str) -> str:
    """Append a query string, using '&' when the URL already has one."""
    if not query:
        return url
    separator = '&' if '?' in url else '?'
    return f"{url}{separator}{query}"


def parse_credentials_response(body: str) -> Dict[str, str]:
    """
    Parse an application/x-www-form-urlencoded credentials response.

    Args:
        body: Response body text

    Returns:
        dict: Decoded fields (the last value wins for repeated names)
    """
    return dict(parse_qsl((body or "").strip(), keep_blank_values=True))


def mask_secret(value: Optional[str], visible: int = 4) -> str:
    """Mask all but the first characters of a secret for log output."""
    if not value:
        return ""
    return value[:visible] + "..." if len(value) > visible else "***"
