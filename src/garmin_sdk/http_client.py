"""
HTTP transport for Garmin API communication

This module wraps a requests session. It maps network failures to
TransportError and non-2xx answers to AuthenticationError. It never signs
anything itself, and the session never resends a request. Callers retry by
signing again before every attempt (see should_retry and backoff_time).
"""

import logging
from dataclasses import dataclass
from typing import Optional, Mapping

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .exceptions import AuthenticationError, TransportError, InvalidConfigurationError, ErrorCodes

logger = logging.getLogger(__name__)

# Retries are only ever applied to idempotent reads and deletes
RETRYABLE_METHODS = frozenset(["GET", "DELETE"])
RETRY_STATUS_CODES = frozenset([429, 500, 502, 503, 504])

_RETRY_POLICY = Retry(
    total=1,
    status_forcelist=RETRY_STATUS_CODES,
    allowed_methods=RETRYABLE_METHODS,
    respect_retry_after_header=False,
)


@dataclass
class HttpConfig:
    """Configuration for the HTTP transport."""
    timeout: float = 30.0
    verify_ssl: bool = True
    user_agent: str = "Garmin-Python-SDK/0.1.0"
    retry_attempts: int = 0
    retry_backoff_factor: float = 0.3

    def __post_init__(self):
        """Validate transport configuration."""
        if self.timeout <= 0:
            raise InvalidConfigurationError("Timeout must be positive", ErrorCodes.INVALID_CONFIG)

        if self.retry_attempts < 0:
            raise InvalidConfigurationError("Retry attempts must be non-negative", ErrorCodes.INVALID_CONFIG)

        if self.retry_backoff_factor < 0:
            raise InvalidConfigurationError("Retry backoff factor must be non-negative", ErrorCodes.INVALID_CONFIG)


class GarminHttpClient:
    """
    HTTP client used by the handshake engine and the endpoint invoker.
    """

    def __init__(self, config: Optional[HttpConfig] = None, session: Optional[requests.Session] = None):
        """
        Initialize the HTTP client.

        Args:
            config: Transport settings
            session: Optional pre-configured session (useful for testing)
        """
        self.config = config or HttpConfig()
        self.session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create HTTP session whose adapters never resend a request."""
        session = requests.Session()

        # A resent request would replay its oauth_nonce
        adapter = HTTPAdapter(max_retries=Retry(total=0, read=False))
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update({
            'Accept': 'application/json',
            'User-Agent': self.config.user_agent,
        })

        return session

    def request(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        data: Optional[Mapping[str, str]] = None,
    ) -> requests.Response:
        """
        Send one request.

        Args:
            method: HTTP method
            url: Complete URL, query string included and already encoded
            headers: Extra headers (the Authorization header among them)
            data: Form body parameters

        Returns:
            requests.Response: Response of any status

        Raises:
            TransportError: On network, TLS or timeout failures
        """
        logger.debug(f"Making {method} request to {url}")

        try:
            return self.session.request(
                method,
                url,
                headers=dict(headers or {}),
                data=dict(data) if data else None,
                timeout=self.config.timeout,
                verify=self.config.verify_ssl,
            )
        except requests.exceptions.Timeout as e:
            raise TransportError(
                f"Request timeout after {self.config.timeout} seconds",
                ErrorCodes.TIMEOUT,
                original_error=e,
                details={'url': url, 'method': method}
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise TransportError(
                f"Connection error: {e}",
                ErrorCodes.CONNECTION_ERROR,
                original_error=e,
                details={'url': url, 'method': method}
            ) from e
        except requests.exceptions.RequestException as e:
            raise TransportError(
                f"Request failed: {e}",
                ErrorCodes.TRANSPORT_ERROR,
                original_error=e,
                details={'url': url, 'method': method}
            ) from e

    def close(self):
        """Close the HTTP session."""
        self.session.close()
        logger.debug("HTTP session closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def is_success(response: requests.Response) -> bool:
    return 200 <= response.status_code < 300


def should_retry(method: str, status_code: Optional[int] = None) -> bool:
    """
    Decide whether a failed attempt may be repeated.

    Args:
        method: HTTP method of the attempt
        status_code: Response status, or None when the attempt raised TransportError

    Returns:
        bool: True for GET/DELETE that failed at the network level or with a
            transient status (429, 5xx gateway errors)
    """
    if status_code is None:
        return method in RETRYABLE_METHODS
    return _RETRY_POLICY.is_retry(method, status_code)


def backoff_time(backoff_factor: float, attempt: int) -> float:
    """Seconds to wait after the given (1-based) failed attempt."""
    return backoff_factor * (2 ** (attempt - 1))


def ensure_success(response: requests.Response, operation: str,
                   error_code: str = ErrorCodes.REQUEST_FAILED) -> requests.Response:
    """
    Raise AuthenticationError unless the response is 2xx.

    Args:
        response: Response to check
        operation: What was being done, for the error message
        error_code: Code to attach to the error

    Returns:
        requests.Response: The same response when successful
    """
    if is_success(response):
        return response

    body = response.text
    status = response.status_code
    logger.warning(f"Garmin API returned status {status} when {operation}")
    raise AuthenticationError(
        f"Received error [{body}] with status code [{status}] when {operation}.",
        error_code,
        http_status=status,
        response_body=body,
        details={'url': getattr(response, 'url', None)}
    )
