"""
Shared fixtures for the Garmin SDK tests
"""

from unittest.mock import Mock

import pytest

from garmin_sdk.http_client import HttpConfig
from garmin_sdk.signing import ClientCredentials, OAuth1SigningConfig, OAuth1Signer, TokenCredentials


def _response(status_code=200, text="", url="https://example.com/"):
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.url = url
    return response


@pytest.fixture
def client_credentials():
    return ClientCredentials("CK", "CS", "https://app/cb")


@pytest.fixture
def signing_config():
    return OAuth1SigningConfig(
        nonce_generator=lambda: "fixednonce",
        timestamp_generator=lambda: "1700000000",
    )


@pytest.fixture
def signer(client_credentials, signing_config):
    return OAuth1Signer(client_credentials, signing_config)


@pytest.fixture
def token():
    return TokenCredentials("TOKEN", "TOKEN_SECRET")


@pytest.fixture
def make_response():
    """Factory for stand-ins of requests.Response."""
    return _response


@pytest.fixture
def transport():
    """Mock of GarminHttpClient returning a 200 with an empty body."""
    http_client = Mock()
    http_client.config = HttpConfig()
    http_client.request.return_value = _response()
    return http_client
