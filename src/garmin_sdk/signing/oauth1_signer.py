"""
OAuth1 protocol header signer

This module assembles the OAuth1 protocol parameters for a request, signs them
with the configured signature method and serializes the Authorization header.
"""

import logging
from typing import Optional, Union

from ..exceptions import InvalidConfigurationError, ErrorCodes
from .types import (
    ClientCredentials,
    TemporaryCredentials,
    TokenCredentials,
    OAuth1SigningConfig,
    OAuth1SignatureResult,
    ParameterList,
    OAUTH_VERSION,
)
from .normalizer import normalize_parameters, to_header_string
from .signature import create_signature_method, build_signature_base_string
from .utils import (
    generate_nonce,
    generate_timestamp,
    validate_nonce,
    validate_timestamp,
    as_parameter_list,
    parse_url,
    ParameterInput,
)

logger = logging.getLogger(__name__)

Credentials = Union[TemporaryCredentials, TokenCredentials]


class OAuth1Signer:
    """
    OAuth1 signer for one set of client credentials

    The signer holds no per-request state, so one instance can sign requests
    for many users from many threads at once.
    """

    def __init__(self, client_credentials: ClientCredentials, config: Optional[OAuth1SigningConfig] = None):
        """
        Initialize the signer.

        Args:
            client_credentials: Consumer key, secret and callback URI
            config: Optional signing configuration (HMAC-SHA1 by default)

        Raises:
            InvalidConfigurationError: If the client credentials are missing
        """
        if not isinstance(client_credentials, ClientCredentials):
            raise InvalidConfigurationError(
                "client_credentials must be a ClientCredentials instance",
                ErrorCodes.INVALID_CREDENTIALS
            )
        self.client_credentials = client_credentials
        self.config = config or OAuth1SigningConfig()
        self.signature_method = create_signature_method(self.config.signature_method)

    def build_header(
        self,
        method: str,
        uri: str,
        credentials: Optional[Credentials] = None,
        parameters: ParameterInput = None,
        include_callback: bool = False
    ) -> str:
        """
        Build the Authorization header value for a request.

        Args:
            method: HTTP method actually used for the request
            uri: Absolute request URL including any query string
            credentials: Temporary or token credentials; None for the
                temporary credentials request
            parameters: Form body parameters sent with the request
            include_callback: Add oauth_callback (temporary credentials request)

        Returns:
            str: Header value starting with "OAuth "
        """
        return self.sign_request(method, uri, credentials, parameters, include_callback).authorization

    def sign_request(
        self,
        method: str,
        uri: str,
        credentials: Optional[Credentials] = None,
        parameters: ParameterInput = None,
        include_callback: bool = False
    ) -> OAuth1SignatureResult:
        """
        Sign a request and return the header together with what was signed.

        Raises:
            InvalidConfigurationError: On malformed credentials or URL, before
                anything is sent
        """
        if credentials is not None and not isinstance(credentials, (TemporaryCredentials, TokenCredentials)):
            raise InvalidConfigurationError(
                "credentials must be TemporaryCredentials or TokenCredentials",
                ErrorCodes.INVALID_CREDENTIALS,
                {"type": type(credentials).__name__}
            )

        # Fail on a bad URL before generating anything
        parsed = parse_url(uri)

        protocol_parameters = self._protocol_parameters(credentials, include_callback)
        request_parameters = as_parameter_list(parameters)
        signed_parameters = protocol_parameters + request_parameters

        token_secret = credentials.secret if credentials is not None else None
        signature = self.signature_method.sign(
            method, uri, signed_parameters, self.client_credentials.secret, token_secret
        )

        header_parameters = signed_parameters + [("oauth_signature", signature)]
        authorization = f"OAuth {to_header_string(header_parameters)}"

        logger.debug(
            f"Signed {str(getattr(method, 'value', method)).upper()} {parsed['base_url']} "
            f"with {self.signature_method.name.value}"
        )

        return OAuth1SignatureResult(
            authorization=authorization,
            signature=signature,
            base_string=build_signature_base_string(method, uri, signed_parameters),
            parameters=tuple(normalize_parameters(list(parsed["query_parameters"]) + signed_parameters)),
        )

    def _protocol_parameters(self, credentials: Optional[Credentials], include_callback: bool) -> ParameterList:
        nonce = (self.config.nonce_generator or generate_nonce)()
        timestamp = (self.config.timestamp_generator or generate_timestamp)()

        if not validate_nonce(nonce):
            raise InvalidConfigurationError(
                f"Invalid nonce format: {nonce!r}",
                ErrorCodes.INVALID_NONCE,
                {"nonce": nonce}
            )

        if not validate_timestamp(timestamp):
            raise InvalidConfigurationError(
                f"Invalid timestamp: {timestamp!r}",
                ErrorCodes.INVALID_TIMESTAMP,
                {"timestamp": timestamp}
            )

        parameters = [
            ("oauth_consumer_key", self.client_credentials.identifier),
            ("oauth_nonce", nonce),
            ("oauth_signature_method", self.signature_method.name.value),
            ("oauth_timestamp", timestamp),
            ("oauth_version", OAUTH_VERSION),
        ]

        if include_callback and self.client_credentials.callback_uri:
            parameters.append(("oauth_callback", self.client_credentials.callback_uri))

        if credentials is not None:
            parameters.append(("oauth_token", credentials.identifier))

        return parameters


def create_signer(
    consumer_key: str,
    consumer_secret: str,
    callback_uri: Optional[str] = None,
    config: Optional[OAuth1SigningConfig] = None
) -> OAuth1Signer:
    """
    Create an OAuth1 signer from raw consumer key and secret.

    Args:
        consumer_key: Consumer key
        consumer_secret: Consumer secret
        callback_uri: Optional callback URI
        config: Optional signing configuration

    Returns:
        OAuth1Signer: Configured signer
    """
    return OAuth1Signer(ClientCredentials(consumer_key, consumer_secret, callback_uri), config)


def sign_request(
    client_credentials: ClientCredentials,
    method: str,
    uri: str,
    credentials: Optional[Credentials] = None,
    parameters: ParameterInput = None,
    config: Optional[OAuth1SigningConfig] = None
) -> OAuth1SignatureResult:
    """
    Sign a single request without keeping a signer around.
    """
    return OAuth1Signer(client_credentials, config).sign_request(method, uri, credentials, parameters)
