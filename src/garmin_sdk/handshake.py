"""
Three-legged OAuth1 handshake with Garmin Connect

Unauthenticated -> temporary credentials -> user authorization -> token
credentials. The engine keeps no session: every call takes the credentials it
needs and returns new ones, and the caller persists them between steps.
"""

import logging
from typing import Optional, Union

from .config.environment import EnvironmentProfile
from .exceptions import AuthenticationError, SecurityViolationError, ErrorCodes
from .http_client import GarminHttpClient, ensure_success
from .signing.oauth1_signer import OAuth1Signer
from .signing.types import TemporaryCredentials, TokenCredentials, HttpMethod
from .signing.utils import percent_encode, append_query, parse_credentials_response, mask_secret

logger = logging.getLogger(__name__)


class HandshakeEngine:
    """
    Runs the OAuth1 credential exchange against one environment variant.

    Args:
        signer: Signer holding the client credentials
        environment: URLs of the active variant
        http_client: Transport used for the two POST requests
    """

    def __init__(self, signer: OAuth1Signer, environment: EnvironmentProfile, http_client: GarminHttpClient):
        self.signer = signer
        self.environment = environment
        self.http_client = http_client

    @property
    def client_credentials(self):
        return self.signer.client_credentials

    def request_temporary_credentials(self) -> TemporaryCredentials:
        """
        Obtain temporary (request token) credentials.

        Returns:
            TemporaryCredentials: Request token pair; persist it until the callback

        Raises:
            AuthenticationError: If the server rejects the request
            TransportError: On network failure
        """
        uri = self.environment.temporary_credentials_url
        authorization = self.signer.build_header(HttpMethod.POST, uri, include_callback=True)

        logger.info(f"Requesting temporary credentials from {uri}")
        response = self.http_client.request(HttpMethod.POST.value, uri, headers={'Authorization': authorization})
        ensure_success(response, "retrieving temporary credentials", ErrorCodes.TEMPORARY_CREDENTIALS_FAILED)

        identifier, secret = self._parse_credentials(
            response, "temporary credentials", ErrorCodes.TEMPORARY_CREDENTIALS_FAILED
        )
        logger.info(f"Temporary credentials issued: {mask_secret(identifier)}")
        return TemporaryCredentials(identifier, secret)

    def get_authorization_url(self, temporary: Union[TemporaryCredentials, str]) -> str:
        """
        Build the URL the user is redirected to for authorizing the application.

        Args:
            temporary: Temporary credentials or their identifier

        Returns:
            str: Authorization URL with oauth_token and oauth_callback
        """
        identifier = temporary.identifier if isinstance(temporary, TemporaryCredentials) else temporary

        query = f"oauth_token={percent_encode(identifier)}"
        callback_uri = self.client_credentials.callback_uri
        if callback_uri:
            query += f"&oauth_callback={percent_encode(callback_uri)}"

        return append_query(self.environment.auth_url, query)

    def exchange_for_token_credentials(
        self,
        temporary: TemporaryCredentials,
        temporary_identifier: str,
        verifier: str
    ) -> TokenCredentials:
        """
        Exchange the verifier and temporary credentials for token credentials.

        Args:
            temporary: Temporary credentials stored after the first step
            temporary_identifier: oauth_token echoed back on the callback
            verifier: oauth_verifier from the callback

        Returns:
            TokenCredentials: Long-lived user token pair

        Raises:
            SecurityViolationError: If the echoed identifier does not match;
                nothing is sent in that case
            AuthenticationError: If the server rejects the exchange
            TransportError: On network failure
        """
        if temporary_identifier != temporary.identifier:
            logger.warning("Temporary identifier on callback does not match the stored temporary credentials")
            raise SecurityViolationError(
                "Temporary identifier passed back by server does not match that of stored "
                "temporary credentials. Potential man-in-the-middle.",
                details={'expected': mask_secret(temporary.identifier), 'received': mask_secret(temporary_identifier)}
            )

        uri = self.environment.token_credentials_url
        body_parameters = {'oauth_verifier': verifier}
        authorization = self.signer.build_header(HttpMethod.POST, uri, temporary, body_parameters)

        logger.info(f"Exchanging verifier for token credentials at {uri}")
        response = self.http_client.request(
            HttpMethod.POST.value, uri, headers={'Authorization': authorization}, data=body_parameters
        )
        ensure_success(response, "retrieving token credentials", ErrorCodes.TOKEN_CREDENTIALS_FAILED)

        identifier, secret = self._parse_credentials(
            response, "token credentials", ErrorCodes.TOKEN_CREDENTIALS_FAILED
        )
        logger.info(f"Token credentials issued: {mask_secret(identifier)}")
        return TokenCredentials(identifier, secret)

    @staticmethod
    def _parse_credentials(response, label: str, error_code: str):
        body = response.text
        data = parse_credentials_response(body)

        if 'error' in data:
            raise AuthenticationError(
                f"Error [{data['error']}] in retrieving {label}.",
                error_code,
                http_status=response.status_code,
                response_body=body
            )

        identifier: Optional[str] = data.get('oauth_token')
        secret: Optional[str] = data.get('oauth_token_secret')
        if not identifier or not secret:
            raise AuthenticationError(
                f"Error in retrieving {label}: response has no oauth_token/oauth_token_secret.",
                error_code,
                http_status=response.status_code,
                response_body=body
            )
        return identifier, secret
