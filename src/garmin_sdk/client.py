"""
Garmin Health API client

High-level client combining the OAuth1 handshake with the signed wellness
REST endpoints (summaries, backfill requests, deregistration, user id).
"""

import json
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union

from .config.environment import ApiVariant, EnvironmentProfile, DEFAULT_VARIANT
from .config.settings import ClientConfig
from .exceptions import AuthenticationError, InvalidConfigurationError, TransportError, ErrorCodes
from .handshake import HandshakeEngine
from .http_client import GarminHttpClient, HttpConfig, ensure_success, should_retry, backoff_time
from .signing.oauth1_signer import OAuth1Signer
from .signing.types import (
    ClientCredentials,
    TemporaryCredentials,
    TokenCredentials,
    OAuth1SigningConfig,
    HttpMethod,
)
from .signing.utils import build_query_string, append_query, ParameterInput

logger = logging.getLogger(__name__)


class BackfillType(str, Enum):
    """Summary types that can be backfilled"""
    ACTIVITIES = "activities"
    DAILIES = "dailies"
    EPOCHS = "epochs"
    ACTIVITY_DETAILS = "activityDetails"
    SLEEP = "sleep"
    BODY_COMPS = "bodyComps"
    STRESS_DETAILS = "stressDetails"
    USER_METRICS = "userMetrics"
    PULSE_OX = "pulseOx"
    RESPIRATION = "respiration"


@dataclass
class GarminUser:
    """User details; Garmin only exposes a user id."""
    uid: Optional[str]
    email: str = ""
    screen_name: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)


class GarminApiClient:
    """
    Client for the Garmin Connect OAuth1 flow and the wellness REST API.

    Every data call takes the user's TokenCredentials and returns the raw
    response body. Nothing is cached. GET/DELETE calls are retried only when
    the transport has retry_attempts set, and each retry is signed afresh.
    """

    def __init__(
        self,
        client_credentials: ClientCredentials,
        variant: Union[str, ApiVariant] = DEFAULT_VARIANT,
        http_client: Optional[GarminHttpClient] = None,
        signing_config: Optional[OAuth1SigningConfig] = None,
    ):
        """
        Initialize the client.

        Args:
            client_credentials: Consumer key, secret and callback URI
            variant: "international" (default) or "regional"
            http_client: Optional transport (useful for testing)
            signing_config: Optional signing configuration

        Raises:
            InvalidConfigurationError: On bad credentials or variant
        """
        self.signer = OAuth1Signer(client_credentials, signing_config)
        self._environment = EnvironmentProfile.for_variant(variant)
        self.http_client = http_client or GarminHttpClient()

        logger.info(f"Initialized Garmin API client ({self._environment.variant.value} variant)")

    @classmethod
    def from_config(cls, config: ClientConfig, http_client: Optional[GarminHttpClient] = None) -> 'GarminApiClient':
        """Create a client from loaded settings."""
        if http_client is None:
            http_client = GarminHttpClient(HttpConfig(
                timeout=config.timeout,
                verify_ssl=config.verify_ssl,
                user_agent=config.user_agent,
                retry_attempts=config.retry_attempts,
                retry_backoff_factor=config.retry_backoff_factor,
            ))
        return cls(config.client_credentials(), config.variant, http_client)

    # Environment variant

    @property
    def environment(self) -> EnvironmentProfile:
        return self._environment

    @property
    def variant(self) -> str:
        return self._environment.variant.value

    @property
    def api_url(self) -> str:
        return self._environment.api_url

    @property
    def user_api_url(self) -> str:
        return self._environment.user_api_url

    @property
    def auth_url(self) -> str:
        return self._environment.auth_url

    def use_variant(self, variant: Union[str, ApiVariant]) -> EnvironmentProfile:
        """
        Switch to another deployment.

        The profile is replaced in one assignment, so a concurrent reader sees
        either the old or the new URLs, never a mix.

        Raises:
            InvalidConfigurationError: If the variant is unknown
        """
        profile = EnvironmentProfile.for_variant(variant)
        self._environment = profile
        logger.info(f"Switched Garmin API client to {profile.variant.value} variant")
        return profile

    def use_international_variant(self) -> EnvironmentProfile:
        return self.use_variant(ApiVariant.INTERNATIONAL)

    def use_regional_variant(self) -> EnvironmentProfile:
        return self.use_variant(ApiVariant.REGIONAL)

    # Handshake

    @property
    def handshake(self) -> HandshakeEngine:
        return HandshakeEngine(self.signer, self._environment, self.http_client)

    def request_temporary_credentials(self) -> TemporaryCredentials:
        return self.handshake.request_temporary_credentials()

    def get_authorization_url(self, temporary: Union[TemporaryCredentials, str]) -> str:
        return self.handshake.get_authorization_url(temporary)

    def exchange_for_token_credentials(
        self,
        temporary: TemporaryCredentials,
        temporary_identifier: str,
        verifier: str
    ) -> TokenCredentials:
        return self.handshake.exchange_for_token_credentials(temporary, temporary_identifier, verifier)

    # Signed data requests

    def _signed_request(
        self,
        method: HttpMethod,
        path: str,
        token: TokenCredentials,
        params: ParameterInput,
        operation: str
    ) -> str:
        url = self._environment.user_api_url + path
        return self._signed_response(method, url, token, params, operation).text

    def _signed_response(
        self,
        method: HttpMethod,
        endpoint_url: str,
        token: TokenCredentials,
        params: ParameterInput,
        operation: str
    ):
        """
        Sign and send one data request, retrying GET/DELETE when the transport
        has retry_attempts set.

        Every attempt is signed again, so each one carries its own nonce and
        timestamp.

        Raises:
            InvalidConfigurationError: If token is not TokenCredentials
            AuthenticationError: On a non-2xx final response
            TransportError: When the final attempt fails at the network level
        """
        if not isinstance(token, TokenCredentials):
            raise InvalidConfigurationError(
                "Data requests require TokenCredentials",
                ErrorCodes.INVALID_CREDENTIALS,
                {"type": type(token).__name__}
            )

        # The same string is signed and sent
        url = append_query(endpoint_url, build_query_string(params))

        transport_config = self.http_client.config
        attempts = 1
        if should_retry(method.value):
            attempts += transport_config.retry_attempts

        for attempt in range(1, attempts + 1):
            authorization = self.signer.build_header(method, url, token)
            try:
                response = self.http_client.request(method.value, url, headers={'Authorization': authorization})
            except TransportError as e:
                if attempt == attempts:
                    raise
                logger.warning(f"Attempt {attempt}/{attempts} {operation} failed: {e}")
            else:
                if attempt == attempts or not should_retry(method.value, response.status_code):
                    break
                logger.warning(
                    f"Attempt {attempt}/{attempts} {operation} returned status {response.status_code}"
                )
            time.sleep(backoff_time(transport_config.retry_backoff_factor, attempt))

        ensure_success(response, operation)
        return response
    def get_activity_summary(self, token: TokenCredentials, params: ParameterInput) -> str:
        """
        Get activity summaries (/activities).

        Args:
            token: User token credentials
            params: Query parameters, e.g. uploadStartTimeInSeconds and
                uploadEndTimeInSeconds

        Returns:
            str: Raw JSON response body
        """
        return self._signed_request(HttpMethod.GET, 'activities', token, params,
                                    "retrieving activity summary")

    def get_daily_summary(self, token: TokenCredentials, params: ParameterInput) -> str:
        """Get daily summaries (/dailies)."""
        return self._signed_request(HttpMethod.GET, 'dailies', token, params,
                                    "retrieving daily summary")

    def get_manually_updated_activity_summary(self, token: TokenCredentials, params: ParameterInput) -> str:
        """Get manually updated activity summaries (/manuallyUpdatedActivities)."""
        return self._signed_request(HttpMethod.GET, 'manuallyUpdatedActivities', token, params,
                                    "retrieving manually updated activity summary")

    def get_activity_details_summary(self, token: TokenCredentials, params: ParameterInput) -> str:
        """Get activity details summaries (/activityDetails)."""
        return self._signed_request(HttpMethod.GET, 'activityDetails', token, params,
                                    "retrieving activity details summary")

    def backfill(self, token: TokenCredentials, summary_type: Union[str, BackfillType],
                 params: ParameterInput) -> str:
        """
        Ask Garmin to redeliver historic summaries of one type.

        Args:
            token: User token credentials
            summary_type: One of BackfillType
            params: Query parameters, e.g. summaryStartTimeInSeconds and
                summaryEndTimeInSeconds

        Returns:
            str: Raw response body (usually empty, status 202)

        Raises:
            InvalidConfigurationError: If summary_type is unknown
        """
        try:
            summary_type = BackfillType(summary_type)
        except ValueError:
            valid = ", ".join(t.value for t in BackfillType)
            raise InvalidConfigurationError(
                f"Invalid backfill type {summary_type!r}. Must be one of: {valid}",
                ErrorCodes.INVALID_BACKFILL_TYPE,
                {"summary_type": str(summary_type)}
            )

        logger.info(f"Requesting backfill of {summary_type.value} summaries")
        return self._signed_request(HttpMethod.GET, f'backfill/{summary_type.value}', token, params,
                                    f"requesting historic {summary_type.value} summary")

    def backfill_activity_summary(self, token: TokenCredentials, params: ParameterInput) -> str:
        return self.backfill(token, BackfillType.ACTIVITIES, params)

    def backfill_daily_summary(self, token: TokenCredentials, params: ParameterInput) -> str:
        return self.backfill(token, BackfillType.DAILIES, params)

    def backfill_epoch_summary(self, token: TokenCredentials, params: ParameterInput) -> str:
        return self.backfill(token, BackfillType.EPOCHS, params)

    def backfill_activity_details_summary(self, token: TokenCredentials, params: ParameterInput) -> str:
        return self.backfill(token, BackfillType.ACTIVITY_DETAILS, params)

    def backfill_sleep_summary(self, token: TokenCredentials, params: ParameterInput) -> str:
        return self.backfill(token, BackfillType.SLEEP, params)

    def backfill_body_composition_summary(self, token: TokenCredentials, params: ParameterInput) -> str:
        return self.backfill(token, BackfillType.BODY_COMPS, params)

    def backfill_stress_details_summary(self, token: TokenCredentials, params: ParameterInput) -> str:
        return self.backfill(token, BackfillType.STRESS_DETAILS, params)

    def backfill_user_metrics_summary(self, token: TokenCredentials, params: ParameterInput) -> str:
        return self.backfill(token, BackfillType.USER_METRICS, params)

    def backfill_pulse_ox_summary(self, token: TokenCredentials, params: ParameterInput) -> str:
        return self.backfill(token, BackfillType.PULSE_OX, params)

    def backfill_respiration_summary(self, token: TokenCredentials, params: ParameterInput) -> str:
        return self.backfill(token, BackfillType.RESPIRATION, params)

    def delete_user_access_token(self, token: TokenCredentials) -> str:
        """
        Deregister the user: Garmin stops delivering their data and the token
        becomes invalid.
        """
        logger.info("Deregistering user access token")
        return self._signed_request(HttpMethod.DELETE, 'user/registration', token, None,
                                    "deleting user access token")

    def get_user_id(self, token: TokenCredentials) -> str:
        """Get the Garmin user id document (/user/id)."""
        return self._user_id_response(token).text

    def get_user_details(self, token: TokenCredentials) -> GarminUser:
        """
        Fetch /user/id and wrap it in a GarminUser.

        Raises:
            AuthenticationError: If the 2xx body is not a JSON object
        """
        response = self._user_id_response(token)
        try:
            data = json.loads(response.text)
        except ValueError as e:
            raise self._invalid_user_details(response, "body is not JSON") from e
        if not isinstance(data, dict):
            raise self._invalid_user_details(response, "body is not a JSON object")
        return self.user_details(data)

    def _user_id_response(self, token: TokenCredentials):
        return self._signed_response(HttpMethod.GET, self._environment.user_details_url, token, None,
                                     "retrieving user id")

    @staticmethod
    def _invalid_user_details(response, reason: str) -> AuthenticationError:
        return AuthenticationError(
            f"Invalid user details response: {reason}.",
            ErrorCodes.INVALID_RESPONSE,
            http_status=response.status_code,
            response_body=response.text
        )

    @staticmethod
    def user_uid(data: Dict[str, Any]) -> Optional[str]:
        return data.get('userId') if isinstance(data, dict) else None

    @classmethod
    def user_details(cls, data: Dict[str, Any]) -> GarminUser:
        extra = dict(data) if isinstance(data, dict) else {}
        return GarminUser(uid=cls.user_uid(data), extra=extra)

    def close(self):
        """Close the HTTP client and clean up resources."""
        self.http_client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def create_client(
    consumer_key: str,
    consumer_secret: str,
    callback_uri: Optional[str] = None,
    variant: Union[str, ApiVariant] = DEFAULT_VARIANT,
    timeout: float = 30.0,
    verify_ssl: bool = True
) -> GarminApiClient:
    """
    Create a Garmin API client with default configuration.

    Args:
        consumer_key: Consumer key
        consumer_secret: Consumer secret
        callback_uri: Callback URI registered for the application
        variant: "international" or "regional"
        timeout: Request timeout in seconds
        verify_ssl: Whether to verify SSL certificates

    Returns:
        GarminApiClient: Configured client
    """
    config = ClientConfig(
        consumer_key=consumer_key,
        consumer_secret=consumer_secret,
        callback_uri=callback_uri,
        variant=variant.value if isinstance(variant, ApiVariant) else variant,
        timeout=timeout,
        verify_ssl=verify_ssl,
    )
    return GarminApiClient.from_config(config)
