"""
Garmin API environment variants

Garmin runs two separate deployments. Each fixes three URLs: the Connect API
(OAuth endpoints), the wellness REST API and the user authorization page.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Union

from ..exceptions import InvalidConfigurationError, ErrorCodes


class ApiVariant(str, Enum):
    """Supported deployments"""
    INTERNATIONAL = "international"
    REGIONAL = "regional"


@dataclass(frozen=True)
class EnvironmentProfile:
    """
    URLs for one deployment

    Attributes:
        variant: Which deployment the URLs belong to
        api_url: Connect API base (OAuth endpoints)
        user_api_url: Wellness REST API base
        auth_url: Page the user is redirected to for authorization
    """
    variant: ApiVariant
    api_url: str
    user_api_url: str
    auth_url: str

    @classmethod
    def for_variant(cls, variant: Union[str, ApiVariant] = ApiVariant.INTERNATIONAL) -> 'EnvironmentProfile':
        """
        Look up the profile of a variant.

        Raises:
            InvalidConfigurationError: If the variant is unknown
        """
        try:
            return ENVIRONMENT_PROFILES[ApiVariant(variant)]
        except ValueError:
            valid = ", ".join(v.value for v in ApiVariant)
            raise InvalidConfigurationError(
                f"Invalid API variant {variant!r}. Must be one of: {valid}",
                ErrorCodes.INVALID_VARIANT,
                {"variant": str(variant)}
            )

    @property
    def temporary_credentials_url(self) -> str:
        return self.api_url + 'oauth-service/oauth/request_token'

    @property
    def token_credentials_url(self) -> str:
        return self.api_url + 'oauth-service/oauth/access_token'

    @property
    def user_details_url(self) -> str:
        return self.user_api_url + 'user/id'


ENVIRONMENT_PROFILES: Dict[ApiVariant, EnvironmentProfile] = {
    ApiVariant.INTERNATIONAL: EnvironmentProfile(
        variant=ApiVariant.INTERNATIONAL,
        api_url="https://connectapi.garmin.com/",
        user_api_url="https://healthapi.garmin.com/wellness-api/rest/",
        auth_url="http://connect.garmin.com/oauthConfirm",
    ),
    ApiVariant.REGIONAL: EnvironmentProfile(
        variant=ApiVariant.REGIONAL,
        api_url="https://connectapi.garmin.cn/",
        user_api_url="https://gcs-wellness.garmin.cn/wellness-api/rest/",
        auth_url="http://connect.garmin.cn/oauthConfirm",
    ),
}

DEFAULT_VARIANT = ApiVariant.INTERNATIONAL
