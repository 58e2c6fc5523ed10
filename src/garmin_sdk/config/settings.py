"""
Client settings for the Garmin SDK

Settings can be built directly, from a dictionary, from a JSON document or
file, or from GARMIN_* environment variables.
"""

import os
import json
import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from ..exceptions import InvalidConfigurationError, ErrorCodes
from ..signing.types import ClientCredentials
from .environment import ApiVariant, EnvironmentProfile, DEFAULT_VARIANT

logger = logging.getLogger(__name__)

ENV_PREFIX = "GARMIN_"

_ENV_FIELDS = {
    "CONSUMER_KEY": "consumer_key",
    "CONSUMER_SECRET": "consumer_secret",
    "CALLBACK_URI": "callback_uri",
    "API_VARIANT": "variant",
    "TIMEOUT": "timeout",
    "VERIFY_SSL": "verify_ssl",
    "USER_AGENT": "user_agent",
    "RETRY_ATTEMPTS": "retry_attempts",
    "RETRY_BACKOFF_FACTOR": "retry_backoff_factor",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class ClientConfig:
    """Configuration for a Garmin API client."""
    consumer_key: str
    consumer_secret: str
    callback_uri: Optional[str] = None
    variant: str = DEFAULT_VARIANT.value
    timeout: float = 30.0
    verify_ssl: bool = True
    user_agent: str = "Garmin-Python-SDK/0.1.0"
    retry_attempts: int = 0
    retry_backoff_factor: float = 0.3

    def __post_init__(self):
        """Validate client configuration."""
        if not self.consumer_key or not self.consumer_secret:
            raise InvalidConfigurationError(
                "consumer_key and consumer_secret are required",
                ErrorCodes.INVALID_CREDENTIALS
            )

        # Resolves the variant and rejects unknown names
        self.variant = EnvironmentProfile.for_variant(self.variant).variant.value

        try:
            self.timeout = float(self.timeout)
            self.retry_attempts = int(self.retry_attempts)
            self.retry_backoff_factor = float(self.retry_backoff_factor)
        except (TypeError, ValueError) as e:
            raise InvalidConfigurationError(f"Invalid numeric setting: {e}", ErrorCodes.INVALID_CONFIG)

        self.verify_ssl = _parse_bool(self.verify_ssl, "verify_ssl")

        if self.timeout <= 0:
            raise InvalidConfigurationError("Timeout must be positive", ErrorCodes.INVALID_CONFIG)

        if self.retry_attempts < 0:
            raise InvalidConfigurationError("Retry attempts must be non-negative", ErrorCodes.INVALID_CONFIG)

        if self.retry_backoff_factor < 0:
            raise InvalidConfigurationError("Retry backoff factor must be non-negative", ErrorCodes.INVALID_CONFIG)

    @property
    def environment(self) -> EnvironmentProfile:
        return EnvironmentProfile.for_variant(self.variant)

    def client_credentials(self) -> ClientCredentials:
        return ClientCredentials(self.consumer_key, self.consumer_secret, self.callback_uri)

    def to_dict(self, include_secret: bool = False) -> Dict[str, Any]:
        data = asdict(self)
        if not include_secret:
            data.pop("consumer_secret")
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ClientConfig':
        """Build settings from a dictionary, ignoring unknown keys."""
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {', '.join(unknown)}")
        try:
            return cls(**{k: v for k, v in data.items() if k in known})
        except TypeError as e:
            raise InvalidConfigurationError(f"Invalid configuration format: {e}", ErrorCodes.INVALID_CONFIG)

    @classmethod
    def from_json(cls, json_string: str) -> 'ClientConfig':
        """Load settings from a JSON document."""
        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            raise InvalidConfigurationError(f"Failed to parse configuration JSON: {e}", ErrorCodes.INVALID_CONFIG)
        if not isinstance(data, dict):
            raise InvalidConfigurationError("Configuration JSON must be an object", ErrorCodes.INVALID_CONFIG)
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> 'ClientConfig':
        """Load settings from a JSON file."""
        try:
            with open(Path(file_path), 'r', encoding='utf-8') as f:
                json_string = f.read()
        except OSError as e:
            raise InvalidConfigurationError(f"Failed to read configuration file: {e}", ErrorCodes.INVALID_CONFIG)
        return cls.from_json(json_string)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> 'ClientConfig':
        """
        Load settings from GARMIN_* environment variables.

        Args:
            environ: Mapping to read instead of os.environ
            **overrides: Values that take precedence over the environment

        Returns:
            ClientConfig: Loaded settings
        """
        environ = os.environ if environ is None else environ
        data: Dict[str, Any] = {}
        for suffix, field_name in _ENV_FIELDS.items():
            value = environ.get(ENV_PREFIX + suffix)
            if value not in (None, ""):
                data[field_name] = value
        data.update({k: v for k, v in overrides.items() if v is not None})

        if not data.get("consumer_key") or not data.get("consumer_secret"):
            raise InvalidConfigurationError(
                "Garmin consumer key/secret not configured. "
                "Set GARMIN_CONSUMER_KEY and GARMIN_CONSUMER_SECRET environment variables.",
                ErrorCodes.INVALID_CREDENTIALS
            )
        return cls.from_dict(data)


def _parse_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise InvalidConfigurationError(f"Invalid boolean for {name}: {value!r}", ErrorCodes.INVALID_CONFIG)
