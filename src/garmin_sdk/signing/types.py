"""
Type definitions for OAuth1 request signing

This module provides the credential types, enums and data classes shared by the
parameter normalizer, the signature methods and the protocol header signer.
"""

from typing import Dict, List, Optional, Tuple, Callable, Any
from dataclasses import dataclass, field
from enum import Enum

from ..exceptions import InvalidConfigurationError, ErrorCodes


class HttpMethod(str, Enum):
    """HTTP methods used against the Garmin APIs"""
    GET = "GET"
    POST = "POST"
    DELETE = "DELETE"


class SignatureMethodName(str, Enum):
    """OAuth1 signature methods"""
    HMAC_SHA1 = "HMAC-SHA1"
    PLAINTEXT = "PLAINTEXT"


OAUTH_VERSION = "1.0"


def _require_text(value: Any, name: str, owner: str) -> None:
    if not isinstance(value, str) or not value:
        raise InvalidConfigurationError(
            f"{owner} {name} must be a non-empty string",
            ErrorCodes.INVALID_CREDENTIALS,
            {"credentials": owner, "field": name}
        )


@dataclass(frozen=True)
class ClientCredentials:
    """
    Consumer credentials issued to the application by the Garmin developer program

    Attributes:
        identifier: Consumer key
        secret: Consumer secret
        callback_uri: Where the user is sent back after authorizing the application
    """
    identifier: str
    secret: str = field(repr=False)
    callback_uri: Optional[str] = None

    def __post_init__(self):
        _require_text(self.identifier, "identifier", "ClientCredentials")
        _require_text(self.secret, "secret", "ClientCredentials")
        if self.callback_uri is not None and not isinstance(self.callback_uri, str):
            raise InvalidConfigurationError(
                "ClientCredentials callback_uri must be a string",
                ErrorCodes.INVALID_CREDENTIALS,
                {"credentials": "ClientCredentials", "field": "callback_uri"}
            )


@dataclass(frozen=True)
class TemporaryCredentials:
    """Request token pair returned by the first handshake step"""
    identifier: str
    secret: str = field(repr=False)

    def __post_init__(self):
        _require_text(self.identifier, "identifier", "TemporaryCredentials")
        _require_text(self.secret, "secret", "TemporaryCredentials")

    def to_dict(self) -> Dict[str, str]:
        return {"identifier": self.identifier, "secret": self.secret}

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> 'TemporaryCredentials':
        return cls(identifier=data.get("identifier"), secret=data.get("secret"))


@dataclass(frozen=True)
class TokenCredentials:
    """
    Long-lived user access token and secret

    Returned by the token exchange and passed into every data request. The SDK
    never stores them; use to_dict/from_dict to persist them elsewhere.
    """
    identifier: str
    secret: str = field(repr=False)

    def __post_init__(self):
        _require_text(self.identifier, "identifier", "TokenCredentials")
        _require_text(self.secret, "secret", "TokenCredentials")

    def to_dict(self) -> Dict[str, str]:
        return {"identifier": self.identifier, "secret": self.secret}

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> 'TokenCredentials':
        return cls(identifier=data.get("identifier"), secret=data.get("secret"))


@dataclass
class OAuth1SigningConfig:
    """
    Configuration for OAuth1 signing

    Attributes:
        signature_method: Signature method used for every request
        nonce_generator: Optional custom nonce generator function
        timestamp_generator: Optional custom timestamp generator function
    """
    signature_method: SignatureMethodName = SignatureMethodName.HMAC_SHA1
    nonce_generator: Optional[Callable[[], str]] = None
    timestamp_generator: Optional[Callable[[], str]] = None

    def __post_init__(self):
        try:
            self.signature_method = SignatureMethodName(self.signature_method)
        except ValueError:
            raise InvalidConfigurationError(
                f"Unsupported signature method: {self.signature_method}",
                ErrorCodes.INVALID_SIGNATURE_METHOD,
                {"signature_method": str(self.signature_method)}
            )


@dataclass(frozen=True)
class OAuth1SignatureResult:
    """
    Result of signing one request

    Attributes:
        authorization: Complete Authorization header value ("OAuth ...")
        signature: The oauth_signature value
        base_string: Signature base string that was signed
        parameters: Every parameter covered by the signature, in normalized order
    """
    authorization: str
    signature: str
    base_string: str
    parameters: Tuple[Tuple[str, str], ...]

    @property
    def headers(self) -> Dict[str, str]:
        return {"Authorization": self.authorization}


# Type aliases for convenience
Parameter = Tuple[str, str]
ParameterList = List[Parameter]
NonceGenerator = Callable[[], str]
TimestampGenerator = Callable[[], str]
