"""
OAuth1 signature methods

HMAC-SHA1 is what the Garmin servers verify; PLAINTEXT is kept for endpoints
reached over TLS that accept it. HMAC is computed with the cryptography package.
"""

import base64
import logging
from typing import Dict, Any, Optional

from cryptography.hazmat.primitives import hashes, hmac

from ..exceptions import InvalidConfigurationError, ErrorCodes
from .types import HttpMethod, SignatureMethodName
from .normalizer import to_base_string_parameters
from .utils import percent_encode, parse_url, as_parameter_list, ParameterInput

logger = logging.getLogger(__name__)


def build_signing_key(consumer_secret: str, token_secret: Optional[str] = None) -> str:
    """
    Build the signing key ``enc(consumer_secret)&enc(token_secret)``.

    The '&' is always present, even before a token secret exists.
    """
    return f"{percent_encode(consumer_secret)}&{percent_encode(token_secret or '')}"


def build_signature_base_string(method: str, url: str, parameters: ParameterInput = None) -> str:
    """
    Build the signature base string.

    Query parameters found in ``url`` are decoded and signed together with
    ``parameters``.

    Args:
        method: HTTP method
        url: Absolute request URL, possibly with a query string
        parameters: Protocol and body parameters

    Returns:
        str: ``METHOD&enc(base_url)&enc(normalized_parameters)``
    """
    parsed = parse_url(url)
    method_value = method.value if isinstance(method, HttpMethod) else str(method)
    all_parameters = list(parsed["query_parameters"]) + as_parameter_list(parameters)

    return "&".join((
        method_value.upper(),
        percent_encode(parsed["base_url"]),
        percent_encode(to_base_string_parameters(all_parameters)),
    ))


class SignatureMethod:
    """Base class for OAuth1 signature methods"""

    name: SignatureMethodName

    def sign(self, method: str, url: str, parameters: ParameterInput,
             consumer_secret: str, token_secret: Optional[str] = None) -> str:
        raise NotImplementedError


class HmacSha1Signature(SignatureMethod):
    """HMAC-SHA1 over the signature base string, base64 encoded"""

    name = SignatureMethodName.HMAC_SHA1

    def sign(self, method: str, url: str, parameters: ParameterInput,
             consumer_secret: str, token_secret: Optional[str] = None) -> str:
        base_string = build_signature_base_string(method, url, parameters)
        logger.debug(f"Signature base string: {base_string}")
        return self.sign_base_string(base_string, build_signing_key(consumer_secret, token_secret))

    @staticmethod
    def sign_base_string(base_string: str, signing_key: str) -> str:
        mac = hmac.HMAC(signing_key.encode('utf-8'), hashes.SHA1())
        mac.update(base_string.encode('utf-8'))
        return base64.b64encode(mac.finalize()).decode('ascii')


class PlaintextSignature(SignatureMethod):
    """PLAINTEXT: the signature is the signing key itself"""

    name = SignatureMethodName.PLAINTEXT

    def sign(self, method: str, url: str, parameters: ParameterInput,
             consumer_secret: str, token_secret: Optional[str] = None) -> str:
        return build_signing_key(consumer_secret, token_secret)


_SIGNATURE_METHODS = {
    SignatureMethodName.HMAC_SHA1: HmacSha1Signature,
    SignatureMethodName.PLAINTEXT: PlaintextSignature,
}


def create_signature_method(name=SignatureMethodName.HMAC_SHA1) -> SignatureMethod:
    """
    Create a signature method by name.

    Raises:
        InvalidConfigurationError: If the method is not supported
    """
    try:
        return _SIGNATURE_METHODS[SignatureMethodName(name)]()
    except (ValueError, KeyError):
        raise InvalidConfigurationError(
            f"Unsupported signature method: {name}",
            ErrorCodes.INVALID_SIGNATURE_METHOD,
            {"signature_method": str(name)}
        )


def check_platform_compatibility() -> Dict[str, Any]:
    """
    Check that the cryptography backend can compute HMAC-SHA1.

    Some FIPS-restricted OpenSSL builds refuse SHA-1.

    Returns:
        dict: 'hmac_sha1_supported' flag and the error text when unsupported
    """
    try:
        HmacSha1Signature.sign_base_string("compatibility check", "key&")
        return {'hmac_sha1_supported': True, 'error': None}
    except Exception as e:
        return {'hmac_sha1_supported': False, 'error': str(e)}
