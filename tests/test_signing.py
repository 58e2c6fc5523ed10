"""
Test suite for OAuth1 request signing

This module tests signing keys, signature base strings, HMAC-SHA1 signatures,
the protocol header signer and the requests integration.
"""

import re
import threading
import time
from urllib.parse import unquote

import pytest
import requests

from garmin_sdk.exceptions import InvalidConfigurationError, ErrorCodes
from garmin_sdk.signing import (
    # Types
    ClientCredentials,
    TemporaryCredentials,
    TokenCredentials,
    OAuth1SigningConfig,
    SignatureMethodName,
    HttpMethod,
    # Signature methods
    HmacSha1Signature,
    PlaintextSignature,
    create_signature_method,
    build_signing_key,
    build_signature_base_string,
    # Signer
    OAuth1Signer,
    OAuth1Auth,
    create_signer,
    sign_request,
    # Utilities
    generate_nonce,
    generate_timestamp,
    validate_nonce,
    validate_timestamp,
    parse_url,
)

# Worked example published in Twitter's "Creating a signature" guide
EXAMPLE_URL = "https://api.twitter.com/1.1/statuses/update.json"
EXAMPLE_CONSUMER_KEY = "xvz1evFS4wEEPTGEFPHBog"
EXAMPLE_CONSUMER_SECRET = "kAcSOqF21Fu85e7zjz7ZN2U4ZRhfV3WpwPAoE3Z7kBw"
EXAMPLE_TOKEN = "370773112-GmHxMAgYyLbNEtIKZeRNFsMKPR9EyMZeS9weJAEb"
EXAMPLE_TOKEN_SECRET = "LswwdoUaIvS8ltyTt5jkRh4J50vUPVVHtR2YPi5kE"
EXAMPLE_NONCE = "kYjzVBB8Y0ZFabxSWbWovY3uYSQ2pTgmZeNu2VS4cg"
EXAMPLE_TIMESTAMP = "1318622958"
EXAMPLE_STATUS = "Hello Ladies + Gentlemen, a signed OAuth request!"
EXAMPLE_SIGNATURE = "tnnArxj06cWHq44gCs1OSKk/jLY="
EXAMPLE_BASE_STRING = (
    "POST&https%3A%2F%2Fapi.twitter.com%2F1.1%2Fstatuses%2Fupdate.json&"
    "include_entities%3Dtrue%26oauth_consumer_key%3Dxvz1evFS4wEEPTGEFPHBog%26"
    "oauth_nonce%3DkYjzVBB8Y0ZFabxSWbWovY3uYSQ2pTgmZeNu2VS4cg%26"
    "oauth_signature_method%3DHMAC-SHA1%26oauth_timestamp%3D1318622958%26"
    "oauth_token%3D370773112-GmHxMAgYyLbNEtIKZeRNFsMKPR9EyMZeS9weJAEb%26"
    "oauth_version%3D1.0%26"
    "status%3DHello%2520Ladies%2520%252B%2520Gentlemen%252C%2520a%2520signed%2520OAuth%2520request%2521"
)


def example_protocol_parameters():
    return [
        ("include_entities", "true"),
        ("oauth_consumer_key", EXAMPLE_CONSUMER_KEY),
        ("oauth_nonce", EXAMPLE_NONCE),
        ("oauth_signature_method", "HMAC-SHA1"),
        ("oauth_timestamp", EXAMPLE_TIMESTAMP),
        ("oauth_token", EXAMPLE_TOKEN),
        ("oauth_version", "1.0"),
        ("status", EXAMPLE_STATUS),
    ]


def fixed_config(nonce="fixednonce", timestamp="1700000000"):
    return OAuth1SigningConfig(
        nonce_generator=lambda: nonce,
        timestamp_generator=lambda: timestamp,
    )


def header_parameters(header):
    """Decode an Authorization header into a dict."""
    assert header.startswith("OAuth ")
    pairs = re.findall(r'([^\s,=]+)="([^"]*)"', header[len("OAuth "):])
    return {unquote(k): unquote(v) for k, v in pairs}


class TestSigningUtilities:
    """Test utility functions"""

    def test_generate_nonce(self):
        """Test nonce generation"""
        nonce = generate_nonce()
        assert isinstance(nonce, str)
        assert validate_nonce(nonce)
        assert len(nonce) == 32

        # Generate multiple nonces to ensure uniqueness
        nonces = [generate_nonce() for _ in range(100)]
        assert len(set(nonces)) == 100

    def test_generate_nonce_concurrently(self):
        """Nonces generated from many threads do not collide"""
        nonces = []
        lock = threading.Lock()

        def worker():
            local = [generate_nonce() for _ in range(200)]
            with lock:
                nonces.extend(local)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(nonces) == 1600
        assert len(set(nonces)) == 1600

    def test_generate_timestamp(self):
        """Timestamp is the current Unix time as a string"""
        timestamp = generate_timestamp()
        assert isinstance(timestamp, str)
        assert validate_timestamp(timestamp)
        assert abs(int(timestamp) - int(time.time())) < 2

    def test_validate_nonce(self):
        """Test nonce validation"""
        assert validate_nonce("abcDEF123-._~")
        assert not validate_nonce("")
        assert not validate_nonce("has space")
        assert not validate_nonce(None)

    def test_validate_timestamp(self):
        """Test timestamp validation"""
        assert validate_timestamp("1318622958")
        assert not validate_timestamp("0")
        assert not validate_timestamp("-1")
        assert not validate_timestamp("12.5")
        assert not validate_timestamp(1318622958)

    def test_parse_url(self):
        """Base URL drops query, fragment and default ports, and lower-cases the host"""
        parsed = parse_url("HTTPS://HealthAPI.Garmin.com:443/wellness-api/rest/dailies?a=1&b=x+y#frag")
        assert parsed["base_url"] == "https://healthapi.garmin.com/wellness-api/rest/dailies"
        assert parsed["query_parameters"] == [("a", "1"), ("b", "x y")]

        assert parse_url("http://example.com:8080")["base_url"] == "http://example.com:8080/"

    def test_parse_url_invalid(self):
        """Only absolute http(s) URLs can be signed"""
        with pytest.raises(InvalidConfigurationError) as exc_info:
            parse_url("not-a-url")
        assert exc_info.value.error_code == ErrorCodes.INVALID_URL

        with pytest.raises(InvalidConfigurationError):
            parse_url("ftp://example.com/file")


class TestSignatureMethod:
    """Test signing keys, base strings and signatures"""

    def test_signing_key(self):
        """Secrets are encoded and joined with '&'"""
        assert build_signing_key(EXAMPLE_CONSUMER_SECRET, EXAMPLE_TOKEN_SECRET) == (
            "kAcSOqF21Fu85e7zjz7ZN2U4ZRhfV3WpwPAoE3Z7kBw&LswwdoUaIvS8ltyTt5jkRh4J50vUPVVHtR2YPi5kE"
        )

    def test_signing_key_without_token_secret(self):
        """The '&' stays when there is no token secret yet"""
        assert build_signing_key("CS") == "CS&"
        assert build_signing_key("C S", None) == "C%20S&"

    def test_base_string(self):
        """Base string matches the published example"""
        base_string = build_signature_base_string("post", EXAMPLE_URL, example_protocol_parameters())
        assert base_string == EXAMPLE_BASE_STRING

    def test_base_string_includes_query_parameters(self):
        """Query parameters in the URL are signed with the other parameters"""
        url = "HTTP://Example.com:80/request?b5=%3D%253D&a3=a&c%40=&a2=r%20b"
        parameters = [
            ("oauth_consumer_key", "9djdj82h48djs9d2"),
            ("oauth_token", "kkk9d7dh3k39sjv7"),
            ("oauth_signature_method", "HMAC-SHA1"),
            ("oauth_timestamp", "137131201"),
            ("oauth_nonce", "7d8f3e4a"),
            ("c2", ""),
            ("a3", "2 q"),
        ]

        assert build_signature_base_string(HttpMethod.POST, url, parameters) == (
            "POST&http%3A%2F%2Fexample.com%2Frequest&"
            "a2%3Dr%2520b%26a3%3D2%2520q%26a3%3Da%26b5%3D%253D%25253D%26c%2540%3D%26c2%3D%26"
            "oauth_consumer_key%3D9djdj82h48djs9d2%26oauth_nonce%3D7d8f3e4a%26"
            "oauth_signature_method%3DHMAC-SHA1%26oauth_timestamp%3D137131201%26"
            "oauth_token%3Dkkk9d7dh3k39sjv7"
        )

    def test_hmac_sha1_signature(self):
        """HMAC-SHA1 signature matches the published example"""
        signature = HmacSha1Signature().sign(
            "POST", EXAMPLE_URL, example_protocol_parameters(),
            EXAMPLE_CONSUMER_SECRET, EXAMPLE_TOKEN_SECRET
        )
        assert signature == EXAMPLE_SIGNATURE

    def test_signature_is_pure(self):
        """Repeated signing of the same input yields the same signature"""
        method = HmacSha1Signature()
        signatures = {
            method.sign("GET", "https://example.com/a?x=1", {"oauth_nonce": "n"}, "CS", "TS")
            for _ in range(5)
        }
        assert len(signatures) == 1

    def test_signature_depends_on_method(self):
        """GET and DELETE over the same URL sign differently"""
        method = HmacSha1Signature()
        get = method.sign("GET", "https://example.com/user/registration", {}, "CS", "TS")
        delete = method.sign("DELETE", "https://example.com/user/registration", {}, "CS", "TS")
        assert get != delete

    def test_plaintext_signature(self):
        """PLAINTEXT signature is the signing key"""
        assert PlaintextSignature().sign("GET", "https://example.com/", {}, "C S", "T&S") == "C%20S&T%26S"

    def test_create_signature_method(self):
        """Signature methods are created by name"""
        assert isinstance(create_signature_method("HMAC-SHA1"), HmacSha1Signature)
        assert isinstance(create_signature_method(SignatureMethodName.PLAINTEXT), PlaintextSignature)

        with pytest.raises(InvalidConfigurationError) as exc_info:
            create_signature_method("RSA-SHA1")
        assert exc_info.value.error_code == ErrorCodes.INVALID_SIGNATURE_METHOD


class TestCredentials:
    """Test credential validation"""

    def test_client_credentials(self):
        """Valid client credentials"""
        credentials = ClientCredentials("CK", "CS", "https://app/cb")
        assert credentials.identifier == "CK"
        assert credentials.callback_uri == "https://app/cb"
        assert "CS" not in repr(credentials)

    @pytest.mark.parametrize("identifier,secret", [("", "CS"), ("CK", ""), (None, "CS"), ("CK", None)])
    def test_client_credentials_invalid(self, identifier, secret):
        """Missing identifier or secret fails fast"""
        with pytest.raises(InvalidConfigurationError) as exc_info:
            ClientCredentials(identifier, secret)
        assert exc_info.value.error_code == ErrorCodes.INVALID_CREDENTIALS

    def test_token_credentials_roundtrip_dict(self):
        """Token credentials can be persisted as a dict"""
        token = TokenCredentials("T", "S")
        assert TokenCredentials.from_dict(token.to_dict()) == token
        assert "secret" not in repr(token)

    def test_temporary_credentials_from_incomplete_dict(self):
        """Incomplete persisted credentials are rejected"""
        with pytest.raises(InvalidConfigurationError):
            TemporaryCredentials.from_dict({"identifier": "T1"})

    def test_credentials_are_immutable(self):
        """Credentials cannot be changed after construction"""
        token = TokenCredentials("T", "S")
        with pytest.raises(AttributeError):
            token.identifier = "other"


class TestOAuth1Signer:
    """Test protocol header construction"""

    def test_published_example(self):
        """The signer reproduces the published example end to end"""
        signer = OAuth1Signer(
            ClientCredentials(EXAMPLE_CONSUMER_KEY, EXAMPLE_CONSUMER_SECRET),
            fixed_config(EXAMPLE_NONCE, EXAMPLE_TIMESTAMP),
        )
        result = signer.sign_request(
            "POST",
            EXAMPLE_URL + "?include_entities=true",
            TokenCredentials(EXAMPLE_TOKEN, EXAMPLE_TOKEN_SECRET),
            {"status": EXAMPLE_STATUS},
        )

        assert result.base_string == EXAMPLE_BASE_STRING
        assert result.signature == EXAMPLE_SIGNATURE
        assert 'oauth_signature="tnnArxj06cWHq44gCs1OSKk%2FjLY%3D"' in result.authorization
        assert result.headers == {"Authorization": result.authorization}

    def test_header_contents(self, client_credentials, token):
        """Header carries every protocol parameter plus the signature"""
        signer = OAuth1Signer(client_credentials, fixed_config())
        header = signer.build_header("GET", "https://healthapi.garmin.com/wellness-api/rest/dailies?a=1", token)
        params = header_parameters(header)

        assert params == {
            "oauth_consumer_key": "CK",
            "oauth_nonce": "fixednonce",
            "oauth_signature_method": "HMAC-SHA1",
            "oauth_timestamp": "1700000000",
            "oauth_version": "1.0",
            "oauth_token": "TOKEN",
            "oauth_signature": params["oauth_signature"],
        }
        # Query parameters are signed but not repeated in the header
        assert "a" not in params

    def test_header_is_sorted(self, client_credentials, token):
        """Header parameters appear in normalized order"""
        signer = OAuth1Signer(client_credentials, fixed_config())
        header = signer.build_header("GET", "https://example.com/", token)
        names = re.findall(r'([a-z_]+)="', header)
        assert names == sorted(names)

    def test_temporary_request_has_no_token(self, client_credentials):
        """Without credentials no oauth_token is sent and the key ends with '&'"""
        signer = OAuth1Signer(client_credentials, fixed_config())
        url = "https://connectapi.garmin.com/oauth-service/oauth/request_token"
        result = signer.sign_request("POST", url, include_callback=True)
        params = header_parameters(result.authorization)

        assert "oauth_token" not in params
        assert params["oauth_callback"] == "https://app/cb"
        assert result.signature == HmacSha1Signature.sign_base_string(result.base_string, "CS&")

    def test_callback_only_when_requested(self, client_credentials, token):
        """oauth_callback is only added for the temporary credentials request"""
        signer = OAuth1Signer(client_credentials, fixed_config())
        params = header_parameters(signer.build_header("GET", "https://example.com/", token))
        assert "oauth_callback" not in params

    def test_body_parameters_signed(self, client_credentials):
        """Body parameters are signed and included in the header"""
        signer = OAuth1Signer(client_credentials, fixed_config())
        temporary = TemporaryCredentials("T1", "TS1")
        result = signer.sign_request(
            "POST", "https://connectapi.garmin.com/oauth-service/oauth/access_token",
            temporary, {"oauth_verifier": "V"}
        )

        assert ("oauth_verifier", "V") in result.parameters
        assert header_parameters(result.authorization)["oauth_verifier"] == "V"
        assert result.signature == HmacSha1Signature.sign_base_string(result.base_string, "CS&TS1")

    def test_reproducible_with_fixed_nonce_and_timestamp(self, client_credentials, token):
        """Same inputs and generators give the same header"""
        signer = OAuth1Signer(client_credentials, fixed_config())
        url = "https://example.com/dailies?uploadStartTimeInSeconds=1"
        assert signer.build_header("GET", url, token) == signer.build_header("GET", url, token)

    def test_nonce_changes_between_requests(self, client_credentials, token):
        """Default generators produce a new nonce per request"""
        signer = OAuth1Signer(client_credentials)
        first = header_parameters(signer.build_header("GET", "https://example.com/", token))
        second = header_parameters(signer.build_header("GET", "https://example.com/", token))
        assert first["oauth_nonce"] != second["oauth_nonce"]

    def test_invalid_credentials_type(self, client_credentials):
        """Anything but temporary/token credentials is rejected before signing"""
        signer = OAuth1Signer(client_credentials)
        with pytest.raises(InvalidConfigurationError):
            signer.build_header("GET", "https://example.com/", credentials=("T", "S"))

    def test_invalid_client_credentials(self):
        """The signer requires ClientCredentials"""
        with pytest.raises(InvalidConfigurationError):
            OAuth1Signer({"identifier": "CK", "secret": "CS"})

    def test_invalid_generated_nonce(self, client_credentials):
        """A custom nonce generator producing unsafe text is rejected"""
        signer = OAuth1Signer(client_credentials, fixed_config(nonce="not safe"))
        with pytest.raises(InvalidConfigurationError) as exc_info:
            signer.build_header("GET", "https://example.com/")
        assert exc_info.value.error_code == ErrorCodes.INVALID_NONCE

    def test_invalid_generated_timestamp(self, client_credentials):
        """A custom timestamp generator producing non-numeric text is rejected"""
        signer = OAuth1Signer(client_credentials, fixed_config(timestamp="yesterday"))
        with pytest.raises(InvalidConfigurationError) as exc_info:
            signer.build_header("GET", "https://example.com/")
        assert exc_info.value.error_code == ErrorCodes.INVALID_TIMESTAMP

    def test_invalid_signature_method_config(self):
        """Unknown signature methods are rejected in the config"""
        with pytest.raises(InvalidConfigurationError):
            OAuth1SigningConfig(signature_method="MD5")

    def test_plaintext_config(self, client_credentials, token):
        """PLAINTEXT can be selected through the config"""
        config = OAuth1SigningConfig(signature_method=SignatureMethodName.PLAINTEXT)
        signer = OAuth1Signer(client_credentials, config)
        params = header_parameters(signer.build_header("GET", "https://example.com/", token))
        assert params["oauth_signature_method"] == "PLAINTEXT"
        assert params["oauth_signature"] == "CS&TOKEN_SECRET"

    def test_create_signer_and_sign_request(self, token):
        """Convenience constructors produce working signers"""
        signer = create_signer("CK", "CS", config=fixed_config())
        result = sign_request(
            ClientCredentials("CK", "CS"), "GET", "https://example.com/", token, config=fixed_config()
        )
        assert signer.build_header("GET", "https://example.com/", token) == result.authorization


class TestRequestsIntegration:
    """Test the requests auth hook"""

    def test_signs_prepared_request(self, client_credentials, token):
        """The hook signs the exact prepared URL"""
        signer = OAuth1Signer(client_credentials, fixed_config())
        request = requests.Request(
            "GET",
            "https://healthapi.garmin.com/wellness-api/rest/dailies",
            params={"uploadStartTimeInSeconds": "1452470400"},
            auth=OAuth1Auth(signer, token),
        ).prepare()

        expected = signer.build_header("GET", request.url, token)
        assert request.headers["Authorization"] == expected

    def test_signs_form_body(self, client_credentials):
        """Form-encoded body parameters are part of the signature"""
        signer = OAuth1Signer(client_credentials, fixed_config())
        temporary = TemporaryCredentials("T1", "TS1")
        url = "https://connectapi.garmin.com/oauth-service/oauth/access_token"
        request = requests.Request(
            "POST", url, data={"oauth_verifier": "V"}, auth=OAuth1Auth(signer, temporary)
        ).prepare()

        expected = signer.build_header("POST", url, temporary, {"oauth_verifier": "V"})
        assert request.headers["Authorization"] == expected

    def test_ignores_json_body(self, client_credentials, token):
        """JSON bodies are not signed"""
        signer = OAuth1Signer(client_credentials, fixed_config())
        url = "https://example.com/upload"
        request = requests.Request("POST", url, json={"a": 1}, auth=OAuth1Auth(signer, token)).prepare()
        assert request.headers["Authorization"] == signer.build_header("POST", url, token)
