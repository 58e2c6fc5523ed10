#!/usr/bin/env python3
"""
Garmin Python SDK - OAuth1 Handshake Example

This example shows how requests to the Garmin Connect and Health APIs are
signed with OAuth1 (HMAC-SHA1) and how the three-legged handshake is driven.
The signing part runs offline; the handshake part only runs when
GARMIN_CONSUMER_KEY and GARMIN_CONSUMER_SECRET are set.
"""

import sys
import os

# Add src to path for development
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from garmin_sdk import (
    # Credentials and signing
    ClientCredentials,
    TokenCredentials,
    OAuth1Signer,
    OAuth1SigningConfig,
    # Client
    GarminApiClient,
    ClientConfig,
    # Errors
    GarminSDKError,
    InvalidConfigurationError,
)


def signing_example():
    """Sign a data request with fixed nonce and timestamp"""
    print("=== Request Signing Example ===")

    config = OAuth1SigningConfig(
        nonce_generator=lambda: "examplenonce",
        timestamp_generator=lambda: "1452470400",
    )
    signer = OAuth1Signer(ClientCredentials("example-consumer-key", "example-consumer-secret"), config)
    token = TokenCredentials("example-user-token", "example-user-token-secret")

    url = ("https://healthapi.garmin.com/wellness-api/rest/dailies"
           "?uploadStartTimeInSeconds=1452470400&uploadEndTimeInSeconds=1452556800")
    result = signer.sign_request("GET", url, token)

    print(f"   URL: {url}")
    print(f"   Base string: {result.base_string}")
    print(f"   Signature: {result.signature}")
    print(f"   Authorization: {result.authorization}")


def variant_example():
    """Show the URLs of both deployments"""
    print("\n\n=== Environment Variants Example ===")

    client = GarminApiClient(ClientCredentials("example-consumer-key", "example-consumer-secret"))
    for variant in ("international", "regional"):
        client.use_variant(variant)
        print(f"--- {variant} ---")
        print(f"   API: {client.api_url}")
        print(f"   Wellness API: {client.user_api_url}")
        print(f"   Authorization page: {client.auth_url}")

    try:
        client.use_variant("europe")
    except InvalidConfigurationError as e:
        print(f"   Unknown variant: {e.error_code}: {e}")
    client.close()


def handshake_example():
    """Run the first handshake step against the live service"""
    print("\n\n=== Handshake Example ===")

    try:
        config = ClientConfig.from_env()
    except InvalidConfigurationError as e:
        print(f"   Skipped: {e}")
        return

    with GarminApiClient.from_config(config) as client:
        temporary = client.request_temporary_credentials()
        print(f"   Temporary credentials: {temporary.identifier}")
        print(f"   Send the user to: {client.get_authorization_url(temporary)}")
        print("   Then run: garmin-oauth access-token --request-token ... "
              "--request-token-secret ... --verifier ...")


def main():
    """Run all examples"""
    print("Garmin Python SDK - OAuth1 Examples")
    print("=" * 50)

    try:
        signing_example()
        variant_example()
        handshake_example()
    except GarminSDKError as e:
        print(f"\nExample failed: {e.error_code}: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
