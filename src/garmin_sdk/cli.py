"""
Command-line interface for the Garmin Python SDK
Runs the OAuth1 handshake and calls the signed wellness endpoints
"""

import argparse
import json
import logging
import sys
from typing import Dict, List, Optional

from . import initialize_sdk, __version__
from .client import GarminApiClient, BackfillType
from .config.environment import ApiVariant
from .config.settings import ClientConfig
from .exceptions import GarminSDKError, AuthenticationError
from .signing.types import TemporaryCredentials, TokenCredentials

SUMMARY_COMMANDS = {
    'activities': 'get_activity_summary',
    'dailies': 'get_daily_summary',
    'manually-updated-activities': 'get_manually_updated_activity_summary',
    'activity-details': 'get_activity_details_summary',
}


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='garmin-oauth',
        description='Garmin Health API command-line interface for the OAuth1 handshake and data requests'
    )

    parser.add_argument('--version', action='version', version=f'Garmin Python SDK {__version__}')
    parser.add_argument('--check-compatibility', action='store_true', help='Check platform compatibility and exit')
    parser.add_argument('-v', '--verbose', action='count', default=0, help='Increase log output (-v info, -vv debug)')
    parser.add_argument('--config', help='JSON configuration file (defaults to GARMIN_* environment variables)')
    parser.add_argument('--consumer-key', help='OAuth1 consumer key')
    parser.add_argument('--consumer-secret', help='OAuth1 consumer secret')
    parser.add_argument('--callback-uri', help='Callback URI registered for the application')
    parser.add_argument('--variant', choices=[v.value for v in ApiVariant], help='API deployment variant')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    subparsers.add_parser('request-token', help='Obtain temporary credentials and print the authorization URL')

    authorize_parser = subparsers.add_parser('authorize-url', help='Print the authorization URL for a request token')
    authorize_parser.add_argument('--request-token', required=True, help='Temporary credentials identifier')

    access_parser = subparsers.add_parser('access-token', help='Exchange a verifier for token credentials')
    access_parser.add_argument('--request-token', required=True, help='Temporary credentials identifier')
    access_parser.add_argument('--request-token-secret', required=True, help='Temporary credentials secret')
    access_parser.add_argument('--callback-token', help='oauth_token echoed on the callback (defaults to --request-token)')
    access_parser.add_argument('--verifier', required=True, help='oauth_verifier from the callback')

    fetch_parser = subparsers.add_parser('fetch', help='Fetch a summary')
    fetch_parser.add_argument('summary', choices=sorted(SUMMARY_COMMANDS), help='Summary endpoint')
    _add_token_arguments(fetch_parser)
    _add_param_argument(fetch_parser)

    backfill_parser = subparsers.add_parser('backfill', help='Request historic summaries')
    backfill_parser.add_argument('summary_type', choices=[t.value for t in BackfillType], help='Summary type')
    _add_token_arguments(backfill_parser)
    _add_param_argument(backfill_parser)

    deregister_parser = subparsers.add_parser('deregister', help='Delete the user access token')
    _add_token_arguments(deregister_parser)

    user_parser = subparsers.add_parser('user-id', help='Print the Garmin user id')
    _add_token_arguments(user_parser)

    return parser


def _add_token_arguments(parser):
    parser.add_argument('--token', required=True, help='User access token')
    parser.add_argument('--token-secret', required=True, help='User access token secret')


def _add_param_argument(parser):
    parser.add_argument(
        '--param',
        action='append',
        default=[],
        metavar='NAME=VALUE',
        help='Query parameter (repeatable), e.g. uploadStartTimeInSeconds=1452470400'
    )


def parse_params(values: List[str]) -> List[tuple]:
    """Parse NAME=VALUE pairs, keeping order and repeats."""
    params = []
    for item in values:
        name, sep, value = item.partition('=')
        if not sep or not name:
            raise ValueError(f"Invalid parameter {item!r}, expected NAME=VALUE")
        params.append((name, value))
    return params


def load_config(args) -> ClientConfig:
    """Load settings from --config or the environment, command-line flags taking precedence."""
    overrides: Dict[str, Optional[str]] = {
        'consumer_key': args.consumer_key,
        'consumer_secret': args.consumer_secret,
        'callback_uri': args.callback_uri,
        'variant': args.variant,
    }
    if args.config:
        data = ClientConfig.from_file(args.config).to_dict(include_secret=True)
        data.update({k: v for k, v in overrides.items() if v is not None})
        return ClientConfig.from_dict(data)
    return ClientConfig.from_env(**overrides)


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s %(name)s: %(message)s')


def _print_json(data) -> None:
    print(json.dumps(data, indent=2))


def _print_body(body: str) -> None:
    if not body:
        print("Request accepted")
        return
    try:
        _print_json(json.loads(body))
    except ValueError:
        print(body)


def run_command(args, client: GarminApiClient) -> int:
    """Dispatch a parsed command to the client."""
    if args.command == 'request-token':
        temporary = client.request_temporary_credentials()
        data = temporary.to_dict()
        data['authorization_url'] = client.get_authorization_url(temporary)
        _print_json(data)
        return 0

    if args.command == 'authorize-url':
        print(client.get_authorization_url(args.request_token))
        return 0

    if args.command == 'access-token':
        temporary = TemporaryCredentials(args.request_token, args.request_token_secret)
        token = client.exchange_for_token_credentials(
            temporary, args.callback_token or args.request_token, args.verifier
        )
        _print_json(token.to_dict())
        return 0

    token = TokenCredentials(args.token, args.token_secret)

    if args.command == 'fetch':
        method = getattr(client, SUMMARY_COMMANDS[args.summary])
        _print_body(method(token, parse_params(args.param)))
    elif args.command == 'backfill':
        _print_body(client.backfill(token, args.summary_type, parse_params(args.param)))
    elif args.command == 'deregister':
        _print_body(client.delete_user_access_token(token))
    elif args.command == 'user-id':
        user = client.get_user_details(token)
        _print_json({'userId': user.uid})
    return 0


def main(argv=None) -> int:
    """
    Main entry point for the CLI

    Args:
        argv: Command line arguments (None to use sys.argv)

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.check_compatibility:
        result = initialize_sdk()
        if result['compatible']:
            print("✓ Platform is compatible with the Garmin SDK")
            return 0
        print("✗ Platform is not compatible with the Garmin SDK")
        for warning in result['warnings']:
            print(f"  Error: {warning}")
        return 1

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config(args)
        with GarminApiClient.from_config(config) as client:
            return run_command(args, client)
    except AuthenticationError as e:
        print(f"Error: {e} (status {e.http_status})", file=sys.stderr)
        return 1
    except (GarminSDKError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130


if __name__ == '__main__':
    sys.exit(main())
