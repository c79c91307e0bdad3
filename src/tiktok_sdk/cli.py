"""
Command-line interface for TikTok Python SDK
Debugging helpers for canonical URLs, response decoding and credential obfuscation
"""

import argparse
import sys
import json
from pathlib import Path
from typing import Dict, List, Optional

from . import __version__
from .config import DEFAULT_BASE_URL, load_request_params_from_file
from .crypto import encrypt_with_xor
from .decoding import decode_response
from .exceptions import TikTokSDKError, ValidationError
from .signing import build_canonical_url, create_params_serializer, generate_rticket, generate_timestamp


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='tiktok-sdk',
        description='TikTok SDK command-line tools for inspecting signed requests'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'TikTok Python SDK {__version__}'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    canonical_parser = subparsers.add_parser(
        'canonical-url',
        help='Print the canonical URL that would be passed to the signer'
    )
    canonical_parser.add_argument('path', help='Endpoint path, e.g. aweme/v1/user/')
    canonical_parser.add_argument('--params-file', required=True, help='JSON file with device parameters')
    canonical_parser.add_argument(
        '--param',
        action='append',
        default=[],
        metavar='KEY=VALUE',
        help='Request parameter (repeatable)'
    )
    canonical_parser.add_argument('--base-url', default=DEFAULT_BASE_URL, help='Request origin')
    canonical_parser.add_argument('--ts', type=int, help='Fixed timestamp instead of the current time')

    decode_parser = subparsers.add_parser('decode', help='Decode a response body with big-integer safety')
    decode_parser.add_argument('file', help='File containing the raw response body ("-" for stdin)')

    xor_parser = subparsers.add_parser('xor', help='Obfuscate a credential for the login endpoints')
    xor_parser.add_argument('text', help='Credential to obfuscate')

    return parser


def parse_param_pairs(pairs: List[str]) -> Dict[str, str]:
    """Parse KEY=VALUE arguments into a dict, keeping their order."""
    params: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition('=')
        if not sep or not key:
            raise ValidationError(f"Invalid parameter '{pair}', expected KEY=VALUE")
        params[key] = value
    return params


def handle_canonical_url_command(args) -> int:
    """Handle canonical URL construction."""
    params = load_request_params_from_file(args.params_file)
    params.update(parse_param_pairs(args.param))
    params['ts'] = args.ts if args.ts is not None else generate_timestamp()
    params['_rticket'] = generate_rticket()

    base_url = args.base_url if args.base_url.endswith('/') else args.base_url + '/'
    print(build_canonical_url(f"{base_url}{args.path}", params, create_params_serializer()))
    return 0


def handle_decode_command(args) -> int:
    """Handle response body decoding."""
    if args.file == '-':
        raw = sys.stdin.buffer.read()
    else:
        raw = Path(args.file).read_bytes()

    # Empty bodies are passed through undecoded
    if not raw:
        print()
        return 0

    decoded = decode_response(raw)
    print(json.dumps(decoded, indent=2, ensure_ascii=False))
    return 0


def handle_xor_command(args) -> int:
    """Handle credential obfuscation."""
    print(encrypt_with_xor(args.text))
    return 0


def main(argv: Optional[list] = None) -> int:
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

    try:
        if args.command == 'canonical-url':
            return handle_canonical_url_command(args)
        elif args.command == 'decode':
            return handle_decode_command(args)
        elif args.command == 'xor':
            return handle_xor_command(args)
        else:
            # No command specified, show help
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130
    except (TikTokSDKError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
