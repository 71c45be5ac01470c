"""
PactMock CLI

Command-line interface for running and controlling a mock service.

Commands:
    serve       - Start the mock service
    verify      - Ask a running service whether all interactions were matched
    clear       - Clear the interactions of a running service

Examples:
    # Start a mock service for the Animal Service provider
    pactmock serve --name "Animal Service" --port 1234

    # Start with interactions preloaded from a file
    pactmock serve --interactions interactions.yaml

    # Verify at the end of a test run
    pactmock verify --url http://localhost:1234
"""

import argparse
import sys

import requests

from .client import MockServiceClient
from .mock import MockConfig, MockService


def cmd_serve(args):
    """
    Start the mock service (blocking).

    Args:
        args: Parsed command-line arguments
    """
    config = MockConfig(
        name=args.name,
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        log_file=args.log_file,
        interactions_file=args.interactions
    )

    try:
        service = MockService(config=config)
    except (OSError, ValueError) as e:
        print(f"❌ Failed to create mock service: {e}")
        sys.exit(1)

    try:
        service.start()
    except KeyboardInterrupt:
        print("\n\n👋 Mock service stopped")


def cmd_verify(args):
    """Verify a running mock service; exit code 1 when interactions are missing."""
    client = MockServiceClient(args.url)
    try:
        matched, text = client.verification()
    except requests.RequestException as e:
        print(f"❌ Could not reach mock service at {args.url}: {e}")
        sys.exit(1)

    print(text)
    if not matched:
        sys.exit(1)


def cmd_clear(args):
    """Clear the interactions of a running mock service."""
    client = MockServiceClient(args.url)
    try:
        client.clear_interactions()
    except requests.RequestException as e:
        print(f"❌ Could not clear interactions at {args.url}: {e}")
        sys.exit(1)

    print("✅ Interactions cleared")


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="PactMock - mock provider for consumer-driven contract tests",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s serve --name "Animal Service" --port 1234
  %(prog)s serve --interactions interactions.yaml --log-file mock.log
  %(prog)s verify --url http://localhost:1234
  %(prog)s clear --url http://localhost:1234
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # --- SERVE command ---
    serve_parser = subparsers.add_parser('serve', help='Start the mock service')
    serve_parser.add_argument('--name', default='MockService', help='Service name used in logs (default: MockService)')
    serve_parser.add_argument('--host', default='127.0.0.1', help='Host to bind (default: 127.0.0.1)')
    serve_parser.add_argument('-p', '--port', type=int, default=1234, help='Port to bind (default: 1234)')
    serve_parser.add_argument('--interactions', help='JSON or YAML file of interactions to register at startup')
    serve_parser.add_argument('--log-level', default='info', choices=['debug', 'info', 'warning', 'error'],
                              help='Log level (default: info)')
    serve_parser.add_argument('--log-file', help='Write logs to this file instead of stdout')

    # --- VERIFY command ---
    verify_parser = subparsers.add_parser('verify', help='Verify a running mock service')
    verify_parser.add_argument('--url', default='http://127.0.0.1:1234', help='Mock service URL')

    # --- CLEAR command ---
    clear_parser = subparsers.add_parser('clear', help='Clear interactions of a running mock service')
    clear_parser.add_argument('--url', default='http://127.0.0.1:1234', help='Mock service URL')

    args = parser.parse_args(argv)

    if args.command == 'serve':
        cmd_serve(args)
    elif args.command == 'verify':
        cmd_verify(args)
    elif args.command == 'clear':
        cmd_clear(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == '__main__':
    main()
