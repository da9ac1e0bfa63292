"""
OpenAPI Mocker CLI

Command-line interface for the OpenAPI mock server.

Commands:
    serve       - Start mock HTTP server for a contract
    routes      - List the routes a contract compiles to
    validate    - Load a contract and report warnings

Examples:
    # Start mock server on the default port (8080)
    openapi-mocker serve petstore.yaml

    # Same, without the subcommand
    openapi-mocker petstore.yaml -p 8080

    # Bind elsewhere without the admin API
    openapi-mocker serve petstore.yaml --host 127.0.0.1 --port 9090 --no-admin

    # Check a contract before serving it
    openapi-mocker validate petstore.yaml
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .contract import ContractError, ContractLoader, ContractModel
from .mock import MockConfig, MockServer, RouteTable, check_contract


LOG_LEVELS = ['debug', 'info', 'warning', 'error']

COMMANDS = ('serve', 'routes', 'validate')


def _load(contract_file: str) -> ContractModel:
    """Load a contract, exiting with status 1 when it can't be used."""
    try:
        return ContractLoader(contract_file).load()
    except (FileNotFoundError, ContractError) as e:
        print(f"❌ Failed to load contract: {e}", file=sys.stderr)
        sys.exit(1)


def _configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def cmd_serve(args):
    """
    Start mock HTTP server serving contract examples.

    Args:
        args: Parsed command-line arguments
    """
    _configure_logging(args.log_level)

    print(f"🎭 OpenAPI Mock Server")
    print(f"   Contract: {args.contract}")

    if args.verbose:
        print(f"📋 Verbose mode enabled (resolution details for each request)")

    config = MockConfig(
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        verbose_mode=args.verbose,
        debug_headers=not args.no_debug_headers,
        admin_enabled=not args.no_admin,
        admin_prefix=args.admin_prefix,
        default_status=args.default_status
    )

    contract = _load(args.contract)

    try:
        server = MockServer(args.contract, config=config, contract=contract)
    except ImportError as e:
        print(f"❌ Failed to create mock server: {e}", file=sys.stderr)
        sys.exit(1)

    # Start server (blocking)
    try:
        server.start()
    except KeyboardInterrupt:
        print("\n\n👋 Mock server stopped")


def cmd_routes(args):
    """
    Print the compiled route table in match order.

    Args:
        args: Parsed command-line arguments
    """
    contract = _load(args.contract)
    table = RouteTable.compile(contract)

    if args.json:
        print(json.dumps([route.to_dict() for route in table], indent=2))
        return

    print(f"📚 {contract.title or args.contract} {contract.version}".rstrip())
    print(f"   Routes: {len(table)}")
    print()

    for route in table:
        statuses = ', '.join(route.operation.responses.keys()) or '-'
        label = route.operation.operation_id or route.operation.summary or ''
        print(f"  {route.method.upper():<8} {route.template:<40} [{statuses}] {label}".rstrip())


def cmd_validate(args):
    """
    Validate a contract and report warnings.

    Exits with status 1 only when the contract can't be loaded; warnings
    describe requests that may resolve unexpectedly but never fail startup.

    Args:
        args: Parsed command-line arguments
    """
    print(f"✓ OpenAPI Contract Validation")
    print(f"   Contract: {args.contract}")

    contract = _load(args.contract)
    warnings = check_contract(contract)

    print(f"   OpenAPI: {contract.openapi}")
    print(f"   Operations: {len(contract.operations())}")
    print()

    if warnings:
        print("⚠️  Warnings:")
        for warning in warnings:
            print(f"   • {warning}")
        print()
        print(f"📊 Summary:")
        print(f"   Warnings: {len(warnings)}")
    else:
        print("✅ All checks passed!")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog='openapi-mocker',
        description="OpenAPI Mocker - Mock HTTP server serving the examples of an OpenAPI 3 contract",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start mock server
  %(prog)s serve petstore.yaml --port 8080

  # A contract as the first argument is shorthand for serve
  %(prog)s petstore.yaml -p 8080

  # Ask for a specific status and example
  curl http://localhost:8080/400/pets?page=1

  # List routes as JSON
  %(prog)s routes petstore.yaml --json

  # Validate a contract
  %(prog)s validate petstore.yaml
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # --- SERVE command ---
    serve_parser = subparsers.add_parser('serve', help='Start mock HTTP server')
    serve_parser.add_argument('contract', help='OpenAPI contract file (YAML or JSON)')
    serve_parser.add_argument('--host', default='0.0.0.0', help='Host to bind (default: 0.0.0.0)')
    serve_parser.add_argument('-p', '--port', type=int, default=8080, help='Port to bind (default: 8080)')
    serve_parser.add_argument('--default-status', type=int, default=200,
                              help='Status served when the path has no status segment (default: 200)')
    serve_parser.add_argument('--no-admin', action='store_true', help='Disable admin API')
    serve_parser.add_argument('--admin-prefix', default='/__admin__', help='Admin API path prefix (default: /__admin__)')
    serve_parser.add_argument('--no-debug-headers', action='store_true', help='Omit X-Mock-* response headers')
    serve_parser.add_argument('--log-level', default='info', choices=LOG_LEVELS,
                              help='Log level (default: info)')
    serve_parser.add_argument('--verbose', action='store_true', help='Show resolution details for each request')

    # --- ROUTES command ---
    routes_parser = subparsers.add_parser('routes', help='List compiled routes')
    routes_parser.add_argument('contract', help='OpenAPI contract file (YAML or JSON)')
    routes_parser.add_argument('--json', action='store_true', help='Print routes as JSON')

    # --- VALIDATE command ---
    validate_parser = subparsers.add_parser('validate', help='Validate an OpenAPI contract')
    validate_parser.add_argument('contract', help='OpenAPI contract file (YAML or JSON)')

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = build_parser()
    argv = sys.argv[1:] if argv is None else list(argv)

    # "openapi-mocker petstore.yaml -p 8080" is shorthand for serve
    if argv and argv[0] not in COMMANDS and not argv[0].startswith('-'):
        argv = ['serve'] + argv

    # Parse arguments
    args = parser.parse_args(argv)

    # Dispatch to command handler
    if args.command == 'serve':
        cmd_serve(args)
    elif args.command == 'routes':
        cmd_routes(args)
    elif args.command == 'validate':
        cmd_validate(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == '__main__':
    main()
