#!/usr/bin/env python3
"""
CLI Router for the Analytics Reporting load tester.

Command/subcommand architecture on top of argparse.
"""

import argparse
import logging
import os
import sys
from typing import Optional, List

# Load environment variables first
import core.env_loader  # noqa: F401  Auto-loads .env file

from commands import get_command, COMMANDS

logger = logging.getLogger(__name__)


def existing_file(value: str) -> str:
    """argparse type accepting only paths of existing files."""
    if not os.path.isfile(value):
        raise argparse.ArgumentTypeError(f"file does not exist: {value}")
    return value


class CLIRouter:
    """
    CLI router for load test commands.

    Command structure:
    - python run.py load run --secret secret.json --count 10
    - python run.py load run --secret secret.json --concurrent 5 --count 20
    - python run.py load check --secret secret.json
    """

    def __init__(self, container=None):
        """Initialize CLI router."""
        self._container = container
        self._command_parsers = {}
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the main argument parser."""
        parser = argparse.ArgumentParser(
            prog='ga-loadtest',
            description="Load tester for the Google Analytics Reporting API",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=self._get_examples_text()
        )

        subparsers = parser.add_subparsers(
            dest='command',
            help='Available commands',
            metavar='{command}'
        )

        self._add_load_parser(subparsers)

        return parser

    def _add_load_parser(self, subparsers):
        """Add load command parser."""
        load_parser = subparsers.add_parser(
            'load',
            help='Run report request load tests'
        )
        self._command_parsers['load'] = load_parser

        load_subparsers = load_parser.add_subparsers(
            dest='subcommand',
            help='Load test operations',
            metavar='{run,check}'
        )

        # Run subcommand
        run_parser = load_subparsers.add_parser('run', help='Issue report requests and print timings')
        run_parser.add_argument('--secret', type=existing_file, required=True, help='Secret config file (JSON)')
        run_parser.add_argument('--concurrent', type=int, default=0, help='Requests per concurrent batch, 0 runs sequentially (default: 0)')
        run_parser.add_argument('--count', type=int, default=5, help='Total number of requests (default: 5)')
        run_parser.add_argument('--interval', type=float, default=1.0, help='Seconds to sleep after each sequential request (default: 1.0)')
        run_parser.add_argument('--start-date', default=None, help='Report date: YYYY-MM-DD, today or yesterday (default: 2019-09-25)')
        run_parser.add_argument('--timezone', default=None, help='Timezone for today/yesterday (default: DEFAULT_TIMEZONE or UTC)')
        run_parser.add_argument('--walk-back', action='store_true', help='Move the report date one day back after each sequential request')
        run_parser.add_argument('--batch-window', type=float, default=1.0, help='Minimum seconds per concurrent batch (default: 1.0)')
        run_parser.add_argument('--metric', default=None, help='Metric expression (default: METRIC_EXPRESSION or ga:sessions)')
        run_parser.add_argument('--quota-user', default=None, help='quotaUser attached to every call (default: QUOTA_USER or fixed)')
        run_parser.add_argument('--verbose', action='store_true', help='Verbose output')

        # Check subcommand
        check_parser = load_subparsers.add_parser('check', help='Validate the secret file and token exchange')
        check_parser.add_argument('--secret', type=existing_file, required=True, help='Secret config file (JSON)')
        check_parser.add_argument('--verbose', action='store_true', help='Verbose output')

    def _get_examples_text(self) -> str:
        """Get examples text for help."""
        return """
Examples:
  # Five sequential requests, one second apart
  python run.py load run --secret secret.json

  # Walk back one day per request
  python run.py load run --secret secret.json --count 30 --interval 0.5 --walk-back

  # Batches of 5 concurrent requests, at most one batch per second
  python run.py load run --secret secret.json --concurrent 5 --count 50

  # Verify credentials only
  python run.py load check --secret secret.json
"""

    def route_command(self, args: Optional[List[str]] = None) -> int:
        """
        Route command to appropriate handler.

        Args:
            args: Command line arguments (uses sys.argv if None)

        Returns:
            Exit code
        """
        try:
            if args is None:
                args = sys.argv[1:]

            parsed_args = self.parser.parse_args(args)

            if not parsed_args.command:
                self.parser.print_help()
                return 1

            return self._handle_command(parsed_args)

        except SystemExit as e:
            # argparse calls sys.exit() on error or help
            return e.code if e.code is not None else 0
        except Exception as e:
            logger.error(f"CLI routing error: {e}", exc_info=True)
            return 1

    def _handle_command(self, args: argparse.Namespace) -> int:
        """Handle command structure."""
        logger.debug(f"Handling command: {args.command}")

        if args.command not in COMMANDS:
            available = ', '.join(COMMANDS.keys())
            logger.error(f"Unknown command '{args.command}'. Available: {available}")
            return 1

        subcommand = getattr(args, 'subcommand', None)
        if not subcommand:
            logger.error(f"No subcommand specified for '{args.command}'")
            self._command_parsers[args.command].print_help()
            return 1

        command = get_command(args.command, container=self._container)
        return command.execute(subcommand, args)


def main(args: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code
    """
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    router = CLIRouter()
    return router.route_command(args)


if __name__ == '__main__':
    exit_code = main()
    sys.exit(exit_code)
