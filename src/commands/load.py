#!/usr/bin/env python3
"""
Load command endpoints for running report request load tests.
"""

import asyncio
import logging
from argparse import Namespace

from .base import BaseCommand
from core.config import build_load_test_config, LoadTestConfig
from core.dates import format_date
from core.models.metrics import RunResult
from core.request_driver import RequestDriver

logger = logging.getLogger(__name__)


class LoadCommand(BaseCommand):
    """Run load tests against the Analytics Reporting API."""

    SUBCOMMANDS = ('run', 'check')

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute load subcommand."""
        try:
            self.config_manager.update_logging(verbose=getattr(args, 'verbose', False))

            if subcommand == "run":
                return self.run(args)
            elif subcommand == "check":
                return self.check(args)
            else:
                available = ", ".join(self.get_available_subcommands())
                self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
                return 1

        except (Exception, KeyboardInterrupt) as e:
            return self.handle_error(e, f"load {subcommand}")

    def run(self, args: Namespace) -> int:
        """Issue the configured number of report requests and print timings."""
        app_config = self.config
        client, secret = self.client_factory(args.secret, app_config, quota_user=getattr(args, 'quota_user', None))
        load_config = build_load_test_config(args, secret, app_config)

        self._print_header(load_config)
        result = asyncio.run(self._drive(client, load_config))

        logger.info(f"Run finished: {result.success_count}/{result.request_count} requests in {result.total_duration:.2f}s")
        return 0

    async def _drive(self, client, load_config: LoadTestConfig) -> RunResult:
        async with client:
            await client.authenticate()
            driver = RequestDriver(client, load_config, sleep=self.sleep)
            return await driver.run()

    def check(self, args: Namespace) -> int:
        """Validate the secret file and the token exchange without sending reports."""
        client, secret = self.client_factory(args.secret, self.config)
        asyncio.run(self._authenticate(client))

        expiry = getattr(client.credentials, 'expiry', None)
        print(f"secret: {args.secret}")
        print(f"view id: {secret.view_id}")
        print(f"client id: {secret.client_id}")
        if expiry:
            print(f"access token: ok (expires {expiry:%Y-%m-%d %H:%M:%S} UTC)")
        else:
            print("access token: ok")
        return 0

    async def _authenticate(self, client) -> None:
        async with client:
            await client.authenticate()

    def _print_header(self, load_config: LoadTestConfig) -> None:
        if load_config.is_sequential:
            mode = f"sequential, interval {load_config.interval}s"
            if load_config.walk_back:
                mode += ", walking back one day per request"
        else:
            mode = f"concurrent x{load_config.concurrency}, batch window {load_config.batch_window}s"

        print(f"view {load_config.view_id}: {load_config.count} requests ({mode})")
        print(f"start date {format_date(load_config.start_date)}, metric {load_config.metric_expression}, "
              f"quota user {load_config.quota_user}")
        print("")
