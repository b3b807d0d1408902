#!/usr/bin/env python3
"""
Base command class for the modular command architecture.

Provides common functionality and interface that all commands inherit.
Uses dependency injection for better testability and maintainability.
"""

import logging
from abc import ABC, abstractmethod
from typing import List
from argparse import Namespace

from core.container import get_container
from core.exceptions import LoadTestError

logger = logging.getLogger(__name__)


class BaseCommand(ABC):
    """
    Base class for all command endpoints.

    Provides configuration access, service lookup and the error-to-exit-code
    mapping that all commands share.
    """

    def __init__(self, container=None):
        """
        Initialize base command with dependency injection container.

        Args:
            container: Optional container instance. If None, uses global container.
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self._container = container or get_container()

    @property
    def config(self):
        """Get application configuration from container."""
        return self._container.get('config')

    @property
    def config_manager(self):
        """Get configuration manager from container."""
        return self._container.get('config_manager')

    @property
    def client_factory(self):
        """Get the reporting client factory from container."""
        return self._container.get('client_factory')

    @property
    def sleep(self):
        """Get the coroutine function used for pacing."""
        return self._container.get('sleep')

    @abstractmethod
    def execute(self, subcommand: str, args: Namespace) -> int:
        """
        Execute the command with given subcommand and arguments.

        Args:
            subcommand: The specific action to perform
            args: Parsed command line arguments

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        pass

    def get_available_subcommands(self) -> List[str]:
        """Get list of available subcommands for this command."""
        return list(getattr(self, 'SUBCOMMANDS', ()))

    def handle_error(self, error: BaseException, context: str = "") -> int:
        """
        Standard error handling for commands.

        Args:
            error: The exception that occurred
            context: Additional context about where the error occurred

        Returns:
            Appropriate exit code
        """
        if isinstance(error, KeyboardInterrupt):
            self.logger.info("Command interrupted by user")
            return 130

        error_msg = f"{context}: {error}" if context else str(error)

        if isinstance(error, LoadTestError):
            # Expected failures: no traceback unless debugging
            self.logger.error(error_msg, exc_info=self.logger.isEnabledFor(logging.DEBUG))
            print(f"error: {error}")
            return error.exit_code

        self.logger.error(error_msg, exc_info=True)
        print(f"error: {error}")

        if isinstance(error, FileNotFoundError):
            return 2
        elif isinstance(error, PermissionError):
            return 13
        elif isinstance(error, ValueError):
            return 22
        else:
            return 1
