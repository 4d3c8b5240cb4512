"""
================================================================================
Execution Context
================================================================================

The capability bundle handed to every suite body: API client access, owner
identity, unique naming, logging, assertions and a cleanup registry.

A context is created fresh for one suite execution and discarded once its
cleanup sweep has run.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import inspect
import itertools
from datetime import datetime
from typing import Any, Awaitable, Callable, List, Optional, Union
from uuid import uuid4

from loguru import logger

from . import assertions
from .config_loader import RunConfig


# Prefix for every resource the harness creates, so leftovers are easy to spot
NAME_PREFIX = "it-"

LOG_LEVELS = {"debug": "DEBUG", "info": "INFO", "warning": "WARNING", "error": "ERROR"}

# Process-wide; only ever touched by the single sequential runner
_name_counter = itertools.count(1)

CleanupAction = Callable[[], Union[None, Awaitable[None]]]


def unique_suffix() -> str:
    """Timestamp, process-wide counter and random part, e.g. ``20261019093512-3-a1b2c3``."""
    timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
    return f"{timestamp}-{next(_name_counter)}-{uuid4().hex[:6]}"


class ExecutionContext:
    """
    Per-suite view of the harness.

    Usage (inside a suite body):
        >>> name = ctx.unique_name("project")
        >>> project = await ctx.client.projects.create({"name": name, "ownerId": ctx.owner_id})
        >>> ctx.assert_equal(project["name"], name, "Project name matches")
        >>> ctx.log(f"Created project: {project['id']}", "debug")
    """

    def __init__(self, config: RunConfig, client: Any, suite_name: str = "") -> None:
        self.config = config
        self.client = client
        self.owner_id = config.owner_id
        self.suite_name = suite_name
        self.cleanup_errors = 0

        self._cleanups: List[tuple] = []
        self._cleaned_up = False
        self._logger = logger.bind(suite=suite_name)

    # ------------------------------------------------------------------
    # Naming & logging
    # ------------------------------------------------------------------

    def unique_name(self, prefix: str) -> str:
        """Return a resource name that will not clash with this or earlier runs."""
        return f"{NAME_PREFIX}{prefix}-{unique_suffix()}"

    def log(self, message: str, level: str = "info") -> None:
        """Log a suite progress line. Unknown levels fall back to INFO."""
        label = f"[{self.suite_name}] " if self.suite_name else ""
        self._logger.log(LOG_LEVELS.get(level.lower(), "INFO"), f"{label}{message}")

    # ------------------------------------------------------------------
    # Assertions
    # ------------------------------------------------------------------

    def assert_that(self, condition: Any, message: str) -> None:
        assertions.assert_that(condition, message)

    def assert_equal(self, actual: Any, expected: Any, message: str) -> None:
        assertions.assert_equal(actual, expected, message)

    def assert_defined(self, value: Optional[Any], message: str) -> None:
        assertions.assert_defined(value, message)

    def assert_contains(
        self,
        collection: Any,
        predicate: Callable[[Any], bool],
        message: str,
    ) -> None:
        assertions.assert_contains(collection, predicate, message)

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def defer(self, action: CleanupAction, label: str = "") -> None:
        """
        Register a cleanup action for the harness-level sweep.

        Actions run newest-first after the suite finishes, whatever its
        outcome. Both plain callables and coroutine functions are accepted.
        """
        self._cleanups.append((label or getattr(action, "__name__", "cleanup"), action))

    async def release(self, label: str, action: CleanupAction) -> bool:
        """
        Best-effort, suite-local cleanup of a resource the suite created.

        Used from a suite's ``finally`` block. Errors are logged and counted,
        never raised, so they cannot replace the suite's own outcome.

        Returns:
            True if the action completed without error
        """
        self.log(f"Cleaning up {label}...", "debug")
        try:
            result = action()
            if inspect.isawaitable(result):
                await result
            return True
        except Exception as e:
            self.cleanup_errors += 1
            self._logger.warning(f"[{self.suite_name}] Cleanup of {label} failed: {e}")
            return False

    async def run_cleanup(self) -> None:
        """
        Run every deferred action once, most recently registered first.

        Never raises. A second call is a no-op.
        """
        if self._cleaned_up:
            return
        self._cleaned_up = True

        pending = list(reversed(self._cleanups))
        self._cleanups.clear()
        for label, action in pending:
            await self.release(label, action)

    @property
    def pending_cleanups(self) -> int:
        return len(self._cleanups)


__all__ = ["ExecutionContext", "NAME_PREFIX", "unique_suffix"]
