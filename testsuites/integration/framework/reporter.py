"""
================================================================================
Console Reporter
================================================================================

Human-readable rendering of a harness run: header, per-suite progress lines,
final summary and the --list catalog.

Reporting is observational only. Every public method is guarded so that a
rendering failure is logged and swallowed instead of masking test outcomes.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional, Sequence

from loguru import logger

from .logging_setup import report_logger

if TYPE_CHECKING:
    from .registry import Suite
    from .runner import TestResult


def _never_raise(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except Exception as e:
            logger.warning(f"Reporter.{method.__name__} failed: {e}")
            return None
    return wrapper


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


class ConsoleReporter:
    """
    Writes report lines through a single ``emit`` callable.

    By default lines go to the loguru report channel (stdout, message only);
    tests pass ``emit=lines.append`` to capture output.
    """

    TITLE = "Render API Integration Tests"

    def __init__(self, emit: Optional[Callable[[str], None]] = None, verbose: bool = False) -> None:
        self._emit = emit or report_logger().info
        self.verbose = verbose

    def _line(self, text: str = "") -> None:
        self._emit(text)

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    @_never_raise
    def unknown_suites(self, names: Sequence[str]) -> None:
        self._line(f"❌ Unknown test suites: {', '.join(names)}")
        self._line("Run with --list to see available suites")

    @_never_raise
    def skipped_expensive(self, names: Sequence[str]) -> None:
        if not names:
            return
        self._line(f"Skipping expensive tests: {', '.join(names)}")
        self._line("Use --include-expensive to include them")
        self._line()

    @_never_raise
    def no_suites(self) -> None:
        self._line("⚠️  No test suites to run")

    @_never_raise
    def header(self, count: int) -> None:
        self._line("=" * 40)
        self._line(f"{self.TITLE:^40}")
        self._line("=" * 40)
        self._line()
        self._line(f"Running {_plural(count, 'test suite')}...")
        self._line()

    @_never_raise
    def suite_started(self, suite: "Suite") -> None:
        self._line(f"[{suite.name}] Starting... ({suite.description})")

    @_never_raise
    def suite_finished(self, result: "TestResult") -> None:
        if result.passed:
            self._line(f"✅ [{result.suite}] PASSED ({result.duration:.1f}s)")
        else:
            self._line(f"❌ [{result.suite}] FAILED ({result.duration:.1f}s)")
            self._line(f"  Error: {result.error_message}")
            if self.verbose and result.traceback:
                for tb_line in result.traceback.rstrip().splitlines():
                    self._line(f"  {tb_line}")
        if result.cleanup_errors:
            self._line(f"  ⚠️  {_plural(result.cleanup_errors, 'cleanup error')} (see log)")
        self._line()

    @_never_raise
    def summary(self, results: Sequence["TestResult"], total_duration: float) -> None:
        passed = [r for r in results if r.passed]
        failed = [r for r in results if not r.passed]
        cleanup_errors = sum(r.cleanup_errors for r in results)

        self._line("-" * 40)
        if not failed:
            self._line(f"✅ Results: {len(passed)} passed ({total_duration:.1f}s)")
        else:
            self._line(
                f"❌ Results: {len(passed)} passed, {len(failed)} failed "
                f"({total_duration:.1f}s)"
            )
            self._line()
            self._line("Failed suites:")
            for result in failed:
                self._line(f"  - {result.suite}: {result.error_message}")
        if cleanup_errors:
            self._line()
            self._line(
                f"⚠️  {_plural(cleanup_errors, 'cleanup error')} absorbed; "
                f"check the account for leftover resources"
            )
        self._line()

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    @_never_raise
    def catalog(self, suites: Iterable["Suite"]) -> None:
        suites = list(suites)
        self._line("Available test suites:")
        self._line()

        width = max((len(s.name) for s in suites), default=0)
        for suite in suites:
            tag = " [expensive]" if suite.expensive else ""
            self._line(f"  {suite.name.ljust(width)}  {suite.description}{tag}")

        self._line()
        for usage in self.usage_lines():
            self._line(usage)
        self._line()

    @staticmethod
    def usage_lines() -> List[str]:
        return [
            "Usage:",
            "  --only projects,envGroups    Run only specified suites",
            "  --skip services              Skip specified suites",
            "  --include-expensive          Include expensive tests",
            "  --verbose                    Show tracebacks for failures",
        ]


__all__ = ["ConsoleReporter"]
