"""
================================================================================
Suite Runner
================================================================================

Orchestrates a harness run:
    - selects suites from the catalog according to the RunConfig
    - runs them one at a time, each against a fresh ExecutionContext
    - always runs the context cleanup sweep before the next suite starts
    - records a TestResult per suite and reports a summary

A failing suite never stops the run; the runner is the single recovery
boundary for suite errors.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import time
import traceback as tb
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional, Tuple

from loguru import logger

from .config_loader import RunConfig
from .context import ExecutionContext
from .registry import Selection, Suite, UnknownSuiteError, select_suites
from .reporter import ConsoleReporter


ContextFactory = Callable[[RunConfig, Any, str], ExecutionContext]


@dataclass(frozen=True)
class TestResult:
    """Outcome of one suite execution."""

    __test__ = False  # not a pytest test class

    suite: str
    passed: bool
    duration: float
    error: Optional[BaseException] = field(default=None, compare=False)
    traceback: str = field(default="", compare=False, repr=False)
    cleanup_errors: int = 0

    @property
    def error_message(self) -> str:
        if self.error is None:
            return ""
        return str(self.error) or type(self.error).__name__


@dataclass(frozen=True)
class RunReport:
    """Aggregate of a run; success is all-passed, and an empty run passes."""

    results: Tuple[TestResult, ...] = ()
    skipped_expensive: Tuple[str, ...] = ()
    unknown_suites: Tuple[str, ...] = ()
    duration: float = 0.0

    @property
    def success(self) -> bool:
        if self.unknown_suites:
            return False
        return all(r.passed for r in self.results)

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    @property
    def failed(self) -> List[TestResult]:
        return [r for r in self.results if not r.passed]


class SuiteRunner:
    """
    Sequential suite runner.

    Usage:
        >>> async with RenderClient(config) as client:
        ...     report = await SuiteRunner(catalog, config, client).run()
        >>> sys.exit(report.exit_code)
    """

    def __init__(
        self,
        suites: Iterable[Suite],
        config: RunConfig,
        client: Any,
        reporter: Optional[ConsoleReporter] = None,
        context_factory: ContextFactory = ExecutionContext,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.suites = list(suites)
        self.config = config
        self.client = client
        self.reporter = reporter or ConsoleReporter(verbose=config.verbose)
        self.context_factory = context_factory
        self.clock = clock

    def select(self) -> Selection:
        return select_suites(self.suites, self.config)

    async def run(self) -> RunReport:
        """Run every selected suite and return the aggregate report."""
        try:
            selection = self.select()
        except UnknownSuiteError as e:
            logger.error(str(e))
            self.reporter.unknown_suites(e.names)
            return RunReport(unknown_suites=e.names)

        self.reporter.skipped_expensive(selection.skipped_expensive)

        if not selection.suites:
            self.reporter.no_suites()
            return RunReport(skipped_expensive=selection.skipped_expensive)

        self.reporter.header(len(selection.suites))
        logger.debug(f"Selected suites: {', '.join(selection.names)}")

        started = self.clock()
        results: List[TestResult] = []
        for suite in selection.suites:
            result = await self.run_suite(suite)
            results.append(result)
            self.reporter.suite_finished(result)

        total = self.clock() - started
        self.reporter.summary(results, total)

        return RunReport(
            results=tuple(results),
            skipped_expensive=selection.skipped_expensive,
            duration=total,
        )

    async def run_suite(self, suite: Suite) -> TestResult:
        """
        Run one suite: running → passed/failed → cleanup → done.

        Exceptions from the suite body (or from building its context) become
        a failed result. The cleanup sweep runs on every exit path, including
        cancellation and interrupts, which re-raise once it is done. Sweep
        errors never change the outcome.
        """
        self.reporter.suite_started(suite)
        logger.debug(f"[{suite.name}] Starting ({suite.description})")

        started = self.clock()
        ctx: Optional[ExecutionContext] = None
        error: Optional[Exception] = None
        trace = ""
        try:
            ctx = self.context_factory(self.config, self.client, suite.name)
            await suite.run(ctx)
        except Exception as e:
            error = e
            trace = "".join(tb.format_exception(type(e), e, e.__traceback__))
        finally:
            duration = self.clock() - started
            if ctx is not None:
                await self._sweep(suite, ctx)

        if error is None:
            logger.debug(f"[{suite.name}] PASSED ({duration:.1f}s)")
        else:
            logger.debug(f"[{suite.name}] FAILED ({duration:.1f}s): {error}")

        return TestResult(
            suite=suite.name,
            passed=error is None,
            duration=duration,
            error=error,
            traceback=trace,
            cleanup_errors=getattr(ctx, "cleanup_errors", 0),
        )

    async def _sweep(self, suite: Suite, ctx: ExecutionContext) -> None:
        try:
            await ctx.run_cleanup()
        except Exception as e:
            # run_cleanup() is not supposed to raise; a custom context might
            logger.warning(f"[{suite.name}] Cleanup sweep raised: {e}")


async def run_tests(
    suites: Iterable[Suite],
    config: RunConfig,
    client: Any,
    reporter: Optional[ConsoleReporter] = None,
) -> bool:
    """Convenience wrapper: run and return overall success."""
    report = await SuiteRunner(suites, config, client, reporter=reporter).run()
    return report.success


__all__ = ["RunReport", "SuiteRunner", "TestResult", "run_tests"]
