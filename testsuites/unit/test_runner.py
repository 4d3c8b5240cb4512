import asyncio
import itertools

import pytest

from testsuites.integration.framework.assertions import AssertionFailure
from testsuites.integration.framework.config_loader import RunConfig
from testsuites.integration.framework.context import ExecutionContext
from testsuites.integration.framework.registry import Suite
from testsuites.integration.framework.reporter import ConsoleReporter
from testsuites.integration.framework.runner import RunReport, SuiteRunner, TestResult, run_tests


CLIENT = object()


def ok_suite(name, expensive=False, calls=None):
    async def body(ctx):
        if calls is not None:
            calls.append(name)
    return Suite(name, f"{name} suite", body, expensive=expensive)


def failing_suite(name, error, calls=None):
    async def body(ctx):
        if calls is not None:
            calls.append(name)
        raise error
    return Suite(name, f"{name} suite", body)


class RecordingContext(ExecutionContext):
    """ExecutionContext that remembers every instance and counts sweeps."""

    instances = []

    def __init__(self, config, client, suite_name=""):
        super().__init__(config, client, suite_name)
        self.sweeps = 0
        RecordingContext.instances.append(self)

    async def run_cleanup(self):
        self.sweeps += 1
        await super().run_cleanup()


@pytest.fixture(autouse=True)
def _reset_recording_context():
    RecordingContext.instances = []
    yield
    RecordingContext.instances = []


@pytest.fixture
def lines():
    return []


def make_runner(suites, lines, **config):
    run_config = RunConfig(api_key="k", owner_id="tea-1", **config)
    return SuiteRunner(
        suites,
        run_config,
        CLIENT,
        reporter=ConsoleReporter(emit=lines.append, verbose=run_config.verbose),
        context_factory=RecordingContext,
    )


@pytest.mark.runner
class TestRunScenarios:

    @pytest.mark.asyncio
    async def test_expensive_skipped_and_failure_recorded(self, lines):
        calls = []
        suites = [
            ok_suite("A", calls=calls),
            ok_suite("B", expensive=True, calls=calls),
            failing_suite("C", RuntimeError("boom"), calls=calls),
        ]

        report = await make_runner(suites, lines).run()

        assert calls == ["A", "C"]
        assert [(r.suite, r.passed) for r in report.results] == [("A", True), ("C", False)]
        assert report.results[1].error_message == "boom"
        assert report.skipped_expensive == ("B",)
        assert report.success is False
        assert report.exit_code == 1
        assert "Skipping expensive tests: B" in lines
        assert "  - C: boom" in lines

    @pytest.mark.asyncio
    async def test_unknown_only_runs_nothing(self, lines):
        calls = []
        report = await make_runner([ok_suite("A", calls=calls)], lines, only=("Z",)).run()

        assert calls == []
        assert report.results == ()
        assert report.unknown_suites == ("Z",)
        assert report.exit_code == 1
        assert RecordingContext.instances == []
        assert "❌ Unknown test suites: Z" in lines

    @pytest.mark.asyncio
    async def test_empty_selection_is_success(self, lines):
        report = await make_runner([ok_suite("B", expensive=True)], lines).run()

        assert report.results == ()
        assert report.success is True
        assert report.exit_code == 0
        assert "⚠️  No test suites to run" in lines

    @pytest.mark.asyncio
    async def test_all_passing(self, lines):
        report = await make_runner([ok_suite("A"), ok_suite("B")], lines).run()
        assert report.success is True
        assert all(isinstance(r, TestResult) for r in report.results)
        assert any(line.startswith("✅ Results: 2 passed") for line in lines)


@pytest.mark.runner
class TestIsolation:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failing_index", [0, 1, 3])
    async def test_every_suite_attempted_despite_failures(self, lines, failing_index):
        calls = []
        suites = [ok_suite(f"s{i}", calls=calls) for i in range(4)]
        suites[failing_index] = failing_suite(
            f"s{failing_index}", AssertionFailure("broken"), calls=calls
        )

        report = await make_runner(suites, lines).run()

        assert calls == ["s0", "s1", "s2", "s3"]
        assert len(report.results) == 4
        assert [r.suite for r in report.failed] == [f"s{failing_index}"]

    @pytest.mark.asyncio
    async def test_each_suite_gets_a_fresh_context(self, lines):
        seen = []

        async def body(ctx):
            seen.append(ctx)

        suites = [Suite("one", "", body), Suite("two", "", body)]
        await make_runner(suites, lines).run()

        assert len(seen) == 2
        assert seen[0] is not seen[1]
        assert [c.suite_name for c in seen] == ["one", "two"]
        assert all(c.client is CLIENT for c in seen)

    @pytest.mark.asyncio
    async def test_suites_run_strictly_in_sequence(self, lines):
        events = []

        def tracking(name):
            async def body(ctx):
                events.append(f"start:{name}")
                ctx.defer(lambda: events.append(f"cleanup:{name}"))
                events.append(f"end:{name}")
            return Suite(name, "", body)

        await make_runner([tracking("a"), tracking("b")], lines).run()

        assert events == [
            "start:a", "end:a", "cleanup:a",
            "start:b", "end:b", "cleanup:b",
        ]


@pytest.mark.runner
class TestCleanupGuarantee:

    @pytest.mark.asyncio
    async def test_cleanup_runs_once_when_body_raises_early(self, lines):
        deleted = []

        async def body(ctx):
            ctx.defer(lambda: deleted.append("project"))
            raise ConnectionError("network down")

        report = await make_runner([Suite("projects", "", body)], lines).run()

        ctx = RecordingContext.instances[0]
        assert ctx.sweeps == 1
        assert deleted == ["project"]
        assert report.results[0].passed is False

    @pytest.mark.asyncio
    async def test_cleanup_failure_does_not_change_outcome(self, lines):
        def broken_delete():
            raise RuntimeError("404 already gone")

        async def passing(ctx):
            ctx.defer(broken_delete)

        async def failing(ctx):
            ctx.defer(broken_delete)
            raise AssertionFailure("Project name matches", expected="a", actual="b")

        report = await make_runner(
            [Suite("passing", "", passing), Suite("failing", "", failing)], lines
        ).run()

        passing_result, failing_result = report.results
        assert passing_result.passed is True
        assert passing_result.cleanup_errors == 1
        assert failing_result.passed is False
        assert isinstance(failing_result.error, AssertionFailure)
        assert failing_result.cleanup_errors == 1

    @pytest.mark.asyncio
    async def test_raising_sweep_from_custom_context_is_absorbed(self, lines):
        class ExplodingContext(ExecutionContext):
            async def run_cleanup(self):
                raise RuntimeError("sweep bug")

        runner = make_runner([ok_suite("A"), ok_suite("B")], lines)
        runner.context_factory = ExplodingContext

        report = await runner.run()
        assert [r.passed for r in report.results] == [True, True]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("interrupt", [
        asyncio.CancelledError,
        KeyboardInterrupt,
        SystemExit,
    ])
    async def test_cleanup_runs_when_suite_is_interrupted(self, lines, interrupt):
        deleted = []
        calls = []

        async def body(ctx):
            ctx.defer(lambda: deleted.append("project"))
            raise interrupt()

        runner = make_runner([Suite("postgres", "", body), ok_suite("after", calls=calls)], lines)

        with pytest.raises(interrupt):
            await runner.run()

        assert deleted == ["project"]
        assert RecordingContext.instances[0].sweeps == 1
        assert calls == []

    @pytest.mark.asyncio
    async def test_context_factory_error_fails_only_that_suite(self, lines):
        calls = []

        def flaky_factory(config, client, suite_name):
            if suite_name == "broken":
                raise RuntimeError("cannot build context")
            return RecordingContext(config, client, suite_name)

        runner = make_runner(
            [Suite("broken", "", ok_suite("x").run), ok_suite("B", calls=calls)], lines
        )
        runner.context_factory = flaky_factory

        report = await runner.run()

        broken, after = report.results
        assert broken.passed is False
        assert broken.error_message == "cannot build context"
        assert broken.cleanup_errors == 0
        assert after.passed is True
        assert calls == ["B"]


@pytest.mark.runner
class TestResultsAndReporting:

    @pytest.mark.asyncio
    async def test_durations_use_the_clock(self, lines):
        ticks = itertools.count(0, 2)
        runner = make_runner([ok_suite("A"), ok_suite("B")], lines)
        runner.clock = lambda: next(ticks)

        report = await runner.run()

        assert [r.duration for r in report.results] == [2, 2]
        assert report.duration == 10

    @pytest.mark.asyncio
    async def test_verbose_includes_traceback(self, lines):
        report = await make_runner(
            [failing_suite("C", ValueError("bad payload"))], lines, verbose=True
        ).run()

        assert "ValueError: bad payload" in report.results[0].traceback
        assert any("Traceback (most recent call last)" in line for line in lines)

    @pytest.mark.asyncio
    async def test_non_verbose_omits_traceback(self, lines):
        await make_runner([failing_suite("C", ValueError("bad payload"))], lines).run()
        assert not any("Traceback" in line for line in lines)

    @pytest.mark.asyncio
    async def test_broken_reporter_does_not_mask_outcome(self):
        def exploding_emit(line):
            raise OSError("stdout closed")

        runner = SuiteRunner(
            [ok_suite("A"), failing_suite("C", RuntimeError("boom"))],
            RunConfig(),
            CLIENT,
            reporter=ConsoleReporter(emit=exploding_emit),
        )
        report = await runner.run()

        assert [r.passed for r in report.results] == [True, False]
        assert report.exit_code == 1

    @pytest.mark.asyncio
    async def test_run_tests_returns_overall_success(self, lines):
        reporter = ConsoleReporter(emit=lines.append)
        assert await run_tests([ok_suite("A")], RunConfig(), CLIENT, reporter=reporter) is True
        assert await run_tests(
            [failing_suite("C", RuntimeError("x"))], RunConfig(), CLIENT, reporter=reporter
        ) is False


def test_run_report_success_rules():
    passed = TestResult("A", True, 0.1)
    failed = TestResult("B", False, 0.2, error=RuntimeError("boom"))

    assert RunReport().success is True
    assert RunReport(results=(passed,)).success is True
    assert RunReport(results=(passed, failed)).success is False
    assert RunReport(unknown_suites=("Z",)).success is False
    assert RunReport(results=(passed, failed)).failed == [failed]


def test_error_message_falls_back_to_exception_type():
    assert TestResult("A", False, 0.0, error=TimeoutError()).error_message == "TimeoutError"
    assert TestResult("A", True, 0.0).error_message == ""
