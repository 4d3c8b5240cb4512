"""
================================================================================
Assertion Primitives
================================================================================

Predicate checks used by integration suites to state expectations about API
responses. Every check either returns silently or raises AssertionFailure,
which is the structured way a suite reports a broken expectation to the
runner.

Assertions:
    - assert_that: condition must be truthy
    - assert_equal: actual must equal expected (deep equality)
    - assert_defined: value must not be None
    - assert_contains: some element of a collection must match a predicate

================================================================================
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional

from loguru import logger


# Sentinel for "no value recorded" so that None stays a legitimate value
_MISSING = object()


class AssertionFailure(AssertionError):
    """
    Raised when an expectation inside a suite does not hold.

    Carries the human-readable message and, for comparisons, the expected
    and actual values so reporters can show both sides.
    """

    def __init__(
        self,
        message: str,
        expected: Any = _MISSING,
        actual: Any = _MISSING,
    ) -> None:
        self.message = message
        self.expected = expected
        self.actual = actual
        super().__init__(self._render())

    @property
    def has_comparison(self) -> bool:
        return self.expected is not _MISSING or self.actual is not _MISSING

    def _render(self) -> str:
        text = f"Assertion failed: {self.message}"
        if self.expected is not _MISSING:
            text += f" (expected {self.expected!r}"
            if self.actual is not _MISSING:
                text += f", got {self.actual!r}"
            text += ")"
        elif self.actual is not _MISSING:
            text += f" (got {self.actual!r})"
        return text


def _passed(message: str) -> None:
    logger.debug(f"✅ PASS: {message}")


def assert_that(condition: Any, message: str) -> None:
    """Fail unless ``condition`` is truthy."""
    if not condition:
        raise AssertionFailure(message)
    _passed(message)


def assert_equal(actual: Any, expected: Any, message: str) -> None:
    """
    Fail unless ``actual == expected``.

    Dicts, lists and tuples compare structurally, so nested API payloads can
    be checked in one call.
    """
    if actual != expected:
        raise AssertionFailure(message, expected=expected, actual=actual)
    _passed(message)


def assert_defined(value: Optional[Any], message: str) -> None:
    """Fail if ``value`` is None."""
    if value is None:
        raise AssertionFailure(message, actual=None)
    _passed(message)


def assert_contains(
    collection: Iterable[Any],
    predicate: Callable[[Any], bool],
    message: str,
) -> None:
    """Fail unless at least one element of ``collection`` satisfies ``predicate``."""
    if collection is None:
        raise AssertionFailure(f"{message} (collection is None)")
    if not any(predicate(item) for item in collection):
        raise AssertionFailure(message)
    _passed(message)


__all__ = [
    "AssertionFailure",
    "assert_that",
    "assert_equal",
    "assert_defined",
    "assert_contains",
]
