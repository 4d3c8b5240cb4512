"""
================================================================================
Suite Registry & Selection
================================================================================

Suite descriptors, the ordered catalog they are registered in, and the
selection pipeline that turns a RunConfig into the list of suites to run.

Selection order (each stage narrows the previous one):
    1. full catalog, declared order
    2. --only allow-list (unknown names are a fatal configuration error)
    3. --skip deny-list
    4. expensive suites dropped unless --include-expensive

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from .config_loader import ConfigurationError, RunConfig
from .context import ExecutionContext


SuiteBody = Callable[[ExecutionContext], Awaitable[None]]


class UnknownSuiteError(ConfigurationError):
    """Raised when --only names suites that are not in the catalog."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = tuple(names)
        super().__init__(f"Unknown test suites: {', '.join(self.names)}")


class DuplicateSuiteError(ValueError):
    """Raised when two suites are registered under the same name."""
    pass


@dataclass(frozen=True)
class Suite:
    """
    A named, independent sequence of API operations.

    Attributes:
        name: Unique key used by --only / --skip
        description: Human-readable summary shown in --list and progress lines
        run: Coroutine function taking an ExecutionContext
        expensive: Provisions billable or slow resources (opt-in)
    """

    name: str
    description: str
    run: SuiteBody = field(compare=False, repr=False)
    expensive: bool = False


class SuiteRegistry:
    """
    Ordered, name-unique catalog of suites.

    Usage:
        >>> registry = SuiteRegistry()
        >>> @registry.suite("projects", "Projects CRUD operations")
        ... async def projects(ctx):
        ...     ...
    """

    def __init__(self, suites: Iterable[Suite] = ()) -> None:
        self._suites: Dict[str, Suite] = {}
        for suite in suites:
            self.register(suite)

    def register(self, suite: Suite) -> Suite:
        if suite.name in self._suites:
            raise DuplicateSuiteError(f"Suite already registered: {suite.name}")
        self._suites[suite.name] = suite
        return suite

    def suite(
        self,
        name: str,
        description: str,
        expensive: bool = False,
    ) -> Callable[[SuiteBody], Suite]:
        """Decorator form of register()."""
        def decorator(body: SuiteBody) -> Suite:
            return self.register(Suite(name, description, body, expensive))
        return decorator

    def get(self, name: str) -> Optional[Suite]:
        return self._suites.get(name)

    @property
    def names(self) -> List[str]:
        return list(self._suites)

    def __iter__(self) -> Iterator[Suite]:
        return iter(self._suites.values())

    def __len__(self) -> int:
        return len(self._suites)

    def __contains__(self, name: object) -> bool:
        return name in self._suites


@dataclass(frozen=True)
class Selection:
    """Outcome of select_suites(): what runs, and what was left out as expensive."""
    suites: Tuple[Suite, ...]
    skipped_expensive: Tuple[str, ...] = ()

    @property
    def names(self) -> List[str]:
        return [s.name for s in self.suites]


def select_suites(catalog: Iterable[Suite], config: RunConfig) -> Selection:
    """
    Apply only → skip → expensive filtering to the catalog.

    Raises:
        UnknownSuiteError: if any --only name is not in the catalog
    """
    selected = list(catalog)
    known = {s.name for s in selected}

    if config.only:
        missing = [name for name in config.only if name not in known]
        if missing:
            raise UnknownSuiteError(missing)
        selected = [s for s in selected if s.name in config.only]

    if config.skip:
        selected = [s for s in selected if s.name not in config.skip]

    skipped_expensive: Tuple[str, ...] = ()
    if not config.include_expensive:
        skipped_expensive = tuple(s.name for s in selected if s.expensive)
        selected = [s for s in selected if not s.expensive]

    return Selection(suites=tuple(selected), skipped_expensive=skipped_expensive)


__all__ = [
    "DuplicateSuiteError",
    "Selection",
    "Suite",
    "SuiteRegistry",
    "UnknownSuiteError",
    "select_suites",
]
