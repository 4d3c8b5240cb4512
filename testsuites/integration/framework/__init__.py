"""
================================================================================
Integration Harness Framework
================================================================================

Orchestration engine for end-to-end suites against the Render API.

Modules:
    - assertions: expectation primitives raising AssertionFailure
    - context: per-suite ExecutionContext (client, naming, logging, cleanup)
    - registry: Suite descriptors, SuiteRegistry and selection filters
    - runner: SuiteRunner, TestResult and RunReport
    - reporter: console rendering of progress, summary and catalog
    - api_client: async Render API client over httpx
    - config_loader: YAML/env configuration and RunConfig
    - logging_setup: loguru sinks

Author: Automation Team
License: MIT
================================================================================
"""

from .api_client import ApiError, HttpClientError, Page, RenderClient
from .assertions import AssertionFailure
from .config_loader import ConfigLoader, ConfigurationError, RunConfig, build_run_config
from .context import ExecutionContext
from .registry import (
    DuplicateSuiteError,
    Selection,
    Suite,
    SuiteRegistry,
    UnknownSuiteError,
    select_suites,
)
from .reporter import ConsoleReporter
from .runner import RunReport, SuiteRunner, TestResult, run_tests

__all__ = [
    "ApiError",
    "AssertionFailure",
    "ConfigLoader",
    "ConfigurationError",
    "ConsoleReporter",
    "DuplicateSuiteError",
    "ExecutionContext",
    "HttpClientError",
    "Page",
    "RenderClient",
    "RunConfig",
    "RunReport",
    "Selection",
    "Suite",
    "SuiteRegistry",
    "SuiteRunner",
    "TestResult",
    "UnknownSuiteError",
    "build_run_config",
    "run_tests",
    "select_suites",
]
