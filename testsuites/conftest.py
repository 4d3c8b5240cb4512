"""
================================================================================
Test Suites Pytest Configuration
================================================================================

Registers the markers used by the harness unit tests.

================================================================================
"""


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""
    config.addinivalue_line(
        "markers", "runner: Suite selection, execution and aggregation"
    )
    config.addinivalue_line(
        "markers", "context: Execution context naming, logging and cleanup"
    )
    config.addinivalue_line(
        "markers", "client: Render API client behaviour against a mock transport"
    )
    config.addinivalue_line(
        "markers", "suites: Bundled suites against an in-memory fake API"
    )
    config.addinivalue_line(
        "markers", "cli: Command-line entry point and exit codes"
    )


def pytest_report_header(config):
    """Add custom header to pytest output."""
    return [
        "",
        "=" * 60,
        "Render API Integration Harness - unit tests",
        "=" * 60,
        "",
    ]
