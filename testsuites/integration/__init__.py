"""
Render API integration harness.

    - framework: runner, execution context, assertions, reporting, API client
    - suites: the catalog of end-to-end suites run against a live account
"""
