"""
Test suites package.

Kept importable so that:
  - `run_integration.py` can load the suite catalog
  - the unit tests can import the harness framework
  - CI jobs can run the harness programmatically
"""
