"""
Repository-level pytest configuration (showcase-safe).

Why this exists:
  - Unit tests must never pick up a developer's real Render credentials
  - Every test starts from a fresh ConfigLoader singleton
  - Loguru output can be captured with the ``log_records`` fixture
"""

from __future__ import annotations

from pathlib import Path
from typing import Generator, List

import pytest
from loguru import logger

from testsuites.integration.framework.config_loader import ConfigLoader


RENDER_ENV_VARS = (
    "RENDER_API_KEY",
    "RENDER_OWNER_ID",
    "RENDER_BASE_URL",
    "RENDER_TIMEOUT",
    "HARNESS_INCLUDE_EXPENSIVE",
    "LOGGING_LEVEL",
    "LOGGING_FILE",
)


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch) -> Generator[None, None, None]:
    """Strip real credentials from the environment and reset the config singleton."""
    for name in RENDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    ConfigLoader.reset()
    yield
    ConfigLoader.reset()


@pytest.fixture
def log_records() -> Generator[List[dict], None, None]:
    """Collect loguru records (level name + message) emitted during the test."""
    records: List[dict] = []
    sink_id = logger.add(
        lambda message: records.append(
            {
                "level": message.record["level"].name,
                "message": message.record["message"],
                "extra": dict(message.record["extra"]),
            }
        ),
        level="DEBUG",
    )
    yield records
    logger.remove(sink_id)
