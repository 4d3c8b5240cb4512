"""
================================================================================
Configuration Loader
================================================================================

YAML-based settings with environment variable override, and the immutable
run configuration handed to the suite runner.

Features:
    - YAML file loading (config/config.yaml by default)
    - Environment variable override (RENDER_API_KEY overrides render.api_key)
    - Dot notation path access with typed defaults
    - RunConfig: frozen per-invocation settings (filters, flags, credentials)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

import yaml
from loguru import logger


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent.parent / "config" / "config.yaml"

DEFAULT_BASE_URL = "https://api.render.com/v1"
DEFAULT_TIMEOUT = 30.0


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""
    pass


class ConfigLoader:
    """
    Configuration loader with YAML and environment variable support.

    Configuration hierarchy (highest to lowest priority):
        1. Environment variables (RENDER_API_KEY)
        2. YAML configuration file
        3. Default values

    Usage:
        >>> config = ConfigLoader()
        >>> config.get("render.owner_id")
        'tea-abc123'

    Environment Variable Mapping:
        - render.api_key -> RENDER_API_KEY
        - render.owner_id -> RENDER_OWNER_ID
        - render.base_url -> RENDER_BASE_URL
        - logging.level -> LOGGING_LEVEL
    """

    _instance: Optional["ConfigLoader"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[Path] = None) -> "ConfigLoader":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Initialize configuration loader.

        Args:
            config_path: Path to YAML configuration file.
                        Uses DEFAULT_CONFIG_PATH if not specified.
        """
        if getattr(self, "_initialized", False):
            return

        self._config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._load_config()
        self._initialized = True

    @property
    def path(self) -> Path:
        return self._config_path

    def _load_config(self) -> None:
        if not self._config_path.exists():
            logger.debug(
                f"Configuration file not found: {self._config_path}. "
                f"Using defaults and environment variables only."
            )
            self._config = {}
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                self._config = yaml.safe_load(f) or {}
            logger.debug(f"Loaded configuration from: {self._config_path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {e}"
            ) from e

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        First checks environment variables, then YAML config, then default.
        """
        env_key = key.upper().replace(".", "_")
        env_value = os.environ.get(env_key)
        if env_value is not None:
            return self._convert_type(env_value, default)

        value: Any = self._config
        for part in key.split("."):
            if isinstance(value, dict):
                value = value.get(part)
            else:
                value = None

            if value is None:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        return self._config.get(section, {})

    def _convert_type(self, value: str, reference: Any) -> Any:
        """Environment values are strings; coerce them to the default's type."""
        if reference is None:
            return value

        if isinstance(reference, bool):
            return value.lower() in ("true", "1", "yes", "on")
        if isinstance(reference, int):
            try:
                return int(value)
            except ValueError:
                return value
        if isinstance(reference, float):
            try:
                return float(value)
            except ValueError:
                return value

        return value

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton so the next instantiation reloads from disk."""
        cls._instance = None
        cls._config = {}


# =============================================================================
# Run Configuration
# =============================================================================

def split_names(raw: Optional[str]) -> Tuple[str, ...]:
    """Parse a comma-separated suite list, dropping blanks and duplicates."""
    if not raw:
        return ()
    names = []
    for part in raw.split(","):
        name = part.strip()
        if name and name not in names:
            names.append(name)
    return tuple(names)


@dataclass(frozen=True)
class RunConfig:
    """
    Immutable settings for one harness invocation.

    Attributes:
        list_suites: Print the catalog and exit without running anything
        only: Allow-list of suite names (empty means "all")
        skip: Deny-list of suite names, applied after the allow-list
        include_expensive: Run suites that provision billable resources
        verbose: Include tracebacks in failure output
        api_key: Render API key
        owner_id: Workspace (owner) id every created resource belongs to
        base_url: API root
        timeout: Per-request timeout in seconds
    """

    list_suites: bool = False
    only: Tuple[str, ...] = ()
    skip: Tuple[str, ...] = ()
    include_expensive: bool = False
    verbose: bool = False
    api_key: str = ""
    owner_id: str = ""
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT

    def require_credentials(self) -> None:
        """Raise ConfigurationError unless an API key and owner id are set."""
        missing = []
        if not self.api_key:
            missing.append("RENDER_API_KEY")
        if not self.owner_id:
            missing.append("RENDER_OWNER_ID")
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}"
            )


def build_run_config(
    loader: ConfigLoader,
    *,
    list_suites: bool = False,
    only: Iterable[str] = (),
    skip: Iterable[str] = (),
    include_expensive: bool = False,
    verbose: bool = False,
) -> RunConfig:
    """
    Merge command-line flags with file/environment settings.

    Flags come from the CLI; credentials and connection settings come from
    the loader so they never have to appear on a command line.
    """
    timeout = loader.get("render.timeout", DEFAULT_TIMEOUT)
    try:
        timeout = float(timeout)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid render.timeout: {timeout!r}") from e

    return RunConfig(
        list_suites=list_suites,
        only=tuple(only),
        skip=tuple(skip),
        include_expensive=include_expensive or loader.get("harness.include_expensive", False),
        verbose=verbose,
        api_key=str(loader.get("render.api_key", "") or ""),
        owner_id=str(loader.get("render.owner_id", "") or ""),
        base_url=str(loader.get("render.base_url", DEFAULT_BASE_URL)),
        timeout=timeout,
    )


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "RunConfig",
    "build_run_config",
    "split_names",
]
