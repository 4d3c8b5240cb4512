#!/usr/bin/env python3
# ================================================================================
# Integration Test Runner Script
# ================================================================================
#
# Main entry point for running the Render API integration suites against a
# live account.
#
# Features:
#   - List the suite catalog
#   - Allow-list / deny-list suites by name
#   - Opt in to expensive (billable) suites
#   - Verbose failure output with tracebacks
#
# Usage:
#   python run_integration.py --list
#   python run_integration.py --only projects,envGroups
#   python run_integration.py --skip services --include-expensive --verbose
#
# Credentials come from RENDER_API_KEY / RENDER_OWNER_ID or config/config.yaml.
#
# ================================================================================

import argparse
import asyncio
import sys
from typing import List, Optional

from loguru import logger

from testsuites.integration.framework import (
    ConfigLoader,
    ConfigurationError,
    ConsoleReporter,
    RenderClient,
    RunConfig,
    SuiteRunner,
    UnknownSuiteError,
    build_run_config,
    select_suites,
)
from testsuites.integration.framework.config_loader import split_names
from testsuites.integration.framework.logging_setup import init_logger
from testsuites.integration.suites import CATALOG


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render API Integration Test Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show available suites
  python run_integration.py --list

  # Run two suites only
  python run_integration.py --only projects,envGroups

  # Everything, including databases, with tracebacks on failure
  python run_integration.py --include-expensive --verbose
        """
    )

    parser.add_argument(
        "--list",
        dest="list_suites",
        action="store_true",
        help="List available test suites and exit"
    )

    parser.add_argument(
        "--only",
        type=split_names,
        default=(),
        metavar="NAMES",
        help="Comma-separated suites to run (allow-list)"
    )

    parser.add_argument(
        "--skip",
        type=split_names,
        default=(),
        metavar="NAMES",
        help="Comma-separated suites to skip (applied after --only)"
    )

    parser.add_argument(
        "--include-expensive",
        action="store_true",
        help="Include suites that provision billable resources"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show tracebacks for failures and debug logging"
    )

    parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML config file (default: config/config.yaml)"
    )

    return parser


def parse_config(argv: Optional[List[str]] = None) -> RunConfig:
    args = build_parser().parse_args(argv)

    ConfigLoader.reset()
    loader = ConfigLoader(config_path=args.config)

    init_logger(
        level="DEBUG" if args.verbose else loader.get("logging.level", "INFO"),
        log_file=loader.get("logging.file"),
        rotation=loader.get("logging.rotation", "10 MB"),
        retention=loader.get("logging.retention", "7 days"),
        force=True,
    )

    return build_run_config(
        loader,
        list_suites=args.list_suites,
        only=args.only,
        skip=args.skip,
        include_expensive=args.include_expensive,
        verbose=args.verbose,
    )


async def run(config: RunConfig) -> int:
    """Run the selected suites and return the process exit code."""
    reporter = ConsoleReporter(verbose=config.verbose)

    if config.list_suites:
        reporter.catalog(CATALOG)
        return 0

    try:
        select_suites(CATALOG, config)
    except UnknownSuiteError as e:
        logger.error(str(e))
        reporter.unknown_suites(e.names)
        return 1

    config.require_credentials()

    async with RenderClient(config) as client:
        report = await SuiteRunner(CATALOG, config, client, reporter=reporter).run()
    return report.exit_code


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    try:
        config = parse_config(argv)
        return asyncio.run(run(config))
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except Exception:
        logger.exception("Fatal error")
        return 1


if __name__ == "__main__":
    sys.exit(main())
