#!/usr/bin/env python3
"""
Coverage Collector - Main entry point.

Collects Go coverage data from the instrumented pods of a deployment and
renders a function-level coverage report.

Usage:
    collect-coverage
    # Or as a module:
    python -m coverage_collector

Environment Variables:
    COVERAGE_NAMESPACE: Namespace of the instrumented deployment
    COVERAGE_DEPLOYMENT: Deployment to restart and signal
    COVERAGE_TIMEOUT: Upper bound in seconds for each pod wait
    COVERAGE_INTERACTIVE: Set to 'false' to skip the Ctrl+D prompt
    LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
"""

import logging
import sys
import time

from pydantic import ValidationError

from coverage_collector.constants import EXIT_FAILURE, EXIT_INTERRUPTED, EXIT_OK
from coverage_collector.errors import CollectorError, ConfigurationError
from coverage_collector.observability.logging import (
    CollectorLogger,
    setup_structured_logging,
)
from coverage_collector.services import CoverageCollector
from coverage_collector.settings import Settings, get_settings

logger = CollectorLogger(__name__)


def configure_logging(collector_settings: Settings) -> None:
    """Configure logging based on the collector settings."""
    setup_structured_logging(
        log_level=collector_settings.log_level.upper(),
        enable_json_formatting=collector_settings.json_logs,
        run_id_enabled=collector_settings.run_ids,
    )


def load_settings() -> Settings:
    """Load settings, reporting invalid values as a ConfigurationError."""
    try:
        return get_settings()
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(part) for part in error["loc"]) for error in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration for: {fields}") from e


def main() -> int:
    """Run a coverage collection and return the process exit code."""
    start_time = time.time()
    try:
        collector_settings = load_settings()
    except ConfigurationError as e:
        setup_structured_logging()
        logger.error(str(e))
        return EXIT_FAILURE

    configure_logging(collector_settings)

    try:
        CoverageCollector(collector_settings).run()
    except CollectorError as e:
        logger.log_step_failure("collect", e, duration=time.time() - start_time)
        if logging.getLogger().isEnabledFor(logging.DEBUG) and e.cause is not None:
            logger.debug(f"Underlying error: {e.cause!r}")
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.warning("Interrupted, coverage collection aborted")
        return EXIT_INTERRUPTED

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
