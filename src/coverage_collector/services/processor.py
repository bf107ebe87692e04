"""
Coverage data processing.

Merging, conversion and reporting are all delegated to the Go toolchain
(``go tool covdata`` and ``go tool cover``); counter files are never parsed
here.
"""

import shutil
from pathlib import Path

from coverage_collector.constants import COVERAGE_FILE_PREVIEW_LIMIT
from coverage_collector.errors import CommandError, CoverageProcessingError
from coverage_collector.observability.logging import CollectorLogger
from coverage_collector.utils.filesystem import (
    clear_directory,
    describe_directory,
    list_entries,
    list_files,
)
from coverage_collector.utils.process import run_command


def cleanup_coverage_dir(coverage_dir: Path) -> int:
    """
    Remove legacy coverage data, creating the directory when missing.

    Returns:
        Number of top-level entries deleted
    """
    logger = CollectorLogger(__name__)
    logger.log_step_start("cleanup", f"Cleaning up legacy coverage data from {coverage_dir}...")

    if coverage_dir.exists() and not coverage_dir.is_dir():
        raise CoverageProcessingError(f"Coverage path {coverage_dir} exists but is not a directory")

    if not coverage_dir.is_dir():
        logger.info("Coverage directory does not exist, creating fresh directory")
        try:
            coverage_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CoverageProcessingError(
                f"Cannot create coverage directory {coverage_dir}: {e}", cause=e
            ) from e
        return 0

    item_count = len(list_entries(coverage_dir))
    if item_count == 0:
        logger.info("Coverage directory is already empty, no cleanup needed")
        return 0

    logger.info(f"Found {item_count} items in coverage directory, deleting all contents")
    removed = clear_directory(coverage_dir)
    logger.info(f"Cleanup completed: deleted all contents from {coverage_dir}")
    return removed


class CoverageProcessor:
    """Merge raw counters and render the function-level report."""

    def __init__(
        self,
        coverage_dir: Path,
        source_path: Path,
        merged_dir: str = "merged",
        coverage_out: str = "coverage-overall.txt",
    ):
        self.coverage_dir = coverage_dir
        self.source_path = source_path
        self.merged_dir = merged_dir
        self.coverage_out = coverage_out
        self.logger = CollectorLogger(self.__class__.__name__)

    def validate_coverage_files(self) -> list[Path]:
        """
        Make sure raw counter data is present.

        Raises:
            CoverageProcessingError: If the directory is missing or has no files
        """
        self.logger.info(f"Checking coverage directory: {self.coverage_dir}")
        if not self.coverage_dir.is_dir():
            self.logger.error(f"Coverage directory {self.coverage_dir} does not exist")
            raise CoverageProcessingError(
                f"Coverage directory {self.coverage_dir} does not exist"
            )

        files = list_files(self.coverage_dir)
        self.logger.info(f"Found {len(files)} files in coverage directory")

        if not files:
            self.logger.warning(f"No coverage files found in {self.coverage_dir}")
            self.logger.info("Coverage directory contents:")
            for line in describe_directory(self.coverage_dir) or ["(empty)"]:
                self.logger.info(f"  {line}")
            raise CoverageProcessingError(f"No coverage files found in {self.coverage_dir}")

        self.logger.info("Coverage files found:")
        for path in files[:COVERAGE_FILE_PREVIEW_LIMIT]:
            self.logger.info(f"  {path.name}")
        return files

    def _go(self, *args: str) -> None:
        try:
            run_command(["go", *args], cwd=self.source_path)
        except CommandError as e:
            raise CoverageProcessingError(str(e.args[0]), cause=e) from e

    def process(self) -> Path:
        """
        Merge counters, convert them to a text profile and print per-function coverage.

        Returns:
            Path of the text coverage profile
        """
        self.logger.log_step_start("process", "Processing coverage data...")
        self.validate_coverage_files()

        merged = self.source_path / self.merged_dir
        shutil.rmtree(merged, ignore_errors=True)
        merged.mkdir(parents=True)

        self.logger.info(f"Merging coverage data from {self.coverage_dir}...")
        self._go("tool", "covdata", "merge", f"-i={self.coverage_dir}", "-o", self.merged_dir)

        self.logger.info("Converting coverage data to text format...")
        self._go("tool", "covdata", "textfmt", f"-i={self.merged_dir}", "-o", self.coverage_out)

        self.logger.info("Generating function-level coverage report...")
        self._go("tool", "cover", "-func", self.coverage_out)

        return self.source_path / self.coverage_out
