"""
End-to-end coverage collection.

Runs every step in a fixed order: cleanup, tool installation, checkout,
deployment restart, operator prompt, coverage dump, readiness wait and
report generation. A failing step aborts the run; nothing is rolled back.
"""

import sys
import time
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

from coverage_collector.models import CollectionRun, CollectionStage
from coverage_collector.observability.logging import CollectorLogger
from coverage_collector.services.installer import GoToolchainInstaller, SystemToolsInstaller
from coverage_collector.services.processor import CoverageProcessor, cleanup_coverage_dir
from coverage_collector.services.readiness import ReadinessOutcome, ReadinessPoller
from coverage_collector.services.repository import clone_repository
from coverage_collector.services.restarter import DeploymentRestarter
from coverage_collector.services.trigger import CoverageTrigger
from coverage_collector.settings import Settings, get_settings
from coverage_collector.utils.kubernetes import PodClient


def wait_for_operator(stdin: TextIO, logger: CollectorLogger) -> None:
    """Block until the operator presses Enter or sends end-of-input (Ctrl+D)."""
    logger.info(
        "Setup completed. Please ensure the instrumented workload runs long "
        "enough to generate coverage data."
    )
    logger.info("When you are ready to generate the coverage report, press Ctrl+D to continue...")
    logger.info("Waiting for Ctrl+D signal...")
    stdin.readline()
    logger.info("Continuing with coverage dump...")


class CoverageCollector:
    """
    Drive a complete coverage collection against one deployment.

    Stages only ever move forward; see CollectionRun.
    """

    def __init__(
        self,
        collector_settings: Settings | None = None,
        pod_client: PodClient | None = None,
        stdin: TextIO | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = collector_settings or get_settings()
        self._pod_client = pod_client
        self.stdin = stdin or sys.stdin
        self.sleep = sleep
        self.run_state = CollectionRun()
        self.logger = CollectorLogger(self.__class__.__name__)

    @property
    def pod_client(self) -> PodClient:
        """Get or create the pod client."""
        if self._pod_client is None:
            self._pod_client = PodClient(
                namespace=self.settings.namespace,
                label_selector=self.settings.pod_label_selector,
            )
        return self._pod_client

    def prepare_workspace(self) -> None:
        """Clean legacy data, install tooling and check out the sources."""
        cleanup_coverage_dir(self.settings.coverage_dir)
        SystemToolsInstaller(self.settings.package_manager).install()
        GoToolchainInstaller(self.settings).install()
        clone_repository(self.settings.repo_url, self.settings.work_root, self.settings.src_dir)

    def restart(self) -> None:
        self.run_state.advance(CollectionStage.RESTARTING)
        restarter = DeploymentRestarter(
            self.pod_client,
            deployment=self.settings.deployment,
            coverage_dir=self.settings.coverage_dir,
            timeout=self.settings.timeout_seconds,
            interval=self.settings.sleep_interval_seconds,
            sleep=self.sleep,
        )
        observed = restarter.restart()
        self.run_state.advance(CollectionStage.PODS_STOPPED, forced=not observed)

    def await_operator(self) -> None:
        if self.settings.interactive:
            wait_for_operator(self.stdin, self.logger)
        self.run_state.advance(CollectionStage.PODS_RECREATED)

    def trigger(self) -> None:
        CoverageTrigger(
            self.pod_client,
            deployment=self.settings.deployment,
            container=self.settings.container,
            process_name=self.settings.process_name,
        ).trigger()
        self.run_state.advance(CollectionStage.TRIGGERED)

    def wait_ready(self) -> None:
        outcome = ReadinessPoller(
            self.pod_client,
            timeout=self.settings.timeout_seconds,
            interval=self.settings.sleep_interval_seconds,
            sleep=self.sleep,
        ).wait_for_pods_ready()
        self.run_state.advance(
            CollectionStage.READY, forced=outcome is ReadinessOutcome.DEGRADED
        )

    def process(self) -> Path:
        report = CoverageProcessor(
            coverage_dir=self.settings.coverage_dir,
            source_path=self.settings.source_path,
            merged_dir=self.settings.merged_dir,
            coverage_out=self.settings.coverage_out,
        ).process()
        self.run_state.advance(CollectionStage.PROCESSED)
        return report

    def run(self) -> Path:
        """
        Execute the full collection.

        Returns:
            Path of the text coverage profile

        Raises:
            CollectorError: On the first fatal step failure
        """
        start_time = time.time()
        self.logger.log_step_start("collect", "Starting coverage generation...")

        self.prepare_workspace()
        self.restart()
        self.await_operator()
        self.trigger()
        self.wait_ready()
        report = self.process()

        self.logger.log_step_success(
            "collect",
            f"Coverage generation completed successfully! Report: {report}",
            duration=time.time() - start_time,
        )
        return report
