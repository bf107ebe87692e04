"""
Deployment restart and stale counter cleanup.

A rolling restart makes the old pods exit, and each exiting instrumented
process writes a covcounters file. Those counters belong to the previous
process generation, so they are removed once the old pods are gone.
"""

import time
from collections.abc import Callable
from pathlib import Path

from coverage_collector.constants import COVCOUNTERS_PREFIX
from coverage_collector.observability.logging import CollectorLogger
from coverage_collector.utils.filesystem import find_covcounters
from coverage_collector.utils.kubernetes import PodClient, read_pod_state
from coverage_collector.utils.polling import poll_until


class DeploymentRestarter:
    """
    Restart a deployment and wait for its initial pods to go away.

    The wait is bounded: on timeout a warning is logged and the collection
    proceeds anyway.
    """

    def __init__(
        self,
        pod_client: PodClient,
        deployment: str,
        coverage_dir: Path,
        timeout: int,
        interval: int,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.pod_client = pod_client
        self.deployment = deployment
        self.coverage_dir = coverage_dir
        self.timeout = timeout
        self.interval = interval
        self.sleep = sleep
        self.logger = CollectorLogger(self.__class__.__name__)

    def _pods_stopping(self, initial_pods: list[str]) -> bool:
        current_pods = self.pod_client.list_pod_names()

        if set(current_pods) != set(initial_pods):
            self.logger.info("Pod changes detected, restart is in progress")
            return True

        if not current_pods:
            self.logger.info("No pods remain, proceeding with cleanup")
            return True

        stopping = sum(
            1 for name in current_pods if read_pod_state(self.pod_client, name).is_stopping
        )
        if stopping == len(initial_pods):
            self.logger.info("All pods are stopping, proceeding with cleanup")
            return True

        self.logger.debug(f"{stopping}/{len(initial_pods)} pods stopping")
        return False

    def wait_for_pods_to_stop(self) -> bool:
        """
        Wait until the pod set changes or every initial pod is stopping.

        Returns:
            True if the restart was observed, False on timeout
        """
        self.logger.info("Waiting for pods to stop during restart...")
        initial_pods = self.pod_client.list_pod_names()

        observed = poll_until(
            lambda: self._pods_stopping(initial_pods),
            timeout=self.timeout,
            interval=self.interval,
            description="pods to stop",
            sleep=self.sleep,
        )
        if not observed:
            self.logger.warning("Timeout waiting for pods to stop, proceeding anyway")
        return observed

    def cleanup_covcounters(self) -> int:
        """
        Delete counter files written by the previous process generation.

        Returns:
            Number of files deleted
        """
        self.logger.info("Cleaning up covcounters files from coverage directory...")

        if not self.coverage_dir.is_dir():
            self.logger.info("Coverage directory does not exist, no covcounters cleanup needed")
            return 0

        counters = find_covcounters(self.coverage_dir)
        if not counters:
            self.logger.info(f"No {COVCOUNTERS_PREFIX}* files found, no cleanup needed")
            return 0

        self.logger.info(f"Found {len(counters)} covcounters files, deleting them...")
        for path in counters:
            self.logger.info(f"Deleting covcounters file: {path.name}")
            path.unlink(missing_ok=True)

        self.logger.info("Covcounters cleanup completed")
        return len(counters)

    def restart(self) -> bool:
        """
        Restart the deployment, wait for the old pods to stop and clean up.

        Returns:
            True if the pods were observed stopping before the timeout

        Raises:
            DeploymentRestartError: If the restart could not be initiated
        """
        self.logger.log_step_start(
            "restart",
            f"Restarting deployment {self.deployment} to ensure fresh coverage metadata generation...",
        )
        self.pod_client.restart_deployment(self.deployment)
        self.logger.info("Deployment restart initiated successfully")

        observed = self.wait_for_pods_to_stop()
        self.cleanup_covcounters()
        return observed
