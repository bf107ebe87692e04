"""Wait for the deployment's pods to come back after the coverage dump."""

import time
from collections.abc import Callable
from enum import Enum

from coverage_collector.errors import PodsNotReadyError
from coverage_collector.models import PodSetStatus
from coverage_collector.observability.logging import CollectorLogger
from coverage_collector.utils.kubernetes import PodClient, read_pod_state
from coverage_collector.utils.polling import poll_until


class ReadinessOutcome(str, Enum):
    ALL_READY = "all_ready"
    DEGRADED = "degraded"


class ReadinessPoller:
    """
    Poll pod phase and Ready condition until every pod is ready.

    On timeout the collection continues in degraded mode as long as at least
    one pod is ready.
    """

    def __init__(
        self,
        pod_client: PodClient,
        timeout: int,
        interval: int,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.pod_client = pod_client
        self.timeout = timeout
        self.interval = interval
        self.sleep = sleep
        self.logger = CollectorLogger(self.__class__.__name__)

    def pod_set_status(self) -> PodSetStatus:
        names = self.pod_client.list_pod_names()
        pods = [read_pod_state(self.pod_client, name) for name in names]
        return PodSetStatus(pods=pods)

    def _all_ready(self) -> bool:
        status = self.pod_set_status()
        if status.total == 0:
            self.logger.info("No pods found, waiting for deployment to create new pods...")
            return False

        self.logger.info(
            f"Pod status: {status.ready_count}/{status.total} pods ready and running"
        )
        return status.all_ready

    def wait_for_pods_ready(self) -> ReadinessOutcome:
        """
        Wait for the pods to be running and ready.

        Returns:
            ALL_READY, or DEGRADED when only some pods were ready at timeout

        Raises:
            PodsNotReadyError: If no pod is ready when the timeout elapses
        """
        self.logger.log_step_start("wait_ready", "Waiting for coverage files to be dumped...")
        self.logger.info("Monitoring deployment restart and waiting for pods to be running...")

        if poll_until(
            self._all_ready,
            timeout=self.timeout,
            interval=self.interval,
            description="pods to become ready",
            sleep=self.sleep,
        ):
            self.logger.info("All pods are running and ready. Coverage files should be available.")
            return ReadinessOutcome.ALL_READY

        status = self.pod_set_status()
        if status.any_ready:
            self.logger.warning(
                "Timeout reached waiting for all pods to be ready, "
                f"but {status.ready_count}/{status.total} pods are running. Continuing..."
            )
            return ReadinessOutcome.DEGRADED

        self.logger.error("Timeout reached and no pods are ready. Cannot proceed.")
        raise PodsNotReadyError(self.timeout, status.total)
