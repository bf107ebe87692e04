"""
Coverage dump trigger.

Go binaries built with -cover write their counters when they exit, so the
dump is forced by sending SIGTERM to the instrumented process in every pod.
"""

from coverage_collector.constants import COVERAGE_DUMP_SIGNAL
from coverage_collector.errors import KubernetesAPIError, NoPodsFoundError
from coverage_collector.models import TriggerResult
from coverage_collector.observability.logging import CollectorLogger
from coverage_collector.utils.kubernetes import PodClient, read_pod_state


class CoverageTrigger:
    """Signal the instrumented process in each running pod."""

    def __init__(
        self,
        pod_client: PodClient,
        deployment: str,
        container: str,
        process_name: str,
    ):
        self.pod_client = pod_client
        self.deployment = deployment
        self.container = container
        self.process_name = process_name
        self.logger = CollectorLogger(self.__class__.__name__)

    def signal_pod(self, pod_name: str, result: TriggerResult) -> None:
        state = read_pod_state(self.pod_client, pod_name)
        if not state.is_scheduled_and_running:
            self.logger.warning(
                f"Skipping pod {pod_name} ({state.describe()})", pod_name=pod_name
            )
            result.skipped.append(pod_name)
            return

        self.logger.info(
            f"Sending {COVERAGE_DUMP_SIGNAL} to {self.container} container in pod {pod_name}...",
            pod_name=pod_name,
        )
        try:
            output = self.pod_client.signal_process(
                pod_name, self.container, self.process_name
            )
        except KubernetesAPIError as e:
            # Delivery is best-effort; the next pod is still signalled
            self.logger.warning(
                f"Failed to signal {self.process_name} in pod {pod_name}: {e.args[0]}",
                pod_name=pod_name,
                error_type=type(e).__name__,
            )
            result.failed.append(pod_name)
            return

        if output:
            self.logger.debug(f"pkill output from {pod_name}: {output.strip()}")
        result.signalled.append(pod_name)

    def trigger(self) -> TriggerResult:
        """
        Send the dump signal to every pod of the deployment.

        Returns:
            Per-pod outcome

        Raises:
            NoPodsFoundError: If the deployment has no pods at all
        """
        self.logger.log_step_start("trigger", "Triggering coverage dump for pods...")

        pods = self.pod_client.list_pod_names()
        if not pods:
            self.logger.error(
                f"No pods found for deployment {self.deployment} in namespace {self.pod_client.namespace}"
            )
            raise NoPodsFoundError(
                self.deployment, self.pod_client.namespace, self.pod_client.label_selector
            )

        result = TriggerResult(total=len(pods))
        for pod_name in pods:
            self.signal_pod(pod_name, result)

        self.logger.info(f"Coverage dump triggered for {result.success_count} pods")
        return result
