"""
Kubernetes utilities for the coverage collector.

This module provides helper functions and a small client for the handful of
cluster operations a collection needs.

Key functionality:
- Kubernetes client management and configuration
- Pod listing and state snapshots for one label selector
- Rolling restart of a deployment
- Signal delivery through pod exec
"""

import logging
from datetime import UTC, datetime

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.stream import stream
from websocket import WebSocketException

from coverage_collector.constants import (
    CONDITION_FALSE,
    CONDITION_READY,
    COVERAGE_DUMP_SIGNAL,
    DEFAULT_EXEC_TIMEOUT,
    PHASE_NOT_FOUND,
    PHASE_TERMINATING,
    RESTARTED_AT_ANNOTATION,
)
from coverage_collector.errors import DeploymentRestartError, KubernetesAPIError
from coverage_collector.models import PodState

logger = logging.getLogger(__name__)


def get_kubernetes_client() -> client.ApiClient:
    """
    Get configured Kubernetes API client.

    Tries the local kubeconfig first since the collector normally runs on a
    control-plane host, then falls back to in-cluster configuration.

    Returns:
        Configured Kubernetes API client
    """
    try:
        config.load_kube_config()
        logger.debug("Loaded kubeconfig from local environment")
    except config.ConfigException:
        try:
            config.load_incluster_config()
            logger.debug("Loaded in-cluster Kubernetes configuration")
        except config.ConfigException as e:
            logger.error(f"Failed to load Kubernetes configuration: {e}")
            raise KubernetesAPIError(
                "No usable kubeconfig or in-cluster configuration", cause=e
            ) from e

    return client.ApiClient()


def pod_state_from_object(pod: client.V1Pod) -> PodState:
    """
    Fold a V1Pod into a PodState.

    A pod with a deletion timestamp is reported as Terminating, the way
    kubectl displays it, regardless of its API phase.
    """
    metadata = pod.metadata
    status = pod.status
    spec = pod.spec

    if metadata.deletion_timestamp is not None:
        phase = PHASE_TERMINATING
    else:
        phase = (status.phase if status else None) or PHASE_NOT_FOUND

    ready = CONDITION_FALSE
    if status and status.conditions:
        for condition in status.conditions:
            if condition.type == CONDITION_READY:
                ready = condition.status
                break

    return PodState(
        name=metadata.name,
        phase=phase,
        node_name=(spec.node_name if spec else None) or "",
        ready=ready,
    )


def read_pod_state(pod_client: "PodClient", name: str) -> PodState:
    """
    Read a pod's state for a polling or signalling loop.

    A failed read is reported as NotFound so that one unreadable pod never
    ends the loop for the others.
    """
    try:
        return pod_client.get_pod_state(name)
    except KubernetesAPIError as e:
        logger.warning(
            f"Could not read pod {name}, treating it as NotFound: {e.args[0]}",
            extra={"pod_name": name, "error_type": type(e).__name__},
        )
        return PodState(name=name, phase=PHASE_NOT_FOUND)


class PodClient:
    """
    Cluster operations scoped to one deployment's pods.

    Wraps CoreV1Api and AppsV1Api for a fixed namespace and label selector.
    """

    def __init__(
        self,
        namespace: str,
        label_selector: str,
        k8s_client: client.ApiClient | None = None,
    ):
        """
        Initialize the pod client.

        Args:
            namespace: Namespace holding the deployment
            label_selector: Selector matching the deployment's pods
            k8s_client: Kubernetes API client, will be created if not provided
        """
        self.namespace = namespace
        self.label_selector = label_selector
        self.k8s_client = k8s_client or get_kubernetes_client()
        self.core_api = client.CoreV1Api(self.k8s_client)
        self.apps_api = client.AppsV1Api(self.k8s_client)

    def list_pod_names(self) -> list[str]:
        """List the names of all pods matching the selector, terminating ones included."""
        try:
            pods = self.core_api.list_namespaced_pod(
                namespace=self.namespace, label_selector=self.label_selector
            )
        except ApiException as e:
            logger.error(f"Failed to list pods in {self.namespace}: {e.reason}")
            raise KubernetesAPIError(
                f"Failed to list pods in namespace {self.namespace}",
                reason=e.reason,
                cause=e,
            ) from e

        return [pod.metadata.name for pod in pods.items]

    def get_pod_state(self, name: str) -> PodState:
        """
        Read the current state of a pod.

        Returns:
            PodState; phase is NotFound when the pod no longer exists
        """
        try:
            pod = self.core_api.read_namespaced_pod(name=name, namespace=self.namespace)
        except ApiException as e:
            if e.status == 404:
                logger.debug(f"Pod {name} not found")
                return PodState(name=name, phase=PHASE_NOT_FOUND)
            raise KubernetesAPIError(
                f"Failed to read pod {name} in namespace {self.namespace}",
                reason=e.reason,
                cause=e,
            ) from e

        return pod_state_from_object(pod)

    def restart_deployment(self, name: str) -> None:
        """
        Trigger a rolling restart of a deployment.

        Raises:
            DeploymentRestartError: If the patch is rejected
        """
        body = {
            "spec": {
                "template": {
                    "metadata": {
                        "annotations": {
                            RESTARTED_AT_ANNOTATION: datetime.now(UTC).isoformat()
                        }
                    }
                }
            }
        }

        try:
            self.apps_api.patch_namespaced_deployment(
                name=name, namespace=self.namespace, body=body
            )
        except ApiException as e:
            logger.error(f"Failed to restart deployment {name}: {e.reason}")
            raise DeploymentRestartError(name, self.namespace, cause=e) from e

        logger.debug(f"Patched {RESTARTED_AT_ANNOTATION} on deployment {name}")

    def signal_process(
        self,
        pod_name: str,
        container: str,
        process_name: str,
        signal: str = COVERAGE_DUMP_SIGNAL,
        timeout: int = DEFAULT_EXEC_TIMEOUT,
    ) -> str:
        """
        Send a signal to a process inside a container with pkill.

        Returns:
            Combined stdout and stderr of the exec

        Raises:
            KubernetesAPIError: If the exec could not be performed
        """
        command = ["pkill", f"-{signal}", process_name]
        logger.debug(f"Executing {' '.join(command)} in {pod_name}/{container}")

        try:
            return stream(
                self.core_api.connect_get_namespaced_pod_exec,
                pod_name,
                self.namespace,
                container=container,
                command=command,
                stderr=True,
                stdin=False,
                stdout=True,
                tty=False,
                _request_timeout=timeout,
            )
        except ApiException as e:
            raise KubernetesAPIError(
                f"Failed to exec in pod {pod_name} container {container}",
                reason=e.reason,
                cause=e,
            ) from e
        except (WebSocketException, OSError) as e:
            # The exec session often drops when the signalled process exits
            raise KubernetesAPIError(
                f"Exec session to pod {pod_name} container {container} failed: {e}",
                reason=type(e).__name__,
                cause=e,
            ) from e
