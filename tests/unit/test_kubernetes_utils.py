"""Unit tests for Kubernetes utility functions."""

from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

import pytest
from kubernetes import client
from kubernetes.client.rest import ApiException
from websocket import WebSocketConnectionClosedException

from coverage_collector.constants import RESTARTED_AT_ANNOTATION
from coverage_collector.errors import DeploymentRestartError, KubernetesAPIError
from coverage_collector.utils.kubernetes import (
    PodClient,
    pod_state_from_object,
    read_pod_state,
)


def make_pod(
    name="pod-a",
    phase="Running",
    node_name="node-1",
    ready="True",
    deleting=False,
):
    conditions = [client.V1PodCondition(type="Ready", status=ready)] if ready else None
    return client.V1Pod(
        metadata=client.V1ObjectMeta(
            name=name,
            deletion_timestamp=datetime.now(UTC) if deleting else None,
        ),
        spec=client.V1PodSpec(containers=[], node_name=node_name),
        status=client.V1PodStatus(phase=phase, conditions=conditions),
    )


@pytest.fixture
def apis():
    core_api = MagicMock()
    apps_api = MagicMock()
    with (
        patch("kubernetes.client.CoreV1Api", return_value=core_api),
        patch("kubernetes.client.AppsV1Api", return_value=apps_api),
    ):
        pod_client = PodClient("test-ns", "component=test", k8s_client=MagicMock())
        yield pod_client, core_api, apps_api


class TestPodStateFromObject:
    def test_running_ready_pod(self):
        state = pod_state_from_object(make_pod())

        assert state.phase == "Running"
        assert state.node_name == "node-1"
        assert state.is_ready
        assert state.is_scheduled_and_running

    def test_deletion_timestamp_reports_terminating(self):
        state = pod_state_from_object(make_pod(deleting=True))

        assert state.phase == "Terminating"
        assert state.is_stopping

    def test_missing_conditions_and_node(self):
        state = pod_state_from_object(make_pod(phase="Pending", node_name=None, ready=None))

        assert state.ready == "False"
        assert state.node_name == ""
        assert not state.is_scheduled_and_running


class TestPodClient:
    def test_list_pod_names_uses_selector(self, apis):
        pod_client, core_api, _ = apis
        core_api.list_namespaced_pod.return_value = client.V1PodList(
            items=[make_pod("pod-a"), make_pod("pod-b")]
        )

        assert pod_client.list_pod_names() == ["pod-a", "pod-b"]
        core_api.list_namespaced_pod.assert_called_once_with(
            namespace="test-ns", label_selector="component=test"
        )

    def test_list_pod_names_api_error(self, apis):
        pod_client, core_api, _ = apis
        core_api.list_namespaced_pod.side_effect = ApiException(status=403, reason="Forbidden")

        with pytest.raises(KubernetesAPIError) as exc_info:
            pod_client.list_pod_names()

        assert exc_info.value.reason == "Forbidden"
        assert "exec pods" in str(exc_info.value)

    def test_get_pod_state_not_found(self, apis):
        pod_client, core_api, _ = apis
        core_api.read_namespaced_pod.side_effect = ApiException(status=404, reason="Not Found")

        state = pod_client.get_pod_state("gone")

        assert state.phase == "NotFound"
        assert state.is_stopping

    def test_get_pod_state_other_error_raises(self, apis):
        pod_client, core_api, _ = apis
        core_api.read_namespaced_pod.side_effect = ApiException(status=500, reason="Internal")

        with pytest.raises(KubernetesAPIError):
            pod_client.get_pod_state("pod-a")

    def test_restart_deployment_sets_restarted_at(self, apis):
        pod_client, _, apps_api = apis

        pod_client.restart_deployment("test-deploy")

        call_kwargs = apps_api.patch_namespaced_deployment.call_args.kwargs
        assert call_kwargs["name"] == "test-deploy"
        assert call_kwargs["namespace"] == "test-ns"
        annotations = call_kwargs["body"]["spec"]["template"]["metadata"]["annotations"]
        assert RESTARTED_AT_ANNOTATION in annotations

    def test_restart_deployment_failure(self, apis):
        pod_client, _, apps_api = apis
        apps_api.patch_namespaced_deployment.side_effect = ApiException(
            status=404, reason="Not Found"
        )

        with pytest.raises(DeploymentRestartError, match="test-deploy"):
            pod_client.restart_deployment("test-deploy")

    def test_signal_process_execs_pkill(self, apis):
        pod_client, core_api, _ = apis

        with patch("coverage_collector.utils.kubernetes.stream", return_value="") as mock_stream:
            pod_client.signal_process("pod-a", "nsx-operator", "manager")

        args, kwargs = mock_stream.call_args
        assert args == (core_api.connect_get_namespaced_pod_exec, "pod-a", "test-ns")
        assert kwargs["container"] == "nsx-operator"
        assert kwargs["command"] == ["pkill", "-SIGTERM", "manager"]
        assert kwargs["tty"] is False

    def test_signal_process_failure(self, apis):
        pod_client, _, _ = apis

        with (
            patch(
                "coverage_collector.utils.kubernetes.stream",
                side_effect=ApiException(status=403, reason="Forbidden"),
            ),
            pytest.raises(KubernetesAPIError),
        ):
            pod_client.signal_process("pod-a", "nsx-operator", "manager")

    @pytest.mark.parametrize(
        "error",
        [WebSocketConnectionClosedException("closed"), TimeoutError("timed out")],
    )
    def test_signal_process_transport_failure(self, apis, error):
        pod_client, _, _ = apis

        with (
            patch("coverage_collector.utils.kubernetes.stream", side_effect=error),
            pytest.raises(KubernetesAPIError, match="Exec session to pod pod-a") as exc_info,
        ):
            pod_client.signal_process("pod-a", "nsx-operator", "manager")

        assert exc_info.value.cause is error


class TestReadPodState:
    def test_server_error_reads_as_not_found(self, apis):
        pod_client, core_api, _ = apis
        core_api.read_namespaced_pod.side_effect = ApiException(
            status=500, reason="Internal Server Error"
        )

        state = read_pod_state(pod_client, "pod-a")

        assert state.name == "pod-a"
        assert state.phase == "NotFound"

    def test_successful_read_passes_through(self, apis):
        pod_client, core_api, _ = apis
        core_api.read_namespaced_pod.return_value = make_pod("pod-a")

        assert read_pod_state(pod_client, "pod-a").is_ready
