"""Shared pytest fixtures for collector unit tests."""

from pathlib import Path

import pytest

from coverage_collector.errors import KubernetesAPIError
from coverage_collector.models import PodState
from coverage_collector.settings import Settings


class FakePodClient:
    """
    In-memory stand-in for PodClient.

    ``listings`` is consumed one entry per list_pod_names() call; the last
    listing repeats once exhausted. ``states`` maps pod name to PodState, or
    to a list of PodStates consumed per read the same way.
    """

    def __init__(
        self,
        listings: list[list[str]] | None = None,
        states: dict | None = None,
        namespace: str = "test-ns",
        label_selector: str = "component=test",
    ):
        self.namespace = namespace
        self.label_selector = label_selector
        self.listings = listings or [[]]
        self.states = states or {}
        self.list_calls = 0
        self.restarted: list[str] = []
        self.signalled: list[tuple[str, str, str]] = []
        self.failing_pods: set[str] = set()
        self.failing_reads: set[str] = set()

    def list_pod_names(self) -> list[str]:
        index = min(self.list_calls, len(self.listings) - 1)
        self.list_calls += 1
        return list(self.listings[index])

    def get_pod_state(self, name: str) -> PodState:
        if name in self.failing_reads:
            raise KubernetesAPIError(
                f"Failed to read pod {name} in namespace {self.namespace}",
                reason="Internal Server Error",
            )
        state = self.states.get(name)
        if state is None:
            return PodState(name=name, phase="NotFound")
        if isinstance(state, list):
            return state.pop(0) if len(state) > 1 else state[0]
        return state

    def restart_deployment(self, name: str) -> None:
        self.restarted.append(name)

    def signal_process(self, pod_name: str, container: str, process_name: str) -> str:
        if pod_name in self.failing_pods:
            raise KubernetesAPIError(f"Failed to exec in pod {pod_name}", reason="Forbidden")
        self.signalled.append((pod_name, container, process_name))
        return ""


@pytest.fixture
def fake_pod_client():
    """The FakePodClient class, for tests to build with their own listings."""
    return FakePodClient


@pytest.fixture
def running_pod():
    """Factory for a Running pod snapshot."""

    def _running_pod(name: str, node: str = "node-1", ready: str = "True") -> PodState:
        return PodState(name=name, phase="Running", node_name=node, ready=ready)

    return _running_pod


@pytest.fixture
def no_sleep():
    """Sleep replacement that records requested delays."""
    calls: list[float] = []

    def _sleep(seconds: float) -> None:
        calls.append(seconds)

    _sleep.calls = calls
    return _sleep


@pytest.fixture
def collector_settings(tmp_path: Path) -> Settings:
    """Settings pointing every path into a temporary directory."""
    return Settings(
        COVERAGE_WORK_ROOT=tmp_path / "work",
        COVERAGE_DIR=tmp_path / "covdata",
        COVERAGE_GO_INSTALL_ROOT=tmp_path / "usr-local",
        COVERAGE_NAMESPACE="test-ns",
        COVERAGE_DEPLOYMENT="test-deploy",
        COVERAGE_POD_LABEL_SELECTOR="component=test",
        COVERAGE_TIMEOUT=10,
        COVERAGE_SLEEP_INTERVAL=5,
        COVERAGE_INTERACTIVE=False,
    )
