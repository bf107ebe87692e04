"""Unit tests for the deployment restarter and covcounters cleanup."""

import logging

import pytest

from coverage_collector.errors import DeploymentRestartError
from coverage_collector.models import PodState
from coverage_collector.services.restarter import DeploymentRestarter


def make_restarter(pod_client, coverage_dir, sleep, timeout=60, interval=5):
    return DeploymentRestarter(
        pod_client,
        deployment="test-deploy",
        coverage_dir=coverage_dir,
        timeout=timeout,
        interval=interval,
        sleep=sleep,
    )


class TestWaitForPodsToStop:
    """Tests for the bounded stop-wait loop."""

    def test_unchanged_running_pods_wait_until_timeout(
        self, fake_pod_client, running_pod, no_sleep, tmp_path, caplog
    ):
        """A stable pod set that never stops runs the loop to timeout, then proceeds."""
        client = fake_pod_client(
            listings=[["pod-a", "pod-b"]],
            states={"pod-a": running_pod("pod-a"), "pod-b": running_pod("pod-b")},
        )
        restarter = make_restarter(client, tmp_path, no_sleep, timeout=60, interval=5)

        with caplog.at_level(logging.WARNING):
            observed = restarter.wait_for_pods_to_stop()

        assert observed is False
        assert no_sleep.calls == [5] * 12
        assert "Timeout waiting for pods to stop, proceeding anyway" in caplog.text

    def test_pod_set_change_ends_wait(self, fake_pod_client, running_pod, no_sleep, tmp_path):
        client = fake_pod_client(
            listings=[["pod-a"], ["pod-a"], ["pod-a", "pod-new"]],
            states={"pod-a": running_pod("pod-a")},
        )
        restarter = make_restarter(client, tmp_path, no_sleep)

        assert restarter.wait_for_pods_to_stop() is True
        assert no_sleep.calls == [5]

    def test_all_initial_pods_terminating_ends_wait(self, fake_pod_client, no_sleep, tmp_path):
        client = fake_pod_client(
            listings=[["pod-a", "pod-b"]],
            states={
                "pod-a": PodState(name="pod-a", phase="Terminating", node_name="n1"),
                "pod-b": PodState(name="pod-b", phase="Terminating", node_name="n2"),
            },
        )
        restarter = make_restarter(client, tmp_path, no_sleep)

        assert restarter.wait_for_pods_to_stop() is True
        assert no_sleep.calls == []

    def test_not_found_counts_as_stopping(self, fake_pod_client, no_sleep, tmp_path):
        """Pods whose lookup returns 404 count towards the stopping total."""
        client = fake_pod_client(listings=[["pod-a"]], states={})
        restarter = make_restarter(client, tmp_path, no_sleep)

        assert restarter.wait_for_pods_to_stop() is True

    def test_partially_terminating_keeps_waiting(
        self, fake_pod_client, running_pod, no_sleep, tmp_path
    ):
        client = fake_pod_client(
            listings=[["pod-a", "pod-b"]],
            states={
                "pod-a": PodState(name="pod-a", phase="Terminating"),
                "pod-b": running_pod("pod-b"),
            },
        )
        restarter = make_restarter(client, tmp_path, no_sleep, timeout=10, interval=5)

        assert restarter.wait_for_pods_to_stop() is False
        assert no_sleep.calls == [5, 5]

    def test_empty_pod_listing_ends_wait(self, fake_pod_client, no_sleep, tmp_path):
        client = fake_pod_client(listings=[[]])
        restarter = make_restarter(client, tmp_path, no_sleep)

        assert restarter.wait_for_pods_to_stop() is True

    def test_unreadable_pod_counts_as_stopping(
        self, fake_pod_client, running_pod, no_sleep, tmp_path, caplog
    ):
        """A failed state read is treated as NotFound instead of ending the wait."""
        client = fake_pod_client(
            listings=[["pod-a", "pod-b"]],
            states={
                "pod-a": PodState(name="pod-a", phase="Terminating"),
                "pod-b": running_pod("pod-b"),
            },
        )
        client.failing_reads = {"pod-b"}
        restarter = make_restarter(client, tmp_path, no_sleep)

        with caplog.at_level(logging.WARNING):
            assert restarter.wait_for_pods_to_stop() is True

        assert "Could not read pod pod-b" in caplog.text


class TestCleanupCovcounters:
    """Tests for removal of stale counter files."""

    def test_missing_directory_is_noop(self, fake_pod_client, no_sleep, tmp_path):
        restarter = make_restarter(fake_pod_client(), tmp_path / "absent", no_sleep)

        assert restarter.cleanup_covcounters() == 0
        assert not (tmp_path / "absent").exists()

    def test_only_covcounters_are_deleted(self, fake_pod_client, no_sleep, tmp_path):
        (tmp_path / "covcounters.abc.1234.1700000000").write_bytes(b"\x00")
        (tmp_path / "nested").mkdir()
        (tmp_path / "nested" / "covcounters.def.99.1700000001").write_bytes(b"\x00")
        (tmp_path / "covmeta.abc").write_bytes(b"\x01")

        restarter = make_restarter(fake_pod_client(), tmp_path, no_sleep)

        assert restarter.cleanup_covcounters() == 2
        remaining = sorted(p.name for p in tmp_path.rglob("*") if p.is_file())
        assert remaining == ["covmeta.abc"]

    def test_no_counters_found(self, fake_pod_client, no_sleep, tmp_path):
        (tmp_path / "covmeta.abc").write_bytes(b"\x01")
        restarter = make_restarter(fake_pod_client(), tmp_path, no_sleep)

        assert restarter.cleanup_covcounters() == 0
        assert (tmp_path / "covmeta.abc").exists()


class TestRestart:
    """Tests for the full restart step."""

    def test_restart_patches_waits_and_cleans(self, fake_pod_client, no_sleep, tmp_path):
        (tmp_path / "covcounters.old.1.1").write_bytes(b"\x00")
        client = fake_pod_client(listings=[["pod-a"], ["pod-b"]])
        restarter = make_restarter(client, tmp_path, no_sleep)

        assert restarter.restart() is True
        assert client.restarted == ["test-deploy"]
        assert not (tmp_path / "covcounters.old.1.1").exists()

    def test_restart_failure_propagates(self, fake_pod_client, no_sleep, tmp_path):
        client = fake_pod_client(listings=[["pod-a"]])

        def reject(name):
            raise DeploymentRestartError(name, "test-ns")

        client.restart_deployment = reject
        restarter = make_restarter(client, tmp_path, no_sleep)

        with pytest.raises(DeploymentRestartError):
            restarter.restart()
        assert client.list_calls == 0
