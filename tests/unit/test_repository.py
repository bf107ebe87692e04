"""Unit tests for the repository checkout."""

from unittest.mock import patch

import pytest

from coverage_collector.errors import CommandError
from coverage_collector.services.repository import clone_repository

REPO = "https://github.com/vmware-tanzu/nsx-operator"


def test_clones_with_depth_one(tmp_path):
    with patch("coverage_collector.services.repository.run_command") as mock_run:
        assert clone_repository(REPO, tmp_path, "nsx-operator") is True

    mock_run.assert_called_once_with(
        ["git", "clone", "--depth", "1", REPO, "nsx-operator"], cwd=tmp_path
    )


def test_existing_checkout_is_reused(tmp_path):
    (tmp_path / "nsx-operator").mkdir()

    with patch("coverage_collector.services.repository.run_command") as mock_run:
        assert clone_repository(REPO, tmp_path, "nsx-operator") is False

    mock_run.assert_not_called()


def test_clone_failure_propagates(tmp_path):
    with (
        patch(
            "coverage_collector.services.repository.run_command",
            side_effect=CommandError(["git", "clone"], 128, "fatal: unable to access"),
        ),
        pytest.raises(CommandError, match="exit code 128"),
    ):
        clone_repository(REPO, tmp_path, "nsx-operator")
