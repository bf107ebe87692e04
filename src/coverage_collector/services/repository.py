"""Shallow checkout of the instrumented sources."""

from pathlib import Path

from coverage_collector.observability.logging import CollectorLogger
from coverage_collector.utils.process import run_command

logger = CollectorLogger(__name__)


def clone_repository(repo_url: str, work_root: Path, src_dir: str) -> bool:
    """
    Clone the repository with depth 1 unless the checkout already exists.

    Args:
        repo_url: Remote repository URL
        work_root: Directory the checkout lives in
        src_dir: Checkout directory name

    Returns:
        True if a clone was performed
    """
    logger.log_step_start("clone", f"Cloning {repo_url}...")

    destination = work_root / src_dir
    if destination.is_dir():
        logger.info(f"{src_dir} directory already exists")
        return False

    work_root.mkdir(parents=True, exist_ok=True)
    run_command(["git", "clone", "--depth", "1", repo_url, src_dir], cwd=work_root)
    logger.info("Repository cloned successfully")
    return True
