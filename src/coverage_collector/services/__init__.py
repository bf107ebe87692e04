"""
Service layer for the coverage collector.

Each module implements one step of a collection; CoverageCollector runs them
in order.
"""

from .collector import CoverageCollector
from .installer import GoToolchainInstaller, SystemToolsInstaller
from .processor import CoverageProcessor, cleanup_coverage_dir
from .readiness import ReadinessOutcome, ReadinessPoller
from .repository import clone_repository
from .restarter import DeploymentRestarter
from .trigger import CoverageTrigger

__all__ = [
    "CoverageCollector",
    "CoverageProcessor",
    "CoverageTrigger",
    "DeploymentRestarter",
    "GoToolchainInstaller",
    "ReadinessOutcome",
    "ReadinessPoller",
    "SystemToolsInstaller",
    "cleanup_coverage_dir",
    "clone_repository",
]
