"""
Error handling module for the coverage collector.

This module provides the error hierarchy raised by the collection steps and
translated into exit codes by the CLI.
"""

from .collector_errors import (
    CollectorError,
    CommandError,
    ConfigurationError,
    CoverageProcessingError,
    DependencyInstallError,
    DeploymentRestartError,
    KubernetesAPIError,
    NoPodsFoundError,
    PodsNotReadyError,
    StageTransitionError,
)

__all__ = [
    "CollectorError",
    "CommandError",
    "ConfigurationError",
    "CoverageProcessingError",
    "DependencyInstallError",
    "DeploymentRestartError",
    "KubernetesAPIError",
    "NoPodsFoundError",
    "PodsNotReadyError",
    "StageTransitionError",
]
