"""
Collector error hierarchy with categorization and user guidance.

This module defines the error types used throughout the coverage collector.
Every error carries a category and a hint telling the operator what to check,
so the CLI can print a single actionable message before exiting.
"""


class CollectorError(Exception):
    """
    Base error class for all collector-related exceptions.

    Provides categorization and user guidance for resolution.
    """

    def __init__(
        self,
        message: str,
        category: str,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        """
        Initialize collector error.

        Args:
            message: Human-readable error description
            category: Error category (configuration, command, kubernetes, coverage)
            user_action: What user should do to resolve the issue
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.category = category
        self.user_action = user_action
        self.cause = cause

    def __str__(self) -> str:
        """Enhanced string representation with user guidance."""
        base_msg = super().__str__()
        if self.user_action:
            return f"{base_msg}\nAction required: {self.user_action}"
        return base_msg


class ConfigurationError(CollectorError):
    """Error in collector configuration."""

    def __init__(self, message: str, user_action: str | None = None):
        super().__init__(
            message=message,
            category="configuration",
            user_action=user_action or "Review and correct the COVERAGE_* settings",
        )


class CommandError(CollectorError):
    """An external command exited with a non-zero status."""

    def __init__(
        self,
        command: list[str],
        returncode: int | None,
        stderr: str = "",
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr

        rendered = " ".join(self.command)
        if returncode is None:
            message = f"Command '{rendered}' could not be started"
        else:
            message = f"Command '{rendered}' failed with exit code {returncode}"
        if stderr:
            message = f"{message}: {stderr.strip()[:500]}"

        super().__init__(
            message=message,
            category="command",
            user_action=user_action or "Run the command by hand to inspect its output",
            cause=cause,
        )


class DependencyInstallError(CollectorError):
    """A required tool could not be installed."""

    def __init__(self, tool: str, message: str, cause: Exception | None = None):
        self.tool = tool
        super().__init__(
            message=f"Failed to install {tool}: {message}",
            category="dependency",
            user_action="Check package manager repositories and network access",
            cause=cause,
        )


class KubernetesAPIError(CollectorError):
    """Error communicating with Kubernetes API."""

    def __init__(
        self,
        message: str,
        reason: str | None = None,
        cause: Exception | None = None,
    ):
        self.reason = reason
        if reason:
            message = f"{message} (reason: {reason})"

        if reason in {"Forbidden", "Unauthorized"}:
            action = "Check that the kubeconfig user may get, list, patch and exec pods"
        else:
            action = "Check kubeconfig and cluster connectivity"

        super().__init__(
            message=f"Kubernetes API error: {message}",
            category="kubernetes",
            user_action=action,
            cause=cause,
        )


class DeploymentRestartError(CollectorError):
    """The rolling restart of the target deployment could not be started."""

    def __init__(self, deployment: str, namespace: str, cause: Exception | None = None):
        message = f"Failed to restart deployment {deployment} in namespace {namespace}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(
            message=message,
            category="kubernetes",
            user_action="Verify the deployment exists and RBAC allows patching it",
            cause=cause,
        )


class NoPodsFoundError(CollectorError):
    """The pod lookup returned nothing."""

    def __init__(self, deployment: str, namespace: str, label_selector: str):
        super().__init__(
            message=(
                f"No pods found for deployment {deployment} in namespace "
                f"{namespace} (selector: {label_selector})"
            ),
            category="kubernetes",
            user_action="Check COVERAGE_POD_LABEL_SELECTOR and the deployment status",
        )


class PodsNotReadyError(CollectorError):
    """No pod became ready before the timeout."""

    def __init__(self, timeout: int, total: int):
        super().__init__(
            message=f"Timeout reached after {timeout}s and none of {total} pods are ready",
            category="kubernetes",
            user_action="Inspect pod events and container logs for crash loops",
        )


class CoverageProcessingError(CollectorError):
    """Coverage data could not be merged or rendered."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(
            message=message,
            category="coverage",
            user_action="Check that the deployment was built with -cover and GOCOVERDIR is set",
            cause=cause,
        )


class StageTransitionError(CollectorError):
    """A collection stage was entered out of order."""

    def __init__(self, current: str, requested: str):
        super().__init__(
            message=f"Cannot move from stage '{current}' to '{requested}'",
            category="internal",
        )
