"""
Pod snapshot models.

Pods are read once per poll and folded into these models so that the
restart, trigger and readiness steps share a single interpretation of
"running", "ready" and "stopping".
"""

from pydantic import BaseModel, Field

from coverage_collector.constants import (
    CONDITION_TRUE,
    PHASE_NOT_FOUND,
    PHASE_RUNNING,
    PHASE_TERMINATING,
)


class PodState(BaseModel):
    """Point-in-time view of a single pod."""

    model_config = {"populate_by_name": True, "frozen": True}

    name: str = Field(..., description="Pod name")
    phase: str = Field(PHASE_NOT_FOUND, description="Pod phase, Terminating or NotFound")
    node_name: str = Field("", description="Node the pod is scheduled on")
    ready: str = Field("False", description="Status of the Ready condition")

    @property
    def is_scheduled_and_running(self) -> bool:
        """Running with a node assigned, so exec can reach the container."""
        return self.phase == PHASE_RUNNING and bool(self.node_name)

    @property
    def is_ready(self) -> bool:
        return self.phase == PHASE_RUNNING and self.ready == CONDITION_TRUE

    @property
    def is_stopping(self) -> bool:
        return self.phase in (PHASE_TERMINATING, PHASE_NOT_FOUND)

    def describe(self) -> str:
        """Short status string for log messages."""
        return f"status: {self.phase}, node: {self.node_name or 'unassigned'}"


class PodSetStatus(BaseModel):
    """Readiness summary across every pod of the deployment."""

    pods: list[PodState] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.pods)

    @property
    def ready_count(self) -> int:
        return sum(1 for pod in self.pods if pod.is_ready)

    @property
    def all_ready(self) -> bool:
        """True only for a non-empty set where every pod is ready."""
        return self.total > 0 and self.ready_count == self.total

    @property
    def any_ready(self) -> bool:
        return self.ready_count > 0


class TriggerResult(BaseModel):
    """Outcome of signalling the deployment's pods."""

    total: int = Field(0, description="Pods returned by the lookup")
    signalled: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.signalled)
