"""
Collection run stage tracking.

A collection moves strictly forward through its stages. Stages may be
skipped when a wait times out, but a stage is never entered twice.
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

from coverage_collector.errors import StageTransitionError


class CollectionStage(str, Enum):
    """Stages of a coverage collection, in execution order."""

    IDLE = "idle"
    RESTARTING = "restarting"
    PODS_STOPPED = "pods_stopped"
    PODS_RECREATED = "pods_recreated"
    TRIGGERED = "triggered"
    READY = "ready"
    PROCESSED = "processed"

    @property
    def order(self) -> int:
        return list(CollectionStage).index(self)


class StageRecord(BaseModel):
    """A stage that was entered and when."""

    stage: CollectionStage
    entered_at: datetime
    forced: bool = Field(False, description="Entered after a timeout")


class CollectionRun(BaseModel):
    """Forward-only stage tracker for one collection."""

    stage: CollectionStage = CollectionStage.IDLE
    history: list[StageRecord] = Field(default_factory=list)

    def advance(self, stage: CollectionStage, forced: bool = False) -> None:
        """
        Move to a later stage.

        Args:
            stage: Stage to enter
            forced: Whether the stage is entered because a wait timed out

        Raises:
            StageTransitionError: If the stage is not after the current one
        """
        if stage.order <= self.stage.order:
            raise StageTransitionError(self.stage.value, stage.value)

        self.stage = stage
        self.history.append(
            StageRecord(stage=stage, entered_at=datetime.now(UTC), forced=forced)
        )

    @property
    def visited(self) -> list[CollectionStage]:
        return [record.stage for record in self.history]
