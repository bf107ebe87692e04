"""Data models for pods and collection runs."""

from .pod import PodSetStatus, PodState, TriggerResult
from .run import CollectionRun, CollectionStage

__all__ = [
    "CollectionRun",
    "CollectionStage",
    "PodSetStatus",
    "PodState",
    "TriggerResult",
]
