from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class MetricKind(StrEnum):
    LOAD = "load"
    MEMORY = "memory"
    DISK = "disk"
    NETWORK = "network"


class ThresholdWarning(BaseModel):
    """A single threshold violation, ready to print."""

    metric: MetricKind
    message: str
    value: float = 0.0

    def __str__(self) -> str:
        return self.message
