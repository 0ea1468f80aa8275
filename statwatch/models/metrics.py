from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class NetworkFallback(StrEnum):
    """How ``used_network`` is derived when the feed has no seventh field."""

    TOTAL = "total"
    ZERO = "zero"


class MetricsSnapshot(BaseModel):
    """One parsed response from the remote stats endpoint."""

    load_average: float = Field(ge=0)
    total_memory: int = Field(ge=0)
    used_memory: int = Field(ge=0)
    total_disk: int = Field(ge=0)
    used_disk: int = Field(ge=0)
    total_network: int = Field(ge=0)  # bytes/s
    used_network: int = Field(ge=0)  # bytes/s
    network_reported: bool = False

    @property
    def free_disk(self) -> int:
        return self.total_disk - self.used_disk

    @property
    def available_network(self) -> int:
        return self.total_network - self.used_network
