from __future__ import annotations

import math

from pydantic import BaseModel

from statwatch.models import MetricKind, MetricsSnapshot, ThresholdWarning

BYTES_PER_MIB = 1024 * 1024
BITS_PER_BYTE = 8
BITS_PER_MEGABIT = 1_000_000


class Thresholds(BaseModel):
    load_average: float = 30.0
    memory: float = 0.80  # used / total
    disk: float = 0.90
    network: float = 0.90


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class ThresholdEvaluator:
    """Turns a snapshot into warning lines. Pure, no I/O.

    Every rule fires on strictly greater than its threshold. Ratio rules
    are skipped when the matching total is zero.
    """

    def __init__(
        self,
        thresholds: Thresholds | None = None,
        require_network_usage: bool = False,
        check_derived_network: bool = False,
    ) -> None:
        self.thresholds = thresholds or Thresholds()
        self.require_network_usage = require_network_usage
        self.check_derived_network = check_derived_network

    def evaluate(self, snapshot: MetricsSnapshot) -> list[ThresholdWarning]:
        """Return warnings in load, memory, disk, network order."""
        warnings: list[ThresholdWarning] = []
        for check in (
            self._check_load,
            self._check_memory,
            self._check_disk,
            self._check_network,
        ):
            warning = check(snapshot)
            if warning is not None:
                warnings.append(warning)
        return warnings

    def _check_load(self, s: MetricsSnapshot) -> ThresholdWarning | None:
        if s.load_average > self.thresholds.load_average:
            return ThresholdWarning(
                metric=MetricKind.LOAD,
                message=f"Load Average is too high: {round_half_up(s.load_average)}",
                value=s.load_average,
            )
        return None

    def _check_memory(self, s: MetricsSnapshot) -> ThresholdWarning | None:
        if s.total_memory <= 0:
            return None
        ratio = s.used_memory / s.total_memory
        if ratio > self.thresholds.memory:
            return ThresholdWarning(
                metric=MetricKind.MEMORY,
                message=f"Memory usage too high: {round_half_up(ratio * 100)}%",
                value=ratio,
            )
        return None

    def _check_disk(self, s: MetricsSnapshot) -> ThresholdWarning | None:
        if s.total_disk <= 0:
            return None
        ratio = s.used_disk / s.total_disk
        if ratio > self.thresholds.disk:
            free_mib = round_half_up(s.free_disk / BYTES_PER_MIB)
            return ThresholdWarning(
                metric=MetricKind.DISK,
                message=f"Free disk space is too low: {free_mib} Mb left",
                value=ratio,
            )
        return None

    def _check_network(self, s: MetricsSnapshot) -> ThresholdWarning | None:
        if s.total_network <= 0:
            return None
        if not s.network_reported and not self.check_derived_network:
            return None
        if self.require_network_usage and s.used_network <= 0:
            return None
        ratio = s.used_network / s.total_network
        if ratio > self.thresholds.network:
            available = s.available_network * BITS_PER_BYTE / BITS_PER_MEGABIT
            return ThresholdWarning(
                metric=MetricKind.NETWORK,
                message=(
                    "Network bandwidth usage high: "
                    f"{round_half_up(available)} Mbit/s available"
                ),
                value=ratio,
            )
        return None
