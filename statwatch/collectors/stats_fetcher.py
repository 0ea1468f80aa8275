from __future__ import annotations

import logging
import math

from statwatch.collectors.transport import StatsTransport
from statwatch.models.errors import FieldError, FormatError, ParseError
from statwatch.models.metrics import MetricsSnapshot, NetworkFallback

logger = logging.getLogger(__name__)

DELIMITER = ","
REQUIRED_FIELDS = (
    "load_average",
    "total_memory",
    "used_memory",
    "total_disk",
    "used_disk",
    "total_network",
)
OPTIONAL_FIELD = "used_network"


def _parse_real(raw: str) -> float:
    # float() would also take underscores and non-ASCII digits
    if "_" in raw or not raw.isascii():
        raise ValueError(f"invalid number: {raw!r}")
    value = float(raw)
    if not math.isfinite(value):
        raise ValueError("not a finite number")
    if value < 0:
        raise ValueError("negative value")
    return value


def _parse_count(raw: str) -> int:
    # int() would also take signs, underscores and non-ASCII digits
    if not (raw.isascii() and raw.isdigit()):
        raise ValueError(f"not a non-negative integer: {raw!r}")
    return int(raw, 10)


def parse_stats_line(
    line: str,
    *,
    strict_field_count: bool = True,
    network_fallback: NetworkFallback = NetworkFallback.TOTAL,
) -> MetricsSnapshot:
    """Parse ``load,totalMem,usedMem,totalDisk,usedDisk,totalNet[,usedNet]``.

    With ``strict_field_count`` the line must have exactly six fields.
    Otherwise six or more are accepted, a seventh is read as the current
    network usage and anything after it is ignored.

    When the usage field is absent, ``network_fallback`` decides what
    ``used_network`` becomes and the snapshot is marked as not reported.
    """
    values = [v.strip() for v in line.strip().split(DELIMITER)]
    expected = len(REQUIRED_FIELDS)

    if strict_field_count and len(values) != expected:
        raise FormatError(expected, len(values))
    if len(values) < expected:
        raise FormatError(expected, len(values), exact=False)

    names = list(REQUIRED_FIELDS)
    if not strict_field_count and len(values) > expected:
        names.append(OPTIONAL_FIELD)

    parsed: dict[str, float | int] = {}
    errors: list[FieldError] = []
    for name, raw in zip(names, values):
        parser = _parse_real if name == "load_average" else _parse_count
        try:
            parsed[name] = parser(raw)
        except ValueError as exc:
            errors.append(FieldError(field=name, raw=raw, reason=str(exc)))

    if errors:
        raise ParseError(errors)

    reported = OPTIONAL_FIELD in parsed
    if not reported:
        if network_fallback == NetworkFallback.TOTAL:
            parsed[OPTIONAL_FIELD] = parsed["total_network"]
        else:
            parsed[OPTIONAL_FIELD] = 0

    return MetricsSnapshot(**parsed, network_reported=reported)


class StatsFetcher:
    """Fetches one stats line through a transport and parses it."""

    def __init__(
        self,
        transport: StatsTransport,
        strict_field_count: bool = True,
        network_fallback: NetworkFallback = NetworkFallback.TOTAL,
    ) -> None:
        self.transport = transport
        self.strict_field_count = strict_field_count
        self.network_fallback = network_fallback

    async def fetch(self) -> MetricsSnapshot:
        line = await self.transport.fetch_line()
        logger.debug("Fetched stats line via %s: %r", self.transport.name, line)
        return parse_stats_line(
            line,
            strict_field_count=self.strict_field_count,
            network_fallback=self.network_fallback,
        )
