"""Tests for statwatch.models: MetricsSnapshot, ThresholdWarning, errors."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from statwatch.models import (
    BadStatusError,
    ErrorBudgetExhausted,
    FetchConnectionError,
    FetchError,
    FetchErrorKind,
    FieldError,
    FormatError,
    MetricKind,
    MetricsSnapshot,
    NetworkFallback,
    ParseError,
    ThresholdWarning,
)


def _snapshot(**overrides) -> MetricsSnapshot:
    values = dict(
        load_average=1.5,
        total_memory=1000,
        used_memory=500,
        total_disk=2000,
        used_disk=1500,
        total_network=800,
        used_network=200,
    )
    values.update(overrides)
    return MetricsSnapshot(**values)


# ── MetricsSnapshot ───────────────────────────────────

class TestMetricsSnapshot:
    def test_defaults(self):
        s = _snapshot()
        assert s.network_reported is False
        assert s.load_average == 1.5

    def test_derived_free_and_available(self):
        s = _snapshot()
        assert s.free_disk == 500
        assert s.available_network == 600

    def test_used_above_total_is_allowed(self):
        s = _snapshot(used_disk=2500)
        assert s.free_disk == -500

    def test_negative_values_rejected(self):
        with pytest.raises(ValidationError):
            _snapshot(total_memory=-1)
        with pytest.raises(ValidationError):
            _snapshot(load_average=-0.1)


class TestNetworkFallback:
    def test_values(self):
        assert NetworkFallback("total") is NetworkFallback.TOTAL
        assert NetworkFallback("zero") is NetworkFallback.ZERO


# ── ThresholdWarning ──────────────────────────────────

class TestThresholdWarning:
    def test_str_is_message(self):
        w = ThresholdWarning(metric=MetricKind.LOAD, message="Load Average is too high: 35")
        assert str(w) == "Load Average is too high: 35"

    def test_metric_values_are_lowercase(self):
        for member in MetricKind:
            assert member.value == member.name.lower()


# ── errors ────────────────────────────────────────────

class TestErrors:
    def test_all_fetch_errors_share_base(self):
        for cls in (FetchConnectionError, BadStatusError, FormatError, ParseError):
            assert issubclass(cls, FetchError)

    def test_kinds(self):
        assert FetchConnectionError("x").kind == FetchErrorKind.CONNECTION
        assert BadStatusError(503).kind == FetchErrorKind.BAD_STATUS
        assert FormatError(6, 5).kind == FetchErrorKind.FORMAT
        assert ParseError([FieldError(field="a", raw="b")]).kind == FetchErrorKind.PARSE

    def test_bad_status_message(self):
        err = BadStatusError(503)
        assert err.status == 503
        assert "503" in str(err)

    def test_format_error_message(self):
        assert str(FormatError(6, 7)) == "invalid data format: expected 6 values, got 7"
        assert "at least 6" in str(FormatError(6, 4, exact=False))

    def test_parse_error_first_field(self):
        err = ParseError(
            [
                FieldError(field="used_memory", raw="abc", reason="bad"),
                FieldError(field="total_disk", raw="-1", reason="bad"),
            ]
        )
        assert err.field == "used_memory"
        assert err.raw == "abc"
        assert "total_disk" in str(err)

    def test_parse_error_requires_errors(self):
        with pytest.raises(ValueError):
            ParseError([])

    def test_error_budget_exhausted(self):
        err = ErrorBudgetExhausted(3)
        assert err.errors == 3
        assert not isinstance(err, FetchError)
