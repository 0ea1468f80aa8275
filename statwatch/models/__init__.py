from .errors import (
    BadStatusError,
    ErrorBudgetExhausted,
    FetchConnectionError,
    FetchError,
    FetchErrorKind,
    FieldError,
    FormatError,
    ParseError,
)
from .metrics import MetricsSnapshot, NetworkFallback
from .warning import MetricKind, ThresholdWarning

__all__ = [
    "BadStatusError",
    "ErrorBudgetExhausted",
    "FetchConnectionError",
    "FetchError",
    "FetchErrorKind",
    "FieldError",
    "FormatError",
    "ParseError",
    "MetricsSnapshot",
    "NetworkFallback",
    "MetricKind",
    "ThresholdWarning",
]
