from .evaluator import Thresholds, ThresholdEvaluator
from .poll_loop import ErrorBudget, EscalationPolicy, PollLoop, PollState

__all__ = [
    "Thresholds",
    "ThresholdEvaluator",
    "ErrorBudget",
    "EscalationPolicy",
    "PollLoop",
    "PollState",
]
