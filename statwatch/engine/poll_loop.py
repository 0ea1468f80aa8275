from __future__ import annotations

import asyncio
import logging
from enum import StrEnum
from typing import Callable

from statwatch.collectors.stats_fetcher import StatsFetcher
from statwatch.engine.evaluator import ThresholdEvaluator
from statwatch.models import ErrorBudgetExhausted, FetchError, ThresholdWarning

logger = logging.getLogger(__name__)

Reporter = Callable[[str], None]

CEILING_MESSAGE = "Unable to fetch server statistic"
SHUTDOWN_MESSAGE = "Shutting down monitor"


class PollState(StrEnum):
    IDLE = "idle"
    FETCHING = "fetching"
    REPORTING = "reporting"


class EscalationPolicy(StrEnum):
    """What happens when consecutive failures reach the ceiling."""

    FAIL_STOP = "stop"
    RESET_AND_CONTINUE = "continue"


class ErrorBudget:
    """Consecutive fetch failure counter with a fixed ceiling."""

    def __init__(self, max_errors: int = 3) -> None:
        if max_errors < 1:
            raise ValueError("max_errors must be >= 1")
        self.max_errors = max_errors
        self.consecutive_errors = 0

    def record_failure(self) -> bool:
        """Count a failure; True once the ceiling is reached."""
        self.consecutive_errors += 1
        return self.exhausted

    def record_success(self) -> None:
        self.consecutive_errors = 0

    def reset(self) -> None:
        self.consecutive_errors = 0

    @property
    def exhausted(self) -> bool:
        return self.consecutive_errors >= self.max_errors


class PollLoop:
    """Fetch, evaluate and report once per interval, one tick at a time.

    Ticks are scheduled at a fixed rate. ``run()`` waits on an
    ``asyncio.Event`` between ticks, so setting the event ends the wait at
    once. A fetch already in flight is left to finish; its duration is
    bounded by the transport timeout.
    """

    def __init__(
        self,
        fetcher: StatsFetcher,
        evaluator: ThresholdEvaluator,
        *,
        interval: float = 30.0,
        error_budget: ErrorBudget | None = None,
        escalation: EscalationPolicy = EscalationPolicy.FAIL_STOP,
        reporter: Reporter = print,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self.fetcher = fetcher
        self.evaluator = evaluator
        self.interval = interval
        self.error_budget = error_budget or ErrorBudget()
        self.escalation = escalation
        self._report = reporter
        self._state = PollState.IDLE
        self.ticks = 0
        self.last_error: FetchError | None = None

    # ── lifecycle ────────────────────────────────────────

    async def run(self, stop_event: asyncio.Event | None = None) -> None:
        """Poll until ``stop_event`` is set.

        Raises ``ErrorBudgetExhausted`` under the fail-stop policy.
        """
        stop_event = stop_event or asyncio.Event()
        logger.info(
            "Poll loop started (interval=%.1fs, max_errors=%d, escalation=%s)",
            self.interval,
            self.error_budget.max_errors,
            self.escalation.value,
        )
        clock = asyncio.get_running_loop()
        deadline = clock.time() + self.interval
        while not stop_event.is_set():
            if await self._wait(stop_event, deadline - clock.time()):
                break
            await self.tick()
            # fixed rate; ticks missed during a slow fetch are dropped
            deadline += self.interval
            now = clock.time()
            while deadline <= now:
                deadline += self.interval
        self._report(SHUTDOWN_MESSAGE)
        logger.info("Poll loop stopped after %d ticks", self.ticks)

    async def tick(self) -> list[ThresholdWarning]:
        """Run one fetch-evaluate-report cycle and return the warnings."""
        self.ticks += 1
        self._state = PollState.FETCHING
        try:
            snapshot = await self.fetcher.fetch()
        except FetchError as exc:
            self._state = PollState.IDLE
            self.last_error = exc
            self._handle_failure(exc)
            return []

        self.last_error = None
        self.error_budget.record_success()
        self._state = PollState.REPORTING
        try:
            warnings = self.evaluator.evaluate(snapshot)
            for warning in warnings:
                self._report(warning.message)
        finally:
            self._state = PollState.IDLE
        return warnings

    # ── internals ───────────────────────────────────────

    async def _wait(self, stop_event: asyncio.Event, timeout: float) -> bool:
        """Sleep until the next tick is due. True if stopped while waiting."""
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=max(timeout, 0.0))
        except asyncio.TimeoutError:
            return False
        return True

    def _handle_failure(self, exc: FetchError) -> None:
        reached = self.error_budget.record_failure()
        logger.warning(
            "Fetch failed [%s] (%d/%d): %s",
            exc.kind.value,
            self.error_budget.consecutive_errors,
            self.error_budget.max_errors,
            exc,
        )
        self._report(f"Error fetching stats: {exc}")
        if not reached:
            return

        self._report(CEILING_MESSAGE)
        if self.escalation == EscalationPolicy.FAIL_STOP:
            logger.error("Error budget exhausted, stopping")
            raise ErrorBudgetExhausted(self.error_budget.consecutive_errors)
        logger.error("Error budget exhausted, resetting and continuing")
        self.error_budget.reset()

    @property
    def state(self) -> PollState:
        return self._state
