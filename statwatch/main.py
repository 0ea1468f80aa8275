"""Command-line entry point for the statwatch health-check agent.

Usage:
    statwatch                          # poll with settings from env / .env
    statwatch --transport socket --interval 5
    statwatch --once                   # single fetch, exit 1 on failure
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys

from statwatch.collectors import HttpTransport, SocketTransport, StatsFetcher, StatsTransport
from statwatch.config import Settings, settings
from statwatch.engine import ErrorBudget, EscalationPolicy, PollLoop, ThresholdEvaluator
from statwatch.models import ErrorBudgetExhausted

logger = logging.getLogger(__name__)


def build_transport(cfg: Settings) -> StatsTransport:
    if cfg.transport == "socket":
        return SocketTransport(
            cfg.server_host,
            cfg.server_port,
            path=cfg.stats_path,
            timeout=cfg.request_timeout,
        )
    return HttpTransport(cfg.base_url, path=cfg.stats_path, timeout=cfg.request_timeout)


def build_loop(cfg: Settings, reporter=print) -> PollLoop:
    fetcher = StatsFetcher(
        build_transport(cfg),
        strict_field_count=cfg.strict_field_count,
        network_fallback=cfg.network_fallback,
    )
    evaluator = ThresholdEvaluator(
        cfg.thresholds(),
        require_network_usage=cfg.require_network_usage,
        check_derived_network=cfg.check_derived_network,
    )
    return PollLoop(
        fetcher,
        evaluator,
        interval=cfg.poll_interval,
        error_budget=ErrorBudget(cfg.max_errors),
        escalation=cfg.escalation,
        reporter=reporter,
    )


def _install_signal_handlers(stop_event: asyncio.Event, reporter=print) -> list[signal.Signals]:
    loop = asyncio.get_running_loop()
    installed: list[signal.Signals] = []

    def _on_signal() -> None:
        reporter("Received shutdown signal")
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _on_signal)
            installed.append(sig)
        except NotImplementedError:
            # Windows event loops; Ctrl+C still raises KeyboardInterrupt
            logger.debug("Signal handler for %s not supported", sig)
    return installed


async def run(cfg: Settings, once: bool = False) -> int:
    poll_loop = build_loop(cfg)
    if once:
        try:
            await poll_loop.tick()
        except ErrorBudgetExhausted:
            return 1
        return 1 if poll_loop.last_error is not None else 0

    stop_event = asyncio.Event()
    installed = _install_signal_handlers(stop_event)
    try:
        await poll_loop.run(stop_event)
    except ErrorBudgetExhausted as exc:
        logger.error("Giving up: %s", exc)
        return 1
    finally:
        loop = asyncio.get_running_loop()
        for sig in installed:
            loop.remove_signal_handler(sig)
    return 0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Remote server health-check agent")
    parser.add_argument("--host", help="Stats server host")
    parser.add_argument("--port", type=int, help="Stats server port")
    parser.add_argument("--transport", choices=["http", "socket"])
    parser.add_argument("--interval", type=float, help="Seconds between polls")
    parser.add_argument(
        "--escalation",
        choices=[p.value for p in EscalationPolicy],
        help="Behaviour when the error ceiling is reached",
    )
    parser.add_argument("--once", action="store_true", help="Poll a single time and exit")
    parser.add_argument("--debug", action="store_true")
    return parser.parse_args(argv)


def apply_overrides(cfg: Settings, args: argparse.Namespace) -> Settings:
    overrides = {
        "server_host": args.host,
        "server_port": args.port,
        "transport": args.transport,
        "poll_interval": args.interval,
        "escalation": EscalationPolicy(args.escalation) if args.escalation else None,
        "debug": True if args.debug else None,
    }
    update = {k: v for k, v in overrides.items() if v is not None}
    return cfg.model_copy(update=update) if update else cfg


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    cfg = apply_overrides(settings, args)
    logging.basicConfig(
        level=logging.DEBUG if cfg.debug else cfg.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info(
        "%s polling %s:%d%s via %s",
        cfg.app_name,
        cfg.server_host,
        cfg.server_port,
        cfg.stats_path,
        cfg.transport,
    )
    try:
        return asyncio.run(run(cfg, once=args.once))
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
