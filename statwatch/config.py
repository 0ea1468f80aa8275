from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings

from statwatch.engine.evaluator import Thresholds
from statwatch.engine.poll_loop import EscalationPolicy
from statwatch.models.metrics import NetworkFallback


class Settings(BaseSettings):
    # --- app ---
    app_name: str = "statwatch"
    debug: bool = False
    log_level: str = "INFO"

    # --- remote endpoint ---
    server_host: str = "srv.msk01.gigacorp.local"
    server_port: int = 80
    stats_path: str = "/_stats"
    transport: Literal["http", "socket"] = "http"
    request_timeout: float = 10.0  # seconds, connect and read

    # --- poll loop ---
    poll_interval: float = 30.0  # seconds between ticks
    max_errors: int = 3  # consecutive failures before escalation
    escalation: EscalationPolicy = EscalationPolicy.FAIL_STOP

    # --- feed parsing ---
    strict_field_count: bool = True  # exactly six fields
    network_fallback: NetworkFallback = NetworkFallback.TOTAL

    # --- thresholds ---
    load_threshold: float = 30.0
    memory_threshold: float = 0.80
    disk_threshold: float = 0.90
    network_threshold: float = 0.90
    require_network_usage: bool = False
    check_derived_network: bool = False

    model_config = {"env_file": ".env", "env_prefix": "STATWATCH_"}

    @property
    def base_url(self) -> str:
        return f"http://{self.server_host}:{self.server_port}"

    def thresholds(self) -> Thresholds:
        return Thresholds(
            load_average=self.load_threshold,
            memory=self.memory_threshold,
            disk=self.disk_threshold,
            network=self.network_threshold,
        )


settings = Settings()
