"""
logroute.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for enrichment, routing and sinks.
- Offer a cached settings instance for hosts that do not inject their own.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Read-only configuration consumed by the logging path.
    Hosts may construct this directly (tests) or rely on `LOGROUTE_*` env vars.
    """

    model_config = SettingsConfigDict(env_prefix="LOGROUTE_", case_sensitive=False)

    service_name: str = "logroute"
    log_level: str = "INFO"

    # Severity threshold (0=EMERG .. 7=DEBUG). WARN means "no filter".
    priority: str = "4"
    # Per-sink overrides keyed by sink name; "default" defers to `priority`.
    sink_priorities: dict[str, str] = Field(default_factory=dict)

    # Enrichment
    max_backtrace_lines: int = Field(default=10, ge=0)
    not_available: str = "N/A"
    store_code: str = "default"
    execution_mode: str = "cli"
    app_root: Path = Field(default_factory=Path.cwd)
    facade_class: str = "Log"

    # Routing: JSON list of {pattern, target, backtrace, stop_on_match} records.
    target_map: str = ""

    # Database sink
    database_url: str = "sqlite:///./logroute.db"
    max_days_to_keep: int = 30

    @property
    def base_dir(self) -> str:
        # One level above the app root so symlinked deployments still get relative paths.
        return str(Path(self.app_root).parent).rstrip("/") + "/"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars on every log call.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Schema provisioning and config-file parsing are left to the host application;
# this model only reads values.
