"""
Configuration loader for crowdledger.

What it does:
- Reads static settings from `config/config.yaml` (or `$CROWDLEDGER_CONFIG`).
- Applies environment overrides for deployment-specific values:
  `PROMETHEUS_PORT`, `REDIS_URL`, `EVENTS_STREAM`, `EVENTS_DLQ`.
- Validates the result using Pydantic models.

Where it is used:
- Called by `crowdledger.main` and `crowdledger.api.app.create_app` to build
  a `Settings` object for runtime.

A missing config file is not an error: every section has defaults.
"""

import os
import pathlib
import yaml
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_PATH = "config/config.yaml"


class LedgerConfig(BaseModel):
    """Validation policy for ledger commands."""
    strict_titles: bool = False


class DisplayConfig(BaseModel):
    """How smallest-unit amounts are shown at the edge (18 decimals = wei/ETH)."""
    unit: str = "ETH"
    decimals: int = Field(default=18, ge=0, le=36)


class EventsConfig(BaseModel):
    enabled: bool = True
    redis: bool = True
    redis_url: str = "redis://localhost:6379/0"
    stream: str = "crowdledger.events"
    dlq: str = "crowdledger.dlq"


class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(default=8080, ge=1, le=65535)
    prometheus_port: int = Field(default=8000, ge=0, le=65535)
    identity_header: str = "X-Identity"

    @field_validator("identity_header")
    @classmethod
    def not_empty(cls, v):
        if not v.strip():
            raise ValueError("identity_header must not be empty")
        return v


class Settings(BaseModel):
    """Runtime settings assembled from YAML + environment variables."""
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    events: EventsConfig = Field(default_factory=EventsConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)


def _env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    events = dict(config.get("events") or {})
    server = dict(config.get("server") or {})
    if os.getenv("REDIS_URL"):
        events["redis_url"] = os.environ["REDIS_URL"]
    if os.getenv("EVENTS_STREAM"):
        events["stream"] = os.environ["EVENTS_STREAM"]
    if os.getenv("EVENTS_DLQ"):
        events["dlq"] = os.environ["EVENTS_DLQ"]
    if os.getenv("PROMETHEUS_PORT"):
        server["prometheus_port"] = int(os.environ["PROMETHEUS_PORT"])
    return {**config, "events": events, "server": server}


def load_settings(path: Optional[str] = None) -> Settings:
    """Load YAML config, apply env overrides, and return Settings."""
    p = pathlib.Path(path or os.getenv("CROWDLEDGER_CONFIG", DEFAULT_CONFIG_PATH))
    config: Dict[str, Any] = {}
    if p.exists():
        with open(p, "r") as f:
            config = yaml.safe_load(f) or {}
    return Settings(**_env_overrides(config))
