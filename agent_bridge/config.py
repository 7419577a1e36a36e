"""Configuration loader — reads config.yaml, validates with Pydantic.

The bridge needs very little: where the upstream agent service lives,
how long to wait on it, and the CORS origins for the browser client.
``BACKEND_URL`` in the environment overrides ``upstream.base_url``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, field_validator

logger = logging.getLogger(__name__)


class UpstreamConfig(BaseModel):
    """The agent-execution service the bridge forwards runs to."""

    base_url: str = "http://localhost:8081"
    run_path: str = "/api/agent"
    connect_timeout: float = 10.0
    read_timeout: float = 300.0  # max silence between two upstream chunks

    @field_validator("base_url")
    @classmethod
    def must_be_http(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"upstream.base_url must be an http(s) URL, got '{v}'")
        return v.rstrip("/")

    @field_validator("run_path")
    @classmethod
    def must_be_absolute(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError(f"upstream.run_path must start with '/', got '{v}'")
        return v

    @field_validator("connect_timeout", "read_timeout")
    @classmethod
    def must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeouts must be positive")
        return v

    @property
    def run_url(self) -> str:
        return f"{self.base_url}{self.run_path}"


class BridgeConfig(BaseModel):
    """Top-level bridge configuration."""

    upstream: UpstreamConfig = UpstreamConfig()
    fallback_thread_id: str = "default-thread"

    # CORS
    allowed_origins: list[str] = ["*"]

    @field_validator("fallback_thread_id")
    @classmethod
    def must_not_be_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("fallback_thread_id must not be empty")
        return v


# ---------------------------------------------------------------------------
# Module-level config cache
# ---------------------------------------------------------------------------

_config: BridgeConfig | None = None
_config_path: str = os.environ.get("BRIDGE_CONFIG", "config.yaml")


def load_config(path: str | None = None) -> BridgeConfig:
    """Read the config file from disk, apply env overrides, validate, and cache."""
    global _config, _config_path
    if path is not None:
        _config_path = path

    config_file = Path(_config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_file.resolve()}")

    raw = yaml.safe_load(config_file.read_text()) or {}

    backend_url = os.environ.get("BACKEND_URL")
    if backend_url:
        raw.setdefault("upstream", {})["base_url"] = backend_url

    _config = BridgeConfig(**raw)

    logger.info(
        f"Loaded config: upstream={_config.upstream.run_url}, "
        f"read_timeout={_config.upstream.read_timeout}s"
    )
    return _config


def get_config() -> BridgeConfig:
    """Return cached config. Raises if not yet loaded."""
    if _config is None:
        raise RuntimeError("Config not loaded — call load_config() first")
    return _config


def reload_config() -> BridgeConfig:
    """Re-read config from disk. Called by /reload endpoint."""
    logger.info(f"Reloading config from {_config_path}")
    return load_config(_config_path)
