"""Global configuration — XDG paths, env vars, defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _default_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "podguard"
    return Path.home() / ".config" / "podguard"


@dataclass
class PodguardConfig:
    """Application-wide configuration."""

    config_dir: Path = field(default_factory=_default_config_dir)
    broker_url: str = "http://127.0.0.1:9090"
    lookup_timeout: float = 10.0
    web_host: str = "127.0.0.1"  # loopback only
    web_port: int = 8471
    verbose: bool = False

    @classmethod
    def load(cls) -> PodguardConfig:
        """Load config from environment variables with XDG defaults."""
        config = cls()

        env_broker = os.environ.get("PODGUARD_BROKER_URL")
        if env_broker:
            config.broker_url = env_broker.rstrip("/")

        env_timeout = os.environ.get("PODGUARD_LOOKUP_TIMEOUT")
        if env_timeout:
            config.lookup_timeout = float(env_timeout)

        env_port = os.environ.get("PODGUARD_WEB_PORT")
        if env_port:
            config.web_port = int(env_port)

        return config
