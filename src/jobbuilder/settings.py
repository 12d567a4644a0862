# settings.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from .errors import ConfigError


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    """Service settings. Every field has an environment variable."""
    nomad_addr: str
    nomad_token: Optional[str] = None
    http_host: str = "0.0.0.0"
    http_port: int = 8080
    datacenters: List[str] = field(default_factory=lambda: ["dc1"])
    register_timeout: float = 10.0
    debug: bool = False
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Settings:
        env = os.environ if environ is None else environ

        nomad_addr = env.get("NOMAD_ADDR", "").strip()
        if not nomad_addr:
            raise ConfigError("NOMAD_ADDR is required")

        try:
            http_port = int(env.get("HTTP_PORT", "8080"))
            register_timeout = float(env.get("REGISTER_TIMEOUT", "10"))
        except ValueError as e:
            raise ConfigError(f"invalid numeric setting: {e}") from e

        datacenters = _parse_list(env.get("DATACENTERS", "dc1"))
        if not datacenters:
            raise ConfigError("DATACENTERS must name at least one datacenter")

        return cls(
            nomad_addr=nomad_addr,
            nomad_token=env.get("NOMAD_TOKEN") or None,
            http_host=env.get("HTTP_HOST", "0.0.0.0"),
            http_port=http_port,
            datacenters=datacenters,
            register_timeout=register_timeout,
            debug=_parse_bool(env.get("DEBUG", "")),
            log_file=env.get("LOG_FILE") or None,
        )
