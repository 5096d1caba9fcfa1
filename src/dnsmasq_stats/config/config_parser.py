"""Configuration parsing and normalization helpers for dnsmasq_stats.

Brief:
  This module contains the configuration utilities used by the CLI
  entrypoint. It centralizes:
    - reading YAML config files
    - validating the ``dnsmasq``, ``logging`` and ``outputs`` sections with
      pydantic models
    - resolving the immutable effective configuration a collection cycle
      runs with (defaults applied once, before the cycle starts)

Inputs:
  - YAML config dicts and paths

Outputs:
  - AppConfig models and EffectiveConfig values
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, validator

from ..exchange import DEFAULT_SERVER, TRANSPORTS, split_host_port
from ..sinks.base import SinkConfig


class DnsmasqConfig(BaseModel):
    """Brief: Typed configuration model for the ``dnsmasq`` section.

    Inputs:
      - server: Resolver endpoint "host:port"; empty selects 127.0.0.1:53.
      - transport: "udp" or "tcp".
      - timeout_ms: Per-query timeout in milliseconds.
      - single_inflight: Collapse identical concurrent queries.

    Outputs:
      - DnsmasqConfig instance with normalized field types.
    """

    server: str = ""
    transport: str = "udp"
    timeout_ms: int = Field(default=2000, ge=1)
    single_inflight: bool = True

    @validator("server", pre=True)
    def normalize_server(cls, v: object) -> str:
        return "" if v is None else str(v).strip()

    @validator("transport", pre=True)
    def normalize_transport(cls, v: object) -> str:
        text = str(v or "udp").strip().lower()
        if text not in TRANSPORTS:
            raise ValueError(f"transport must be one of {', '.join(TRANSPORTS)}")
        return text

    class Config:
        extra = "forbid"


class AppConfig(BaseModel):
    """Brief: Root configuration model.

    Inputs:
      - dnsmasq: DnsmasqConfig section.
      - logging: Mapping passed to init_logging().
      - outputs: List of SinkConfig entries.

    Outputs:
      - AppConfig instance.
    """

    dnsmasq: DnsmasqConfig = Field(default_factory=DnsmasqConfig)
    logging: Dict[str, Any] = Field(default_factory=dict)
    outputs: List[SinkConfig] = Field(default_factory=list)

    class Config:
        extra = "forbid"


@dataclass(frozen=True)
class EffectiveConfig:
    """
    Brief: Immutable configuration a collection cycle runs with.

    Inputs:
      - server: normalized "host:port" endpoint used for tags and queries
      - host, port: split endpoint
      - transport: "udp" or "tcp"
      - timeout_ms: per-query timeout
      - single_inflight: single-flight deduplication enabled

    Outputs:
      - EffectiveConfig instance
    """

    server: str
    host: str
    port: int
    transport: str = "udp"
    timeout_ms: int = 2000
    single_inflight: bool = True


def load_config(data: Optional[Mapping[str, Any]]) -> AppConfig:
    """Brief: Validate a parsed configuration mapping.

    Inputs:
      - data: Mapping parsed from YAML (None means all defaults).

    Outputs:
      - AppConfig

    Raises:
      - ValueError: When the root is not a mapping or validation fails.
    """

    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ValueError("Configuration root must be a mapping")
    raw = {k: v for k, v in data.items() if v is not None}
    try:
        return AppConfig(**raw)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc


def parse_config_file(config_path: str) -> AppConfig:
    """Brief: Read and validate a YAML configuration file.

    Inputs:
      - config_path: Path to the YAML configuration file.

    Outputs:
      - AppConfig

    Raises:
      - OSError: When the file cannot be read.
      - ValueError: When the YAML is invalid or fails validation.
    """

    with open(config_path, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc
    return load_config(data)


def resolve_config(
    cfg: Optional[DnsmasqConfig] = None,
    *,
    server: Optional[str] = None,
    transport: Optional[str] = None,
    timeout_ms: Optional[int] = None,
) -> EffectiveConfig:
    """Brief: Apply defaults and overrides to produce the effective configuration.

    Inputs:
      - cfg: Validated ``dnsmasq`` section (None means defaults).
      - server, transport, timeout_ms: Optional overrides (for example from
        CLI flags); None leaves the configured value in place.

    Outputs:
      - EffectiveConfig

    Raises:
      - ValueError: Malformed endpoint, unknown transport or non-positive
        timeout.

    Example:
      >>> resolve_config().server
      '127.0.0.1:53'
    """

    cfg = cfg or DnsmasqConfig()
    updates: Dict[str, Any] = {}
    if server is not None:
        updates["server"] = server
    if transport is not None:
        updates["transport"] = transport
    if timeout_ms is not None:
        updates["timeout_ms"] = timeout_ms
    if updates:
        merged = cfg.dict()
        merged.update(updates)
        try:
            cfg = DnsmasqConfig(**merged)
        except ValidationError as exc:
            raise ValueError(f"Invalid dnsmasq configuration: {exc}") from exc

    server_text = cfg.server or DEFAULT_SERVER
    host, port = split_host_port(server_text)
    return EffectiveConfig(
        server=server_text,
        host=host,
        port=port,
        transport=cfg.transport,
        timeout_ms=int(cfg.timeout_ms),
        single_inflight=bool(cfg.single_inflight),
    )
