"""Configuration loading and logging setup for dnsmasq_stats."""

from .config_parser import (
    DnsmasqConfig,
    EffectiveConfig,
    AppConfig,
    load_config,
    parse_config_file,
    resolve_config,
)
from .logging_config import init_logging

__all__ = [
    "DnsmasqConfig",
    "EffectiveConfig",
    "AppConfig",
    "init_logging",
    "load_config",
    "parse_config_file",
    "resolve_config",
]
