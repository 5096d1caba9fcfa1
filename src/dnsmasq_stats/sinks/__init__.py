"""Metrics sink abstraction and registry.

Inputs:
  - SinkConfig entries from the ``outputs`` section of the configuration.

Outputs:
  - load_sink()/load_sinks() build concrete MetricsSink instances from
    aliases ("stdout", "influxdb", ...) or dotted import paths.
"""

from __future__ import annotations

import importlib
from typing import Dict, Iterable, List, Optional, Type, Union

from .base import MetricsSink, MultiSink, SinkConfig, format_line_protocol
from .influxdb import InfluxSink
from .stdout import LineProtocolSink

__all__ = [
    "InfluxSink",
    "LineProtocolSink",
    "MetricsSink",
    "MultiSink",
    "SinkConfig",
    "format_line_protocol",
    "get_sink_class",
    "load_sink",
    "load_sinks",
]

_BUILTIN_SINKS = (LineProtocolSink, InfluxSink)


def _normalize(alias: str) -> str:
    """Brief: Normalize alias strings: lowercase, trimmed, dashes to underscores."""

    return alias.strip().lower().replace("-", "_")


def _registry() -> Dict[str, Type[MetricsSink]]:
    registry: Dict[str, Type[MetricsSink]] = {}
    for cls in _BUILTIN_SINKS:
        for alias in cls.aliases:
            registry[_normalize(alias)] = cls
    return registry


def get_sink_class(identifier: str) -> Type[MetricsSink]:
    """Brief: Resolve identifier to a MetricsSink subclass.

    Inputs:
      - identifier: alias ("stdout", "influxdb") or dotted path ("pkg.mod.Class").

    Outputs:
      - MetricsSink subclass.

    Raises:
      - ValueError: unknown alias, import failure, or a class that is not a
        MetricsSink.
    """

    registry = _registry()
    key = _normalize(identifier)
    if key in registry:
        return registry[key]

    if "." not in identifier:
        raise ValueError(
            "Unknown sink backend %r; known aliases: %s"
            % (identifier, ", ".join(sorted(registry)))
        )

    module_name, _, class_name = identifier.rpartition(".")
    try:
        module = importlib.import_module(module_name)
        cls = getattr(module, class_name)
    except (ImportError, AttributeError) as exc:
        raise ValueError(f"Cannot import sink backend {identifier!r}: {exc}") from exc
    if not isinstance(cls, type) or not issubclass(cls, MetricsSink):
        raise ValueError(f"{identifier!r} is not a MetricsSink subclass")
    return cls


def load_sink(cfg: Union[SinkConfig, dict]) -> MetricsSink:
    """Brief: Construct one sink from its configuration entry.

    Inputs:
      - cfg: SinkConfig or a mapping accepted by SinkConfig.

    Outputs:
      - MetricsSink instance.
    """

    if not isinstance(cfg, SinkConfig):
        cfg = SinkConfig(**dict(cfg))
    cls = get_sink_class(cfg.backend)
    try:
        return cls(**cfg.config)
    except TypeError as exc:
        raise ValueError(f"Invalid configuration for sink {cfg.backend!r}: {exc}") from exc


def load_sinks(specs: Optional[Iterable[Union[SinkConfig, dict]]]) -> MetricsSink:
    """Brief: Build the sink for a list of output entries.

    Inputs:
      - specs: Iterable of SinkConfig/mappings; empty or None selects stdout.

    Outputs:
      - The single configured sink, or a MultiSink when several are given.
    """

    sinks: List[MetricsSink] = [load_sink(spec) for spec in (specs or [])]
    if not sinks:
        return LineProtocolSink()
    if len(sinks) == 1:
        return sinks[0]
    return MultiSink(sinks)
