"""Abstract base class and configuration model for metrics sinks.

This module defines:

- SinkConfig: Pydantic model describing a single output entry (backend
  identifier plus backend-specific config).
- MetricsSink: interface receiving one measurement per collection cycle.
- MultiSink: fan-out wrapper used when several outputs are configured.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel, Field

from ..errors import SinkError

logger = logging.getLogger(__name__)


class SinkConfig(BaseModel):
    """Brief: Typed configuration model for a single metrics output.

    Inputs (constructor fields):
      - backend: short alias (for example "stdout" or "influxdb") or a
        fully-qualified dotted import path to a MetricsSink subclass.
      - config: Free-form mapping of backend-specific options passed to the
        sink constructor as keyword arguments.

    Outputs:
      - SinkConfig instance with normalized types.
    """

    backend: str = Field(default="stdout", description="Sink alias or dotted import path")
    config: Dict[str, Any] = Field(
        default_factory=dict,
        description="Backend-specific configuration options",
    )

    class Config:
        extra = "forbid"


def _escape_tag(value: str) -> str:
    """Escape a tag key/value or measurement name for InfluxDB line protocol.

    Inputs:
        value: Raw tag value string.

    Outputs:
        Escaped tag value with commas, spaces, and equals signs backslash-escaped.
    """

    return (
        value.replace("\\", "\\\\")
        .replace(",", "\\,")
        .replace(" ", "\\ ")
        .replace("=", "\\=")
    )


def _escape_field_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def format_line_protocol(
    measurement: str,
    tags: Mapping[str, Optional[str]],
    fields: Mapping[str, Any],
    ts: float,
) -> str:
    """Format a single InfluxDB line-protocol entry.

    Inputs:
        measurement: Measurement name.
        tags: Mapping of tag keys to optional values; None values are skipped.
        fields: Mapping of field keys to values (floats, ints, bools, or strings);
            NaN and infinite floats are skipped.
        ts: Unix timestamp in seconds.

    Outputs:
        Single line-protocol string including timestamp in nanoseconds. Tags
        and fields are emitted in sorted key order.

    Raises:
        SinkError: No writable fields.
    """

    tag_parts = []
    for k in sorted(tags):
        v = tags[k]
        if v is None:
            continue
        tag_parts.append(f"{_escape_tag(str(k))}={_escape_tag(str(v))}")
    tag_section = "" if not tag_parts else "," + ",".join(tag_parts)

    field_parts = []
    for k in sorted(fields):
        v = fields[k]
        key = _escape_tag(str(k))
        if isinstance(v, bool):
            field_parts.append(f"{key}={'true' if v else 'false'}")
        elif isinstance(v, int):
            field_parts.append(f"{key}={v}i")
        elif isinstance(v, float):
            if not math.isfinite(v):
                continue
            field_parts.append(f"{key}={v!r}")
        elif v is None:
            continue
        else:
            field_parts.append(f"{key}={_escape_field_string(str(v))}")

    if not field_parts:
        raise SinkError(f"measurement {measurement!r} has no fields to write")

    ns_ts = int(ts * 1_000_000_000)
    return f"{_escape_tag(measurement)}{tag_section} {','.join(field_parts)} {ns_ts}"


class MetricsSink:
    """Brief: Destination for the measurement produced by a collection cycle.

    Concrete sinks declare ``aliases`` used by the sink registry and
    implement ``add_fields``. Failures must raise SinkError so the cycle is
    reported as failed.
    """

    aliases: Sequence[str] = ()

    def add_fields(
        self,
        measurement: str,
        fields: Mapping[str, float],
        tags: Mapping[str, str],
        ts: Optional[float] = None,
    ) -> None:  # pragma: no cover - interface only
        """Brief: Record one measurement.

        Inputs:
          - measurement: measurement name (for example "dnsmasq")
          - fields: field name -> numeric value
          - tags: tag name -> string value
          - ts: Unix timestamp in seconds; defaults to now

        Outputs:
          - None
        """

        raise NotImplementedError("add_fields() must be implemented by a subclass")

    def close(self) -> None:
        """Brief: Release resources held by the sink (no-op by default)."""

        return None

    @staticmethod
    def _timestamp(ts: Optional[float]) -> float:
        return float(time.time() if ts is None else ts)


class MultiSink(MetricsSink):
    """Brief: Fan one measurement out to several sinks.

    Inputs (constructor):
      - sinks: Non-empty list of MetricsSink instances.

    Outputs:
      - MultiSink that writes to every sink in order. All sinks are attempted;
        when any fails a SinkError naming the failures is raised afterwards.
    """

    def __init__(self, sinks: List[MetricsSink]) -> None:
        if not sinks:
            raise ValueError("MultiSink requires at least one sink")
        self._sinks = list(sinks)

    @property
    def sinks(self) -> List[MetricsSink]:
        return list(self._sinks)

    def add_fields(self, measurement, fields, tags, ts=None) -> None:
        ts = self._timestamp(ts)
        failures = []
        for sink in self._sinks:
            try:
                sink.add_fields(measurement, fields, tags, ts)
            except SinkError as exc:
                logger.error("Sink %s failed: %s", type(sink).__name__, exc)
                failures.append(f"{type(sink).__name__}: {exc}")
        if failures:
            raise SinkError("; ".join(failures))

    def close(self) -> None:
        for sink in self._sinks:
            try:
                sink.close()
            except Exception:  # pragma: no cover - defensive
                logger.exception("Error while closing sink %s", type(sink).__name__)
