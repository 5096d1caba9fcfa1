"""Line-protocol sink writing to a text stream (stdout by default).

Suitable for exec-style agents that run the collector on a timer and read
InfluxDB line protocol from its standard output.
"""

from __future__ import annotations

import sys
from typing import Any, Optional, TextIO

from ..errors import SinkError
from .base import MetricsSink, format_line_protocol


class LineProtocolSink(MetricsSink):
    """Brief: Write each measurement as one line-protocol line.

    Inputs (constructor):
      - stream: Optional text stream; defaults to sys.stdout at write time.

    Outputs:
      - LineProtocolSink instance.
    """

    aliases = ("stdout", "line_protocol")

    def __init__(self, stream: Optional[TextIO] = None, **_: Any) -> None:
        self._stream = stream

    def add_fields(self, measurement, fields, tags, ts=None) -> None:
        line = format_line_protocol(measurement, tags, fields, self._timestamp(ts))
        stream = self._stream if self._stream is not None else sys.stdout
        try:
            stream.write(line + "\n")
            stream.flush()
        except (OSError, ValueError) as exc:
            raise SinkError(f"failed to write measurement: {exc}") from exc
