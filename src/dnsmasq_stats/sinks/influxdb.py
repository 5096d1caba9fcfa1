"""InfluxDB sink writing measurements over the HTTP line-protocol API.

Inputs:
  - Constructed from the ``config`` mapping of a SinkConfig with fields such
    as write_url, org, bucket, precision, and token.

Outputs:
  - Sink instance posting one line-protocol entry per collection cycle.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from ..errors import SinkError
from .base import MetricsSink, format_line_protocol

logger = logging.getLogger(__name__)


class InfluxSink(MetricsSink):
    """InfluxDB-backed metrics sink.

    Inputs (constructor):
        write_url: HTTP endpoint for InfluxDB line-protocol writes
            (for example, "http://127.0.0.1:8086/api/v2/write").
        org: Optional organization identifier (v2); appended as a query
            parameter when provided.
        bucket: Optional bucket/database name; appended as a query parameter
            when provided.
        precision: Timestamp precision for writes (only "ns" is produced).
        token: Optional authentication token; when provided, an Authorization
            header "Token <token>" is added.
        timeout: Request timeout in seconds (default 2.0).
        session_kwargs: Optional mapping of extra keyword arguments passed to
            requests.Session().

    Outputs:
        Initialized InfluxSink instance.
    """

    aliases = ("influx", "influxdb")

    def __init__(
        self,
        write_url: str,
        org: Optional[str] = None,
        bucket: Optional[str] = None,
        precision: str = "ns",
        token: Optional[str] = None,
        timeout: float = 2.0,
        session_kwargs: Optional[Dict[str, Any]] = None,
        **_: Any,
    ) -> None:
        self._write_url = str(write_url)
        self._timeout = float(timeout)

        self._session = requests.Session(**(session_kwargs or {}))
        self._params: Dict[str, str] = {"precision": str(precision or "ns")}
        if org is not None:
            self._params["org"] = str(org)
        if bucket is not None:
            self._params["bucket"] = str(bucket)

        headers: Dict[str, str] = {"Content-Type": "text/plain; charset=utf-8"}
        if token is not None:
            headers["Authorization"] = f"Token {token}"
        self._headers = headers

    def close(self) -> None:
        """Close the underlying HTTP session."""

        session = getattr(self, "_session", None)
        if session is not None:
            session.close()

    def add_fields(self, measurement, fields, tags, ts=None) -> None:
        """Write one measurement to InfluxDB.

        Inputs:
            measurement: Measurement name.
            fields: Field name -> numeric value.
            tags: Tag name -> string value.
            ts: Optional Unix timestamp (float seconds).

        Outputs:
            None.

        Raises:
            SinkError: request failure or HTTP status >= 400.
        """

        line = format_line_protocol(measurement, tags, fields, self._timestamp(ts))
        try:
            resp = self._session.post(
                self._write_url,
                params=self._params,
                data=line.encode("utf-8"),
                headers=self._headers,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise SinkError(f"InfluxDB write to {self._write_url} failed: {exc}") from exc

        if resp.status_code >= 400:
            logger.warning(
                "InfluxDB write failed with status %s: %s",
                resp.status_code,
                resp.text,
            )
            raise SinkError(
                f"InfluxDB write to {self._write_url} failed with status {resp.status_code}"
            )
