"""One dnsmasq statistics collection cycle.

Brief:
  Collector queries every statistics name in METRIC_NAMES in order, merges
  the replies into one field map and hands it, with the server/host tags, to
  the injected sink as a single ``dnsmasq`` measurement. Any failure aborts
  the cycle before the sink is called; scheduling and retries belong to the
  caller.
"""

from __future__ import annotations

import logging
import socket
from typing import Callable, Dict, Optional, Sequence

from dnslib import DNSRecord

from .config.config_parser import EffectiveConfig
from .errors import CollectionError, HostLookupError
from .exchange import Exchanger
from .parser import process_response
from .query import build_stat_query
from .sinks.base import MetricsSink

logger = logging.getLogger(__name__)

MEASUREMENT = "dnsmasq"

METRIC_NAMES = (
    "cachesize.bind.",
    "insertions.bind.",
    "evictions.bind.",
    "misses.bind.",
    "hits.bind.",
    "auth.bind.",
    "servers.bind.",
)

DESCRIPTION = "Read Dnsmasq metrics by dns query"

SAMPLE_CONFIG = """\
dnsmasq:
  ## Dnsmasq server IP address and port.
  # server: "127.0.0.1:53"
  ## Transport used for the statistics queries: udp or tcp.
  # transport: udp
  # timeout_ms: 2000

logging:
  level: info
  # file: /var/log/dnsmasq-stats.log

outputs:
  - backend: stdout
  # - backend: influxdb
  #   config:
  #     write_url: http://127.0.0.1:8086/api/v2/write
  #     bucket: telegraf
  #     org: example
  #     token: changeme
"""


def sample_config() -> str:
    """Return the commented sample YAML configuration."""
    return SAMPLE_CONFIG


def short_hostname(lookup: Optional[Callable[[], str]] = None) -> str:
    """
    Brief: Return the local host name up to its first dot.

    Inputs:
      - lookup: host-name lookup callable (socket.gethostname when None)

    Outputs:
      - str: short host identifier

    Raises:
      - HostLookupError: lookup failed
    """
    try:
        hostname = (lookup or socket.gethostname)()
    except OSError as exc:
        raise HostLookupError(f"Failed to get hostname: {exc}") from exc
    return str(hostname).split(".")[0]


class Collector:
    """
    Brief: Runs dnsmasq statistics collection cycles.

    Inputs (constructor):
      - config: EffectiveConfig (resolved once, before any cycle)
      - exchanger: Exchanger used for every query; may be shared between
        collectors so that overlapping cycles coalesce identical queries
      - sink: MetricsSink receiving the measurement
      - hostname_lookup: callable returning the local host name
        (socket.gethostname when None)
      - metric_names: ordered statistics names to query
      - query_factory: builds the DNSRecord for one statistics name

    Outputs:
      - Collector instance; holds no per-cycle state between calls.

    Example:
        >>> # collector = Collector(resolve_config(), Exchanger(), LineProtocolSink())
        >>> # collector.run_once()
    """

    def __init__(
        self,
        config: EffectiveConfig,
        exchanger: Exchanger,
        sink: MetricsSink,
        *,
        hostname_lookup: Optional[Callable[[], str]] = None,
        metric_names: Sequence[str] = METRIC_NAMES,
        query_factory: Callable[[str], DNSRecord] = build_stat_query,
    ) -> None:
        self.config = config
        self.exchanger = exchanger
        self.sink = sink
        self._hostname_lookup = hostname_lookup
        self.metric_names = tuple(metric_names)
        self._query_factory = query_factory

    def tags(self) -> Dict[str, str]:
        """Build the tag set for one cycle."""
        return {
            "server": self.config.server,
            "host": short_hostname(self._hostname_lookup),
        }

    def gather(self) -> Dict[str, float]:
        """
        Brief: Run one collection cycle and emit the measurement.

        Inputs:
          - None

        Outputs:
          - Dict[str, float]: the field map handed to the sink

        Raises:
          - CollectionError: host lookup, transport, parse or sink failure;
            the sink is not called for any failure before emission
        """
        tags = self.tags()
        fields: Dict[str, float] = {}
        logger.debug(
            "Collecting %d statistics from %s", len(self.metric_names), self.config.server
        )
        for name in self.metric_names:
            query = self._query_factory(name)
            reply = self.exchanger.exchange(query, self.config.server)
            process_response(reply, name, fields)

        self.sink.add_fields(MEASUREMENT, dict(fields), tags)
        logger.debug("Emitted %s with %d field(s)", MEASUREMENT, len(fields))
        return fields

    def run_once(self) -> bool:
        """
        Brief: Run one cycle for a scheduler, reporting success as a bool.

        Outputs:
          - bool: True when the measurement was emitted; False when the cycle
            aborted (the error is logged)
        """
        try:
            self.gather()
        except CollectionError as exc:
            logger.error("dnsmasq collection from %s failed: %s", self.config.server, exc)
            return False
        return True
