"""dnsmasq cache statistics collector.

Brief:
  Queries the CHAOS-class TXT statistics records a dnsmasq resolver exposes
  (``cachesize.bind.``, ``hits.bind.``, ``servers.bind.`` and friends) and
  turns the replies into a flat ``{field: float}`` measurement that is handed
  to a metrics sink.
"""

from .collector import MEASUREMENT, METRIC_NAMES, Collector
from .errors import (
    CollectionError,
    HostLookupError,
    ParseError,
    SinkError,
    TransportError,
)
from .exchange import Exchanger
from .parser import process_response
from .query import build_stat_query

__all__ = [
    "MEASUREMENT",
    "METRIC_NAMES",
    "Collector",
    "CollectionError",
    "Exchanger",
    "HostLookupError",
    "ParseError",
    "SinkError",
    "TransportError",
    "build_stat_query",
    "process_response",
]
