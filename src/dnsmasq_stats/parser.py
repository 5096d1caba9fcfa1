"""Interpretation of dnsmasq statistics replies.

dnsmasq answers two shapes of TXT record under the CHAOS class:

- simple records such as ``hits.bind.`` carry exactly one string holding a
  single number; the field name is the first label of the record name.
- the composite ``servers.bind.`` record carries one string per upstream
  server of the form ``"<address> <queries> <failed>"``; the two counts are
  stored under the fixed ``queries`` and ``queries_failed`` fields. With
  several upstreams the last string seen wins.
"""

from __future__ import annotations

import logging
import math
import re
from typing import MutableMapping

from dnslib import QTYPE, DNSRecord

from .errors import ParseError

logger = logging.getLogger(__name__)

COMPOSITE_RECORD = "servers.bind."
COMPOSITE_TOKENS = 3

# Plain ASCII decimal or exponent notation; no whitespace, underscores,
# Unicode digits or non-finite spellings.
_NUMBER = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def _parse_float(token: str, record: str) -> float:
    value = float(token) if _NUMBER.fullmatch(token) else math.nan
    if not math.isfinite(value):
        raise ParseError(
            f"stats DNS record {record}: invalid numeric value {token!r}"
        )
    return value


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


def process_response(
    response: DNSRecord, metric_name: str, fields: MutableMapping[str, float]
) -> None:
    """
    Brief: Merge the numeric values of one statistics reply into fields.

    Inputs:
      - response: parsed reply for the metric_name query
      - metric_name: statistics name that produced the reply
      - fields: accumulating field map (mutated in-place)

    Outputs:
      - None

    Raises:
      - ParseError: wrong token/string count or a non-numeric value. Fields
        merged from earlier well-formed records are left in place.

    Example:
        >>> fields = {}
        >>> # reply carrying TXT "5" under hits.bind.
        >>> # process_response(reply, "hits.bind.", fields) -> {"hits": 5.0}
    """
    logger.debug(
        "Processing %d answer(s) for %s", len(response.rr), metric_name
    )
    for rr in response.rr:
        if rr.rtype != QTYPE.TXT:
            continue
        record = str(rr.rname)
        strings = [_decode(s) for s in getattr(rr.rdata, "data", [])]

        if record.lower() == COMPOSITE_RECORD:
            for text in strings:
                tokens = text.split()
                if len(tokens) != COMPOSITE_TOKENS:
                    raise ParseError(
                        f"stats DNS record {COMPOSITE_RECORD}: unexpected number of "
                        f"argument in record: got {len(tokens)}, want {COMPOSITE_TOKENS}"
                    )
                queries = _parse_float(tokens[1], record)
                failed = _parse_float(tokens[2], record)
                fields["queries"] = queries
                fields["queries_failed"] = failed
            continue

        if len(strings) != 1:
            raise ParseError(
                f'stats DNS record "{record}": unexpected number of replies: '
                f"got {len(strings)}, want 1"
            )
        value = _parse_float(strings[0], record)
        fields[record.split(".")[0]] = value
