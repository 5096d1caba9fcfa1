"""Statistics query construction.

Brief:
  build_stat_query() turns one dnsmasq statistics name into a CHAOS-class TXT
  query with recursion desired and a fresh transaction id.
"""

from __future__ import annotations

import random
from typing import Optional

from dnslib import CLASS, QTYPE, DNSHeader, DNSQuestion, DNSRecord


def build_stat_query(name: str, qid: Optional[int] = None) -> DNSRecord:
    """
    Brief: Build a CHAOS-class TXT query for one dnsmasq statistics name.

    Inputs:
      - name: statistics record name, e.g. "hits.bind."
      - qid: optional transaction id; a random 16-bit id is used when omitted

    Outputs:
      - DNSRecord: query with RD set and a single CH/TXT question

    Example:
        >>> q = build_stat_query("hits.bind.", qid=42)
        >>> q.header.id, QTYPE[q.q.qtype], CLASS[q.q.qclass]
        (42, 'TXT', 'CH')
    """
    if not name:
        raise ValueError("statistics query name must be non-empty")
    if qid is None:
        qid = random.randint(0, 0xFFFF)
    header = DNSHeader(id=int(qid) & 0xFFFF, rd=1)
    return DNSRecord(header, q=DNSQuestion(name, QTYPE.TXT, CLASS.CH))
