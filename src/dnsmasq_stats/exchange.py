"""Synchronous request/response exchange with the resolver's statistics interface.

Brief:
  Exchanger sends one wire-format query over UDP (falling back to TCP when
  the reply is truncated) or TCP, parses the reply with dnslib, and checks the
  transaction id. Identical queries issued concurrently against the same
  endpoint share one network round trip through SingleFlight.

Inputs:
  - dnslib.DNSRecord queries and "host:port" endpoint strings

Outputs:
  - Parsed dnslib.DNSRecord replies, or TransportError
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from dnslib import RCODE, DNSError, DNSRecord

from .errors import TransportError
from .singleflight import SingleFlight
from .transports.tcp import TCPError, tcp_query
from .transports.udp import UDPError, udp_query

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 53
DEFAULT_SERVER = f"{DEFAULT_HOST}:{DEFAULT_PORT}"

TRANSPORTS = ("udp", "tcp")


def split_host_port(server: Optional[str], default_port: int = DEFAULT_PORT) -> Tuple[str, int]:
    """
    Brief: Split a resolver endpoint into host and port.

    Inputs:
      - server: "host:port", "[v6addr]:port", bare host, bare IPv6 literal,
        or empty (meaning the loopback default)
      - default_port: port used when the endpoint carries none

    Outputs:
      - (host, port)

    Raises:
      - ValueError: malformed brackets or a port outside 1..65535

    Example:
        >>> split_host_port("[::1]:5353")
        ('::1', 5353)
        >>> split_host_port("")
        ('127.0.0.1', 53)
    """
    text = (server or "").strip()
    if not text:
        return DEFAULT_HOST, default_port

    port_text: Optional[str] = None
    if text.startswith("["):
        end = text.find("]")
        if end < 0:
            raise ValueError(f"invalid server address {server!r}: missing ']'")
        host = text[1:end]
        rest = text[end + 1 :]
        if rest:
            if not rest.startswith(":"):
                raise ValueError(f"invalid server address {server!r}")
            port_text = rest[1:]
    elif text.count(":") == 1:
        host, port_text = text.split(":", 1)
    else:
        host = text

    if not host:
        raise ValueError(f"invalid server address {server!r}: empty host")
    if port_text is None:
        return host, default_port
    try:
        port = int(port_text)
    except ValueError:
        raise ValueError(
            f"invalid server address {server!r}: port {port_text!r} is not a number"
        ) from None
    if not 1 <= port <= 65535:
        raise ValueError(f"invalid server address {server!r}: port {port} out of range")
    return host, port


def _is_truncated(wire: bytes) -> bool:
    return len(wire) >= 4 and bool(wire[2] & 0x02)


class Exchanger:
    """
    Brief: Blocking DNS client used for statistics queries.

    Inputs (constructor):
      - transport: "udp" (default) or "tcp"
      - timeout_ms: per-query socket timeout in milliseconds
      - single_inflight: collapse identical concurrent queries into one
        network round trip (default True)

    Outputs:
      - Exchanger instance; safe to share between threads.

    Example:
        >>> client = Exchanger(timeout_ms=500)
        >>> # reply = client.exchange(build_stat_query("hits.bind."), "127.0.0.1:53")
    """

    def __init__(
        self,
        transport: str = "udp",
        timeout_ms: int = 2000,
        single_inflight: bool = True,
    ) -> None:
        transport = str(transport).lower()
        if transport not in TRANSPORTS:
            raise ValueError(
                f"unsupported transport {transport!r}; expected one of {TRANSPORTS}"
            )
        self.transport = transport
        self.timeout_ms = int(timeout_ms)
        self._flights: Optional[SingleFlight] = SingleFlight() if single_inflight else None

    def exchange(self, query: DNSRecord, server: Optional[str]) -> DNSRecord:
        """
        Brief: Send one query and return the parsed reply.

        Inputs:
          - query: DNSRecord to send
          - server: resolver endpoint "host:port"; empty means 127.0.0.1:53

        Outputs:
          - DNSRecord: parsed reply carrying the caller's transaction id

        Raises:
          - TransportError: network failure, timeout, malformed wire reply,
            or a reply whose id does not match the query
        """
        try:
            host, port = split_host_port(server)
        except ValueError as exc:
            raise TransportError(str(exc)) from exc

        if self._flights is None:
            resp_wire, shared = self._fetch(host, port, query), False
        else:
            q = query.q
            key = (
                self.transport,
                host,
                port,
                str(q.qname).lower(),
                int(q.qtype),
                int(q.qclass),
            )
            resp_wire, shared = self._flights.do(
                key, lambda: self._fetch(host, port, query)
            )

        reply = DNSRecord.parse(resp_wire)
        if shared:
            reply.header.id = query.header.id

        if reply.header.rcode != RCODE.NOERROR:
            logger.warning(
                "Resolver %s:%s answered %s with rcode %s",
                host,
                port,
                query.q.qname,
                RCODE.get(reply.header.rcode, reply.header.rcode),
            )
        return reply

    def _fetch(self, host: str, port: int, query: DNSRecord) -> bytes:
        """
        Brief: Exchange one query and validate the reply against it.

        Inputs:
          - host, port: resolver endpoint
          - query: DNSRecord whose id the reply must carry

        Outputs:
          - bytes: wire reply that parses and matches the query id; callers
            sharing this flight receive the same validated bytes
        """
        resp_wire = self._roundtrip(host, port, query.pack())
        try:
            reply = DNSRecord.parse(resp_wire)
        except DNSError as exc:
            raise TransportError(
                f"malformed reply from {host}:{port} for {query.q.qname}: {exc}"
            ) from exc
        if reply.header.id != query.header.id:
            raise TransportError(
                f"reply id mismatch from {host}:{port}: "
                f"got {reply.header.id}, want {query.header.id}"
            )
        return resp_wire

    def _roundtrip(self, host: str, port: int, wire: bytes) -> bytes:
        """
        Brief: Perform the network exchange for one wire query.

        Inputs:
          - host, port: resolver endpoint
          - wire: packed query

        Outputs:
          - bytes: wire reply (from TCP when the UDP reply was truncated)
        """
        try:
            if self.transport == "tcp":
                return tcp_query(
                    host,
                    port,
                    wire,
                    connect_timeout_ms=self.timeout_ms,
                    read_timeout_ms=self.timeout_ms,
                )
            resp = udp_query(host, port, wire, timeout_ms=self.timeout_ms)
            if _is_truncated(resp):
                logger.debug("Truncated UDP reply from %s:%s; retrying over TCP", host, port)
                resp = tcp_query(
                    host,
                    port,
                    wire,
                    connect_timeout_ms=self.timeout_ms,
                    read_timeout_ms=self.timeout_ms,
                )
            return resp
        except (UDPError, TCPError) as exc:
            raise TransportError(str(exc)) from exc
