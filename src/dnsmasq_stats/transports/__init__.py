"""Blocking DNS wire transports used to reach the resolver's statistics interface."""

from .tcp import TCPError, tcp_query
from .udp import UDPError, udp_query

__all__ = ["TCPError", "UDPError", "tcp_query", "udp_query"]
