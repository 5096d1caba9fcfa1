"""
Brief: Global pytest configuration and shared dnsmasq stub fixtures.

Inputs:
  - None

Outputs:
  - None
"""

import os
import signal
import socket
import sys
import threading

import pytest

# Ensure 'src' is on sys.path so 'dnsmasq_stats' is importable in tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
SRC_DIR = os.path.join(ROOT, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from dnslib import CLASS, QTYPE, RR, TXT, DNSRecord  # noqa: E402


def _alarm_handler(signum, frame):
    """
    Brief: Signal handler that raises TimeoutError when alarm triggers.

    Inputs:
      - signum: signal number (int)
      - frame: current frame (ignored)

    Outputs:
      - None: Raises TimeoutError to fail the test
    """
    raise TimeoutError("Test exceeded 10 seconds")


if hasattr(signal, "SIGALRM"):
    signal.signal(signal.SIGALRM, _alarm_handler)


@pytest.fixture(autouse=True)
def enforce_test_timeout():
    """
    Brief: Enforce a hard 10-second timeout for each test.

    Inputs:
      - None

    Outputs:
      - None: Cancels alarm after test
    """
    if hasattr(signal, "SIGALRM"):
        signal.alarm(10)
        try:
            yield
        finally:
            signal.alarm(0)
    else:
        yield


def txt_rr(name, *strings, rclass=CLASS.CH):
    """Build a TXT answer record carrying the given strings."""
    return RR(name, QTYPE.TXT, rclass=rclass, ttl=0, rdata=TXT(list(strings)))


DNSMASQ_STATS = {
    "cachesize.bind.": ["150"],
    "insertions.bind.": ["12"],
    "evictions.bind.": ["0"],
    "misses.bind.": ["30"],
    "hits.bind.": ["5"],
    "auth.bind.": ["0"],
    "servers.bind.": ["127.0.0.1#53 42 1340"],
}


class DnsmasqUDPStub:
    """
    Brief: Minimal UDP responder answering CHAOS TXT statistics queries.

    Inputs:
      - stats: mapping of record name -> list of TXT strings

    Outputs:
      - Running stub bound to 127.0.0.1 on an ephemeral port; ``queries``
        records every question name received.
    """

    def __init__(self, stats):
        self.stats = dict(stats)
        self.queries = []
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind(("127.0.0.1", 0))
        self.addr = self.sock.getsockname()
        self._stop = False
        self.thread = threading.Thread(target=self._loop, daemon=True)

    @property
    def server(self):
        return "%s:%d" % self.addr

    def start(self):
        self.thread.start()

    def _loop(self):
        while not self._stop:
            try:
                self.sock.settimeout(0.2)
                data, peer = self.sock.recvfrom(4096)
            except OSError:
                continue
            try:
                req = DNSRecord.parse(data)
            except Exception:
                continue
            name = str(req.q.qname)
            self.queries.append(name)
            reply = req.reply()
            strings = self.stats.get(name)
            if strings is not None:
                reply.add_answer(txt_rr(name, *strings))
            try:
                self.sock.sendto(reply.pack(), peer)
            except OSError:
                pass

    def close(self):
        self._stop = True
        self.thread.join(timeout=1)
        self.sock.close()


@pytest.fixture
def dnsmasq_stub():
    """
    Brief: Start a DnsmasqUDPStub serving DNSMASQ_STATS for one test.

    Inputs:
      - None

    Outputs:
      - DnsmasqUDPStub instance (closed after the test)
    """
    stub = DnsmasqUDPStub(DNSMASQ_STATS)
    stub.start()
    try:
        yield stub
    finally:
        stub.close()
