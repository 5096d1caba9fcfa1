"""Brief: Tests for line-protocol formatting, the stdout sink and MultiSink.

Inputs:
  - None

Outputs:
  - None
"""

import io

import pytest

from dnsmasq_stats.errors import SinkError
from dnsmasq_stats.sinks.base import MultiSink, format_line_protocol
from dnsmasq_stats.sinks.stdout import LineProtocolSink


def test_format_line_protocol_escapes_and_sorts():
    line = format_line_protocol(
        measurement="dns masq",
        tags={"server": "127.0.0.1:53", "host": "a,b=c", "skip": None},
        fields={"misses": 3.0, "hits": 5.0, "up": True, "count": 2, "note": 'say "hi"'},
        ts=1.5,
    )
    assert line == (
        'dns\\ masq,host=a\\,b\\=c,server=127.0.0.1:53 '
        'count=2i,hits=5.0,misses=3.0,note="say \\"hi\\"",up=true 1500000000'
    )


def test_format_line_protocol_without_fields_raises():
    with pytest.raises(SinkError):
        format_line_protocol("dnsmasq", {}, {}, 0.0)


def test_line_protocol_sink_writes_one_line():
    buf = io.StringIO()
    LineProtocolSink(stream=buf).add_fields("dnsmasq", {"hits": 5.0}, {"host": "h"}, ts=2.0)
    assert buf.getvalue() == "dnsmasq,host=h hits=5.0 2000000000\n"


def test_line_protocol_sink_closed_stream_raises_sink_error():
    buf = io.StringIO()
    buf.close()
    with pytest.raises(SinkError):
        LineProtocolSink(stream=buf).add_fields("dnsmasq", {"hits": 1.0}, {}, ts=0.0)


def test_line_protocol_sink_defaults_to_stdout(capsys):
    LineProtocolSink().add_fields("dnsmasq", {"hits": 1.0}, {}, ts=0.0)
    assert capsys.readouterr().out == "dnsmasq hits=1.0 0\n"


class _Recorder:
    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail
        self.closed = False

    def add_fields(self, measurement, fields, tags, ts=None):
        self.calls.append((measurement, fields, tags, ts))
        if self.fail:
            raise SinkError("nope")

    def close(self):
        self.closed = True


def test_multi_sink_fans_out_with_shared_timestamp():
    a, b = _Recorder(), _Recorder()
    multi = MultiSink([a, b])
    multi.add_fields("dnsmasq", {"hits": 1.0}, {"host": "h"})
    assert len(a.calls) == len(b.calls) == 1
    assert a.calls[0][3] == b.calls[0][3] is not None
    multi.close()
    assert a.closed and b.closed


def test_multi_sink_attempts_all_then_raises():
    a, b = _Recorder(fail=True), _Recorder()
    with pytest.raises(SinkError):
        MultiSink([a, b]).add_fields("dnsmasq", {"hits": 1.0}, {})
    assert len(b.calls) == 1


def test_multi_sink_requires_sinks():
    with pytest.raises(ValueError):
        MultiSink([])


def test_format_line_protocol_skips_non_finite_floats():
    line = format_line_protocol(
        "dnsmasq", {}, {"hits": float("nan"), "misses": float("inf"), "auth": 1.0}, 0.0
    )
    assert line == "dnsmasq auth=1.0 0"


def test_format_line_protocol_only_non_finite_raises():
    with pytest.raises(SinkError):
        format_line_protocol("dnsmasq", {}, {"hits": float("nan")}, 0.0)
