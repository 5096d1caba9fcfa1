"""Brief: Tests for sink alias resolution and loading.

Inputs:
  - None

Outputs:
  - None
"""

import pytest

from dnsmasq_stats.sinks import (
    InfluxSink,
    LineProtocolSink,
    MultiSink,
    SinkConfig,
    get_sink_class,
    load_sink,
    load_sinks,
)


@pytest.mark.parametrize(
    "identifier,cls",
    [
        ("stdout", LineProtocolSink),
        ("Line-Protocol", LineProtocolSink),
        ("influxdb", InfluxSink),
        ("influx", InfluxSink),
        ("dnsmasq_stats.sinks.stdout.LineProtocolSink", LineProtocolSink),
    ],
)
def test_get_sink_class_resolves_aliases_and_paths(identifier, cls):
    assert get_sink_class(identifier) is cls


@pytest.mark.parametrize(
    "identifier", ["nosuch", "dnsmasq_stats.sinks.nosuch.Sink", "dnsmasq_stats.errors.SinkError"]
)
def test_get_sink_class_rejects_unknown(identifier):
    with pytest.raises(ValueError):
        get_sink_class(identifier)


def test_load_sinks_defaults_to_stdout():
    assert isinstance(load_sinks([]), LineProtocolSink)
    assert isinstance(load_sinks(None), LineProtocolSink)


def test_load_sinks_builds_multi_sink():
    sink = load_sinks([{"backend": "stdout"}, SinkConfig(backend="line_protocol")])
    assert isinstance(sink, MultiSink)
    assert len(sink.sinks) == 2


def test_load_sink_bad_config_raises_value_error():
    with pytest.raises(ValueError):
        load_sink({"backend": "influxdb", "config": {}})
