"""
Brief: Tests for dnsmasq_stats.config.config_parser.

Inputs:
  - None

Outputs:
  - None
"""

import dataclasses

import pytest

from dnsmasq_stats.config.config_parser import (
    DnsmasqConfig,
    EffectiveConfig,
    AppConfig,
    load_config,
    parse_config_file,
    resolve_config,
)


def test_resolve_config_defaults_to_loopback():
    eff = resolve_config()
    assert eff == EffectiveConfig(
        server="127.0.0.1:53",
        host="127.0.0.1",
        port=53,
        transport="udp",
        timeout_ms=2000,
        single_inflight=True,
    )


def test_resolve_config_empty_server_uses_default():
    assert resolve_config(DnsmasqConfig(server="")).server == "127.0.0.1:53"


def test_resolve_config_keeps_configured_server_text():
    eff = resolve_config(DnsmasqConfig(server="[::1]:5353", transport="TCP"))
    assert eff.server == "[::1]:5353"
    assert (eff.host, eff.port, eff.transport) == ("::1", 5353, "tcp")


def test_resolve_config_overrides_win():
    cfg = DnsmasqConfig(server="10.0.0.1:53", timeout_ms=100)
    eff = resolve_config(cfg, server="10.0.0.2:5300", transport="tcp", timeout_ms=900)
    assert (eff.server, eff.transport, eff.timeout_ms) == ("10.0.0.2:5300", "tcp", 900)
    assert cfg.server == "10.0.0.1:53"


def test_effective_config_is_immutable():
    eff = resolve_config()
    with pytest.raises(dataclasses.FrozenInstanceError):
        eff.server = "elsewhere:53"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"server": "127.0.0.1:notaport"},
        {"transport": "quic"},
        {"timeout_ms": 0},
    ],
)
def test_resolve_config_rejects_invalid_values(kwargs):
    with pytest.raises(ValueError):
        resolve_config(**kwargs)


def test_load_config_none_gives_defaults():
    cfg = load_config(None)
    assert isinstance(cfg, AppConfig)
    assert cfg.dnsmasq.server == ""
    assert cfg.outputs == []
    assert cfg.logging == {}


def test_load_config_rejects_non_mapping():
    with pytest.raises(ValueError):
        load_config(["not", "a", "mapping"])


def test_load_config_rejects_unknown_keys():
    with pytest.raises(ValueError):
        load_config({"dnsmasq": {"servr": "127.0.0.1:53"}})


def test_load_config_treats_null_sections_as_defaults():
    cfg = load_config({"dnsmasq": None, "logging": None, "outputs": None})
    assert cfg.dnsmasq.transport == "udp"


def test_parse_config_file_reads_yaml(tmp_path):
    path = tmp_path / "dnsmasq.yaml"
    path.write_text(
        "dnsmasq:\n"
        "  server: 192.0.2.53:53\n"
        "  transport: tcp\n"
        "  timeout_ms: 500\n"
        "logging:\n"
        "  level: debug\n"
        "outputs:\n"
        "  - backend: influxdb\n"
        "    config:\n"
        "      write_url: http://127.0.0.1:8086/api/v2/write\n"
    )
    cfg = parse_config_file(str(path))
    assert cfg.dnsmasq.server == "192.0.2.53:53"
    assert cfg.dnsmasq.transport == "tcp"
    assert cfg.dnsmasq.timeout_ms == 500
    assert cfg.logging == {"level": "debug"}
    assert cfg.outputs[0].backend == "influxdb"
    assert cfg.outputs[0].config["write_url"].endswith("/write")


def test_parse_config_file_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert parse_config_file(str(path)).dnsmasq.server == ""


def test_parse_config_file_invalid_yaml_raises_value_error(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("dnsmasq: [unclosed\n")
    with pytest.raises(ValueError):
        parse_config_file(str(path))


def test_parse_config_file_missing_raises_oserror(tmp_path):
    with pytest.raises(OSError):
        parse_config_file(str(tmp_path / "missing.yaml"))
