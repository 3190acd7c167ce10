import pytest

from crowdledger.config.loader import load_settings


def test_missing_file_yields_defaults(tmp_path, monkeypatch):
    for var in ("REDIS_URL", "EVENTS_STREAM", "EVENTS_DLQ", "PROMETHEUS_PORT"):
        monkeypatch.delenv(var, raising=False)
    s = load_settings(str(tmp_path / "nope.yaml"))
    assert s.ledger.strict_titles is False
    assert (s.display.unit, s.display.decimals) == ("ETH", 18)
    assert s.server.identity_header == "X-Identity"
    assert s.events.stream == "crowdledger.events"


def test_yaml_values_and_env_overrides(tmp_path, monkeypatch):
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        "ledger:\n  strict_titles: true\n"
        "display:\n  unit: USD\n  decimals: 2\n"
        "events:\n  enabled: false\n"
    )
    monkeypatch.setenv("REDIS_URL", "redis://cache:6379/1")
    monkeypatch.setenv("PROMETHEUS_PORT", "9100")
    s = load_settings(str(cfg))
    assert s.ledger.strict_titles is True
    assert (s.display.unit, s.display.decimals) == ("USD", 2)
    assert s.events.enabled is False
    assert s.events.redis_url == "redis://cache:6379/1"
    assert s.server.prometheus_port == 9100


def test_config_path_from_env(tmp_path, monkeypatch):
    cfg = tmp_path / "alt.yaml"
    cfg.write_text("display:\n  unit: DAI\n")
    monkeypatch.setenv("CROWDLEDGER_CONFIG", str(cfg))
    assert load_settings().display.unit == "DAI"


def test_invalid_values_rejected(tmp_path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("display:\n  decimals: -1\n")
    with pytest.raises(Exception):
        load_settings(str(cfg))
