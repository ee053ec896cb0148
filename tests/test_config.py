import pytest

from announcement_monitor.config.loader import MonitorConfig, parse_exchange_intervals, parse_exchange_list
from main import build_config, parse_args


def test_parse_exchange_intervals_skips_malformed():
    raw = "binance:60, okx:120,bad,kraken:x,gate:-1,:30"

    assert parse_exchange_intervals(raw) == {"binance": 60, "okx": 120}


def test_parse_exchange_list():
    assert parse_exchange_list(" binance, okx,,Gate.io ") == ["binance", "okx", "Gate.io"]
    assert parse_exchange_list(None) == []


def test_defaults():
    config = MonitorConfig()

    assert config.default_poll_interval == 300
    assert config.request_timeout == 30
    assert config.log_level == "INFO"
    assert config.should_monitor("anything")


def test_interval_lookup_is_case_insensitive():
    config = MonitorConfig(exchange_intervals={"Binance": 60, "gate.io": 90})

    assert config.get_polling_interval("BINANCE") == 60
    assert config.get_polling_interval("Gate.io") == 90
    assert config.get_polling_interval("okx") == 300


def test_allow_list():
    config = MonitorConfig(enabled_exchanges=["gateio", "OKX"])

    assert config.should_monitor("Gate.io")
    assert config.should_monitor("okx")
    assert not config.should_monitor("Binance")


def test_load_yaml(tmp_path):
    path = tmp_path / "general.yaml"
    path.write_text(
        "poll_interval: 120\n"
        "exchange_intervals:\n"
        "  binance: 30\n"
        "exchanges: [binance, kraken]\n"
        "log_level: debug\n"
        "request_timeout: 10\n"
    )

    config = MonitorConfig.load(str(path))

    assert config.default_poll_interval == 120
    assert config.get_polling_interval("binance") == 30
    assert config.enabled_exchanges == ["binance", "kraken"]
    assert config.log_level == "DEBUG"
    assert config.request_timeout == 10


def test_load_missing_file_gives_defaults(tmp_path):
    assert MonitorConfig.load(str(tmp_path / "absent.yaml")) == MonitorConfig()


def test_merge_ignores_none_and_merges_intervals():
    base = MonitorConfig(default_poll_interval=120, exchange_intervals={"binance": 30, "okx": 60})

    merged = base.merge(default_poll_interval=None, exchange_intervals={"okx": 10}, log_level="DEBUG")

    assert merged.default_poll_interval == 120
    assert merged.exchange_intervals == {"binance": 30, "okx": 10}
    assert merged.get_polling_interval("okx") == 10
    assert merged.log_level == "DEBUG"


def test_command_line_overrides_yaml(tmp_path):
    path = tmp_path / "general.yaml"
    path.write_text("poll_interval: 120\nexchanges: [binance]\nexchange_intervals: {binance: 30}\n")

    args = parse_args([
        "--config", str(path),
        "--interval", "45",
        "--exchanges", "okx,kraken",
        "--exchange-intervals", "okx:10",
        "--log-level", "debug",
    ])
    config = build_config(args)

    assert config.default_poll_interval == 45
    assert config.enabled_exchanges == ["okx", "kraken"]
    assert config.get_polling_interval("binance") == 30
    assert config.get_polling_interval("okx") == 10
    assert config.log_level == "DEBUG"


def test_yaml_values_kept_without_flags(tmp_path):
    path = tmp_path / "general.yaml"
    path.write_text("poll_interval: 120\nexchanges: [binance]\n")

    config = build_config(parse_args(["--config", str(path)]))

    assert config.default_poll_interval == 120
    assert config.enabled_exchanges == ["binance"]


def test_invalid_log_level_rejected():
    with pytest.raises(SystemExit):
        parse_args(["--log-level", "chatty"])
