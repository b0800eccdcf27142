"""Tests for settings, env casting, time helpers and the JSON logger."""

import json

import pytest

from shared.config import Settings, env
from shared.logging import get_logger
from shared.utils import interval_seconds, seconds_to_boundary


class TestEnv:
    def test_cast_int(self, monkeypatch):
        monkeypatch.setenv("EMA_TEST_INT", "12")
        assert env("EMA_TEST_INT", 5, int) == 12

    def test_bad_cast_falls_back(self, monkeypatch):
        monkeypatch.setenv("EMA_TEST_INT", "twelve")
        assert env("EMA_TEST_INT", 5, int) == 5

    @pytest.mark.parametrize("raw, expected", [("true", True), ("1", True),
                                               ("yes", True), ("false", False),
                                               ("0", False)])
    def test_cast_bool(self, monkeypatch, raw, expected):
        monkeypatch.setenv("EMA_TEST_BOOL", raw)
        assert env("EMA_TEST_BOOL", None, bool) is expected

    def test_missing_uses_default(self, monkeypatch):
        monkeypatch.delenv("EMA_TEST_MISSING", raising=False)
        assert env("EMA_TEST_MISSING", "x") == "x"


class TestSettings:
    def test_defaults(self):
        s = Settings()
        assert s.symbol == "BTCUSDT"
        assert s.dry_run is True
        assert s.min_window == 50
        assert s.fetch_limit == 100

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SYMBOL", "ETHUSDT")
        monkeypatch.setenv("INTERVAL", "5m")
        monkeypatch.setenv("EMA_ENTRY_FAST", "7")
        monkeypatch.setenv("EMA_ENTRY_SLOW", "10")
        monkeypatch.setenv("EMA_EXIT_FAST", "20")
        monkeypatch.setenv("EMA_EXIT_SLOW", "60")
        monkeypatch.setenv("DRY_RUN", "false")
        monkeypatch.setenv("API_PORT", "4000")

        s = Settings.from_env()

        assert (s.symbol, s.interval) == ("ETHUSDT", "5m")
        assert (s.entry_fast, s.entry_slow, s.exit_fast, s.exit_slow) == (7, 10, 20, 60)
        assert s.dry_run is False
        assert s.api_port == 4000
        assert s.min_window == 60
        assert s.fetch_limit == 110

    def test_settings_are_frozen(self):
        with pytest.raises(AttributeError):
            Settings().symbol = "ETHUSDT"


class TestTimeHelpers:
    def test_interval_seconds(self):
        assert interval_seconds("1m") == 60
        assert interval_seconds("4h") == 14400

    @pytest.mark.parametrize("interval", ["7m", "1s", "3d", "1w", "1M"])
    def test_unsupported_interval(self, interval):
        with pytest.raises(ValueError, match="unsupported interval"):
            interval_seconds(interval)

    def test_seconds_to_boundary(self):
        assert seconds_to_boundary(120.0, 60) == 60.0
        assert seconds_to_boundary(125.0, 60) == 55.0


class TestJsonLogger:
    def test_emits_one_json_object_per_line(self, capsys):
        log = get_logger("tests.json_logger")

        log.warning("price %s", 101.5, extra={"symbol": "BTCUSDT"})

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["lvl"] == "WARNING"
        assert record["src"] == "tests.json_logger"
        assert record["msg"] == "price 101.5"
        assert record["ctx"] == {"symbol": "BTCUSDT"}
