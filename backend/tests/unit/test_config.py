"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from config import Settings


class TestSettings:
    def test_business_rule_defaults(self, monkeypatch):
        for name in ("ASSET_LOCK_HOURS", "MIN_TRADE_SATS", "INITIAL_BTC_SATS"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)

        assert settings.ASSET_LOCK_HOURS == 24
        assert settings.MIN_TRADE_SATS == 100_000
        assert settings.INITIAL_BTC_SATS == 100_000_000

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("ASSET_LOCK_HOURS", "48")
        monkeypatch.setenv("MIN_TRADE_SATS", "5000")

        settings = Settings(_env_file=None)

        assert settings.ASSET_LOCK_HOURS == 48
        assert settings.MIN_TRADE_SATS == 5000

    @pytest.mark.parametrize("name", ["ASSET_LOCK_HOURS", "MIN_TRADE_SATS", "TRADE_HISTORY_LIMIT"])
    def test_non_positive_rejected(self, monkeypatch, name):
        monkeypatch.setenv(name, "0")
        with pytest.raises(ValidationError, match=name):
            Settings(_env_file=None)
