"""
Tests for settings loading: packaged defaults, YAML overrides, validation.
"""

from decimal import Decimal

import pytest

from clm_config import get_active_config
from clm_config.loader import compute_checksum, load_settings, merge_settings
from clm_config.schema import EngineSettings


class TestLoadSettings:
    """Tests for load_settings."""

    def test_defaults_match_dataclass_defaults(self):
        settings = load_settings()
        plain = EngineSettings()

        assert settings.expiry == plain.expiry
        assert settings.windows == plain.windows
        assert settings.health == plain.health
        assert settings.rollup == plain.rollup
        assert settings.checksum

    def test_override_file(self, tmp_path):
        path = tmp_path / "override.yaml"
        path.write_text(
            "expiry:\n  urgent_days: 15\nrollup:\n  profitability_multiplier: '1.5'\n",
            encoding="utf-8",
        )

        settings = load_settings(path)

        assert settings.expiry.urgent_days == 15
        assert settings.expiry.attention_days == 60
        assert settings.rollup.profitability_multiplier == Decimal("1.5")
        assert settings.source == str(path)

    def test_unknown_key_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("expiry:\n  soon_days: 5\n", encoding="utf-8")

        with pytest.raises(ValueError):
            load_settings(path)

    def test_unknown_section_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("metrics:\n  enabled: true\n", encoding="utf-8")

        with pytest.raises(ValueError):
            load_settings(path)

    def test_wrong_type_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("windows:\n  expiring_days: soon\n", encoding="utf-8")

        with pytest.raises(ValueError):
            load_settings(path)

    def test_invalid_ordering_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("expiry:\n  urgent_days: 70\n", encoding="utf-8")

        with pytest.raises(ValueError):
            load_settings(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "missing.yaml")


class TestHelpers:
    def test_merge_keeps_unset_keys(self):
        merged = merge_settings({"expiry": {"a": 1, "b": 2}}, {"expiry": {"b": 3}})

        assert merged == {"expiry": {"a": 1, "b": 3}}

    def test_checksum_order_independent(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})


class TestGetActiveConfig:
    def test_environment_overrides(self, tmp_path, monkeypatch, captured_logs):
        path = tmp_path / "override.yaml"
        path.write_text("windows:\n  expiring_days: 45\n", encoding="utf-8")
        monkeypatch.setenv("CLM_CONFIG_PATH", str(path))
        monkeypatch.setenv("DATABASE_URL", "sqlite:///other.db")

        settings = get_active_config()

        assert settings.windows.expiring_days == 45
        assert settings.database.url == "sqlite:///other.db"
        traces = [r for r in captured_logs() if r["message"] == "CLM_CONFIG_TRACE"]
        assert traces[0]["database_url_override"] is True
