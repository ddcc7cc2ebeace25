"""Tests for settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from fedsearch.config.settings import FederationSettings, Settings
from fedsearch.models.query import DEFAULT_FIELDS


class TestFederationSettings:
    def test_defaults(self) -> None:
        fed = FederationSettings()
        assert fed.urls == []
        assert fed.timeout is None
        assert fed.fields == list(DEFAULT_FIELDS)
        assert fed.unsupported_content == "strict"
        assert fed.user_agent == "apm-fedsearch"

    def test_urls_from_json_string(self) -> None:
        fed = FederationSettings(urls='["http://a.example/", "http://b.example/"]')
        assert fed.urls == ["http://a.example/", "http://b.example/"]

    def test_urls_from_comma_separated_string(self) -> None:
        fed = FederationSettings(urls="http://a.example/, http://b.example/")
        assert fed.urls == ["http://a.example/", "http://b.example/"]

    def test_empty_fields_fall_back_to_defaults(self) -> None:
        assert FederationSettings(fields="").fields == list(DEFAULT_FIELDS)

    def test_invalid_policy_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FederationSettings(unsupported_content="sometimes")

    def test_non_positive_timeout_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FederationSettings(timeout=0)


class TestSettings:
    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FEDSEARCH_FEDERATION__TIMEOUT", "12.5")
        monkeypatch.setenv("FEDSEARCH_SERVER__PORT", "9090")
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.federation.timeout == 12.5
        assert settings.server.port == 9090

    def test_from_yaml(self, tmp_path: Path) -> None:
        config = tmp_path / "fedsearch.yaml"
        config.write_text(
            "federation:\n"
            "  urls:\n"
            "    - http://a.example/search?q=foo\n"
            "  timeout: 3\n"
            "  unsupported_content: lenient\n"
            "observability:\n"
            "  log_format: console\n"
        )
        settings = Settings.from_yaml(config)
        assert settings.federation.urls == ["http://a.example/search?q=foo"]
        assert settings.federation.timeout == 3
        assert settings.federation.unsupported_content == "lenient"
        assert settings.observability.log_format == "console"

    def test_env_overrides_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        config = tmp_path / "fedsearch.yaml"
        config.write_text(
            "federation:\n"
            "  urls:\n"
            "    - http://a.example/search?q=foo\n"
            "  timeout: 10\n"
            "server:\n"
            "  port: 7070\n"
        )
        monkeypatch.setenv("FEDSEARCH_FEDERATION__TIMEOUT", "3")

        settings = Settings.from_yaml(config)

        assert settings.federation.timeout == 3
        assert settings.federation.urls == ["http://a.example/search?q=foo"]
        assert settings.server.port == 7070

    def test_yaml_overrides_defaults_only(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("FEDSEARCH_SERVER__PORT", raising=False)
        config = tmp_path / "fedsearch.yaml"
        config.write_text("server:\n  port: 7070\n")

        assert Settings.from_yaml(config).server.port == 7070
        assert Settings().server.port == 8080

    def test_from_yaml_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            Settings.from_yaml(tmp_path / "missing.yaml")
