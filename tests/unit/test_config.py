"""
Unit tests for container options.
"""

import pytest
from pydantic import ValidationError

from scopewire import ContainerOptions
from scopewire.di import Scope
from scopewire.exceptions import ConfigurationError


class TestContainerOptions:
    """Test option defaults and validation."""

    def test_defaults(self):
        options = ContainerOptions()

        assert options.auto_resolve is True
        assert options.default_scope is Scope.SINGLETON
        assert options.record_metrics is True

    def test_frozen(self):
        options = ContainerOptions()
        with pytest.raises(ValidationError):
            options.auto_resolve = False

    def test_scope_from_string(self):
        assert ContainerOptions(default_scope="transient").default_scope is Scope.TRANSIENT


class TestFromEnv:
    """Test reading options from environment variables."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for key in (
            "SCOPEWIRE_AUTO_RESOLVE",
            "SCOPEWIRE_DEFAULT_SCOPE",
            "SCOPEWIRE_RECORD_METRICS",
        ):
            monkeypatch.delenv(key, raising=False)

    def test_defaults_without_env(self):
        assert ContainerOptions.from_env() == ContainerOptions()

    def test_reads_env(self, monkeypatch):
        monkeypatch.setenv("SCOPEWIRE_AUTO_RESOLVE", "false")
        monkeypatch.setenv("SCOPEWIRE_DEFAULT_SCOPE", "Request")
        monkeypatch.setenv("SCOPEWIRE_RECORD_METRICS", "0")

        options = ContainerOptions.from_env()

        assert options.auto_resolve is False
        assert options.default_scope is Scope.REQUEST
        assert options.record_metrics is False

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("SCOPEWIRE_AUTO_RESOLVE", "no")
        assert ContainerOptions.from_env(auto_resolve=True).auto_resolve is True

    def test_invalid_bool(self, monkeypatch):
        monkeypatch.setenv("SCOPEWIRE_RECORD_METRICS", "sometimes")

        with pytest.raises(ConfigurationError) as exc_info:
            ContainerOptions.from_env()

        assert exc_info.value.config_key == "SCOPEWIRE_RECORD_METRICS"
        assert exc_info.value.config_value == "sometimes"

    def test_invalid_scope(self, monkeypatch):
        monkeypatch.setenv("SCOPEWIRE_DEFAULT_SCOPE", "forever")

        with pytest.raises(ConfigurationError) as exc_info:
            ContainerOptions.from_env()

        assert exc_info.value.config_key == "default_scope"
