"""
Unit tests for MessageConfig.
"""

import pytest

from httpmessage.config import ACCEPTED_METHODS, MessageConfig, get_config, set_config


class TestMessageConfig:
    """Tests for MessageConfig values and validation."""

    def test_defaults(self):
        """Test default configuration."""
        config = MessageConfig()

        assert config.protocol_version == "1.1"
        assert config.extra_methods == ()
        assert config.chunk_size == 8192
        assert config.log_level == "WARNING"
        config.validate()

    def test_accepted_methods(self):
        """Test that extra methods extend the table."""
        config = MessageConfig(extra_methods=("trace",))

        assert config.accepted_methods == ACCEPTED_METHODS | {"TRACE"}
        assert "TRACE" not in ACCEPTED_METHODS

    @pytest.mark.parametrize("kwargs", [
        {"protocol_version": "HTTP/1.1"},
        {"protocol_version": "1.1\n"},
        {"extra_methods": ("BAD METHOD",)},
        {"extra_methods": ("PURGE\n",)},
        {"chunk_size": 0},
        {"log_level": "LOUD"},
    ])
    def test_validate_rejects(self, kwargs):
        """Test fail-fast validation."""
        with pytest.raises(ValueError):
            MessageConfig(**kwargs).validate()

    def test_accepted_methods_table_immutable(self):
        """Test that the method table is a frozenset."""
        assert isinstance(ACCEPTED_METHODS, frozenset)


class TestConfigFromEnv:
    """Tests for environment loading."""

    def test_from_env(self, monkeypatch):
        """Test reading every variable."""
        monkeypatch.setenv("HTTPMESSAGE_PROTOCOL_VERSION", "2")
        monkeypatch.setenv("HTTPMESSAGE_EXTRA_METHODS", "TRACE, CONNECT,")
        monkeypatch.setenv("HTTPMESSAGE_CHUNK_SIZE", "1024")
        monkeypatch.setenv("HTTPMESSAGE_LOG_LEVEL", "DEBUG")

        config = MessageConfig.from_env()

        assert config.protocol_version == "2"
        assert config.extra_methods == ("TRACE", "CONNECT")
        assert config.chunk_size == 1024
        assert config.log_level == "DEBUG"

    def test_get_config_loads_env_once(self, monkeypatch):
        """Test lazy loading and caching of the process-wide config."""
        monkeypatch.setenv("HTTPMESSAGE_PROTOCOL_VERSION", "1.0")
        first = get_config()
        monkeypatch.setenv("HTTPMESSAGE_PROTOCOL_VERSION", "2")

        assert first.protocol_version == "1.0"
        assert get_config() is first

    def test_get_config_invalid_env(self, monkeypatch):
        """Test that a bad environment fails on load."""
        monkeypatch.setenv("HTTPMESSAGE_CHUNK_SIZE", "0")

        with pytest.raises(ValueError):
            get_config()

    def test_set_config_validates(self):
        """Test that set_config refuses an invalid config."""
        with pytest.raises(ValueError):
            set_config(MessageConfig(chunk_size=-1))

    def test_set_config_none_reloads(self, monkeypatch):
        """Test that set_config(None) drops the installed config."""
        set_config(MessageConfig(protocol_version="2"))
        assert get_config().protocol_version == "2"

        set_config(None)
        monkeypatch.delenv("HTTPMESSAGE_PROTOCOL_VERSION", raising=False)
        assert get_config().protocol_version == "1.1"
