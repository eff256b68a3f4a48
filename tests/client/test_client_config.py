"""
Tests for ClientConfig validation and environment overrides.
"""

import pytest

from coinbase_client import ClientConfig, DEFAULT_BASE_URL


class TestClientConfig:

    def test_defaults(self):
        config = ClientConfig()

        assert config.base_url == DEFAULT_BASE_URL == "https://coinbase.com/api/v1/"
        assert config.timeout == 30.0
        assert config.refresh_margin == 60.0
        assert not config.debug

    @pytest.mark.parametrize("overrides", [
        {"timeout": 0},
        {"refresh_margin": -1},
        {"base_url": "https://coinbase.com/api/v1"},
    ])
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(ValueError):
            ClientConfig(**overrides)

    def test_from_env(self):
        config = ClientConfig.from_env(environ={
            "COINBASE_BASE_URL": "https://sandbox.coinbase.com/api/v1/",
            "COINBASE_TIMEOUT": "5",
            "COINBASE_REFRESH_MARGIN": "120",
            "COINBASE_DEBUG": "true",
            "UNRELATED": "x",
        })

        assert config.base_url == "https://sandbox.coinbase.com/api/v1/"
        assert config.timeout == 5.0
        assert config.refresh_margin == 120.0
        assert config.debug

    def test_from_env_custom_prefix(self):
        config = ClientConfig.from_env(prefix="CB_", environ={"CB_USER_AGENT": "tests/1.0"})

        assert config.user_agent == "tests/1.0"
        assert config.timeout == 30.0

    def test_from_env_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("COINBASE_TIMEOUT", "12.5")

        assert ClientConfig.from_env().timeout == 12.5
