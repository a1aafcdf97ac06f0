"""
Settings Tests
"""

import logging

import pytest
from pydantic import ValidationError

from cardano_agent_kit import CardanoAgentKit, NetworkType, ProviderKind, Settings, WalletSession, configure_logging


@pytest.fixture
def clean_env(monkeypatch):
    """Remove CARDANO_ variables that could leak in from the shell"""
    for name in ("PROVIDER", "API_KEY", "NETWORK", "MNEMONIC", "ROOT_KEY", "LOG_LEVEL", "REQUEST_TIMEOUT"):
        monkeypatch.delenv(f"CARDANO_{name}", raising=False)
    return monkeypatch


class TestSettings:
    def test_defaults(self, clean_env):
        settings = Settings(_env_file=None)

        assert settings.provider == ProviderKind.BLOCKFROST
        assert settings.network == NetworkType.TESTNET
        assert settings.import_material is None
        assert settings.request_timeout == 30.0

    def test_environment(self, clean_env):
        clean_env.setenv("CARDANO_PROVIDER", "ogmios")
        clean_env.setenv("CARDANO_API_KEY", "ws://localhost:1337")
        clean_env.setenv("CARDANO_NETWORK", "mainnet")
        clean_env.setenv("CARDANO_LOG_LEVEL", "debug")

        settings = Settings(_env_file=None)

        assert settings.provider == ProviderKind.OGMIOS
        assert settings.api_key == "ws://localhost:1337"
        assert settings.network == NetworkType.MAINNET
        assert settings.log_level == "DEBUG"

    def test_mnemonic_wins_over_root_key(self, clean_env, wallet_words, root_key):
        clean_env.setenv("CARDANO_MNEMONIC", " ".join(wallet_words))
        clean_env.setenv("CARDANO_ROOT_KEY", root_key)

        assert Settings(_env_file=None).import_material == wallet_words

    def test_root_key(self, clean_env, root_key):
        clean_env.setenv("CARDANO_ROOT_KEY", root_key)
        assert Settings(_env_file=None).import_material == root_key

    def test_invalid_log_level(self, clean_env):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="LOUD")

    def test_invalid_provider(self, clean_env):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, provider="koios")


class TestFromSettings:
    def test_session_from_settings(self, clean_env, wallet_words):
        settings = Settings(
            _env_file=None,
            api_key="preprodabc",
            mnemonic=" ".join(wallet_words),
            request_timeout=5,
        )

        session = WalletSession.from_settings(settings)

        assert session.get_mnemonic() == wallet_words
        assert session.provider.blockfrost_network == "preprod"
        assert session.provider.timeout == 5

    def test_kit_from_settings(self, clean_env):
        kit = CardanoAgentKit.from_settings(Settings(_env_file=None, api_key="previewabc"))

        assert kit.network == NetworkType.TESTNET
        assert len(kit.get_mnemonic()) == 24
        assert kit.get_private_key() is None


def test_configure_logging(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    configure_logging("debug")

    assert calls[0]["level"] == logging.DEBUG
    assert "%(levelname)s" in calls[0]["format"]
