"""
Agent Kit Configuration

Settings for the wallet session and chain provider, loaded from environment
variables (prefix ``CARDANO_``) or an optional .env file, plus the ledger
constants the normalizer and transaction builder share.
"""

import logging
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cardano_agent_kit.enums import NetworkType, ProviderKind


# Project root (two levels up from src/cardano_agent_kit/)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# ============================================================================
# Ledger constants
# ============================================================================

NATIVE_UNIT = "lovelace"
NATIVE_ASSET_NAME = "ADA"
POLICY_ID_LENGTH = 56
METADATA_STRING_MAX_BYTES = 64

PAYMENT_KEY_PATH = "m/1852'/1815'/0'/0/0"
STAKE_KEY_PATH = "m/1852'/1815'/0'/2/0"

STAKE_ADDRESS_PREFIXES = {
    NetworkType.TESTNET: "stake_test1",
    NetworkType.MAINNET: "stake1",
}

EXPLORER_URLS = {
    "preview": "https://preview.cardanoscan.io",
    "preprod": "https://preprod.cardanoscan.io",
    "mainnet": "https://cardanoscan.io",
}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(BaseSettings):
    """
    Wallet and provider settings

    Secrets (api key, mnemonic, root key) have no defaults and are only read
    from the environment or .env file.
    """

    provider: ProviderKind = ProviderKind.BLOCKFROST
    api_key: str = ""
    network: NetworkType = NetworkType.TESTNET

    # Import material (mnemonic wins when both are set)
    mnemonic: str | None = None
    root_key: str | None = None

    log_level: str = "INFO"
    request_timeout: float = 30.0

    model_config = SettingsConfigDict(
        env_prefix="CARDANO_",
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def import_material(self) -> list[str] | str | None:
        """Mnemonic words, root key string, or None for a fresh wallet"""
        if self.mnemonic:
            return self.mnemonic.split()
        if self.root_key:
            return self.root_key
        return None


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging for applications embedding the kit

    Args:
        level: Log level name (e.g. "INFO", "DEBUG")
    """
    logging.basicConfig(level=getattr(logging, level.upper()), format=LOG_FORMAT)
