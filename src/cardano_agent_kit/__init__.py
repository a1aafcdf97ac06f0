"""
Cardano Agent Kit

Wallet session and transaction orchestration for agents operating a Cardano
wallet: balance and history queries, transfers, minting, burning and staking
over a Blockfrost or Ogmios backend.
"""

from .config import Settings, configure_logging
from .enums import IntentKind, MintLabel, NetworkType, ProviderKind, TransactionPhase
from .exceptions import (
    BuildError,
    CardanoAgentKitError,
    ConfigurationError,
    InvalidStakeAddressError,
    NoAddressError,
    ProviderError,
    SigningError,
    SubmissionError,
    ToolExecutionError,
    TransactionError,
    UnsupportedOperationError,
)
from .intents import (
    BurnAssetIntent,
    MintAssetIntent,
    MintMetadata,
    RegisterAndStakeIntent,
    SendAssetIntent,
    SendValueIntent,
    TransactionIntent,
)
from .keys import MnemonicKey, RootKey
from .kit import CardanoAgentKit
from .models import AssetRecord, TransactionRecord, TransactionResult, UtxoRecord
from .normalizer import ResultNormalizer
from .providers import BlockfrostProvider, ChainProvider, OgmiosProvider, create_provider
from .tools import DEFAULT_ACTIONS, CardanoAction, create_tool_handlers, tool_schemas
from .transactions import TransactionOrchestrator
from .wallet import WalletSession


__all__ = [
    "CardanoAgentKit",
    "WalletSession",
    "TransactionOrchestrator",
    "ResultNormalizer",
    "ChainProvider",
    "BlockfrostProvider",
    "OgmiosProvider",
    "create_provider",
    "MnemonicKey",
    "RootKey",
    "SendValueIntent",
    "SendAssetIntent",
    "MintAssetIntent",
    "MintMetadata",
    "BurnAssetIntent",
    "RegisterAndStakeIntent",
    "TransactionIntent",
    "AssetRecord",
    "TransactionRecord",
    "TransactionResult",
    "UtxoRecord",
    "NetworkType",
    "ProviderKind",
    "IntentKind",
    "MintLabel",
    "TransactionPhase",
    "CardanoAgentKitError",
    "ConfigurationError",
    "NoAddressError",
    "InvalidStakeAddressError",
    "UnsupportedOperationError",
    "ProviderError",
    "TransactionError",
    "BuildError",
    "SigningError",
    "SubmissionError",
    "ToolExecutionError",
    "CardanoAction",
    "DEFAULT_ACTIONS",
    "create_tool_handlers",
    "tool_schemas",
    "Settings",
    "configure_logging",
]
