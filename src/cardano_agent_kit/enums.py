"""
Shared Enums

Single source of truth for enums used across the session, providers,
transaction intents and tool schemas.
"""

from enum import Enum


# ============================================================================
# Blockchain Enums
# ============================================================================


class NetworkType(str, Enum):
    """Blockchain network types"""

    TESTNET = "testnet"
    MAINNET = "mainnet"


class ProviderKind(str, Enum):
    """
    Chain data backends

    - BLOCKFROST: Blockfrost hosted API (api key = project id)
    - OGMIOS: Self-hosted Ogmios node endpoint (api key = endpoint URL)
    """

    BLOCKFROST = "blockfrost"
    OGMIOS = "ogmios"


class KeyKind(str, Enum):
    """Wallet credential variants"""

    MNEMONIC = "mnemonic"
    ROOT_KEY = "root_key"


# ============================================================================
# Transaction Enums
# ============================================================================


class IntentKind(str, Enum):
    """High-level transaction intents"""

    SEND_VALUE = "send_value"
    SEND_ASSET = "send_asset"
    MINT_ASSET = "mint_asset"
    BURN_ASSET = "burn_asset"
    REGISTER_AND_STAKE = "register_and_stake"


class TransactionPhase(str, Enum):
    """
    Transaction pipeline phases

    Lifecycle:
    - BUILD: Unsigned transaction assembled by the chain provider
    - SIGN: Witnesses added by the wallet session
    - SUBMIT: Signed transaction handed to the chain provider
    """

    BUILD = "build"
    SIGN = "sign"
    SUBMIT = "submit"


class MintLabel(str, Enum):
    """Metadata labels for minted assets"""

    NFT = "721"
    FUNGIBLE = "20"
