"""
Chain Providers

Backend implementations of the chain provider interface and the factory that
selects one at configuration time.
"""

from cardano_agent_kit.enums import NetworkType, ProviderKind
from cardano_agent_kit.exceptions import ConfigurationError

from .base import AccountInfo, ChainProvider, TransactionDraft
from .blockfrost import BlockfrostProvider
from .ogmios import OgmiosProvider


PROVIDERS: dict[ProviderKind, type[ChainProvider]] = {
    ProviderKind.BLOCKFROST: BlockfrostProvider,
    ProviderKind.OGMIOS: OgmiosProvider,
}


def create_provider(
    provider_kind: ProviderKind | str,
    api_key: str,
    network: NetworkType = NetworkType.TESTNET,
    timeout: float = 30.0,
) -> ChainProvider:
    """
    Create the chain provider for a provider kind

    Args:
        provider_kind: "blockfrost" or "ogmios"
        api_key: Blockfrost project id, or the Ogmios endpoint URL
        network: Network type
        timeout: Per-query timeout in seconds

    Returns:
        ChainProvider instance (no network access happens here)

    Raises:
        ConfigurationError: If the api key is empty or the provider kind is unknown
    """
    if not api_key:
        raise ConfigurationError("API key is required")

    try:
        kind = ProviderKind(provider_kind)
    except ValueError:
        raise ConfigurationError(
            f"Invalid provider type: {provider_kind!r}. Valid providers: {', '.join(k.value for k in ProviderKind)}"
        ) from None

    return PROVIDERS[kind](api_key, network, timeout)


__all__ = [
    "AccountInfo",
    "BlockfrostProvider",
    "ChainProvider",
    "OgmiosProvider",
    "TransactionDraft",
    "create_provider",
]
