"""
Ogmios Provider

Self-hosted node access through an Ogmios v6 endpoint. Ogmios only exposes
ledger state, so asset metadata, transaction lookup and address history are
not available with this provider.
"""

import asyncio
import logging
from typing import Any
from urllib.parse import urlparse

import httpx
import pycardano as pc

from cardano_agent_kit.enums import NetworkType
from cardano_agent_kit.exceptions import ConfigurationError, ProviderError, UnsupportedOperationError

from .base import AccountInfo, ChainProvider, utxo_to_dict


logger = logging.getLogger(__name__)

SECURE_SCHEMES = ("https", "wss")
DEFAULT_PORT = 1337


class OgmiosProvider(ChainProvider):
    """Ogmios-backed chain provider"""

    def __init__(self, endpoint: str, network: NetworkType = NetworkType.TESTNET, timeout: float = 30.0):
        """
        Initialize Ogmios provider

        Args:
            endpoint: Ogmios URL, e.g. "ws://localhost:1337" or "https://ogmios.example.com"
            network: Network type
            timeout: HTTP timeout in seconds for JSON-RPC queries

        Raises:
            ConfigurationError: If the endpoint is not a usable URL
        """
        super().__init__(network, timeout)

        parsed = urlparse(endpoint)
        if parsed.scheme not in ("http", "https", "ws", "wss") or not parsed.hostname:
            raise ConfigurationError(f"Invalid Ogmios endpoint: {endpoint}")

        self.host = parsed.hostname
        self.secure = parsed.scheme in SECURE_SCHEMES
        self.port = parsed.port or (443 if self.secure else DEFAULT_PORT)
        self.rpc_url = f"{'https' if self.secure else 'http'}://{self.host}:{self.port}{parsed.path}"

    def _create_chain_context(self) -> pc.ChainContext:
        return pc.OgmiosV6ChainContext(
            host=self.host,
            port=self.port,
            secure=self.secure,
            network=self.cardano_network,
        )

    async def _rpc(self, operation: str, method: str, params: dict[str, Any]) -> Any:
        """
        Call an Ogmios JSON-RPC method over HTTP

        Raises:
            ProviderError: On transport failure or a JSON-RPC error response
        """
        payload = {"jsonrpc": "2.0", "method": method, "params": params}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.rpc_url, json=payload)
                response.raise_for_status()
                result = response.json()
        except httpx.HTTPError as e:
            raise ProviderError(operation, e) from e

        if "error" in result:
            raise ProviderError(operation, RuntimeError(result["error"].get("message", result["error"])))
        return result.get("result")

    async def address_has_history(self, address: str) -> bool:
        # Ogmios keeps no history; an address with outputs has been used
        return bool(await self.fetch_address_utxos(address))

    async def fetch_address_utxos(self, address: str) -> list[dict[str, Any]]:
        try:
            utxos = await asyncio.to_thread(self.chain_context.utxos, address)
        except Exception as e:
            raise ProviderError(f"fetching UTxOs for {address}", e) from e
        return [utxo_to_dict(utxo) for utxo in utxos]

    async def fetch_asset_metadata(self, unit: str) -> dict[str, Any] | None:
        raise UnsupportedOperationError("Asset metadata is not available through Ogmios")

    async def fetch_account_info(self, reward_address: str) -> AccountInfo:
        address = pc.Address.from_primitive(reward_address)
        if address.staking_part is None:
            raise ProviderError(f"fetching account {reward_address}", ValueError("not a reward address"))

        credential = address.staking_part.payload.hex()
        result = await self._rpc(
            f"fetching account {reward_address}",
            "queryLedgerState/rewardAccountSummaries",
            {"keys": [credential]},
        )

        # Older v6 releases return a mapping keyed by credential, newer ones a list
        if isinstance(result, dict):
            summary = result.get(credential) or next(iter(result.values()), None)
        else:
            summary = result[0] if result else None

        if not summary:
            return AccountInfo(reward_address=reward_address, active=False)

        delegate = summary.get("delegate") or {}
        return AccountInfo(reward_address=reward_address, active=True, pool_id=delegate.get("id"))

    async def fetch_tx_info(self, tx_hash: str) -> dict[str, Any]:
        raise UnsupportedOperationError("Transaction lookup is not available through Ogmios")

    async def fetch_tx_utxos(self, tx_hash: str) -> dict[str, Any]:
        raise UnsupportedOperationError("Transaction lookup is not available through Ogmios")
