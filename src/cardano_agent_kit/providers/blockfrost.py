"""
Blockfrost Provider

Chain queries through the Blockfrost REST API and transaction building through
PyCardano's BlockFrost chain context.
"""

import asyncio
import logging
from typing import Any, Callable

import pycardano as pc
from blockfrost import ApiError, ApiUrls, BlockFrostApi

from cardano_agent_kit.enums import NetworkType
from cardano_agent_kit.exceptions import ProviderError

from .base import AccountInfo, ChainProvider


logger = logging.getLogger(__name__)

# Blockfrost project ids are prefixed with the network they were issued for
PROJECT_ID_NETWORKS = ("mainnet", "preprod", "preview")


class BlockfrostProvider(ChainProvider):
    """Blockfrost-backed chain provider"""

    supports_address_transactions = True

    def __init__(self, project_id: str, network: NetworkType = NetworkType.TESTNET, timeout: float = 30.0):
        """
        Initialize Blockfrost provider

        Args:
            project_id: Blockfrost project id (API key)
            network: Network type; a network prefix on the project id takes precedence
                for choosing between the preview and preprod testnets
            timeout: Seconds to wait for each Blockfrost query
        """
        super().__init__(network, timeout)
        self.project_id = project_id

        # Set network configuration
        if network == NetworkType.MAINNET:
            self.blockfrost_network = "mainnet"
        else:
            self.blockfrost_network = next(
                (name for name in PROJECT_ID_NETWORKS[1:] if project_id.startswith(name)),
                "preview",
            )
        self.base_url = getattr(ApiUrls, self.blockfrost_network).value

        self.api = BlockFrostApi(project_id=project_id, base_url=self.base_url)

    @property
    def explorer_network(self) -> str:
        return self.blockfrost_network

    def _create_chain_context(self) -> pc.ChainContext:
        return pc.BlockFrostChainContext(project_id=self.project_id, base_url=self.base_url)

    async def _request(
        self, operation: str, func: Callable[..., Any], *args: Any, allow_missing: bool = False, **kwargs: Any
    ) -> Any:
        """
        Run a blocking Blockfrost call off the event loop

        Args:
            operation: Description used in error messages
            func: BlockFrostApi method
            allow_missing: Return None instead of raising on HTTP 404

        Raises:
            ProviderError: If the Blockfrost request fails or times out
        """
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(func, *args, return_type="json", **kwargs), timeout=self.timeout
            )
        except ApiError as e:
            if allow_missing and e.status_code == 404:
                return None
            raise ProviderError(operation, e) from e
        except asyncio.TimeoutError as e:
            raise ProviderError(operation, TimeoutError(f"no response within {self.timeout}s")) from e

    async def address_has_history(self, address: str) -> bool:
        info = await self._request(f"fetching address {address}", self.api.address, address, allow_missing=True)
        return info is not None

    async def fetch_address_utxos(self, address: str) -> list[dict[str, Any]]:
        utxos = await self._request(
            f"fetching UTxOs for {address}",
            self.api.address_utxos,
            address,
            gather_pages=True,
            allow_missing=True,
        )
        return [
            {
                "tx_hash": utxo["tx_hash"],
                "output_index": utxo["output_index"],
                "address": utxo.get("address", address),
                "amount": utxo["amount"],
            }
            for utxo in utxos or []
        ]

    async def fetch_asset_metadata(self, unit: str) -> dict[str, Any] | None:
        asset = await self._request(f"fetching metadata for {unit}", self.api.asset, unit)

        # On-chain (CIP-25/CIP-68) fields take precedence over registry metadata
        metadata = {**(asset.get("metadata") or {}), **(asset.get("onchain_metadata") or {})}
        return metadata or None

    async def fetch_account_info(self, reward_address: str) -> AccountInfo:
        account = await self._request(
            f"fetching account {reward_address}", self.api.accounts, reward_address, allow_missing=True
        )
        if account is None:
            return AccountInfo(reward_address=reward_address, active=False)

        return AccountInfo(
            reward_address=reward_address,
            active=bool(account.get("active")),
            pool_id=account.get("pool_id"),
        )

    async def fetch_address_transactions(self, address: str) -> list[dict[str, Any]]:
        transactions = await self._request(
            f"fetching transactions for {address}",
            self.api.address_transactions,
            address,
            gather_pages=True,
            allow_missing=True,
        )
        return transactions or []

    async def fetch_tx_info(self, tx_hash: str) -> dict[str, Any]:
        return await self._request(f"fetching transaction {tx_hash}", self.api.transaction, tx_hash)

    async def fetch_tx_utxos(self, tx_hash: str) -> dict[str, Any]:
        return await self._request(f"fetching UTxOs of transaction {tx_hash}", self.api.transaction_utxos, tx_hash)
