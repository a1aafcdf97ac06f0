"""
Result Normalizer

Turns raw provider data into the caller-facing balance and history records.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable

from cardano_agent_kit.config import NATIVE_ASSET_NAME, NATIVE_UNIT, POLICY_ID_LENGTH
from cardano_agent_kit.exceptions import UnsupportedOperationError
from cardano_agent_kit.models import AssetRecord, TransactionRecord
from cardano_agent_kit.providers import ChainProvider


logger = logging.getLogger(__name__)

TxFetcher = Callable[[str], Awaitable[dict[str, Any]]]


def decode_asset_name(asset_name_hex: str) -> str:
    """
    Decode a hex asset name to text

    Names that are not valid hex are returned unchanged; bytes that are not
    valid UTF-8 become replacement characters.
    """
    try:
        raw = bytes.fromhex(asset_name_hex)
    except ValueError:
        return asset_name_hex
    return raw.decode("utf-8", errors="replace")


def split_unit(unit: str) -> tuple[str, str]:
    """Split an asset unit into (policy_id, asset_name_hex)"""
    return unit[:POLICY_ID_LENGTH], unit[POLICY_ID_LENGTH:]


class ResultNormalizer:
    """Maps provider responses to AssetRecord and TransactionRecord"""

    def __init__(self, provider: ChainProvider):
        self.provider = provider

    async def _asset_metadata(self, unit: str) -> dict | None:
        try:
            return await self.provider.fetch_asset_metadata(unit)
        except Exception as e:
            logger.warning(f"Could not fetch metadata for {unit}: {e}")
            return None

    async def _asset_record(self, raw: dict[str, Any]) -> AssetRecord:
        unit = raw["unit"]
        quantity = str(raw["quantity"])

        if unit == NATIVE_UNIT:
            return AssetRecord(unit=unit, quantity=quantity, policy_id=None, asset_name=NATIVE_ASSET_NAME)

        policy_id, asset_name_hex = split_unit(unit)
        return AssetRecord(
            unit=unit,
            quantity=quantity,
            policy_id=policy_id,
            asset_name=decode_asset_name(asset_name_hex),
            metadata=await self._asset_metadata(unit),
        )

    async def normalize_balance(self, raw_assets: Iterable[dict[str, Any]]) -> list[AssetRecord]:
        """
        Normalize raw balance entries

        Metadata for each non-native asset is fetched concurrently; a failed
        lookup leaves that record's metadata as None.

        Args:
            raw_assets: Entries with "unit" and "quantity" keys

        Returns:
            AssetRecord list in input order
        """
        raw_assets = list(raw_assets)
        if not raw_assets:
            return []
        return list(await asyncio.gather(*(self._asset_record(raw) for raw in raw_assets)))

    async def normalize_history(
        self,
        tx_refs: Iterable[dict[str, Any] | str],
        fetch_detail: TxFetcher | None = None,
        fetch_utxos: TxFetcher | None = None,
    ) -> list[TransactionRecord]:
        """
        Enrich transaction references with their details and UTxOs

        Args:
            tx_refs: Transaction hashes, or dicts with a "tx_hash" key
            fetch_detail: Transaction info fetcher (default: provider.fetch_tx_info)
            fetch_utxos: Transaction UTxO fetcher (default: provider.fetch_tx_utxos)

        Returns:
            TransactionRecord list in input order

        Raises:
            UnsupportedOperationError: If the provider cannot list address transactions
        """
        if not self.provider.supports_address_transactions:
            raise UnsupportedOperationError(
                f"Transaction history is not supported by the {type(self.provider).__name__} provider"
            )

        tx_hashes = [ref if isinstance(ref, str) else ref["tx_hash"] for ref in tx_refs]
        if not tx_hashes:
            return []

        fetch_detail = fetch_detail or self.provider.fetch_tx_info
        fetch_utxos = fetch_utxos or self.provider.fetch_tx_utxos

        async def enrich(tx_hash: str) -> TransactionRecord:
            info, utxos = await asyncio.gather(fetch_detail(tx_hash), fetch_utxos(tx_hash))
            return TransactionRecord.model_validate(
                {
                    "hash": tx_hash,
                    **info,
                    "inputs": utxos.get("inputs", []),
                    "outputs": utxos.get("outputs", []),
                }
            )

        return list(await asyncio.gather(*(enrich(tx_hash) for tx_hash in tx_hashes)))
