"""
Chain Provider Interface

Backend-independent contract the wallet session, transaction orchestrator and
result normalizer use to reach the chain. Each backend supplies queries and a
PyCardano chain context; building and submission are shared here.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any

import pycardano as pc

from cardano_agent_kit.config import EXPLORER_URLS, NATIVE_UNIT
from cardano_agent_kit.enums import NetworkType
from cardano_agent_kit.exceptions import UnsupportedOperationError


logger = logging.getLogger(__name__)


@dataclass
class AccountInfo:
    """Registration and delegation state of a reward address"""

    reward_address: str
    active: bool
    pool_id: str | None = None


@dataclass
class TransactionDraft:
    """
    Unsigned transaction description produced by the per-intent build rules

    Outputs whose coin is zero are topped up to the minimum lovelace when the
    provider builds the transaction.
    """

    change_address: pc.Address
    input_addresses: list[pc.Address]
    outputs: list[pc.TransactionOutput] = field(default_factory=list)
    mint: pc.MultiAsset | None = None
    native_scripts: list[pc.NativeScript] = field(default_factory=list)
    certificates: list[Any] = field(default_factory=list)
    auxiliary_data: pc.AuxiliaryData | None = None


def utxo_to_dict(utxo: pc.UTxO) -> dict[str, Any]:
    """Convert a PyCardano UTxO to the provider-neutral dict shape"""
    amount = [{"unit": NATIVE_UNIT, "quantity": str(utxo.output.amount.coin)}]
    if utxo.output.amount.multi_asset:
        for policy_id, assets in utxo.output.amount.multi_asset.data.items():
            for asset_name, quantity in assets.data.items():
                amount.append(
                    {
                        "unit": policy_id.payload.hex() + asset_name.payload.hex(),
                        "quantity": str(quantity),
                    }
                )

    return {
        "tx_hash": utxo.input.transaction_id.payload.hex(),
        "output_index": utxo.input.index,
        "address": str(utxo.output.address),
        "amount": amount,
    }


class ChainProvider(ABC):
    """
    Base class for chain backends

    Subclasses are constructed without network access; the PyCardano chain
    context is created on first use.
    """

    supports_address_transactions = False

    def __init__(self, network: NetworkType = NetworkType.TESTNET, timeout: float = 30.0):
        self.network = network
        self.timeout = timeout

    @property
    def cardano_network(self) -> pc.Network:
        return pc.Network.MAINNET if self.network == NetworkType.MAINNET else pc.Network.TESTNET

    @property
    def explorer_network(self) -> str:
        """Explorer flavour for this provider ("preview", "preprod" or "mainnet")"""
        return "mainnet" if self.network == NetworkType.MAINNET else "preview"

    def explorer_url(self, tx_hash: str) -> str:
        """
        Get explorer URL for transaction

        Args:
            tx_hash: Transaction ID

        Returns:
            Explorer URL for the transaction
        """
        return f"{EXPLORER_URLS[self.explorer_network]}/transaction/{tx_hash}"

    @cached_property
    def chain_context(self) -> pc.ChainContext:
        """PyCardano chain context used for building and submitting"""
        return self._create_chain_context()

    @abstractmethod
    def _create_chain_context(self) -> pc.ChainContext:
        """Create the backend's PyCardano chain context"""

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @abstractmethod
    async def address_has_history(self, address: str) -> bool:
        """Whether the address has ever appeared on chain"""

    @abstractmethod
    async def fetch_address_utxos(self, address: str) -> list[dict[str, Any]]:
        """
        Fetch unspent outputs at an address

        Returns:
            List of dicts with "tx_hash", "output_index", "address" and
            "amount" ([{"unit", "quantity"}]) keys
        """

    @abstractmethod
    async def fetch_asset_metadata(self, unit: str) -> dict[str, Any] | None:
        """Fetch on-chain / registry metadata for an asset unit"""

    @abstractmethod
    async def fetch_account_info(self, reward_address: str) -> AccountInfo:
        """Fetch registration status of a reward address"""

    async def fetch_address_transactions(self, address: str) -> list[dict[str, Any]]:
        """
        List transactions touching an address

        Returns:
            List of dicts with at least a "tx_hash" key

        Raises:
            UnsupportedOperationError: If the backend cannot list address transactions
        """
        raise UnsupportedOperationError(
            f"Transaction history is not supported by the {type(self).__name__} provider"
        )

    @abstractmethod
    async def fetch_tx_info(self, tx_hash: str) -> dict[str, Any]:
        """Fetch transaction details"""

    @abstractmethod
    async def fetch_tx_utxos(self, tx_hash: str) -> dict[str, Any]:
        """Fetch consumed and produced outputs of a transaction"""

    # ------------------------------------------------------------------
    # Building and submission
    # ------------------------------------------------------------------

    async def build_transaction(self, draft: TransactionDraft) -> bytes:
        """
        Build an unsigned transaction from a draft

        Args:
            draft: Transaction draft from the orchestrator

        Returns:
            CBOR of the unsigned transaction (empty vkey witnesses)
        """
        return await asyncio.to_thread(self._build_transaction, draft)

    def _build_transaction(self, draft: TransactionDraft) -> bytes:
        context = self.chain_context
        builder = pc.TransactionBuilder(context)

        for address in draft.input_addresses:
            builder.add_input_address(address)

        for output in draft.outputs:
            if output.amount.coin == 0:
                output.amount.coin = pc.min_lovelace_post_alonzo(output, context)
            builder.add_output(output)

        if draft.mint:
            builder.mint = draft.mint
        if draft.native_scripts:
            builder.native_scripts = draft.native_scripts
        if draft.certificates:
            builder.certificates = draft.certificates
        if draft.auxiliary_data:
            builder.auxiliary_data = draft.auxiliary_data

        tx_body = builder.build(change_address=draft.change_address)
        unsigned_tx = pc.Transaction(tx_body, builder.build_witness_set(), auxiliary_data=builder.auxiliary_data)

        logger.debug(f"Built unsigned transaction with fee {tx_body.fee}")
        return unsigned_tx.to_cbor()

    async def submit_tx(self, signed_tx: bytes) -> str:
        """
        Submit a signed transaction to the network

        Args:
            signed_tx: CBOR of the signed transaction

        Returns:
            Transaction ID (hex)
        """
        tx = pc.Transaction.from_cbor(signed_tx)
        await asyncio.to_thread(self.chain_context.submit_tx, tx)
        return tx.id.payload.hex()
