"""
Cardano Wallet Session

Binds one credential to a chain provider and network. Handles address
discovery, balance aggregation, signing and submission without exposing
the signing keys.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Sequence

import pycardano as pc

from cardano_agent_kit.config import NATIVE_UNIT, Settings
from cardano_agent_kit.enums import NetworkType, ProviderKind
from cardano_agent_kit.exceptions import (
    CardanoAgentKitError,
    ConfigurationError,
    NoAddressError,
    SigningError,
    SubmissionError,
)
from cardano_agent_kit.keys import (
    KeyMaterial,
    MnemonicKey,
    RootKey,
    SigningHandle,
    generate_mnemonic,
    resolve_key_material,
)
from cardano_agent_kit.providers import ChainProvider, create_provider


logger = logging.getLogger(__name__)

ImportMaterial = Sequence[str] | str | None


def parse_network(network: NetworkType | str | None) -> NetworkType:
    """Resolve a network selector, defaulting to testnet"""
    if network is None:
        return NetworkType.TESTNET
    try:
        return NetworkType(network)
    except ValueError:
        raise ConfigurationError(
            f"Invalid network: {network!r}. Valid networks: {', '.join(n.value for n in NetworkType)}"
        ) from None


class WalletSession:
    """
    Wallet bound to a chain provider

    Key material is validated at construction (word list and checksum, root
    key encoding). The signing keys themselves are derived on first use, so
    constructing a session never touches the network.
    """

    def __init__(
        self,
        provider_kind: ProviderKind | str,
        api_key: str,
        network: NetworkType | str | None = None,
        import_material: ImportMaterial = None,
        timeout: float = 30.0,
    ):
        """
        Initialize wallet session

        Args:
            provider_kind: "blockfrost" or "ogmios"
            api_key: Blockfrost project id, or Ogmios endpoint URL
            network: "testnet" (default) or "mainnet"
            import_material: Mnemonic words, bech32 root key, or None to generate a wallet
            timeout: Provider query timeout in seconds

        Raises:
            ConfigurationError: On empty api key, unknown provider or network, or
                malformed import material (word count, mnemonic checksum,
                root key encoding)
        """
        network_type = parse_network(network)
        provider = create_provider(provider_kind, api_key, network_type, timeout)
        self._bind(provider, network_type, resolve_key_material(import_material))

    def _bind(self, provider: ChainProvider, network: NetworkType, key: KeyMaterial) -> None:
        self.provider = provider
        self.network = network
        self.key = key
        self._signing_handle: SigningHandle | None = None

        logger.info(f"Wallet session ready on {network.value} ({type(provider).__name__}, {key.kind.value})")

    @classmethod
    def from_provider(
        cls,
        provider: ChainProvider,
        network: NetworkType | str | None = None,
        import_material: ImportMaterial = None,
    ) -> "WalletSession":
        """
        Create a session over an existing provider

        The provider is shared, not owned; several sessions may use one provider.
        """
        network_type = parse_network(network) if network is not None else provider.network
        session = cls.__new__(cls)
        session._bind(provider, network_type, resolve_key_material(import_material))
        return session

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "WalletSession":
        """Create a session from environment settings"""
        settings = settings or Settings()
        return cls(
            settings.provider,
            settings.api_key,
            network=settings.network,
            import_material=settings.import_material,
            timeout=settings.request_timeout,
        )

    @staticmethod
    def create_wallet() -> list[str]:
        """Generate a fresh 24-word recovery phrase"""
        return list(generate_mnemonic().words)

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def _handle(self) -> SigningHandle:
        if self._signing_handle is None:
            self._signing_handle = SigningHandle(self.key, self.provider.cardano_network)
        return self._signing_handle

    @property
    def addresses(self) -> list[pc.Address]:
        """Derived addresses: base address first, then enterprise address"""
        return [self._handle.base_address, self._handle.enterprise_address]

    @property
    def payment_key_hash(self) -> pc.VerificationKeyHash:
        return self._handle.payment_key_hash

    @property
    def stake_key_hash(self) -> pc.VerificationKeyHash:
        return self._handle.stake_key_hash

    @property
    def reward_address(self) -> pc.Address:
        return self._handle.reward_address

    def get_mnemonic(self) -> list[str] | None:
        """Mnemonic words, or None when the session was built from a root key"""
        if isinstance(self.key, MnemonicKey):
            return list(self.key.words)
        return None

    def get_private_key(self) -> str | None:
        """Bech32 root key, or None when the session was built from a mnemonic"""
        if isinstance(self.key, RootKey):
            return self.key.encoded
        return None

    # ------------------------------------------------------------------
    # Address discovery
    # ------------------------------------------------------------------

    async def _split_by_history(self) -> dict[bool, list[str]]:
        addresses = [str(address) for address in self.addresses]
        history = await asyncio.gather(*(self.provider.address_has_history(address) for address in addresses))

        split: dict[bool, list[str]] = {True: [], False: []}
        for address, used in zip(addresses, history):
            split[used].append(address)
        return split

    async def get_used_addresses(self) -> list[str]:
        """Derived addresses that have appeared on chain"""
        return (await self._split_by_history())[True]

    async def get_unused_addresses(self) -> list[str]:
        """Derived addresses with no on-chain history"""
        return (await self._split_by_history())[False]

    async def get_address(self) -> str:
        """
        Get the wallet's working address

        Returns:
            First used address, otherwise the first unused address

        Raises:
            NoAddressError: If no address is available
        """
        split = await self._split_by_history()
        if split[True]:
            return split[True][0]
        if split[False]:
            return split[False][0]
        raise NoAddressError("No address available for this wallet")

    async def get_raw_balance(self) -> list[dict[str, str]]:
        """
        Aggregate UTxO amounts across all derived addresses

        Returns:
            List of {"unit", "quantity"} with the native unit first
        """
        utxo_lists = await asyncio.gather(
            *(self.provider.fetch_address_utxos(str(address)) for address in self.addresses)
        )

        totals: dict[str, int] = defaultdict(int)
        totals[NATIVE_UNIT] = 0
        for utxos in utxo_lists:
            for utxo in utxos:
                for amount in utxo["amount"]:
                    totals[amount["unit"]] += int(amount["quantity"])

        if totals[NATIVE_UNIT] == 0 and len(totals) == 1:
            return []
        return [{"unit": unit, "quantity": str(quantity)} for unit, quantity in totals.items()]

    # ------------------------------------------------------------------
    # Signing and submission
    # ------------------------------------------------------------------

    async def sign_tx(self, unsigned_tx: bytes | str) -> bytes:
        """
        Sign a transaction with the wallet keys

        The payment key always signs; the stake key also signs when the body
        carries certificates or withdrawals.

        Args:
            unsigned_tx: Transaction CBOR as bytes or hex string

        Returns:
            CBOR of the signed transaction

        Raises:
            SigningError: If the transaction cannot be decoded or signed
        """
        try:
            tx = pc.Transaction.from_cbor(unsigned_tx)
            body = tx.transaction_body
            include_stake_key = bool(body.certificates or body.withdraws)

            witnesses = self._handle.witnesses(body, include_stake_key=include_stake_key)
            existing = list(tx.transaction_witness_set.vkey_witnesses or [])
            tx.transaction_witness_set.vkey_witnesses = existing + witnesses
        except CardanoAgentKitError:
            raise
        except Exception as e:
            raise SigningError("signing transaction", e) from e

        logger.debug(f"Signed transaction {tx.id.payload.hex()} with {len(witnesses)} witness(es)")
        return tx.to_cbor()

    async def submit_tx(self, signed_tx: bytes | str) -> str:
        """
        Submit a signed transaction

        Returns:
            Transaction hash (hex)

        Raises:
            SubmissionError: If the provider rejects the transaction
        """
        try:
            if isinstance(signed_tx, str):
                signed_tx = bytes.fromhex(signed_tx)
            tx_hash = await self.provider.submit_tx(signed_tx)
        except Exception as e:
            raise SubmissionError("submitting transaction", e) from e

        logger.info(f"Transaction submitted: {tx_hash}")
        return tx_hash

    async def sign_and_submit(self, unsigned_tx: bytes | str) -> str:
        """Sign then submit a transaction, returning its hash"""
        signed = await self.sign_tx(unsigned_tx)
        return await self.submit_tx(signed)
