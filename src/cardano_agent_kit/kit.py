"""
Cardano Agent Kit

Single entry point composing the wallet session, transaction orchestrator and
result normalizer behind the operation menu agents call.
"""

import logging
from typing import Any, Sequence

from cardano_agent_kit.config import Settings
from cardano_agent_kit.enums import NetworkType, ProviderKind
from cardano_agent_kit.models import AssetRecord, TransactionRecord, TransactionResult
from cardano_agent_kit.normalizer import ResultNormalizer
from cardano_agent_kit.transactions import TransactionOrchestrator
from cardano_agent_kit.wallet import WalletSession


logger = logging.getLogger(__name__)


class CardanoAgentKit:
    """
    Wallet operations for agents

    Example:
        kit = CardanoAgentKit("blockfrost", "preview...", network="testnet")
        address = await kit.get_address()
        result = await kit.send_lovelace(recipient, "2000000")
    """

    def __init__(
        self,
        provider_kind: ProviderKind | str,
        api_key: str,
        network: NetworkType | str | None = None,
        import_material: Sequence[str] | str | None = None,
        timeout: float = 30.0,
    ):
        self._attach(WalletSession(provider_kind, api_key, network, import_material, timeout))

    def _attach(self, session: WalletSession) -> None:
        self.session = session
        self.orchestrator = TransactionOrchestrator(session)
        self.normalizer = ResultNormalizer(session.provider)

    @classmethod
    def from_session(cls, session: WalletSession) -> "CardanoAgentKit":
        """Wrap an existing wallet session"""
        kit = cls.__new__(cls)
        kit._attach(session)
        return kit

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "CardanoAgentKit":
        """Create a kit from environment settings"""
        return cls.from_session(WalletSession.from_settings(settings))

    @property
    def network(self) -> NetworkType:
        return self.session.network

    # ------------------------------------------------------------------
    # Wallet
    # ------------------------------------------------------------------

    async def get_address(self) -> str:
        return await self.session.get_address()

    async def get_balance(self) -> list[AssetRecord]:
        """Wallet holdings across all derived addresses, with asset metadata"""
        raw_balance = await self.session.get_raw_balance()
        return await self.normalizer.normalize_balance(raw_balance)

    async def get_transaction_history(self) -> list[TransactionRecord]:
        """
        Transactions touching the wallet address, with details and UTxOs

        Raises:
            UnsupportedOperationError: If the provider cannot list address transactions
        """
        address = await self.session.get_address()
        tx_refs = await self.session.provider.fetch_address_transactions(address)
        logger.info(f"Found {len(tx_refs)} transactions for {address}")
        return await self.normalizer.normalize_history(tx_refs)

    def get_mnemonic(self) -> list[str] | None:
        return self.session.get_mnemonic()

    def get_private_key(self) -> str | None:
        return self.session.get_private_key()

    @staticmethod
    def create_wallet() -> list[str]:
        return WalletSession.create_wallet()

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def send_lovelace(self, recipient: str, amount: int | str) -> TransactionResult:
        return await self.orchestrator.send_lovelace(recipient, amount)

    async def send_asset(self, recipient: str, unit: str, quantity: int | str) -> TransactionResult:
        return await self.orchestrator.send_asset(recipient, unit, quantity)

    async def mint_asset(
        self,
        asset_name: str,
        metadata: dict[str, Any],
        recipient: str | None = None,
        quantity: int | str = "1",
        label: str = "721",
    ) -> TransactionResult:
        """
        Mint an asset under the wallet's one-signature policy

        Args:
            asset_name: Asset name as text (at most 32 bytes)
            metadata: name, image, mediaType and description (string or list of strings)
            recipient: Receiving address (defaults to the wallet address)
            quantity: Amount to mint
            label: "721" for NFTs, "20" for fungible tokens
        """
        recipient = recipient or await self.session.get_address()
        return await self.orchestrator.mint_asset(asset_name, metadata, recipient, quantity, label)

    async def burn_asset(self, unit: str, quantity: int | str) -> TransactionResult:
        return await self.orchestrator.burn_asset(unit, quantity)

    async def register_and_stake(self, pool_id: str) -> TransactionResult:
        return await self.orchestrator.register_and_stake(pool_id)

    async def sign_and_send(self, unsigned_tx: bytes | str) -> TransactionResult:
        return await self.orchestrator.sign_and_send(unsigned_tx)
