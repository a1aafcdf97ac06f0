"""
Transaction Orchestrator

Runs a transaction intent through its build, sign and submit phases. Each
phase consumes the previous phase's output; a failure stops the pipeline and
surfaces as the phase's error type with the intent's description attached.
"""

import logging
from typing import Any, Awaitable, Callable

import pycardano as pc
from pydantic import TypeAdapter, ValidationError

from cardano_agent_kit.config import POLICY_ID_LENGTH, STAKE_ADDRESS_PREFIXES
from cardano_agent_kit.enums import IntentKind, TransactionPhase
from cardano_agent_kit.exceptions import (
    BuildError,
    InvalidStakeAddressError,
    NoAddressError,
    SigningError,
    SubmissionError,
    TransactionError,
)
from cardano_agent_kit.intents import (
    BurnAssetIntent,
    MintAssetIntent,
    RegisterAndStakeIntent,
    SendAssetIntent,
    SendValueIntent,
    TransactionIntent,
    describe_intent,
)
from cardano_agent_kit.keys import decode_bech32
from cardano_agent_kit.metadata import prepare_mint_metadata
from cardano_agent_kit.models import TransactionResult
from cardano_agent_kit.normalizer import split_unit
from cardano_agent_kit.providers import ChainProvider, TransactionDraft
from cardano_agent_kit.wallet import WalletSession


logger = logging.getLogger(__name__)

PHASE_ERRORS: dict[TransactionPhase, type[TransactionError]] = {
    TransactionPhase.BUILD: BuildError,
    TransactionPhase.SIGN: SigningError,
    TransactionPhase.SUBMIT: SubmissionError,
}

# Raised while planning and surfaced to the caller unchanged
PASSTHROUGH_ERRORS = (NoAddressError, InvalidStakeAddressError)

POOL_ID_PREFIX = "pool1"
POOL_KEY_HASH_SIZE = 28
ASSET_NAME_MAX_BYTES = 32

intent_adapter = TypeAdapter(TransactionIntent)


def parse_pool_id(pool_id: str) -> pc.PoolKeyHash:
    """
    Parse a pool id given as bech32 (pool1...) or hex key hash

    Raises:
        ValueError: If the id does not decode to a 28-byte key hash
    """
    try:
        if pool_id.startswith(POOL_ID_PREFIX):
            _, raw = decode_bech32(pool_id)
        else:
            raw = bytes.fromhex(pool_id)
    except ValueError:
        raise ValueError(f"Invalid pool id: {pool_id}") from None

    if len(raw) != POOL_KEY_HASH_SIZE:
        raise ValueError(f"Invalid pool id: {pool_id}")
    return pc.PoolKeyHash(bytes(raw))


class TransactionOrchestrator:
    """Turns transaction intents into submitted transactions for one wallet session"""

    def __init__(self, session: WalletSession):
        self.session = session
        self._planners: dict[str, Callable[[Any, TransactionDraft], Awaitable[None]]] = {
            IntentKind.SEND_VALUE.value: self._plan_send_value,
            IntentKind.SEND_ASSET.value: self._plan_send_asset,
            IntentKind.MINT_ASSET.value: self._plan_mint_asset,
            IntentKind.BURN_ASSET.value: self._plan_burn_asset,
            IntentKind.REGISTER_AND_STAKE.value: self._plan_register_and_stake,
        }

    @property
    def provider(self) -> ChainProvider:
        return self.session.provider

    # ------------------------------------------------------------------
    # Phase pipeline
    # ------------------------------------------------------------------

    async def _run_phase(
        self, phase: TransactionPhase, operation: str, step: Callable[[Any], Awaitable[Any]], value: Any
    ) -> Any:
        logger.debug(f"{phase.value}: {operation}")
        try:
            return await step(value)
        except PASSTHROUGH_ERRORS:
            raise
        except Exception as e:
            cause = e.cause if isinstance(e, TransactionError) else e
            logger.error(f"Transaction {phase.value} failed while {operation}: {cause}")
            raise PHASE_ERRORS[phase](operation, cause) from e

    async def execute(self, intent: TransactionIntent | dict[str, Any]) -> TransactionResult:
        """
        Build, sign and submit a transaction for an intent

        Args:
            intent: Transaction intent, or a dict with a "kind" discriminator

        Returns:
            TransactionResult with the hash and explorer link

        Raises:
            BuildError, SigningError, SubmissionError: On failure of that phase
            NoAddressError: If the wallet has no usable address
            InvalidStakeAddressError: If the reward address does not match the network
        """
        if isinstance(intent, dict):
            intent = self._validate(intent)

        operation = describe_intent(intent)
        logger.info(f"Starting transaction: {operation}")

        unsigned = await self._run_phase(TransactionPhase.BUILD, operation, self.build, intent)
        signed = await self._run_phase(TransactionPhase.SIGN, operation, self.session.sign_tx, unsigned)
        tx_hash = await self._run_phase(TransactionPhase.SUBMIT, operation, self.session.submit_tx, signed)

        logger.info(f"Transaction {tx_hash} submitted: {operation}")
        return self._result(tx_hash, IntentKind(intent.kind))

    async def sign_and_send(self, unsigned_tx: bytes | str) -> TransactionResult:
        """Sign and submit an externally built transaction"""
        operation = "signing and submitting transaction"
        signed = await self._run_phase(TransactionPhase.SIGN, operation, self.session.sign_tx, unsigned_tx)
        tx_hash = await self._run_phase(TransactionPhase.SUBMIT, operation, self.session.submit_tx, signed)
        return self._result(tx_hash, None)

    def _result(self, tx_hash: str, operation: IntentKind | None) -> TransactionResult:
        return TransactionResult(
            tx_hash=tx_hash,
            operation=operation,
            network=self.session.network,
            explorer_url=self.provider.explorer_url(tx_hash),
        )

    def _validate(self, fields: dict[str, Any]) -> TransactionIntent:
        try:
            return intent_adapter.validate_python(fields)
        except ValidationError as e:
            raise BuildError(f"validating {fields.get('kind', 'transaction')} request", e) from e

    # ------------------------------------------------------------------
    # Build phase
    # ------------------------------------------------------------------

    async def plan(self, intent: TransactionIntent) -> TransactionDraft:
        """
        Plan the unsigned transaction for an intent

        Inputs are taken from, and change returned to, the session address.
        """
        address = pc.Address.from_primitive(await self.session.get_address())
        draft = TransactionDraft(change_address=address, input_addresses=[address])
        await self._planners[intent.kind](intent, draft)
        return draft

    async def build(self, intent: TransactionIntent) -> bytes:
        """Plan and build the unsigned transaction CBOR for an intent"""
        draft = await self.plan(intent)
        return await self.provider.build_transaction(draft)

    @property
    def minting_script(self) -> pc.ScriptPubkey:
        """One-signature native script of the wallet's payment key"""
        return pc.ScriptPubkey(self.session.payment_key_hash)

    async def _plan_send_value(self, intent: SendValueIntent, draft: TransactionDraft) -> None:
        recipient = pc.Address.from_primitive(intent.recipient)
        draft.outputs.append(pc.TransactionOutput(recipient, pc.Value(int(intent.amount))))

    async def _plan_send_asset(self, intent: SendAssetIntent, draft: TransactionDraft) -> None:
        recipient = pc.Address.from_primitive(intent.recipient)
        policy_id, asset_name = split_unit(intent.unit)

        asset = pc.MultiAsset.from_primitive(
            {bytes.fromhex(policy_id): {bytes.fromhex(asset_name): int(intent.quantity)}}
        )
        draft.outputs.append(pc.TransactionOutput(recipient, pc.Value(0, asset)))

    async def _plan_mint_asset(self, intent: MintAssetIntent, draft: TransactionDraft) -> None:
        recipient = pc.Address.from_primitive(intent.recipient)
        asset_name = intent.asset_name.encode("utf-8")
        if len(asset_name) > ASSET_NAME_MAX_BYTES:
            raise ValueError(f"Asset name exceeds {ASSET_NAME_MAX_BYTES} bytes: {intent.asset_name}")

        script = self.minting_script
        policy_id = script.hash()
        quantity = int(intent.quantity)

        draft.mint = pc.MultiAsset.from_primitive({policy_id.payload: {asset_name: quantity}})
        draft.native_scripts.append(script)

        minted = pc.MultiAsset.from_primitive({policy_id.payload: {asset_name: quantity}})
        draft.outputs.append(pc.TransactionOutput(recipient, pc.Value(0, minted)))

        draft.auxiliary_data = prepare_mint_metadata(
            policy_id.payload.hex(),
            intent.asset_name,
            intent.metadata.model_dump(by_alias=True),
            intent.label,
        )

    async def _plan_burn_asset(self, intent: BurnAssetIntent, draft: TransactionDraft) -> None:
        script = self.minting_script
        policy_id = script.hash()

        unit_policy_id, asset_name = split_unit(intent.unit)
        if len(unit_policy_id) != POLICY_ID_LENGTH or unit_policy_id != policy_id.payload.hex():
            raise ValueError(f"Policy {unit_policy_id} is not this wallet's minting policy {policy_id.payload.hex()}")

        draft.mint = pc.MultiAsset.from_primitive(
            {policy_id.payload: {bytes.fromhex(asset_name): -int(intent.quantity)}}
        )
        draft.native_scripts.append(script)

    async def _plan_register_and_stake(self, intent: RegisterAndStakeIntent, draft: TransactionDraft) -> None:
        reward_address = str(self.session.reward_address)
        prefix = STAKE_ADDRESS_PREFIXES[self.session.network]
        if not reward_address.startswith(prefix):
            raise InvalidStakeAddressError(
                f"Reward address {reward_address} does not match the {self.session.network.value} prefix {prefix}"
            )

        pool_hash = parse_pool_id(intent.pool_id)
        credential = pc.StakeCredential(self.session.stake_key_hash)

        account = await self.provider.fetch_account_info(reward_address)
        if account.active:
            logger.info(f"Reward address {reward_address} already registered, delegating only")
        else:
            draft.certificates.append(pc.StakeRegistration(credential))

        draft.certificates.append(pc.StakeDelegation(credential, pool_keyhash=pool_hash))

    # ------------------------------------------------------------------
    # Convenience operations
    # ------------------------------------------------------------------

    async def send_lovelace(self, recipient: str, amount: int | str) -> TransactionResult:
        return await self.execute(self._validate({"kind": "send_value", "recipient": recipient, "amount": str(amount)}))

    async def send_asset(self, recipient: str, unit: str, quantity: int | str) -> TransactionResult:
        return await self.execute(
            self._validate({"kind": "send_asset", "recipient": recipient, "unit": unit, "quantity": str(quantity)})
        )

    async def mint_asset(
        self,
        asset_name: str,
        metadata: dict[str, Any],
        recipient: str,
        quantity: int | str = "1",
        label: str = "721",
    ) -> TransactionResult:
        return await self.execute(
            self._validate(
                {
                    "kind": "mint_asset",
                    "asset_name": asset_name,
                    "metadata": metadata,
                    "recipient": recipient,
                    "quantity": str(quantity),
                    "label": label,
                }
            )
        )

    async def burn_asset(self, unit: str, quantity: int | str) -> TransactionResult:
        return await self.execute(self._validate({"kind": "burn_asset", "unit": unit, "quantity": str(quantity)}))

    async def register_and_stake(self, pool_id: str) -> TransactionResult:
        return await self.execute(self._validate({"kind": "register_and_stake", "pool_id": pool_id}))
