"""
Transaction Orchestrator Tests

Phase ordering, error mapping and the per-intent build rules.
"""

from unittest.mock import AsyncMock

import pycardano as pc
import pytest
from pycardano.crypto.bech32 import encode as bech32_encode

from cardano_agent_kit import (
    BuildError,
    InvalidStakeAddressError,
    IntentKind,
    MintAssetIntent,
    NetworkType,
    NoAddressError,
    ProviderError,
    SendValueIntent,
    SigningError,
    SubmissionError,
    TransactionOrchestrator,
    WalletSession,
)
from cardano_agent_kit.providers import AccountInfo
from cardano_agent_kit.transactions import parse_pool_id
from tests.factories import AssetFactory
from tests.mocks import FakeChainProvider


POOL_HASH = bytes(range(28))


@pytest.fixture
def signer(session, monkeypatch):
    """Replace signing with a stub returning fixed CBOR"""
    sign_tx = AsyncMock(return_value=b"signed")
    monkeypatch.setattr(session, "sign_tx", sign_tx)
    return sign_tx


def policy_hex(session) -> str:
    return pc.ScriptPubkey(session.payment_key_hash).hash().payload.hex()


class TestPhasePipeline:
    """Tests for build -> sign -> submit sequencing"""

    @pytest.mark.asyncio
    async def test_send_value_result(self, orchestrator, fake_provider, signer, recipient):
        result = await orchestrator.send_lovelace(recipient, "2000000")

        signer.assert_awaited_once_with(b"unsigned")
        assert fake_provider.submitted == [b"signed"]
        assert result.tx_hash == fake_provider.submitted_hash
        assert result.operation == IntentKind.SEND_VALUE
        assert result.network == NetworkType.TESTNET
        assert result.explorer_url == f"https://preview.cardanoscan.io/transaction/{result.tx_hash}"

    @pytest.mark.asyncio
    async def test_build_failure_skips_signing(self, orchestrator, fake_provider, signer, recipient, monkeypatch):
        """Test a build failure never reaches signing"""
        monkeypatch.setattr(
            fake_provider,
            "build_transaction",
            AsyncMock(side_effect=ProviderError("building transaction", RuntimeError("insufficient funds"))),
        )

        with pytest.raises(BuildError) as exc_info:
            await orchestrator.send_lovelace(recipient, "2000000")

        assert f"sending 2000000 lovelace to {recipient}" in str(exc_info.value)
        assert "insufficient funds" in str(exc_info.value)
        signer.assert_not_awaited()
        assert fake_provider.submitted == []

    @pytest.mark.asyncio
    async def test_signing_failure_skips_submission(self, orchestrator, session, fake_provider, recipient, monkeypatch):
        """Test a signing failure never reaches submission"""
        monkeypatch.setattr(
            session, "sign_tx", AsyncMock(side_effect=SigningError("signing transaction", ValueError("bad body")))
        )

        with pytest.raises(SigningError) as exc_info:
            await orchestrator.send_lovelace(recipient, "1000000")

        assert isinstance(exc_info.value.cause, ValueError)
        assert exc_info.value.operation == f"sending 1000000 lovelace to {recipient}"
        assert fake_provider.submitted == []

    @pytest.mark.asyncio
    async def test_submission_failure(self, orchestrator, fake_provider, signer, recipient, monkeypatch):
        monkeypatch.setattr(fake_provider, "submit_tx", AsyncMock(side_effect=RuntimeError("ValueNotConserved")))

        with pytest.raises(SubmissionError, match="ValueNotConserved") as exc_info:
            await orchestrator.send_lovelace(recipient, "1000000")

        assert exc_info.value.phase == "submit"

    @pytest.mark.asyncio
    async def test_no_address_propagates(self, orchestrator, session, signer, recipient, monkeypatch):
        monkeypatch.setattr(session, "get_address", AsyncMock(side_effect=NoAddressError("no address")))

        with pytest.raises(NoAddressError):
            await orchestrator.send_lovelace(recipient, "1000000")
        signer.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_parameters_are_build_errors(self, orchestrator, fake_provider, recipient):
        with pytest.raises(BuildError, match="validating send_value request"):
            await orchestrator.send_lovelace(recipient, "-5")
        assert fake_provider.drafts == []

    @pytest.mark.asyncio
    async def test_invalid_recipient(self, orchestrator, fake_provider, signer):
        with pytest.raises(BuildError):
            await orchestrator.execute(SendValueIntent(recipient="addr_test1invalid", amount="1000000"))
        assert fake_provider.drafts == []

    @pytest.mark.asyncio
    async def test_execute_accepts_dict(self, orchestrator, fake_provider, signer, recipient):
        result = await orchestrator.execute({"kind": "send_value", "recipient": recipient, "amount": "1500000"})

        assert result.operation == IntentKind.SEND_VALUE
        assert fake_provider.drafts[0].outputs[0].amount.coin == 1500000

    @pytest.mark.asyncio
    async def test_sign_and_send(self, orchestrator, fake_provider, signer):
        result = await orchestrator.sign_and_send("84a0")

        signer.assert_awaited_once_with("84a0")
        assert result.operation is None
        assert result.tx_hash == fake_provider.submitted_hash


class TestTransferRules:
    """Tests for send value and send asset drafts"""

    @pytest.mark.asyncio
    async def test_inputs_and_change_at_session_address(self, orchestrator, session, fake_provider, signer, recipient):
        await orchestrator.send_lovelace(recipient, 3000000)

        draft = fake_provider.drafts[0]
        assert str(draft.change_address) == str(session.addresses[0])
        assert [str(a) for a in draft.input_addresses] == [str(session.addresses[0])]
        assert len(draft.outputs) == 1
        assert str(draft.outputs[0].address) == recipient
        assert draft.outputs[0].amount.coin == 3000000

    @pytest.mark.asyncio
    async def test_send_asset_output(self, orchestrator, fake_provider, signer, recipient):
        policy_id = AssetFactory.create_policy_id()
        unit = AssetFactory.create_unit("Token", policy_id)

        result = await orchestrator.send_asset(recipient, unit, "5")

        output = fake_provider.drafts[0].outputs[0]
        assert result.operation == IntentKind.SEND_ASSET
        assert output.amount.coin == 0  # topped up to the minimum when built
        assert output.amount.multi_asset == pc.MultiAsset.from_primitive(
            {bytes.fromhex(policy_id): {b"Token": 5}}
        )


class TestMintAndBurn:
    """Tests for mint and burn drafts"""

    @pytest.mark.asyncio
    async def test_mint_uses_wallet_policy(self, orchestrator, session, fake_provider, signer, recipient):
        metadata = AssetFactory.create_mint_metadata()
        result = await orchestrator.mint_asset("TestNFT", metadata, recipient)

        draft = fake_provider.drafts[0]
        policy = pc.ScriptPubkey(session.payment_key_hash).hash()
        expected = pc.MultiAsset.from_primitive({policy.payload: {b"TestNFT": 1}})

        assert result.operation == IntentKind.MINT_ASSET
        assert draft.native_scripts == [pc.ScriptPubkey(session.payment_key_hash)]
        assert draft.mint == expected
        assert str(draft.outputs[0].address) == recipient
        assert draft.outputs[0].amount.multi_asset == expected

    @pytest.mark.asyncio
    async def test_mint_metadata_label(self, orchestrator, session, fake_provider, signer, recipient):
        """Test fungible mints put metadata under label 20 with chunked descriptions"""
        description = "A fungible test token whose description is deliberately longer than sixty-four bytes"
        await orchestrator.mint_asset(
            "Fungible", AssetFactory.create_mint_metadata(description), recipient, quantity="1000", label="20"
        )

        metadata = fake_provider.drafts[0].auxiliary_data.data.metadata.data
        asset_fields = metadata[20][policy_hex(session)]["Fungible"]

        assert 721 not in metadata
        assert asset_fields["mediaType"] == "image/png"
        assert isinstance(asset_fields["description"], list)
        assert "".join(asset_fields["description"]).replace(" ", "") == description.replace(" ", "")
        assert all(len(chunk.encode("utf-8")) <= 64 for chunk in asset_fields["description"])

    @pytest.mark.asyncio
    async def test_mint_requires_metadata_fields(self, orchestrator, fake_provider, recipient):
        with pytest.raises(BuildError):
            await orchestrator.mint_asset("TestNFT", {"name": "No image"}, recipient)
        assert fake_provider.drafts == []

    def test_mint_intent_defaults(self, recipient):
        intent = MintAssetIntent(
            asset_name="TestNFT", recipient=recipient, metadata=AssetFactory.create_mint_metadata()
        )
        assert intent.quantity == "1"
        assert intent.label.value == "721"

    @pytest.mark.asyncio
    async def test_burn_own_policy(self, orchestrator, session, fake_provider, signer):
        policy = policy_hex(session)
        result = await orchestrator.burn_asset(AssetFactory.create_unit("TestNFT", policy), "1")

        draft = fake_provider.drafts[0]
        assert result.operation == IntentKind.BURN_ASSET
        assert draft.mint == pc.MultiAsset.from_primitive({bytes.fromhex(policy): {b"TestNFT": -1}})
        assert draft.native_scripts == [pc.ScriptPubkey(session.payment_key_hash)]
        assert draft.outputs == []

    @pytest.mark.asyncio
    async def test_burn_foreign_policy(self, orchestrator, fake_provider, signer):
        with pytest.raises(BuildError, match="is not this wallet's minting policy"):
            await orchestrator.burn_asset(AssetFactory.create_unit("Other"), "1")

        assert fake_provider.drafts == []
        signer.assert_not_awaited()


class TestRegisterAndStake:
    """Tests for stake registration and delegation drafts"""

    @pytest.mark.asyncio
    async def test_unregistered_adds_registration(self, orchestrator, session, fake_provider, signer):
        await orchestrator.register_and_stake(POOL_HASH.hex())

        certificates = fake_provider.drafts[0].certificates
        assert [type(c) for c in certificates] == [pc.StakeRegistration, pc.StakeDelegation]
        assert certificates[1].pool_keyhash == pc.PoolKeyHash(POOL_HASH)
        assert fake_provider.account_queries == [str(session.reward_address)]

    @pytest.mark.asyncio
    async def test_registered_only_delegates(self, orchestrator, session, fake_provider, signer):
        """Test an already-registered reward address is not registered again"""
        reward_address = str(session.reward_address)
        fake_provider.accounts[reward_address] = AccountInfo(reward_address=reward_address, active=True)

        await orchestrator.register_and_stake(POOL_HASH.hex())
        await orchestrator.register_and_stake(POOL_HASH.hex())

        for draft in fake_provider.drafts:
            assert [type(c) for c in draft.certificates] == [pc.StakeDelegation]

    @pytest.mark.asyncio
    async def test_bech32_pool_id(self, orchestrator, fake_provider, signer):
        pool_id = bech32_encode("pool", POOL_HASH)
        await orchestrator.register_and_stake(pool_id)

        assert fake_provider.drafts[0].certificates[-1].pool_keyhash == pc.PoolKeyHash(POOL_HASH)

    @pytest.mark.asyncio
    async def test_invalid_pool_id(self, orchestrator, fake_provider, signer):
        with pytest.raises(BuildError, match="Invalid pool id"):
            await orchestrator.register_and_stake("pool1notapool")
        assert fake_provider.drafts == []

    @pytest.mark.asyncio
    async def test_network_mismatch(self, wallet_words, monkeypatch):
        """Test a reward address from another network is rejected unchanged"""
        provider = FakeChainProvider(NetworkType.MAINNET)
        session = WalletSession.from_provider(provider, network="testnet", import_material=wallet_words)
        monkeypatch.setattr(session, "sign_tx", AsyncMock(return_value=b"signed"))

        with pytest.raises(InvalidStakeAddressError, match="stake_test1"):
            await TransactionOrchestrator(session).register_and_stake(POOL_HASH.hex())

        assert provider.account_queries == []
        assert provider.drafts == []


class TestParsePoolId:
    def test_hex(self):
        assert parse_pool_id(POOL_HASH.hex()) == pc.PoolKeyHash(POOL_HASH)

    def test_wrong_length(self):
        with pytest.raises(ValueError):
            parse_pool_id("abcd")

    def test_bech32(self):
        assert parse_pool_id(bech32_encode("pool", POOL_HASH)) == pc.PoolKeyHash(POOL_HASH)

    @pytest.mark.parametrize("pool_id", ["pool1notapool", "pool1", "zz" * 28])
    def test_undecodable(self, pool_id):
        with pytest.raises(ValueError, match="Invalid pool id"):
            parse_pool_id(pool_id)

    def test_bech32_wrong_length(self):
        with pytest.raises(ValueError, match="Invalid pool id"):
            parse_pool_id(bech32_encode("pool", bytes(32)))
