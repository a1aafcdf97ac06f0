"""
Pytest configuration

Shared fixtures: wallet credentials, an in-memory chain provider and wallet
sessions bound to it.
"""

import os
from pathlib import Path

import pycardano as pc
import pytest
from dotenv import load_dotenv

from cardano_agent_kit import CardanoAgentKit, TransactionOrchestrator, WalletSession
from tests.factories import WalletFactory
from tests.mocks import FakeChainProvider, NoHistoryChainProvider


# Load test environment variables
@pytest.fixture(scope="session", autouse=True)
def load_env():
    """Load environment variables for testing"""
    env_file = Path(__file__).parent.parent / ".env"
    if env_file.exists():
        load_dotenv(env_file)

    yield


# Wallet fixtures
@pytest.fixture(scope="session")
def wallet_words():
    """Freshly generated 24-word mnemonic used for key derivation"""
    return WalletSession.create_wallet()


@pytest.fixture(scope="session")
def root_key(wallet_words):
    """Bech32 root key derived from the session mnemonic"""
    return WalletFactory.create_root_key(wallet_words)


@pytest.fixture
def fake_provider():
    """In-memory testnet chain provider"""
    return FakeChainProvider()


@pytest.fixture
def no_history_provider():
    """Chain provider without address-transaction listing"""
    return NoHistoryChainProvider()


@pytest.fixture
def session(fake_provider, wallet_words):
    """Wallet session bound to the in-memory provider"""
    return WalletSession.from_provider(fake_provider, import_material=wallet_words)


@pytest.fixture
def orchestrator(session):
    return TransactionOrchestrator(session)


@pytest.fixture
def kit(session):
    return CardanoAgentKit.from_session(session)


@pytest.fixture(scope="session")
def recipient():
    """Base address of an unrelated testnet wallet"""
    other = WalletSession.from_provider(FakeChainProvider())
    return str(other.addresses[0])


@pytest.fixture
def unsigned_tx_factory(session):
    """Build unsigned transaction CBOR paying back to the session's base address"""

    def factory(certificates=None) -> bytes:
        body = pc.TransactionBody(
            inputs=[pc.TransactionInput(pc.TransactionId(bytes.fromhex("a" * 64)), 0)],
            outputs=[pc.TransactionOutput(session.addresses[0], 2_000_000)],
            fee=170_000,
            certificates=certificates,
        )
        return pc.Transaction(body, pc.TransactionWitnessSet()).to_cbor()

    return factory


# Network fixtures
@pytest.fixture
def blockfrost_api_key():
    """Blockfrost project id from environment"""
    api_key = os.getenv("blockfrost_api_key")
    if not api_key:
        pytest.skip("blockfrost_api_key not configured in environment")
    return api_key
