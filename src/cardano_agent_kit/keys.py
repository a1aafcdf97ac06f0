"""
Wallet Key Material

Credential variants a wallet session can be built from, and derivation of
the signing keys and addresses behind them.
"""

from dataclasses import dataclass
from typing import Sequence

import pycardano as pc
from pycardano.crypto.bech32 import CHARSET, bech32_verify_checksum, convertbits
from pycardano.crypto.bip32 import HDWallet

from cardano_agent_kit.config import PAYMENT_KEY_PATH, STAKE_KEY_PATH
from cardano_agent_kit.enums import KeyKind
from cardano_agent_kit.exceptions import ConfigurationError


MNEMONIC_LENGTHS = (12, 15, 18, 21, 24)
ROOT_KEY_PREFIXES = ("xprv1", "root_xsk1")
ROOT_KEY_LENGTH = 96  # 64-byte extended private key + 32-byte chain code


def decode_bech32(value: str) -> tuple[str, bytes]:
    """
    Decode a bech32 string of any length into its prefix and payload

    Key material is longer than segwit-style decoders accept.

    Raises:
        ValueError: On mixed case, bad characters, bad checksum or padding
    """
    if value.lower() != value and value.upper() != value:
        raise ValueError("mixed case")
    value = value.lower()
    pos = value.rfind("1")
    if pos < 1 or pos + 7 > len(value):
        raise ValueError("missing separator or checksum")

    hrp = value[:pos]
    if any(ord(c) < 33 or ord(c) > 126 for c in hrp):
        raise ValueError("invalid prefix")
    try:
        data = [CHARSET.index(c) for c in value[pos + 1 :]]
    except ValueError:
        raise ValueError("invalid character") from None
    if bech32_verify_checksum(hrp, data) is None:
        raise ValueError("invalid checksum")

    decoded = convertbits(data[:-6], 5, 8, False)
    if decoded is None:
        raise ValueError("invalid padding")
    return hrp, bytes(decoded)


@dataclass(frozen=True)
class MnemonicKey:
    """BIP-39 recovery phrase"""

    words: tuple[str, ...]

    kind = KeyKind.MNEMONIC

    def __post_init__(self):
        if len(self.words) not in MNEMONIC_LENGTHS:
            raise ConfigurationError(
                f"Mnemonic must have one of {MNEMONIC_LENGTHS} words, got {len(self.words)}"
            )
        if not all(isinstance(word, str) and word for word in self.words):
            raise ConfigurationError("Mnemonic words must be non-empty strings")
        if not HDWallet.is_mnemonic(" ".join(self.words)):
            raise ConfigurationError("Invalid mnemonic: unknown word or bad checksum")


@dataclass(frozen=True)
class RootKey:
    """Bech32-encoded root extended private key"""

    encoded: str

    kind = KeyKind.ROOT_KEY

    def __post_init__(self):
        if not self.encoded.startswith(ROOT_KEY_PREFIXES):
            raise ConfigurationError(
                f"Root key must be bech32 with one of the prefixes {ROOT_KEY_PREFIXES}"
            )
        try:
            _, raw = decode_bech32(self.encoded)
        except ValueError as e:
            raise ConfigurationError(f"Invalid root key: {e}") from e
        if len(raw) != ROOT_KEY_LENGTH:
            raise ConfigurationError(f"Invalid root key: expected {ROOT_KEY_LENGTH} bytes, got {len(raw)}")

    @property
    def raw(self) -> bytes:
        return decode_bech32(self.encoded)[1]


KeyMaterial = MnemonicKey | RootKey


def generate_mnemonic() -> MnemonicKey:
    """Generate a fresh 24-word recovery phrase"""
    return MnemonicKey(tuple(HDWallet.generate_mnemonic(strength=256).split()))


def resolve_key_material(import_material: Sequence[str] | str | None) -> KeyMaterial:
    """
    Resolve constructor import material into a key variant

    Args:
        import_material: Mnemonic word sequence, bech32 root key, or None

    Returns:
        MnemonicKey for word sequences, RootKey for strings, and a freshly
        generated MnemonicKey when nothing (or an empty sequence) is given

    Raises:
        ConfigurationError: If the word count, mnemonic checksum or root key
            encoding is invalid
    """
    if isinstance(import_material, str):
        return RootKey(import_material.strip())
    if import_material:
        return MnemonicKey(tuple(import_material))
    return generate_mnemonic()


def to_hdwallet(key: KeyMaterial) -> HDWallet:
    """Build the root HD wallet for an already validated key variant"""
    if isinstance(key, MnemonicKey):
        return HDWallet.from_mnemonic(" ".join(key.words))
    return HDWallet.from_seed(key.raw.hex())


class SigningHandle:
    """
    Account keys derived from a wallet credential

    Holds the payment and stake signing keys; only key hashes and addresses
    are handed out.
    """

    def __init__(self, key: KeyMaterial, network: pc.Network):
        root = to_hdwallet(key)

        self._payment_skey = pc.ExtendedSigningKey.from_hdwallet(root.derive_from_path(PAYMENT_KEY_PATH))
        self._stake_skey = pc.ExtendedSigningKey.from_hdwallet(root.derive_from_path(STAKE_KEY_PATH))

        self.payment_key_hash = self._payment_skey.to_verification_key().hash()
        self.stake_key_hash = self._stake_skey.to_verification_key().hash()

        self.base_address = pc.Address(
            payment_part=self.payment_key_hash,
            staking_part=self.stake_key_hash,
            network=network,
        )
        self.enterprise_address = pc.Address(payment_part=self.payment_key_hash, network=network)
        self.reward_address = pc.Address(staking_part=self.stake_key_hash, network=network)

    def witnesses(self, body: pc.TransactionBody, include_stake_key: bool = False) -> list:
        """
        Create verification key witnesses for a transaction body

        Args:
            body: Transaction body to sign
            include_stake_key: Also sign with the stake key (certificates, withdrawals)

        Returns:
            List of VerificationKeyWitness
        """
        keys = [self._payment_skey]
        if include_stake_key:
            keys.append(self._stake_skey)

        tx_hash = body.hash()
        return [pc.VerificationKeyWitness(skey.to_verification_key(), skey.sign(tx_hash)) for skey in keys]
