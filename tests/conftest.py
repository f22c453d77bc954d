"""
Test configuration for saibun tests.
"""

from __future__ import annotations

from collections.abc import Callable

import pytest

from saibun.config import Settings
from saibun.models import UTXO
from saibun.wallet.bip32 import HDKey
from saibun.wallet.keys import KeyPair, encode_wif, import_from_wif
from saibun.wallet.signing import Transaction, TxInput, TxOutput, compute_txid

# Address of private key 1 (compressed)
RECIPIENT_ADDRESS = "1BgGZ9tcN4rm9KBzDn7KprQz87SZ26SAMH"

# BIP32 test vector 1 seed
BIP32_SEED = bytes.fromhex("000102030405060708090a0b0c0d0e0f")


@pytest.fixture
def settings() -> Settings:
    return Settings(network="mainnet", dust_threshold=1)


@pytest.fixture
def signing_wif() -> str:
    """Test key (not for production use!)."""
    return encode_wif(bytes.fromhex("c0ffee" * 10 + "c0ff"), compressed=True)


@pytest.fixture
def signing_key(signing_wif: str) -> KeyPair:
    return import_from_wif(signing_wif)


@pytest.fixture
def make_funding_tx() -> Callable[..., bytes]:
    """Factory for source transactions paying the given (value, script) outputs."""

    def _make(outputs: list[tuple[int, bytes]], tag: int = 1) -> bytes:
        tx = Transaction(
            inputs=[TxInput(txid=f"{tag:064x}", vout=0, script_sig=b"\x51")],
            outputs=[TxOutput(value, script) for value, script in outputs],
        )
        return tx.serialize()

    return _make


@pytest.fixture
def make_utxo() -> Callable[..., UTXO]:
    """UTXO descriptor claiming output ``vout`` of ``raw`` with its real amount."""

    def _make(raw: bytes, vout: int, value: int) -> UTXO:
        return UTXO(txid=compute_txid(raw), vout=vout, satoshis=value, raw_tx_hex=raw.hex())

    return _make


@pytest.fixture
def funded_utxo(
    signing_key: KeyPair,
    make_funding_tx: Callable[..., bytes],
    make_utxo: Callable[..., UTXO],
) -> UTXO:
    """A single 10,000 sat output locked to the signing key, at vout 1."""
    raw = make_funding_tx([(50_000, b"\x6a"), (10_000, signing_key.locking_script)])
    return make_utxo(raw, 1, 10_000)


@pytest.fixture
def master_key() -> HDKey:
    return HDKey.from_seed(BIP32_SEED)
