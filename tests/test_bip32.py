"""
Tests for BIP32 derivation and xpub address batches.
"""

from __future__ import annotations

import base58
import pytest

from saibun.constants import XPRV_VERSION
from saibun.errors import DerivationFailureError, InvalidRecipientConfigError
from saibun.split.recipients import derive_addresses
from saibun.wallet.bip32 import (
    HARDENED_OFFSET,
    ExtendedPublicKey,
    HDKey,
    chain_index_from_path,
    is_valid_xpub,
    parse_path,
)

# BIP32 test vector 1
MASTER_XPUB = (
    "xpub661MyMwAqRbcFtXgS5sYJABqqG9YLmC4Q1Rdap9gSE8NqtwybGhePY2gZ29ESFjqJoCu1Rupje8YtGqsefD265TMg7usUDFdp6W1EGMcet8"
)
M_0H_1_XPUB = (
    "xpub6ASuArnXKPbfEwhqN6e3mwBcDTgzisQN1wXN9BJcM47sSikHjJf3UFHKkNAWbWMiGj7Wf5uMash7SyYq527Hqck2AxYysAA7xmALppuCkwQ"
)


def address_at(key: HDKey, path: str) -> str:
    return key.derive(path).to_extended_public_key().get_address()


class TestParsePath:
    def test_hardened_and_plain(self):
        assert parse_path("m/44'/145'/0'/0") == [
            44 + HARDENED_OFFSET,
            145 + HARDENED_OFFSET,
            HARDENED_OFFSET,
            0,
        ]

    def test_h_notation(self):
        assert parse_path("m/0h/1") == [HARDENED_OFFSET, 1]

    def test_invalid_segment(self):
        with pytest.raises(ValueError, match="Invalid derivation path segment"):
            parse_path("m/44'/abc")

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("m/44'/145'/0'/0", 0),
            ("m/44'/145'/0'/1", 1),
            ("m/44'/145'/0'", 0),
            ("m/0'/1/5", 1),
            ("m/1/0", 0),
            ("m", 0),
        ],
    )
    def test_chain_index(self, path, expected):
        assert chain_index_from_path(path) == expected


class TestHDKey:
    def test_master_xpub_vector(self, master_key: HDKey):
        assert master_key.to_extended_public_key().to_string() == MASTER_XPUB

    def test_private_derivation_vector(self, master_key: HDKey):
        assert master_key.derive("m/0'/1").to_extended_public_key().to_string() == M_0H_1_XPUB

    def test_derive_requires_m(self, master_key: HDKey):
        with pytest.raises(ValueError):
            master_key.derive("0/1")


class TestExtendedPublicKey:
    def test_roundtrip(self):
        assert ExtendedPublicKey.from_string(MASTER_XPUB).to_string() == MASTER_XPUB

    def test_public_derivation_vector(self, master_key: HDKey):
        parent = master_key.derive("m/0'").to_extended_public_key()
        assert parent.derive_child(1).to_string() == M_0H_1_XPUB

    def test_public_matches_private_derivation(self, master_key: HDKey):
        account = master_key.derive("m/44'/145'/0'")
        xpub = account.to_extended_public_key()

        for index in (0, 1, 7):
            public_child = xpub.derive_child(0).derive_child(index)
            assert public_child.get_address() == address_at(account, f"m/0/{index}")

    def test_hardened_child_rejected(self):
        xpub = ExtendedPublicKey.from_string(MASTER_XPUB)
        with pytest.raises(ValueError, match="hardened"):
            xpub.derive_child(HARDENED_OFFSET)

    def test_private_extended_key_rejected(self, master_key: HDKey):
        data = (
            XPRV_VERSION["mainnet"]
            + bytes(9)
            + master_key.chain_code
            + b"\x00"
            + master_key.private_key.secret
        )
        xprv = base58.b58encode_check(data).decode("ascii")
        assert not is_valid_xpub(xprv)

    def test_is_valid_xpub(self):
        assert is_valid_xpub(MASTER_XPUB)
        assert not is_valid_xpub(MASTER_XPUB[:-1] + "9")
        assert not is_valid_xpub("xpub")


class TestDeriveAddresses:
    @pytest.fixture
    def account(self, master_key: HDKey) -> HDKey:
        return master_key.derive("m/44'/145'/0'")

    @pytest.fixture
    def account_xpub(self, account: HDKey) -> str:
        return account.to_extended_public_key().to_string()

    def test_receive_chain(self, account, account_xpub):
        addresses = derive_addresses(account_xpub, "m/44'/145'/0'/0", 3, 4)
        assert addresses == [address_at(account, f"m/0/{i}") for i in range(3, 7)]

    def test_change_chain(self, account, account_xpub):
        addresses = derive_addresses(account_xpub, "m/44'/145'/0'/1", 0, 2)
        assert addresses == [address_at(account, f"m/1/{i}") for i in range(2)]

    def test_deterministic(self, account_xpub):
        first = derive_addresses(account_xpub, "m/44'/145'/0'/0", 0, 10)
        second = derive_addresses(account_xpub, "m/44'/145'/0'/0", 0, 10)
        assert first == second
        assert len(set(first)) == 10

    def test_testnet_addresses(self, account_xpub):
        addresses = derive_addresses(account_xpub, "m/44'/145'/0'/0", 0, 3, network="testnet")
        assert all(address[0] in "mn" for address in addresses)

    def test_failure_at_index_aborts(self, account_xpub):
        with pytest.raises(DerivationFailureError) as exc_info:
            derive_addresses(account_xpub, "m/44'/145'/0'/0", HARDENED_OFFSET - 1, 2)
        assert exc_info.value.index == HARDENED_OFFSET

    def test_invalid_xpub(self):
        with pytest.raises(InvalidRecipientConfigError):
            derive_addresses("xpubnotreally", "m/44'/145'/0'/0", 0, 1)

    def test_invalid_path(self, account_xpub):
        with pytest.raises(InvalidRecipientConfigError):
            derive_addresses(account_xpub, "m/44'/x", 0, 1)
