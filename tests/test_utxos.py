"""
Tests for offline UTXO import.
"""

from __future__ import annotations

import json

import pytest

from saibun.errors import InvalidTransactionHexError, VoutOutOfRangeError
from saibun.split.utxos import (
    UtxoImportError,
    extract_utxo_from_raw_tx,
    parse_raw_transaction_hex,
    parse_unspent_json,
)
from saibun.wallet.signing import compute_txid
from tests.conftest import RECIPIENT_ADDRESS


@pytest.fixture
def raw_tx(make_funding_tx, signing_key) -> bytes:
    return make_funding_tx([(4_200, signing_key.locking_script), (800, b"\x6a")])


class TestExtractUtxo:
    def test_reads_amount_and_txid(self, raw_tx):
        utxo = extract_utxo_from_raw_tx(raw_tx.hex(), 1)

        assert utxo.txid == compute_txid(raw_tx)
        assert utxo.vout == 1
        assert utxo.satoshis == 800
        assert utxo.raw_tx_hex == raw_tx.hex()

    def test_whitespace_stripped(self, raw_tx):
        hex_str = raw_tx.hex()
        pasted = "  " + hex_str[:30] + "\n" + hex_str[30:] + "\t\n"

        utxo = extract_utxo_from_raw_tx(pasted, 0)

        assert utxo.satoshis == 4_200
        assert utxo.raw_tx_hex == hex_str

    def test_non_hex(self):
        with pytest.raises(InvalidTransactionHexError, match="hexadecimal"):
            extract_utxo_from_raw_tx("0100000001xyz", 0)

    def test_too_short(self):
        with pytest.raises(InvalidTransactionHexError, match="too short"):
            extract_utxo_from_raw_tx("01000000", 0)

    def test_unparseable(self, raw_tx):
        with pytest.raises(InvalidTransactionHexError):
            extract_utxo_from_raw_tx(raw_tx.hex()[:-8], 0)

    def test_vout_out_of_range(self, raw_tx):
        with pytest.raises(VoutOutOfRangeError) as exc_info:
            extract_utxo_from_raw_tx(raw_tx.hex(), 2)
        assert exc_info.value.output_count == 2
        assert exc_info.value.txid == compute_txid(raw_tx)

    def test_parse_raw_transaction_hex(self, raw_tx):
        tx = parse_raw_transaction_hex(raw_tx.hex())
        assert [out.value for out in tx.outputs] == [4_200, 800]


class TestParseUnspentJson:
    def test_listing(self):
        text = json.dumps(
            {
                "address": RECIPIENT_ADDRESS,
                "unspent": [
                    {"txid": "ab" * 32, "vout": 0, "satoshis": 1_000, "confirmations": 6},
                    {"txid": "cd" * 32, "vout": 3, "satoshis": 2_500, "time": 1700000000},
                ],
            }
        )

        listing = parse_unspent_json(text)

        assert listing.address == RECIPIENT_ADDRESS
        utxos = listing.to_utxos()
        assert [u.outpoint for u in utxos] == [("ab" * 32, 0), ("cd" * 32, 3)]
        assert [u.satoshis for u in utxos] == [1_000, 2_500]
        assert all(u.raw_tx_hex is None for u in utxos)

    def test_invalid_json(self):
        with pytest.raises(UtxoImportError, match="Invalid JSON format"):
            parse_unspent_json("{not json")

    def test_invalid_entry(self):
        text = json.dumps(
            {"address": RECIPIENT_ADDRESS, "unspent": [{"txid": "short", "vout": 0}]}
        )
        with pytest.raises(UtxoImportError, match="Invalid unspent listing"):
            parse_unspent_json(text)

    def test_empty_listing(self):
        listing = parse_unspent_json(json.dumps({"address": RECIPIENT_ADDRESS, "unspent": []}))
        assert listing.to_utxos() == []
