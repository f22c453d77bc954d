"""
Offline UTXO import: pasted raw transactions and explorer "unspent" listings.
"""

from __future__ import annotations

import re

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from saibun.errors import InvalidTransactionHexError, VoutOutOfRangeError
from saibun.models import UTXO
from saibun.wallet.signing import (
    Transaction,
    TransactionParseError,
    compute_txid,
    deserialize_transaction,
)

_HEX = re.compile(r"^[0-9a-fA-F]+$")

# Anything shorter cannot hold version, counts and locktime
MIN_RAW_TX_HEX_LENGTH = 20


class UtxoImportError(Exception):
    pass


class UnspentEntry(BaseModel):
    txid: str = Field(..., pattern=r"^[0-9a-fA-F]{64}$")
    vout: int = Field(..., ge=0)
    satoshis: int = Field(..., ge=0)
    time: int | None = None
    blockheight: int | None = None
    confirmations: int | None = None


class UnspentListing(BaseModel):
    address: str
    unspent: list[UnspentEntry]

    def to_utxos(self) -> list[UTXO]:
        return [UTXO(txid=u.txid, vout=u.vout, satoshis=u.satoshis) for u in self.unspent]


def clean_hex(raw_tx_hex: str) -> str:
    return re.sub(r"\s", "", raw_tx_hex)


def parse_raw_transaction_hex(raw_tx_hex: str) -> Transaction:
    cleaned = clean_hex(raw_tx_hex)
    try:
        return deserialize_transaction(bytes.fromhex(cleaned))
    except (ValueError, TransactionParseError) as e:
        raise InvalidTransactionHexError(f"Invalid transaction hex format: {e}") from e


def extract_utxo_from_raw_tx(raw_tx_hex: str, vout: int) -> UTXO:
    """
    Build a UTXO descriptor from a pasted raw transaction and an output index.

    Whitespace in the hex is ignored. The txid is computed from the bytes and the
    amount is read from the output, so the descriptor validates by construction.
    """
    cleaned = clean_hex(raw_tx_hex)

    if not cleaned or not _HEX.match(cleaned):
        raise InvalidTransactionHexError(
            "Raw transaction should only contain hexadecimal characters"
        )
    if len(cleaned) < MIN_RAW_TX_HEX_LENGTH:
        raise InvalidTransactionHexError(
            "Transaction hex is too short; paste the complete raw transaction"
        )

    tx = parse_raw_transaction_hex(cleaned)
    txid = compute_txid(bytes.fromhex(cleaned))

    if vout < 0 or vout >= len(tx.outputs):
        raise VoutOutOfRangeError(0, txid, vout, len(tx.outputs))

    utxo = UTXO(txid=txid, vout=vout, satoshis=tx.outputs[vout].value, raw_tx_hex=cleaned)
    logger.debug(f"Extracted UTXO {txid}:{vout} = {utxo.satoshis} sats")
    return utxo


def parse_unspent_json(text: str) -> UnspentListing:
    """Parse an explorer listing: {"address": ..., "unspent": [{txid, vout, satoshis}, ...]}."""
    try:
        listing = UnspentListing.model_validate_json(text)
    except ValidationError as e:
        if any(err["type"] == "json_invalid" for err in e.errors()):
            raise UtxoImportError("Invalid JSON format") from e
        raise UtxoImportError(f"Invalid unspent listing: {e.error_count()} error(s)") from e

    logger.info(f"Imported {len(listing.unspent)} unspent output(s) for {listing.address}")
    return listing
