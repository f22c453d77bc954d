"""
UTXO validation against source transaction bytes.

This is the anti-tamper gate. The signature digest commits to the spent
output's script and amount, so signing against a forged amount produces an
invalid or fund-losing transaction. Every claimed input must prove, before any
other stage runs, that:
1. Its full source transaction is present
2. The source bytes hash to the claimed txid
3. The claimed output index exists in the source transaction
4. The claimed amount equals the amount recorded at that index
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from loguru import logger

from saibun.errors import (
    DuplicateInputError,
    InvalidTransactionHexError,
    MissingSourceBytesError,
    SatoshiMismatchError,
    TxidMismatchError,
    VoutOutOfRangeError,
)
from saibun.models import UTXO
from saibun.wallet.signing import (
    Transaction,
    TransactionParseError,
    TxOutput,
    compute_txid,
    deserialize_transaction,
)


@dataclass(frozen=True)
class ValidatedInput:
    """A UTXO whose claims were proven against its parsed source transaction."""

    index: int
    utxo: UTXO
    source_tx: Transaction

    @property
    def source_output(self) -> TxOutput:
        return self.source_tx.outputs[self.utxo.vout]

    @property
    def satoshis(self) -> int:
        return self.source_output.value


def validate_utxo(utxo: UTXO, index: int = 0) -> ValidatedInput:
    """
    Prove one claimed input against its source transaction bytes.

    Args:
        utxo: The claimed input
        index: Position of the input in the build (reported in errors)

    Returns:
        ValidatedInput holding the parsed source transaction

    Raises:
        MissingSourceBytesError, InvalidTransactionHexError, TxidMismatchError,
        VoutOutOfRangeError, SatoshiMismatchError
    """
    if not utxo.raw_tx_hex or not utxo.raw_tx_hex.strip():
        raise MissingSourceBytesError(index, utxo.txid, utxo.vout)

    try:
        raw = utxo.raw_tx_bytes
    except ValueError as e:
        raise InvalidTransactionHexError(f"not hexadecimal ({e})", input_index=index) from e
    assert raw is not None

    try:
        source_tx = deserialize_transaction(raw)
    except TransactionParseError as e:
        raise InvalidTransactionHexError(str(e), input_index=index) from e

    parsed_txid = compute_txid(raw)
    if parsed_txid != utxo.txid:
        raise TxidMismatchError(index, utxo.txid, parsed_txid)

    if utxo.vout >= len(source_tx.outputs):
        raise VoutOutOfRangeError(index, utxo.txid, utxo.vout, len(source_tx.outputs))

    actual = source_tx.outputs[utxo.vout].value
    if actual != utxo.satoshis:
        raise SatoshiMismatchError(index, utxo.txid, utxo.vout, utxo.satoshis, actual)

    logger.debug(f"Input {index} verified: {utxo.txid}:{utxo.vout} = {actual} sats")
    return ValidatedInput(index, utxo, source_tx)


def validate_utxos(utxos: Sequence[UTXO]) -> list[ValidatedInput]:
    """Validate every input in order; the lowest failing index is reported."""
    seen: dict[tuple[str, int], int] = {}
    validated: list[ValidatedInput] = []

    for index, utxo in enumerate(utxos):
        first = seen.setdefault(utxo.outpoint, index)
        if first != index:
            raise DuplicateInputError(index, first, utxo.txid, utxo.vout)
        validated.append(validate_utxo(utxo, index))

    logger.info(f"Validated {len(validated)} input(s) against their source transactions")
    return validated
