"""
Transaction codec and signing utilities for P2PKH inputs.

Signatures commit to the spent output's script and amount using the
BIP143-style digest selected by the FORKID sighash flag.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field

from coincurve import PrivateKey

from saibun.constants import DEFAULT_SEQUENCE, SIGHASH_ALL_FORKID, TX_LOCKTIME, TX_VERSION

OP_PUSHDATA1 = 0x4C
OP_PUSHDATA2 = 0x4D
OP_PUSHDATA4 = 0x4E


class TransactionParseError(Exception):
    pass


class TransactionSigningError(Exception):
    pass


@dataclass
class TxInput:
    txid: str  # display (big-endian) hex
    vout: int
    script_sig: bytes = b""
    sequence: int = DEFAULT_SEQUENCE


@dataclass
class TxOutput:
    value: int
    script: bytes


@dataclass
class Transaction:
    inputs: list[TxInput] = field(default_factory=list)
    outputs: list[TxOutput] = field(default_factory=list)
    version: int = TX_VERSION
    locktime: int = TX_LOCKTIME

    def serialize(self) -> bytes:
        return serialize_transaction(self)

    @property
    def txid(self) -> str:
        return compute_txid(self.serialize())


def hash256(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def compute_txid(tx_bytes: bytes) -> str:
    """Transaction ID: double SHA256 of the serialized transaction, byte-reversed."""
    return hash256(tx_bytes)[::-1].hex()


def _take(data: bytes, offset: int, length: int) -> tuple[bytes, int]:
    end = offset + length
    if end > len(data):
        raise TransactionParseError(
            f"Unexpected end of data: need {length} bytes at offset {offset}, have {len(data)}"
        )
    return data[offset:end], end


def read_varint(data: bytes, offset: int) -> tuple[int, int]:
    first, offset = _take(data, offset, 1)

    if first[0] < 0xFD:
        return first[0], offset
    if first[0] == 0xFD:
        raw, offset = _take(data, offset, 2)
    elif first[0] == 0xFE:
        raw, offset = _take(data, offset, 4)
    else:
        raw, offset = _take(data, offset, 8)
    return int.from_bytes(raw, "little"), offset


def encode_varint(value: int) -> bytes:
    if value < 0xFD:
        return bytes([value])
    if value <= 0xFFFF:
        return b"\xfd" + value.to_bytes(2, "little")
    if value <= 0xFFFFFFFF:
        return b"\xfe" + value.to_bytes(4, "little")
    return b"\xff" + value.to_bytes(8, "little")


def push_data(data: bytes) -> bytes:
    """Encode a script push of arbitrary data using the smallest opcode."""
    length = len(data)
    if length < OP_PUSHDATA1:
        return bytes([length]) + data
    if length <= 0xFF:
        return bytes([OP_PUSHDATA1, length]) + data
    if length <= 0xFFFF:
        return bytes([OP_PUSHDATA2]) + length.to_bytes(2, "little") + data
    return bytes([OP_PUSHDATA4]) + length.to_bytes(4, "little") + data


def parse_pushes(script: bytes) -> list[bytes]:
    """Split a push-only script (e.g. a P2PKH scriptSig) into its data items."""
    items: list[bytes] = []
    offset = 0
    while offset < len(script):
        opcode = script[offset]
        offset += 1
        if opcode < OP_PUSHDATA1:
            length = opcode
        elif opcode == OP_PUSHDATA1:
            raw, offset = _take(script, offset, 1)
            length = raw[0]
        elif opcode == OP_PUSHDATA2:
            raw, offset = _take(script, offset, 2)
            length = int.from_bytes(raw, "little")
        elif opcode == OP_PUSHDATA4:
            raw, offset = _take(script, offset, 4)
            length = int.from_bytes(raw, "little")
        else:
            raise TransactionParseError(f"Non-push opcode 0x{opcode:02x} in script")
        item, offset = _take(script, offset, length)
        items.append(item)
    return items


def deserialize_transaction(tx_bytes: bytes) -> Transaction:
    """Parse a serialized transaction, rejecting truncated data and trailing bytes."""
    offset = 0
    raw, offset = _take(tx_bytes, offset, 4)
    version = int.from_bytes(raw, "little")

    input_count, offset = read_varint(tx_bytes, offset)
    inputs: list[TxInput] = []

    for _ in range(input_count):
        txid_le, offset = _take(tx_bytes, offset, 32)
        raw, offset = _take(tx_bytes, offset, 4)
        vout = int.from_bytes(raw, "little")

        script_len, offset = read_varint(tx_bytes, offset)
        script_sig, offset = _take(tx_bytes, offset, script_len)

        raw, offset = _take(tx_bytes, offset, 4)
        sequence = int.from_bytes(raw, "little")

        inputs.append(TxInput(txid_le[::-1].hex(), vout, script_sig, sequence))

    output_count, offset = read_varint(tx_bytes, offset)
    outputs: list[TxOutput] = []

    for _ in range(output_count):
        raw, offset = _take(tx_bytes, offset, 8)
        value = int.from_bytes(raw, "little")

        script_len, offset = read_varint(tx_bytes, offset)
        script, offset = _take(tx_bytes, offset, script_len)

        outputs.append(TxOutput(value, script))

    raw, offset = _take(tx_bytes, offset, 4)
    locktime = int.from_bytes(raw, "little")

    if offset != len(tx_bytes):
        raise TransactionParseError(f"{len(tx_bytes) - offset} trailing bytes after locktime")

    return Transaction(inputs, outputs, version, locktime)


def serialize_outpoint(txid: str, vout: int) -> bytes:
    # txid is in display format (big-endian), raw tx stores it reversed
    return bytes.fromhex(txid)[::-1] + vout.to_bytes(4, "little")


def serialize_output(out: TxOutput) -> bytes:
    return out.value.to_bytes(8, "little") + encode_varint(len(out.script)) + out.script


def serialize_transaction(tx: Transaction) -> bytes:
    result = tx.version.to_bytes(4, "little")

    result += encode_varint(len(tx.inputs))
    for inp in tx.inputs:
        result += serialize_outpoint(inp.txid, inp.vout)
        result += encode_varint(len(inp.script_sig))
        result += inp.script_sig
        result += inp.sequence.to_bytes(4, "little")

    result += encode_varint(len(tx.outputs))
    for out in tx.outputs:
        result += serialize_output(out)

    result += tx.locktime.to_bytes(4, "little")
    return result


def compute_sighash_forkid(
    tx: Transaction,
    input_index: int,
    script_code: bytes,
    value: int,
    sighash_type: int = SIGHASH_ALL_FORKID,
) -> bytes:
    """Compute the amount-committing signature digest for one input.

    The preimage layout is BIP143's; the FORKID flag in ``sighash_type`` selects it
    on chains without segregated witness.
    """
    if input_index >= len(tx.inputs):
        raise TransactionSigningError("Input index out of range")

    hash_prevouts = hash256(b"".join(serialize_outpoint(inp.txid, inp.vout) for inp in tx.inputs))
    hash_sequence = hash256(b"".join(inp.sequence.to_bytes(4, "little") for inp in tx.inputs))
    hash_outputs = hash256(b"".join(serialize_output(out) for out in tx.outputs))

    target_input = tx.inputs[input_index]

    preimage = (
        tx.version.to_bytes(4, "little")
        + hash_prevouts
        + hash_sequence
        + serialize_outpoint(target_input.txid, target_input.vout)
        + encode_varint(len(script_code))
        + script_code
        + value.to_bytes(8, "little")
        + target_input.sequence.to_bytes(4, "little")
        + hash_outputs
        + tx.locktime.to_bytes(4, "little")
        + sighash_type.to_bytes(4, "little")
    )

    return hash256(preimage)


def sign_p2pkh_input(
    tx: Transaction,
    input_index: int,
    script_code: bytes,
    value: int,
    private_key: PrivateKey,
    sighash_type: int = SIGHASH_ALL_FORKID,
) -> bytes:
    """Sign a P2PKH input using coincurve.

    Args:
        tx: The transaction to sign
        input_index: Index of the input to sign
        script_code: Locking script of the output being spent
        value: The value of the output being spent (in satoshis)
        private_key: coincurve PrivateKey instance
        sighash_type: Sighash type (default SIGHASH_ALL | SIGHASH_FORKID = 0x41)

    Returns:
        DER-encoded signature with sighash type byte appended
    """
    sighash = compute_sighash_forkid(tx, input_index, script_code, value, sighash_type)

    # The digest is already SHA256d; RFC6979 nonces keep signatures deterministic
    signature = private_key.sign(sighash, hasher=None)

    return signature + bytes([sighash_type & 0xFF])


def create_p2pkh_script_sig(signature: bytes, pubkey_bytes: bytes) -> bytes:
    """Unlocking script: <signature+sighash_type> <pubkey>"""
    return push_data(signature) + push_data(pubkey_bytes)
