"""
Error kinds raised while building a split transaction.

Every error is detected before any signature is produced. Each subclass carries
the structured context (offending index, expected vs. actual value) needed to
present an actionable message.
"""

from __future__ import annotations

from enum import Enum


class SplitErrorKind(str, Enum):
    MISSING_SOURCE_BYTES = "missing_source_bytes"
    TXID_MISMATCH = "txid_mismatch"
    VOUT_OUT_OF_RANGE = "vout_out_of_range"
    SATOSHI_MISMATCH = "satoshi_mismatch"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INVALID_RECIPIENT_CONFIG = "invalid_recipient_config"
    DERIVATION_FAILURE = "derivation_failure"
    INVALID_KEY_FORMAT = "invalid_key_format"
    INVALID_TRANSACTION_HEX = "invalid_transaction_hex"
    INVALID_SPLIT_CONFIG = "invalid_split_config"
    DUPLICATE_INPUT = "duplicate_input"
    KEY_MISMATCH = "key_mismatch"


class SplitError(Exception):
    """Base class for all split build failures."""

    kind: SplitErrorKind


class MissingSourceBytesError(SplitError):
    kind = SplitErrorKind.MISSING_SOURCE_BYTES

    def __init__(self, input_index: int, txid: str, vout: int):
        self.input_index = input_index
        self.txid = txid
        self.vout = vout
        super().__init__(
            f"Missing raw transaction for input {input_index} ({txid}:{vout}); "
            "the source transaction is required to sign"
        )


class TxidMismatchError(SplitError):
    kind = SplitErrorKind.TXID_MISMATCH

    def __init__(self, input_index: int, expected: str, actual: str):
        self.input_index = input_index
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Transaction ID mismatch for input {input_index}. Expected {expected}, got {actual}"
        )


class VoutOutOfRangeError(SplitError):
    kind = SplitErrorKind.VOUT_OUT_OF_RANGE

    def __init__(self, input_index: int, txid: str, vout: int, output_count: int):
        self.input_index = input_index
        self.txid = txid
        self.vout = vout
        self.output_count = output_count
        super().__init__(
            f"Invalid output index {vout} for transaction {txid} "
            f"(only has {output_count} outputs)"
        )


class SatoshiMismatchError(SplitError):
    kind = SplitErrorKind.SATOSHI_MISMATCH

    def __init__(self, input_index: int, txid: str, vout: int, expected: int, actual: int):
        self.input_index = input_index
        self.txid = txid
        self.vout = vout
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Satoshi mismatch for input {input_index} ({txid}:{vout}). "
            f"Expected {expected}, got {actual}"
        )


class InsufficientFundsError(SplitError):
    kind = SplitErrorKind.INSUFFICIENT_FUNDS

    def __init__(self, have: int, need: int, required_output: int, estimated_fee: int):
        self.have = have
        self.need = need
        self.required_output = required_output
        self.estimated_fee = estimated_fee
        super().__init__(
            f"Insufficient funds. Have {have} sats, need {need} sats "
            f"({required_output} for outputs + {estimated_fee} for fees)"
        )


class InvalidRecipientConfigError(SplitError):
    kind = SplitErrorKind.INVALID_RECIPIENT_CONFIG

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid recipient configuration: {reason}")


class DerivationFailureError(SplitError):
    kind = SplitErrorKind.DERIVATION_FAILURE

    def __init__(self, index: int, cause: str):
        self.index = index
        self.cause = cause
        super().__init__(f"Failed to derive child key at index {index}: {cause}")


class InvalidKeyFormatError(SplitError):
    kind = SplitErrorKind.INVALID_KEY_FORMAT

    def __init__(self, reason: str = "Invalid WIF format"):
        self.reason = reason
        super().__init__(reason)


class InvalidTransactionHexError(SplitError):
    kind = SplitErrorKind.INVALID_TRANSACTION_HEX

    def __init__(self, reason: str, input_index: int | None = None):
        self.reason = reason
        self.input_index = input_index
        where = f" for input {input_index}" if input_index is not None else ""
        super().__init__(f"Invalid transaction hex{where}: {reason}")


class InvalidSplitConfigError(SplitError):
    kind = SplitErrorKind.INVALID_SPLIT_CONFIG

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Invalid split configuration: {'; '.join(errors)}")


class DuplicateInputError(SplitError):
    kind = SplitErrorKind.DUPLICATE_INPUT

    def __init__(self, input_index: int, first_index: int, txid: str, vout: int):
        self.input_index = input_index
        self.first_index = first_index
        self.txid = txid
        self.vout = vout
        super().__init__(
            f"Input {input_index} spends {txid}:{vout}, "
            f"already spent by input {first_index}"
        )


class KeyMismatchError(SplitError):
    kind = SplitErrorKind.KEY_MISMATCH

    def __init__(self, input_index: int, expected_script: str, actual_script: str):
        self.input_index = input_index
        self.expected_script = expected_script
        self.actual_script = actual_script
        super().__init__(
            f"Input {input_index} is not locked to the signing key "
            f"(expected script {expected_script}, found {actual_script})"
        )
