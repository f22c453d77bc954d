"""
saibun - UTXO split transaction engine

Validates claimed inputs against their source transactions, then builds and
signs a transaction splitting them into equal outputs.
"""

__version__ = "0.1.0"

from saibun.amounts import bsv_to_satoshis, satoshis_to_bsv
from saibun.config import Settings, get_settings
from saibun.constants import DEFAULT_DUST_THRESHOLD, STANDARD_DUST_LIMIT
from saibun.errors import (
    DerivationFailureError,
    DuplicateInputError,
    InsufficientFundsError,
    InvalidKeyFormatError,
    InvalidRecipientConfigError,
    InvalidSplitConfigError,
    InvalidTransactionHexError,
    KeyMismatchError,
    MissingSourceBytesError,
    SatoshiMismatchError,
    SplitError,
    SplitErrorKind,
    TxidMismatchError,
    VoutOutOfRangeError,
)
from saibun.models import (
    UTXO,
    BuildOutcome,
    BuildState,
    InputDetail,
    OutputDetail,
    SingleRecipient,
    SplitConfig,
    TransactionResult,
    XpubRecipient,
)
from saibun.split import (
    build_split_transaction,
    derive_addresses,
    estimate_fee,
    estimate_size,
    extract_utxo_from_raw_tx,
    parse_unspent_json,
)
from saibun.wallet.address import is_valid_address
from saibun.wallet.bip32 import is_valid_xpub
from saibun.wallet.keys import KeyPair, generate_key_pair, import_from_wif, is_valid_wif

__all__ = [
    "BuildOutcome",
    "BuildState",
    "DEFAULT_DUST_THRESHOLD",
    "DerivationFailureError",
    "DuplicateInputError",
    "InputDetail",
    "InsufficientFundsError",
    "InvalidKeyFormatError",
    "InvalidRecipientConfigError",
    "InvalidSplitConfigError",
    "InvalidTransactionHexError",
    "KeyMismatchError",
    "KeyPair",
    "MissingSourceBytesError",
    "OutputDetail",
    "STANDARD_DUST_LIMIT",
    "SatoshiMismatchError",
    "Settings",
    "SingleRecipient",
    "SplitConfig",
    "SplitError",
    "SplitErrorKind",
    "TransactionResult",
    "TxidMismatchError",
    "UTXO",
    "VoutOutOfRangeError",
    "XpubRecipient",
    "build_split_transaction",
    "bsv_to_satoshis",
    "derive_addresses",
    "estimate_fee",
    "estimate_size",
    "extract_utxo_from_raw_tx",
    "generate_key_pair",
    "get_settings",
    "import_from_wif",
    "is_valid_address",
    "is_valid_wif",
    "is_valid_xpub",
    "parse_unspent_json",
    "satoshis_to_bsv",
]
