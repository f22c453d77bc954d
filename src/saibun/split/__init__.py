"""
UTXO split engine.

Pipeline stages, leaves first:
- validator: proves claimed inputs against their source transaction bytes
- fees: deterministic size/fee model
- recipients: fixed or xpub-derived destination addresses
- assembler: totals, change and the unsigned transaction
- signer: per-input unlocking scripts
- reconciler: actual size/fee from the signed bytes
"""

from saibun.split.assembler import SplitPlan, UnsignedSplit, assemble_transaction, plan_split
from saibun.split.fees import estimate_fee, estimate_size
from saibun.split.pipeline import build_split_transaction, parse_split_config
from saibun.split.recipients import derive_addresses, resolve_recipients
from saibun.split.reconciler import reconcile
from saibun.split.signer import check_spendable, sign_transaction
from saibun.split.utxos import (
    UnspentListing,
    UtxoImportError,
    extract_utxo_from_raw_tx,
    parse_raw_transaction_hex,
    parse_unspent_json,
)
from saibun.split.validator import ValidatedInput, validate_utxo, validate_utxos

__all__ = [
    "SplitPlan",
    "UnsignedSplit",
    "UnspentListing",
    "UtxoImportError",
    "ValidatedInput",
    "assemble_transaction",
    "build_split_transaction",
    "check_spendable",
    "derive_addresses",
    "estimate_fee",
    "estimate_size",
    "extract_utxo_from_raw_tx",
    "parse_raw_transaction_hex",
    "parse_split_config",
    "parse_unspent_json",
    "plan_split",
    "reconcile",
    "resolve_recipients",
    "sign_transaction",
    "validate_utxo",
    "validate_utxos",
]
