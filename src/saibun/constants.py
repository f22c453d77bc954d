"""
Transaction size model, dust policy and network constants.

The size model follows the single-signature P2PKH cost:
- TX_OVERHEAD_BYTES: version (4) + locktime (4) + input/output count varints (1 + 1)
- P2PKH_INPUT_SIZE_BYTES: outpoint (36) + script length (1) + scriptSig (107) + sequence (4)
- P2PKH_OUTPUT_SIZE_BYTES: value (8) + script length (1) + scriptPubKey (25)
"""

from __future__ import annotations

TX_OVERHEAD_BYTES = 10
P2PKH_INPUT_SIZE_BYTES = 148
P2PKH_OUTPUT_SIZE_BYTES = 34

# Same input with a 65-byte uncompressed public key in the scriptSig
P2PKH_UNCOMPRESSED_INPUT_SIZE_BYTES = 180

# Change at or below this value is left to the miner instead of creating an output.
# The network relays 1 sat outputs, so only a change of zero or one satoshi is dropped.
DEFAULT_DUST_THRESHOLD = 1  # satoshis

# Conventional dust limit for a P2PKH output on chains with the 546 sat policy
STANDARD_DUST_LIMIT = 546  # satoshis

TX_VERSION = 1
TX_LOCKTIME = 0
DEFAULT_SEQUENCE = 0xFFFFFFFF

SIGHASH_ALL = 0x01
SIGHASH_FORKID = 0x40
SIGHASH_ALL_FORKID = SIGHASH_ALL | SIGHASH_FORKID

SATOSHIS_PER_COIN = 100_000_000

DEFAULT_FEE_RATE = 0.5  # sat/byte
DEFAULT_DERIVATION_PATH = "m/44'/145'/0'/0"

# Base58Check version bytes
P2PKH_VERSION = {"mainnet": 0x00, "testnet": 0x6F}
WIF_VERSION = {"mainnet": 0x80, "testnet": 0xEF}
XPUB_VERSION = {"mainnet": bytes.fromhex("0488b21e"), "testnet": bytes.fromhex("043587cf")}
XPRV_VERSION = {"mainnet": bytes.fromhex("0488ade4"), "testnet": bytes.fromhex("04358394")}
