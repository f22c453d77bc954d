"""
Deterministic transaction size and fee estimation.
"""

from __future__ import annotations

import math
from decimal import Decimal

from saibun.constants import P2PKH_INPUT_SIZE_BYTES, P2PKH_OUTPUT_SIZE_BYTES, TX_OVERHEAD_BYTES


def estimate_size(
    input_count: int,
    output_count: int,
    *,
    data_output_bytes: int = 0,
    input_size: int = P2PKH_INPUT_SIZE_BYTES,
) -> int:
    """
    Estimate the serialized size of a P2PKH transaction.

    Args:
        input_count: Number of P2PKH inputs
        output_count: Number of P2PKH outputs
        data_output_bytes: Serialized size of any non-P2PKH (OP_RETURN) outputs
        input_size: Per-input cost (larger for uncompressed public keys)

    Returns:
        Size in bytes
    """
    return (
        TX_OVERHEAD_BYTES
        + input_count * input_size
        + output_count * P2PKH_OUTPUT_SIZE_BYTES
        + data_output_bytes
    )


def estimate_fee(
    input_count: int,
    output_count: int,
    fee_rate: float,
    *,
    data_output_bytes: int = 0,
    input_size: int = P2PKH_INPUT_SIZE_BYTES,
) -> int:
    """Fee in satoshis: estimated size times fee rate (sat/byte), rounded up."""
    size = estimate_size(
        input_count, output_count, data_output_bytes=data_output_bytes, input_size=input_size
    )
    # Decimal keeps fractional rates like 0.1 exact
    return math.ceil(Decimal(size) * Decimal(str(fee_rate)))
