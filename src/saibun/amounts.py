"""
Coin/satoshi conversions.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from saibun.constants import SATOSHIS_PER_COIN


def satoshis_to_bsv(satoshis: int) -> str:
    """Format satoshis as a coin amount with 8 decimals (e.g. 1000 -> "0.00001000")."""
    return f"{Decimal(satoshis) / SATOSHIS_PER_COIN:.8f}"


def bsv_to_satoshis(amount: Decimal | float | str) -> int:
    """Convert a coin amount to satoshis, rounding half up."""
    sats = Decimal(str(amount)) * SATOSHIS_PER_COIN
    return int(sats.quantize(Decimal(1), rounding=ROUND_HALF_UP))
