"""
Transaction assembler for split transactions.

Builds the unsigned split transaction from:
- Validated inputs (all spent in full)
- N equal primary outputs to the resolved recipient addresses
- An optional change output back to the source (or configured change) address
- An optional zero-value OP_RETURN note, placed first
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from loguru import logger

from saibun.constants import DEFAULT_DUST_THRESHOLD, P2PKH_INPUT_SIZE_BYTES
from saibun.errors import InsufficientFundsError, InvalidRecipientConfigError
from saibun.models import SplitConfig
from saibun.split.fees import estimate_fee, estimate_size
from saibun.split.validator import ValidatedInput
from saibun.wallet.address import address_to_scriptpubkey, op_return_script
from saibun.wallet.signing import Transaction, TxInput, TxOutput, serialize_output


@dataclass(frozen=True)
class SplitPlan:
    """Amounts for a split, fixed before any address is resolved."""

    input_count: int
    total_input: int
    required_output: int
    estimated_fee: int
    change: int
    has_change: bool
    estimated_size: int
    data_output_bytes: int = 0


@dataclass(frozen=True)
class PlannedOutput:
    """Transaction output with the role it plays in the split."""

    address: str | None
    satoshis: int
    script: bytes
    is_change: bool = False
    is_data: bool = False


@dataclass(frozen=True)
class UnsignedSplit:
    tx: Transaction
    outputs: list[PlannedOutput]
    plan: SplitPlan
    input_values: tuple[int, ...]


def data_output_script(config: SplitConfig) -> bytes | None:
    if config.op_return_note is None:
        return None
    return op_return_script(config.op_return_note.encode("utf-8"))


def plan_split(
    total_input: int,
    input_count: int,
    config: SplitConfig,
    dust_threshold: int = DEFAULT_DUST_THRESHOLD,
    input_size: int = P2PKH_INPUT_SIZE_BYTES,
) -> SplitPlan:
    """
    Check funding and compute the change for a split.

    The fee is estimated assuming a change output is present. A change at or
    below ``dust_threshold`` is not emitted and becomes additional fee.

    Raises:
        InsufficientFundsError: if inputs cannot cover outputs plus estimated fee
    """
    script = data_output_script(config)
    data_output_bytes = len(serialize_output(TxOutput(0, script))) if script is not None else 0

    required_output = config.required_output
    estimated_fee = estimate_fee(
        input_count,
        config.output_count + 1,
        config.fee_rate,
        data_output_bytes=data_output_bytes,
        input_size=input_size,
    )

    need = required_output + estimated_fee
    if total_input < need:
        raise InsufficientFundsError(total_input, need, required_output, estimated_fee)

    change = total_input - required_output - estimated_fee
    has_change = change > dust_threshold

    if not has_change and change > 0:
        logger.warning(f"Change of {change} sats is below dust threshold, adding it to the fee")

    estimated_size = estimate_size(
        input_count,
        config.output_count + (1 if has_change else 0),
        data_output_bytes=data_output_bytes,
        input_size=input_size,
    )

    logger.info(
        f"Split plan: {total_input} sats in, {config.output_count} x "
        f"{config.satoshis_per_output} sats out, fee ~{estimated_fee} sats, "
        f"change {change if has_change else 0} sats"
    )

    return SplitPlan(
        input_count=input_count,
        total_input=total_input,
        required_output=required_output,
        estimated_fee=estimated_fee,
        change=change,
        has_change=has_change,
        estimated_size=estimated_size,
        data_output_bytes=data_output_bytes,
    )


def assemble_transaction(
    inputs: Sequence[ValidatedInput],
    plan: SplitPlan,
    addresses: Sequence[str],
    config: SplitConfig,
    change_address: str,
    network: str = "mainnet",
) -> UnsignedSplit:
    """
    Build the unsigned split transaction.

    Output order: OP_RETURN note (if any), primary outputs in recipient order,
    change (if any).
    """
    if len(addresses) != config.output_count:
        raise InvalidRecipientConfigError(
            f"{len(addresses)} addresses resolved for {config.output_count} outputs"
        )

    # Checked even when no change is emitted
    try:
        change_script = address_to_scriptpubkey(change_address, network)
    except ValueError as e:
        raise InvalidRecipientConfigError(f"invalid change address: {e}") from e

    planned: list[PlannedOutput] = []

    script = data_output_script(config)
    if script is not None:
        planned.append(PlannedOutput(None, 0, script, is_data=True))

    for address in addresses:
        planned.append(
            PlannedOutput(
                address,
                config.satoshis_per_output,
                address_to_scriptpubkey(address, network),
            )
        )

    if plan.has_change:
        planned.append(PlannedOutput(change_address, plan.change, change_script, is_change=True))

    tx = Transaction(
        inputs=[TxInput(inp.utxo.txid, inp.utxo.vout) for inp in inputs],
        outputs=[TxOutput(out.satoshis, out.script) for out in planned],
    )

    logger.debug(f"Assembled unsigned tx: {len(tx.inputs)} inputs, {len(tx.outputs)} outputs")
    return UnsignedSplit(tx, planned, plan, tuple(inp.satoshis for inp in inputs))
