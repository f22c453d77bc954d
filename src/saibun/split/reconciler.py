"""
Final accounting from the signed transaction bytes.
"""

from __future__ import annotations

from loguru import logger

from saibun.models import InputDetail, OutputDetail, TransactionResult
from saibun.split.assembler import UnsignedSplit
from saibun.wallet.signing import Transaction, compute_txid


def reconcile(signed: Transaction, unsigned_split: UnsignedSplit) -> TransactionResult:
    """
    Build the result report from the signed transaction.

    Size and fee rate come from the actual serialized bytes, which differ from
    the pre-flight estimate by the variable signature lengths.
    """
    signed_bytes = signed.serialize()
    size_bytes = len(signed_bytes)
    plan = unsigned_split.plan

    outputs = [
        OutputDetail(
            address=out.address,
            satoshis=out.satoshis,
            is_change=out.is_change,
            is_data=out.is_data,
        )
        for out in unsigned_split.outputs
    ]
    total_output = sum(out.value for out in signed.outputs)
    fee = plan.total_input - total_output

    result = TransactionResult(
        txid=compute_txid(signed_bytes),
        signed_bytes=signed_bytes,
        inputs=[
            InputDetail(txid=inp.txid, vout=inp.vout, satoshis=value)
            for inp, value in zip(signed.inputs, unsigned_split.input_values, strict=True)
        ],
        outputs=outputs,
        total_input=plan.total_input,
        total_output=total_output,
        fee=fee,
        fee_rate=round(fee / size_bytes, 2),
        size_bytes=size_bytes,
        estimated_size=plan.estimated_size,
    )

    logger.info(
        f"Signed tx {result.txid}: {size_bytes} bytes (estimated {plan.estimated_size}), "
        f"fee {fee} sats ({result.fee_rate} sat/byte)"
    )
    return result

