"""
Input signing for split transactions.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

from loguru import logger

from saibun.constants import SIGHASH_ALL_FORKID
from saibun.errors import KeyMismatchError
from saibun.split.validator import ValidatedInput
from saibun.wallet.keys import KeyPair
from saibun.wallet.signing import Transaction, create_p2pkh_script_sig, sign_p2pkh_input


def check_spendable(inputs: Sequence[ValidatedInput], key: KeyPair) -> None:
    """Every source output must be the P2PKH script of the signing key."""
    expected = key.locking_script
    for inp in inputs:
        actual = inp.source_output.script
        if actual != expected:
            raise KeyMismatchError(inp.index, expected.hex(), actual.hex())


def sign_transaction(
    unsigned: Transaction,
    inputs: Sequence[ValidatedInput],
    key: KeyPair,
) -> Transaction:
    """
    Sign every input of ``unsigned`` with ``key``.

    Each digest commits to the source output's locking script and amount, taken
    from the validated source transaction. Inputs are signed in order and the
    signatures are deterministic, so the result is byte-identical across runs.

    Returns:
        A new Transaction with unlocking scripts filled in
    """
    pubkey = key.public_key_bytes
    signed_inputs = []

    for position, inp in enumerate(inputs):
        source_output = inp.source_output
        signature = sign_p2pkh_input(
            unsigned,
            position,
            source_output.script,
            source_output.value,
            key.private_key,
            SIGHASH_ALL_FORKID,
        )
        signed_inputs.append(
            replace(
                unsigned.inputs[position],
                script_sig=create_p2pkh_script_sig(signature, pubkey),
            )
        )
        logger.debug(f"Signed input {position} ({inp.utxo.txid}:{inp.utxo.vout})")

    return replace(unsigned, inputs=signed_inputs)
