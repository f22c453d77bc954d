"""
Split transaction build pipeline.

Stages run strictly forward:
    Validating -> Estimating -> Resolving -> Assembling -> Signing -> Reconciling -> Done

Any SplitError moves the build to Failed and no later stage runs, so a
partially signed transaction is never exposed.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from loguru import logger
from pydantic import ValidationError

from saibun.config import Settings, get_settings
from saibun.constants import P2PKH_INPUT_SIZE_BYTES, P2PKH_UNCOMPRESSED_INPUT_SIZE_BYTES
from saibun.errors import InvalidSplitConfigError, SplitError
from saibun.models import UTXO, BuildOutcome, BuildState, SplitConfig
from saibun.split.assembler import assemble_transaction, plan_split
from saibun.split.recipients import resolve_recipients
from saibun.split.reconciler import reconcile
from saibun.split.signer import check_spendable, sign_transaction
from saibun.split.validator import validate_utxos
from saibun.wallet.keys import import_from_wif


def parse_split_config(config: SplitConfig | Mapping[str, Any]) -> SplitConfig:
    """Validate a split configuration, re-checking instances built without validation."""
    data = config.model_dump() if isinstance(config, SplitConfig) else dict(config)
    try:
        return SplitConfig.model_validate(data)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        raise InvalidSplitConfigError(errors) from e


def build_split_transaction(
    private_key_wif: str,
    utxos: Sequence[UTXO],
    source_address: str,
    config: SplitConfig | Mapping[str, Any],
    settings: Settings | None = None,
) -> BuildOutcome:
    """
    Build and sign a split transaction.

    Args:
        private_key_wif: Key that controls every input
        utxos: Inputs to spend in full, each with its raw source transaction
        source_address: Address the inputs belong to; default change destination
        config: Split configuration (model or mapping)
        settings: Network and dust policy, defaults to environment settings

    Returns:
        BuildOutcome in state DONE with the result, or FAILED with the error
    """
    settings = settings or get_settings()
    network = settings.network
    state = BuildState.VALIDATING

    def advance(next_state: BuildState) -> BuildState:
        logger.debug(f"Split build: {state.value} -> {next_state.value}")
        return next_state

    try:
        split_config = parse_split_config(config)
        key = import_from_wif(private_key_wif, network)
        inputs = validate_utxos(utxos)
        check_spendable(inputs, key)

        state = advance(BuildState.ESTIMATING)
        plan = plan_split(
            total_input=sum(inp.satoshis for inp in inputs),
            input_count=len(inputs),
            config=split_config,
            dust_threshold=settings.dust_threshold,
            input_size=(
                P2PKH_INPUT_SIZE_BYTES if key.compressed else P2PKH_UNCOMPRESSED_INPUT_SIZE_BYTES
            ),
        )

        state = advance(BuildState.RESOLVING)
        addresses = resolve_recipients(split_config.recipient, split_config.output_count, network)

        state = advance(BuildState.ASSEMBLING)
        unsigned = assemble_transaction(
            inputs,
            plan,
            addresses,
            split_config,
            change_address=split_config.change_address or source_address,
            network=network,
        )

        state = advance(BuildState.SIGNING)
        signed = sign_transaction(unsigned.tx, inputs, key)

        state = advance(BuildState.RECONCILING)
        result = reconcile(signed, unsigned)

    except SplitError as e:
        logger.error(f"Split build failed while {state.value}: [{e.kind.value}] {e}")
        return BuildOutcome(state=BuildState.FAILED, error=e, failed_stage=state)

    advance(BuildState.DONE)
    return BuildOutcome(state=BuildState.DONE, result=result)
