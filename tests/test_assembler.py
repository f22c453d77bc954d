"""
Tests for split planning, assembly, signing and reconciliation stages.
"""

from __future__ import annotations

import pytest

from saibun.errors import InsufficientFundsError, InvalidRecipientConfigError, KeyMismatchError
from saibun.models import SingleRecipient, SplitConfig
from saibun.split.assembler import assemble_transaction, plan_split
from saibun.split.reconciler import reconcile
from saibun.split.signer import check_spendable, sign_transaction
from saibun.split.validator import validate_utxos
from saibun.wallet.address import address_to_scriptpubkey
from saibun.wallet.keys import generate_key_pair
from tests.conftest import RECIPIENT_ADDRESS

NOTE = "Powered by https://saibun.io"


def make_config(**overrides) -> SplitConfig:
    params = {
        "output_count": 5,
        "satoshis_per_output": 1_000,
        "fee_rate": 1,
        "recipient": SingleRecipient(address=RECIPIENT_ADDRESS),
    }
    params.update(overrides)
    return SplitConfig(**params)


class TestPlanSplit:
    def test_change_plan(self):
        plan = plan_split(10_000, 1, make_config())

        assert plan.required_output == 5_000
        assert plan.estimated_fee == 362
        assert plan.change == 4_638
        assert plan.has_change
        assert plan.estimated_size == 362

    def test_exact_funding(self):
        plan = plan_split(5_362, 1, make_config())

        assert plan.change == 0
        assert not plan.has_change
        assert plan.estimated_size == 362 - 34

    def test_insufficient_funds(self):
        with pytest.raises(InsufficientFundsError) as exc_info:
            plan_split(5_361, 1, make_config())

        error = exc_info.value
        assert error.have == 5_361
        assert error.need == 5_362
        assert error.required_output == 5_000
        assert error.estimated_fee == 362

    def test_dust_change_goes_to_fee(self):
        plan = plan_split(5_363, 1, make_config())
        assert plan.change == 1
        assert not plan.has_change

    def test_change_above_dust(self):
        plan = plan_split(5_364, 1, make_config())
        assert plan.change == 2
        assert plan.has_change

    def test_custom_dust_threshold(self):
        plan = plan_split(5_862, 1, make_config(), dust_threshold=546)
        assert plan.change == 500
        assert not plan.has_change

    def test_op_return_note_bytes(self):
        plan = plan_split(10_000, 1, make_config(op_return_note=NOTE))

        assert plan.data_output_bytes == 40
        assert plan.estimated_fee == 362 + 40

    def test_more_inputs_cost_more(self):
        one = plan_split(20_000, 1, make_config())
        two = plan_split(20_000, 2, make_config())
        assert two.estimated_fee - one.estimated_fee == 148


class TestAssembleTransaction:
    @pytest.fixture
    def inputs(self, funded_utxo):
        return validate_utxos([funded_utxo])

    def test_output_order(self, inputs, signing_key):
        config = make_config(op_return_note=NOTE)
        plan = plan_split(10_000, 1, config)

        unsigned = assemble_transaction(
            inputs, plan, [RECIPIENT_ADDRESS] * 5, config, signing_key.address
        )

        outputs = unsigned.outputs
        assert outputs[0].is_data and outputs[0].satoshis == 0
        assert [o.satoshis for o in outputs[1:6]] == [1_000] * 5
        assert outputs[-1].is_change
        assert outputs[-1].address == signing_key.address
        assert outputs[-1].satoshis == 10_000 - 5_000 - 402
        assert unsigned.tx.outputs[1].script == address_to_scriptpubkey(RECIPIENT_ADDRESS)

    def test_inputs_spend_in_order(self, inputs, signing_key, funded_utxo):
        config = make_config()
        unsigned = assemble_transaction(
            inputs, plan_split(10_000, 1, config), [RECIPIENT_ADDRESS] * 5, config,
            signing_key.address,
        )

        assert unsigned.tx.inputs[0].txid == funded_utxo.txid
        assert unsigned.tx.inputs[0].vout == 1
        assert unsigned.tx.inputs[0].script_sig == b""
        assert unsigned.input_values == (10_000,)

    def test_address_count_mismatch(self, inputs, signing_key):
        config = make_config()
        with pytest.raises(InvalidRecipientConfigError):
            assemble_transaction(
                inputs, plan_split(10_000, 1, config), [RECIPIENT_ADDRESS], config,
                signing_key.address,
            )

    def test_invalid_change_address(self, inputs):
        config = make_config()
        with pytest.raises(InvalidRecipientConfigError, match="change address"):
            assemble_transaction(
                inputs, plan_split(10_000, 1, config), [RECIPIENT_ADDRESS] * 5, config, "nope"
            )

    def test_change_address_checked_without_change(self, inputs):
        config = make_config()
        plan = plan_split(5_362, 1, config)
        assert not plan.has_change

        with pytest.raises(InvalidRecipientConfigError, match="change address"):
            assemble_transaction(inputs, plan, [RECIPIENT_ADDRESS] * 5, config, "nope")


class TestSignAndReconcile:
    def test_key_mismatch(self, funded_utxo):
        inputs = validate_utxos([funded_utxo])
        with pytest.raises(KeyMismatchError) as exc_info:
            check_spendable(inputs, generate_key_pair())
        assert exc_info.value.input_index == 0

    def test_reconcile_accounts_for_every_satoshi(self, funded_utxo, signing_key):
        inputs = validate_utxos([funded_utxo])
        check_spendable(inputs, signing_key)
        config = make_config()
        unsigned = assemble_transaction(
            inputs, plan_split(10_000, 1, config), [RECIPIENT_ADDRESS] * 5, config,
            signing_key.address,
        )

        signed = sign_transaction(unsigned.tx, inputs, signing_key)
        result = reconcile(signed, unsigned)

        assert result.total_input == result.total_output + result.fee
        assert result.fee == 362
        assert result.size_bytes == len(result.signed_bytes)
        assert result.size_bytes <= result.estimated_size
        assert result.txid == signed.txid
        # The unsigned transaction is left untouched
        assert unsigned.tx.inputs[0].script_sig == b""
