"""
Data models for split builds using Pydantic for validation and serialization.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from saibun.constants import DEFAULT_DERIVATION_PATH, DEFAULT_FEE_RATE
from saibun.errors import SplitError


class UTXO(BaseModel):
    """A claimed spendable output, optionally with its full source transaction."""

    model_config = ConfigDict(frozen=True)

    txid: str = Field(..., pattern=r"^[0-9a-fA-F]{64}$")
    vout: int = Field(..., ge=0)
    satoshis: int = Field(..., ge=0)
    raw_tx_hex: str | None = None

    @field_validator("txid")
    @classmethod
    def normalize_txid(cls, v: str) -> str:
        return v.lower()

    @property
    def outpoint(self) -> tuple[str, int]:
        return self.txid, self.vout

    @property
    def raw_tx_bytes(self) -> bytes | None:
        """Raw source transaction bytes; raises ValueError on malformed hex."""
        if self.raw_tx_hex is None:
            return None
        return bytes.fromhex("".join(self.raw_tx_hex.split()))


class SingleRecipient(BaseModel):
    """Every split output pays the same address."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["single"] = "single"
    address: str = Field(..., min_length=1)


class XpubRecipient(BaseModel):
    """Split outputs pay sequential addresses derived from an extended public key."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["xpub"] = "xpub"
    xpub: str = Field(..., min_length=1)
    derivation_path: str = DEFAULT_DERIVATION_PATH
    start_index: int = Field(default=0, ge=0)
    # Addresses already derived by the caller (e.g. for a preview); used verbatim
    resolved_addresses: tuple[str, ...] | None = None


Recipient = Annotated[SingleRecipient | XpubRecipient, Field(discriminator="mode")]


class SplitConfig(BaseModel):
    """How to split the inputs. Immutable once a build begins."""

    model_config = ConfigDict(frozen=True)

    output_count: int = Field(..., ge=1)
    satoshis_per_output: int = Field(..., gt=0)
    fee_rate: float = Field(
        default=DEFAULT_FEE_RATE, ge=0, allow_inf_nan=False, description="sat/byte"
    )
    recipient: Recipient
    # Change goes to the source address when unset
    change_address: str | None = None
    # Text for a zero-value OP_FALSE OP_RETURN output placed first
    op_return_note: str | None = None

    @field_validator("change_address")
    @classmethod
    def blank_change_address(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v.strip() if v is not None else None

    @property
    def required_output(self) -> int:
        return self.output_count * self.satoshis_per_output


class InputDetail(BaseModel):
    txid: str
    vout: int
    satoshis: int


class OutputDetail(BaseModel):
    address: str | None
    satoshis: int
    is_change: bool = False
    is_data: bool = False


class TransactionResult(BaseModel):
    """Signed split transaction and its fee breakdown."""

    model_config = ConfigDict(frozen=True)

    txid: str
    signed_bytes: bytes
    inputs: list[InputDetail]
    outputs: list[OutputDetail]
    total_input: int
    total_output: int
    fee: int
    fee_rate: float
    size_bytes: int
    estimated_size: int

    @property
    def hex(self) -> str:
        return self.signed_bytes.hex()

    @property
    def change_output(self) -> OutputDetail | None:
        if self.outputs and self.outputs[-1].is_change:
            return self.outputs[-1]
        return None


class BuildState(str, Enum):
    VALIDATING = "validating"
    ESTIMATING = "estimating"
    RESOLVING = "resolving"
    ASSEMBLING = "assembling"
    SIGNING = "signing"
    RECONCILING = "reconciling"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class BuildOutcome:
    """Terminal state of a build: either a result or the error that stopped it."""

    state: BuildState
    result: TransactionResult | None = None
    error: SplitError | None = None
    failed_stage: BuildState | None = None

    @property
    def ok(self) -> bool:
        return self.state == BuildState.DONE

    def unwrap(self) -> TransactionResult:
        if self.error is not None:
            raise self.error
        assert self.result is not None
        return self.result
