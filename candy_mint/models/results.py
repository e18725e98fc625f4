"""
Mint result models.

This module defines the structured results handed back to the UI layer:
one ``MintAttemptResult`` per transaction and a ``BatchMintResult`` that
aggregates a sequential batch.
"""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from candy_mint.utils.errors import ErrorCode


class SubmitOptions(BaseModel):
    """Submission and confirmation policy for a mint transaction."""
    model_config = ConfigDict(frozen=True)

    commitment: str = "confirmed"
    skip_preflight: bool = False
    max_retries: int = Field(default=3, ge=0)


class MintAttemptResult(BaseModel):
    """
    Outcome of exactly one mint transaction.

    ``signature`` is set on success, ``error_message`` on failure, never both.
    """
    model_config = ConfigDict(frozen=True)

    success: bool
    attempt: int = Field(default=1, ge=1)
    signature: Optional[str] = None
    minted_asset_id: Optional[str] = None
    nft_name: Optional[str] = None
    error_message: Optional[str] = None
    error_code: Optional[ErrorCode] = None

    @model_validator(mode="after")
    def check_outcome(self) -> "MintAttemptResult":
        if self.success and (not self.signature or self.error_message is not None):
            raise ValueError("A successful attempt carries a signature and no error")
        if not self.success and (not self.error_message or self.signature is not None):
            raise ValueError("A failed attempt carries an error message and no signature")
        return self


class BatchMintResult(BaseModel):
    """Aggregate outcome of a sequential batch of mint attempts."""
    model_config = ConfigDict(frozen=True)

    total_requested: int = Field(ge=1)
    total_minted: int = Field(ge=0)
    per_attempt: List[MintAttemptResult] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_totals(self) -> "BatchMintResult":
        minted = sum(1 for result in self.per_attempt if result.success)
        if minted != self.total_minted:
            raise ValueError(
                f"total_minted ({self.total_minted}) does not match "
                f"successful attempts ({minted})"
            )
        if self.total_minted > self.total_requested:
            raise ValueError("total_minted exceeds total_requested")
        return self

    @computed_field
    @property
    def success(self) -> bool:
        """A batch succeeds when at least one mint completed."""
        return self.total_minted > 0


class CandyMachineInfo(BaseModel):
    """Display summary of the candy machine for the UI."""
    model_config = ConfigDict(frozen=True)

    items_available: int
    items_redeemed: int
    items_remaining: int
    price: Decimal
