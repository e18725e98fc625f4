"""Unit tests for candy machine and result models."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from candy_mint.models.candy_machine import CandyMachineSnapshot
from candy_mint.models.results import BatchMintResult, MintAttemptResult
from candy_mint.utils.errors import ErrorCode, InsufficientFundsError
from tests.fixtures.common import TEST_SIGNATURE


class TestCandyMachineSnapshot:
    """Test suite for CandyMachineSnapshot."""

    def test_snapshot_is_immutable(self, machine_snapshot):
        with pytest.raises(PydanticValidationError):
            machine_snapshot.items_redeemed = 1

    def test_invalid_public_key(self, addresses):
        with pytest.raises(PydanticValidationError):
            CandyMachineSnapshot(
                public_key="0OIl",
                authority=addresses["authority"],
                mint_authority=addresses["guard"],
                collection_mint=addresses["collection_mint"],
                items_loaded=1,
                items_redeemed=0,
            )


class TestMintResults:
    """Test suite for mint result models."""

    def test_success_requires_signature(self):
        with pytest.raises(PydanticValidationError):
            MintAttemptResult(success=True)

    def test_failure_rejects_signature(self):
        with pytest.raises(PydanticValidationError):
            MintAttemptResult(success=False, error_message="boom", signature=TEST_SIGNATURE)

    def test_batch_totals_must_match(self):
        with pytest.raises(PydanticValidationError):
            BatchMintResult(
                total_requested=2,
                total_minted=2,
                per_attempt=[MintAttemptResult(success=True, signature=TEST_SIGNATURE)],
            )

    def test_batch_success_is_serialized(self):
        result = BatchMintResult(
            total_requested=2,
            total_minted=1,
            per_attempt=[
                MintAttemptResult(success=True, signature=TEST_SIGNATURE),
                MintAttemptResult(success=False, attempt=2, error_message="boom"),
            ],
            errors=["Mint 2 failed: boom"],
        )

        dumped = result.model_dump(mode="json")

        assert dumped["success"] is True
        assert dumped["per_attempt"][1]["error_message"] == "boom"


class TestErrors:
    """Test suite for service errors."""

    def test_insufficient_funds_details(self):
        error = InsufficientFundsError(observed=5_000_000, required=10_000_000)

        assert error.code == ErrorCode.INSUFFICIENT_FUNDS
        assert error.status_code == 402
        assert error.to_dict()["details"] == {"observed": 5_000_000, "required": 10_000_000}
