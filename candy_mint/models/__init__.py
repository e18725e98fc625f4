"""Data models for the Candy Mint service."""

from candy_mint.models.candy_machine import (
    CandyGuardSnapshot,
    CandyMachineSnapshot,
    MintArgs,
    MintLimitArgs,
    MintLimitGuard,
    PaymentConfig,
    TokenPaymentArgs,
    TokenPaymentGuard,
)
from candy_mint.models.results import (
    BatchMintResult,
    CandyMachineInfo,
    MintAttemptResult,
    SubmitOptions,
)

__all__ = [
    "BatchMintResult",
    "CandyGuardSnapshot",
    "CandyMachineInfo",
    "CandyMachineSnapshot",
    "MintArgs",
    "MintAttemptResult",
    "MintLimitArgs",
    "MintLimitGuard",
    "PaymentConfig",
    "SubmitOptions",
    "TokenPaymentArgs",
    "TokenPaymentGuard",
]
