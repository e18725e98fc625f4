"""
Candy machine data models.

This module defines immutable Pydantic snapshots of the on-chain Candy
Machine and Candy Guard accounts, and the guard arguments sent with a
mint instruction. Public keys are carried as base58 strings.
"""

from typing import Annotated, Literal, Optional, Tuple

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator

from candy_mint.utils.validation import validate_solana_address

Address = Annotated[str, AfterValidator(lambda v: validate_solana_address(v, "public key"))]


class CandyMachineSnapshot(BaseModel):
    """
    Point-in-time read of a Candy Machine account.
    """
    model_config = ConfigDict(frozen=True)

    public_key: Address
    authority: Address
    mint_authority: Address
    collection_mint: Address
    items_loaded: int = Field(ge=0)
    items_redeemed: int = Field(ge=0)
    items_available: int = Field(default=0, ge=0)
    token_standard: int = 0
    version: int = 0

    @model_validator(mode="after")
    def check_redeemed(self) -> "CandyMachineSnapshot":
        if self.items_redeemed > self.items_loaded:
            raise ValueError(
                f"items_redeemed ({self.items_redeemed}) exceeds "
                f"items_loaded ({self.items_loaded})"
            )
        return self

    @property
    def is_programmable(self) -> bool:
        """Whether the machine mints programmable NFTs."""
        return self.token_standard == 4


class TokenPaymentGuard(BaseModel):
    """Token payment guard: charges ``amount`` of ``mint`` per mint."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["tokenPayment"] = "tokenPayment"
    amount: int = Field(ge=0)
    mint: Address
    destination_ata: Address


class MintLimitGuard(BaseModel):
    """Mint limit guard: caps mints per wallet under counter ``id``."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["mintLimit"] = "mintLimit"
    id: int = Field(ge=0, le=255)
    limit: int = Field(ge=0)


class CandyGuardSnapshot(BaseModel):
    """
    Point-in-time read of the default guard set of a Candy Guard account.

    A guard that is ``None`` is not enforced for this machine.
    """
    model_config = ConfigDict(frozen=True)

    public_key: Address
    base: Address
    authority: Address
    token_payment: Optional[TokenPaymentGuard] = None
    mint_limit: Optional[MintLimitGuard] = None
    enabled_guards: Tuple[str, ...] = ()


class TokenPaymentArgs(BaseModel):
    model_config = ConfigDict(frozen=True)

    mint: Address
    destination_ata: Address


class MintLimitArgs(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=0, le=255)


class MintArgs(BaseModel):
    """Guard-specific arguments for a single mint instruction."""
    model_config = ConfigDict(frozen=True)

    token_payment: Optional[TokenPaymentArgs] = None
    mint_limit: Optional[MintLimitArgs] = None

    @property
    def is_empty(self) -> bool:
        return self.token_payment is None and self.mint_limit is None


class PaymentConfig(BaseModel):
    """Static token payment settings for the mint."""
    model_config = ConfigDict(frozen=True)

    token_mint: Address
    destination_ata: Address
    token_amount: int = Field(ge=0)
