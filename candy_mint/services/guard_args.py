"""Guard argument building."""

import logging

from candy_mint.models.candy_machine import (
    CandyGuardSnapshot,
    MintArgs,
    MintLimitArgs,
    PaymentConfig,
    TokenPaymentArgs,
)

logger = logging.getLogger(__name__)


def build_mint_args(guard: CandyGuardSnapshot, payment_config: PaymentConfig) -> MintArgs:
    """Build the mint arguments required by the guards enabled on ``guard``.

    Guards missing from the snapshot are left out; a machine without any
    guard yields empty arguments.
    """
    token_payment = None
    mint_limit = None

    if guard.token_payment is not None:
        logger.debug(f"Token payment guard found, paying with {payment_config.token_mint}")
        token_payment = TokenPaymentArgs(
            mint=payment_config.token_mint,
            destination_ata=payment_config.destination_ata,
        )

    if guard.mint_limit is not None:
        logger.debug(f"Mint limit guard found with id {guard.mint_limit.id}")
        mint_limit = MintLimitArgs(id=guard.mint_limit.id)

    return MintArgs(token_payment=token_payment, mint_limit=mint_limit)
