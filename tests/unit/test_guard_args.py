"""Unit tests for guard argument building."""

from candy_mint.models.candy_machine import CandyGuardSnapshot, PaymentConfig
from candy_mint.services.guard_args import build_mint_args


class TestBuildMintArgs:
    """Test suite for build_mint_args."""

    def test_token_payment_and_mint_limit(self, guard_snapshot, mint_config):
        args = build_mint_args(guard_snapshot, mint_config.payment)

        assert args.token_payment.mint == mint_config.token_mint
        assert args.token_payment.destination_ata == mint_config.payment_destination_ata
        assert args.mint_limit.id == 1

    def test_payment_comes_from_configuration(self, guard_snapshot, addresses):
        # The configured payment accounts are used, not the ones stored on the guard
        payment = PaymentConfig(
            token_mint=addresses["collection_mint"],
            destination_ata=addresses["base"],
            token_amount=1,
        )

        args = build_mint_args(guard_snapshot, payment)

        assert args.token_payment.mint == addresses["collection_mint"]
        assert args.token_payment.destination_ata == addresses["base"]

    def test_only_mint_limit(self, guard_snapshot, mint_config):
        guard = guard_snapshot.model_copy(update={"token_payment": None})

        args = build_mint_args(guard, mint_config.payment)

        assert args.token_payment is None
        assert args.mint_limit.id == 1

    def test_no_guards_yields_empty_args(self, addresses, mint_config):
        guard = CandyGuardSnapshot(
            public_key=addresses["guard"],
            base=addresses["base"],
            authority=addresses["authority"],
        )

        args = build_mint_args(guard, mint_config.payment)

        assert args.is_empty
