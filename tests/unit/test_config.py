"""Unit tests for configuration loading."""

import pytest

from candy_mint.config import (
    MintConfig,
    commitment_validator,
    get_env_var,
    get_mint_config,
    get_server_config,
    get_solana_config,
    int_validator,
)
from candy_mint.constants import DEFAULT_COMPUTE_UNIT_LIMIT, DEFAULT_NFT_NAME, MIN_FEE_RESERVE_LAMPORTS
from tests.fixtures.common import new_address


@pytest.fixture(autouse=True)
def clear_config_cache():
    get_solana_config.cache_clear()
    get_mint_config.cache_clear()
    get_server_config.cache_clear()
    yield
    get_solana_config.cache_clear()
    get_mint_config.cache_clear()
    get_server_config.cache_clear()


class TestEnvVars:
    """Test suite for environment variable helpers."""

    def test_default_when_missing(self, monkeypatch):
        monkeypatch.delenv("CANDY_TEST_VAR", raising=False)
        assert get_env_var("CANDY_TEST_VAR", "fallback") == "fallback"

    def test_empty_value_counts_as_missing(self, monkeypatch):
        monkeypatch.setenv("CANDY_TEST_VAR", "")
        with pytest.raises(ValueError):
            get_env_var("CANDY_TEST_VAR", required=True)

    def test_validator_failure(self, monkeypatch):
        monkeypatch.setenv("CANDY_TEST_VAR", "-3")
        with pytest.raises(ValueError, match="CANDY_TEST_VAR"):
            get_env_var("CANDY_TEST_VAR", validator=int_validator)

    def test_commitment_validator(self):
        assert commitment_validator("Finalized") == "finalized"
        with pytest.raises(ValueError):
            commitment_validator("max")


class TestMintConfig:
    """Test suite for MintConfig."""

    def test_from_environment(self, monkeypatch):
        # Setup
        machine, mint, ata = new_address(), new_address(), new_address()
        monkeypatch.setenv("CANDY_MACHINE_ID", machine)
        monkeypatch.setenv("TOKEN_MINT", mint)
        monkeypatch.setenv("PAYMENT_DESTINATION_ATA", ata)
        monkeypatch.setenv("TOKEN_AMOUNT", "150000000")
        monkeypatch.setenv("INTER_MINT_DELAY", "0.5")
        monkeypatch.delenv("CANDY_GUARD_ID", raising=False)
        monkeypatch.delenv("COMPUTE_UNIT_LIMIT", raising=False)
        monkeypatch.delenv("NFT_NAME", raising=False)
        monkeypatch.delenv("MIN_FEE_RESERVE_LAMPORTS", raising=False)

        # Execute
        config = get_mint_config()

        # Verify
        assert config.candy_machine_id == machine
        assert config.candy_guard_id is None
        assert config.token_amount == 150_000_000
        assert config.inter_mint_delay == 0.5
        assert config.compute_unit_limit == DEFAULT_COMPUTE_UNIT_LIMIT
        assert config.nft_name == DEFAULT_NFT_NAME
        assert config.min_fee_reserve_lamports == MIN_FEE_RESERVE_LAMPORTS
        assert config.payment.destination_ata == ata

    def test_missing_machine_id(self, monkeypatch):
        monkeypatch.delenv("CANDY_MACHINE_ID", raising=False)
        with pytest.raises(ValueError, match="CANDY_MACHINE_ID"):
            get_mint_config()

    def test_invalid_address(self):
        with pytest.raises(ValueError):
            MintConfig(
                candy_machine_id="not-a-key!",
                token_mint=new_address(),
                payment_destination_ata=new_address(),
                token_amount=1,
            )

    def test_submit_option_defaults(self, mint_config):
        assert mint_config.single_submit_options.skip_preflight
        assert mint_config.single_submit_options.max_retries == 1
        assert not mint_config.batch_submit_options.skip_preflight
        assert mint_config.batch_submit_options.max_retries == 3


class TestServerConfig:
    """Test suite for ServerConfig."""

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("PORT", "9000")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("CORS_ORIGINS", "http://a.test,http://b.test")

        config = get_server_config()

        assert config.port == 9000
        assert config.log_level == "DEBUG"
        assert config.cors_origins == ["http://a.test", "http://b.test"]
        assert config.bind_address.endswith(":9000")
