"""Configuration module for the Candy Mint service."""

# Standard library imports
import os
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable, List, Optional

# Third-party library imports
from dotenv import load_dotenv
from solana.rpc.commitment import Confirmed

# Internal imports
from candy_mint.constants import (
    CANDY_GUARD_PROGRAM_ID,
    CANDY_MACHINE_PROGRAM_ID,
    DEFAULT_COMPUTE_UNIT_LIMIT,
    DEFAULT_INTER_MINT_DELAY,
    DEFAULT_NFT_NAME,
    MIN_FEE_RESERVE_LAMPORTS,
)
from candy_mint.models.candy_machine import PaymentConfig
from candy_mint.models.results import SubmitOptions
from candy_mint.utils.validation import validate_solana_address

# Load environment variables from .env file
load_dotenv()


def get_env_var(key: str, default: Any = None, required: bool = False,
                validator: Optional[Callable[[str], Any]] = None) -> Any:
    """Get and validate environment variable.

    Args:
        key: Environment variable name
        default: Default value if not present
        required: If True, raises ValueError when not found
        validator: Optional validation function

    Returns:
        The environment variable value or default

    Raises:
        ValueError: If required and not found, or fails validation
    """
    value = os.environ.get(key)

    if value is None or value == "":
        if required:
            raise ValueError(f"Required environment variable '{key}' not found")
        return default

    if validator:
        try:
            return validator(value)
        except Exception as e:
            raise ValueError(f"Invalid value for environment variable '{key}': {str(e)}")

    return value


def bool_validator(value: str) -> bool:
    """Validate and convert string to boolean."""
    return value.lower() in ("true", "1", "yes", "y", "on")


def int_validator(value: str) -> int:
    """Validate and convert string to a non-negative integer.

    Raises:
        ValueError: If not a valid integer
    """
    try:
        result = int(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a valid integer")
    if result < 0:
        raise ValueError(f"'{value}' must not be negative")
    return result


def float_validator(value: str) -> float:
    """Validate and convert string to a non-negative float.

    Raises:
        ValueError: If not a valid number
    """
    try:
        result = float(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a valid number")
    if result < 0:
        raise ValueError(f"'{value}' must not be negative")
    return result


def url_validator(value: str) -> str:
    """Validate URL format.

    Raises:
        ValueError: If not a valid URL format
    """
    url_pattern = re.compile(
        r'^(https?):\/\/'  # http:// or https://
        r'(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+(?:[A-Z]{2,6}\.?|[A-Z0-9-]{2,}\.?)|'  # domain
        r'localhost|'  # localhost
        r'\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})'  # or IPv4
        r'(?::\d+)?'  # optional port
        r'(?:/?|[/?]\S+)$', re.IGNORECASE)

    if not url_pattern.match(value):
        raise ValueError(f"'{value}' is not a valid URL")
    return value


def commitment_validator(value: str) -> str:
    """Validate Solana commitment level.

    Raises:
        ValueError: If not a valid commitment level
    """
    valid_commitments = ("processed", "confirmed", "finalized")
    if value.lower() not in valid_commitments:
        raise ValueError(f"Commitment must be one of: {', '.join(valid_commitments)}")
    return value.lower()


def log_level_validator(value: str) -> str:
    """Validate log level.

    Raises:
        ValueError: If not a valid log level
    """
    valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
    upper_value = value.upper()
    if upper_value not in valid_levels:
        raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
    return upper_value


def pubkey_validator(value: str) -> str:
    """Validate a base58 Solana address."""
    return validate_solana_address(value)


@dataclass
class SolanaConfig:
    """Configuration for Solana RPC connection."""

    rpc_url: str
    commitment: str = Confirmed
    timeout: float = 30.0  # seconds
    max_retries: int = 3
    confirm_timeout: float = 60.0  # seconds
    confirm_poll_interval: float = 0.5  # seconds


@lru_cache()
def get_solana_config() -> SolanaConfig:
    """Get Solana configuration from environment variables.

    Returns:
        SolanaConfig instance

    Raises:
        ValueError: If environment variables fail validation
    """
    return SolanaConfig(
        rpc_url=get_env_var("SOLANA_RPC_URL", "https://api.devnet.solana.com",
                            validator=url_validator),
        commitment=get_env_var("SOLANA_COMMITMENT", Confirmed,
                               validator=commitment_validator),
        timeout=get_env_var("SOLANA_TIMEOUT", 30.0, validator=float_validator),
        max_retries=get_env_var("SOLANA_MAX_RETRIES", 3, validator=int_validator),
        confirm_timeout=get_env_var("CONFIRM_TIMEOUT", 60.0, validator=float_validator),
        confirm_poll_interval=get_env_var("CONFIRM_POLL_INTERVAL", 0.5, validator=float_validator),
    )


@dataclass
class MintConfig:
    """Static configuration of the candy machine being minted from."""

    candy_machine_id: str
    token_mint: str
    payment_destination_ata: str
    token_amount: int
    candy_guard_id: Optional[str] = None
    candy_machine_program_id: str = CANDY_MACHINE_PROGRAM_ID
    candy_guard_program_id: str = CANDY_GUARD_PROGRAM_ID
    min_fee_reserve_lamports: int = MIN_FEE_RESERVE_LAMPORTS
    inter_mint_delay: float = DEFAULT_INTER_MINT_DELAY
    compute_unit_limit: int = DEFAULT_COMPUTE_UNIT_LIMIT
    nft_name: str = DEFAULT_NFT_NAME
    wallet_keypair_path: str = os.path.expanduser("~/.config/solana/id.json")
    # Single mints skip preflight to avoid duplicate wallet prompts
    single_submit_options: SubmitOptions = field(
        default_factory=lambda: SubmitOptions(skip_preflight=True, max_retries=1)
    )
    batch_submit_options: SubmitOptions = field(
        default_factory=lambda: SubmitOptions(skip_preflight=False, max_retries=3)
    )

    def __post_init__(self):
        """Validate configuration after initialization."""
        for name in ("candy_machine_id", "token_mint", "payment_destination_ata",
                     "candy_machine_program_id", "candy_guard_program_id"):
            validate_solana_address(getattr(self, name), name)
        if self.candy_guard_id is not None:
            validate_solana_address(self.candy_guard_id, "candy_guard_id")
        if self.token_amount < 0:
            raise ValueError(f"Invalid token_amount: {self.token_amount}")
        if self.compute_unit_limit <= 0:
            raise ValueError(f"Invalid compute_unit_limit: {self.compute_unit_limit}")

    @property
    def payment(self) -> PaymentConfig:
        """Token payment settings derived from this configuration."""
        return PaymentConfig(
            token_mint=self.token_mint,
            destination_ata=self.payment_destination_ata,
            token_amount=self.token_amount,
        )


@lru_cache()
def get_mint_config() -> MintConfig:
    """Get mint configuration from environment variables.

    Returns:
        MintConfig instance

    Raises:
        ValueError: If required variables are missing or fail validation
    """
    return MintConfig(
        candy_machine_id=get_env_var("CANDY_MACHINE_ID", required=True, validator=pubkey_validator),
        candy_guard_id=get_env_var("CANDY_GUARD_ID", validator=pubkey_validator),
        candy_machine_program_id=get_env_var("CANDY_MACHINE_PROGRAM_ID", CANDY_MACHINE_PROGRAM_ID,
                                             validator=pubkey_validator),
        candy_guard_program_id=get_env_var("CANDY_GUARD_PROGRAM_ID", CANDY_GUARD_PROGRAM_ID,
                                           validator=pubkey_validator),
        token_mint=get_env_var("TOKEN_MINT", required=True, validator=pubkey_validator),
        payment_destination_ata=get_env_var("PAYMENT_DESTINATION_ATA", required=True,
                                            validator=pubkey_validator),
        token_amount=get_env_var("TOKEN_AMOUNT", 0, validator=int_validator),
        min_fee_reserve_lamports=get_env_var("MIN_FEE_RESERVE_LAMPORTS", MIN_FEE_RESERVE_LAMPORTS,
                                             validator=int_validator),
        inter_mint_delay=get_env_var("INTER_MINT_DELAY", DEFAULT_INTER_MINT_DELAY,
                                     validator=float_validator),
        compute_unit_limit=get_env_var("COMPUTE_UNIT_LIMIT", DEFAULT_COMPUTE_UNIT_LIMIT,
                                       validator=int_validator),
        nft_name=get_env_var("NFT_NAME", DEFAULT_NFT_NAME),
        wallet_keypair_path=os.path.expanduser(
            get_env_var("WALLET_KEYPAIR_PATH", "~/.config/solana/id.json")
        ),
    )


@dataclass
class ServerConfig:
    """Configuration for the HTTP server."""

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @property
    def bind_address(self) -> str:
        """Get the bind address for the server."""
        return f"{self.host}:{self.port}"


@lru_cache()
def get_server_config() -> ServerConfig:
    """Get server configuration from environment variables.

    Raises:
        ValueError: If environment variables fail validation
    """
    return ServerConfig(
        host=get_env_var("HOST", "0.0.0.0"),
        port=get_env_var("PORT", 8000, validator=int_validator),
        debug=get_env_var("DEBUG", False, validator=bool_validator),
        log_level=get_env_var("LOG_LEVEL", "INFO", validator=log_level_validator),
        cors_origins=get_env_var("CORS_ORIGINS", "*").split(","),
    )
