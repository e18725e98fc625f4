"""Constants used throughout the Candy Mint service.

This module defines program IDs and minting defaults to avoid duplication
and ensure consistency.
"""

# Solana system program IDs
SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
ASSOCIATED_TOKEN_PROGRAM_ID = "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
METADATA_PROGRAM_ID = "metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s"

# Sysvars
SYSVAR_INSTRUCTIONS_ID = "Sysvar1nstructions1111111111111111111111111"
SYSVAR_SLOT_HASHES_ID = "SysvarS1otHashes111111111111111111111111111"

# Metaplex Candy Machine v3 programs
CANDY_MACHINE_PROGRAM_ID = "CndyV3LdqHUfDLmE5naZjVN8rBZz4tqhdefbAnjHG3JR"
CANDY_GUARD_PROGRAM_ID = "Guard1JwRhJkVH6XZhzoYxeBVQe872VH6QggF4BWmS9g"

# Fee accounting
MIN_FEE_RESERVE_LAMPORTS = 10_000_000  # 0.01 SOL per mint

# Payment token amounts are expressed with 6 decimals
TOKEN_DECIMALS_DIVISOR = 1_000_000

# Minting defaults
DEFAULT_COMPUTE_UNIT_LIMIT = 800_000
DEFAULT_INTER_MINT_DELAY = 2.0  # seconds
DEFAULT_NFT_NAME = "Blinky OG VIP NFT"
UNKNOWN_MINT_ERROR = "Unknown minting error"

# Error fragments that mean the payer cannot cover another attempt
INSUFFICIENT_FUNDS_MARKERS = (
    "insufficient funds",
    "insufficient lamports",
    "no record of a prior credit",
)
