"""Common test fixtures for Candy Mint tests.

This module provides fixtures and account-data builders that can be
reused across different test modules.
"""

import struct
from typing import Dict, Iterable, Optional, Tuple
from unittest.mock import AsyncMock

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from candy_mint.config import MintConfig
from candy_mint.models.candy_machine import (
    CandyGuardSnapshot,
    CandyMachineSnapshot,
    MintLimitGuard,
    TokenPaymentGuard,
)
from candy_mint.programs.candy_machine import (
    GUARD_ORDER,
    GUARD_SIZES,
    HIDDEN_SECTION,
    account_discriminator,
)
from candy_mint.services.batch_mint import SequentialScheduler
from candy_mint.services.chain_state import ChainStateFetcher
from candy_mint.services.rpc_service import RPCService
from candy_mint.wallet import KeypairWallet

TEST_SIGNATURE = "5VERv8NMvzbJMEkV8xnrLkEaWRtSz9CosKDYjCJjBRnbJLgp8uirBgmQpjKhoR4tjF3ZpRzrFmBV6UjKdiSZkQUW"
TOKEN_AMOUNT = 150_000_000


def new_address() -> str:
    """Random base58 address."""
    return str(Keypair().pubkey())


def build_machine_account(
    authority: str,
    mint_authority: str,
    collection_mint: str,
    items_available: int,
    items_redeemed: int,
    items_loaded: Optional[int] = None,
    hidden_settings: bool = False,
    token_standard: int = 0,
    creators: int = 0,
) -> bytes:
    """Serialize a Candy Machine account the way the program lays it out."""
    data = bytearray(account_discriminator("CandyMachine"))
    data += struct.pack("<BB", 1, token_standard)
    data += bytes(6)
    for key in (authority, mint_authority, collection_mint):
        data += bytes(Pubkey.from_string(key))
    data += struct.pack("<QQ", items_redeemed, items_available)
    symbol = b"BLNK"
    data += struct.pack("<I", len(symbol)) + symbol
    data += struct.pack("<HQ", 500, 0)
    data += b"\x01"  # is mutable
    data += struct.pack("<I", creators)
    for _ in range(creators):
        data += bytes(Keypair().pubkey()) + b"\x01" + bytes([100 // creators])
    data += b"\x00"  # no config line settings
    data += b"\x01" if hidden_settings else b"\x00"
    data += bytes(HIDDEN_SECTION + 4 - len(data))
    struct.pack_into("<I", data, HIDDEN_SECTION, items_loaded if items_loaded is not None else 0)
    return bytes(data)


def build_guard_account(
    base: str,
    authority: str,
    token_payment: Optional[Tuple[int, str, str]] = None,
    mint_limit: Optional[Tuple[int, int]] = None,
    other_guards: Iterable[str] = (),
) -> bytes:
    """Serialize a Candy Guard account with the given default guard set."""
    enabled = set(other_guards)
    if token_payment is not None:
        enabled.add("tokenPayment")
    if mint_limit is not None:
        enabled.add("mintLimit")

    features = 0
    for name in enabled:
        features |= 1 << GUARD_ORDER.index(name)

    data = bytearray(account_discriminator("CandyGuard"))
    data += bytes(Pubkey.from_string(base))
    data += b"\xfe"  # bump
    data += bytes(Pubkey.from_string(authority))
    data += struct.pack("<Q", features)
    for name in GUARD_ORDER:
        if name not in enabled:
            continue
        if name == "tokenPayment":
            amount, mint, destination = token_payment
            data += struct.pack("<Q", amount)
            data += bytes(Pubkey.from_string(mint)) + bytes(Pubkey.from_string(destination))
        elif name == "mintLimit":
            data += struct.pack("<BH", *mint_limit)
        else:
            data += bytes(GUARD_SIZES.get(name, 0))
    return bytes(data)


@pytest.fixture
def addresses() -> Dict[str, str]:
    """Distinct addresses used across a test."""
    return {
        name: new_address()
        for name in (
            "machine", "guard", "authority", "collection_mint",
            "base", "token_mint", "destination_ata",
        )
    }


@pytest.fixture
def mint_config(addresses):
    """Mint configuration with token payment and no inter-mint delay."""
    return MintConfig(
        candy_machine_id=addresses["machine"],
        candy_guard_id=addresses["guard"],
        token_mint=addresses["token_mint"],
        payment_destination_ata=addresses["destination_ata"],
        token_amount=TOKEN_AMOUNT,
        inter_mint_delay=0.0,
    )


@pytest.fixture
def machine_snapshot(addresses):
    """Candy machine with 1000 items of which 400 are redeemed."""
    return CandyMachineSnapshot(
        public_key=addresses["machine"],
        authority=addresses["authority"],
        mint_authority=addresses["guard"],
        collection_mint=addresses["collection_mint"],
        items_loaded=1000,
        items_redeemed=400,
        items_available=1000,
    )


@pytest.fixture
def guard_snapshot(addresses):
    """Candy guard enforcing token payment and a mint limit."""
    return CandyGuardSnapshot(
        public_key=addresses["guard"],
        base=addresses["base"],
        authority=addresses["authority"],
        token_payment=TokenPaymentGuard(
            amount=TOKEN_AMOUNT,
            mint=addresses["token_mint"],
            destination_ata=addresses["destination_ata"],
        ),
        mint_limit=MintLimitGuard(id=1, limit=5),
        enabled_guards=("tokenPayment", "mintLimit"),
    )


@pytest.fixture
def wallet():
    """Connected wallet backed by a fresh keypair."""
    return KeypairWallet(Keypair())


@pytest.fixture
def mock_rpc():
    """Mock RPC service that confirms every submitted transaction."""
    rpc = AsyncMock(spec=RPCService)
    rpc.get_latest_blockhash.return_value = str(Hash.default())
    rpc.send_and_confirm.return_value = TEST_SIGNATURE
    rpc.get_balance.return_value = 1_000_000_000
    return rpc


@pytest.fixture
def mock_fetcher(machine_snapshot, guard_snapshot):
    """Mock chain state fetcher with a funded payer."""
    fetcher = AsyncMock(spec=ChainStateFetcher)
    fetcher.fetch.return_value = (machine_snapshot, guard_snapshot)
    fetcher.get_balance.return_value = 1_000_000_000  # 1 SOL in lamports
    return fetcher


@pytest.fixture
def recorded_sleeps():
    """Delays requested through ``no_wait_scheduler``."""
    return []


@pytest.fixture
def no_wait_scheduler(recorded_sleeps):
    """Scheduler with the production delay that records instead of sleeping."""
    async def fake_sleep(delay):
        recorded_sleeps.append(delay)

    return SequentialScheduler(delay=2.0, sleep=fake_sleep)
