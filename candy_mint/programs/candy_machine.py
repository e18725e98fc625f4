"""Candy Machine v3 program adapter.

Decodes the Candy Machine and Candy Guard accounts into snapshots and
encodes the compute-budget and guarded ``mint_v2`` instructions.

Only the fields the minting core reads are decoded. Guards are decoded up
to and including ``mintLimit``; later guards in the set are reported by
name in ``enabled_guards`` but not parsed.
"""

import hashlib
import struct
from typing import List, Optional, Tuple

from solders.compute_budget import set_compute_unit_limit
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from candy_mint.constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    CANDY_GUARD_PROGRAM_ID,
    CANDY_MACHINE_PROGRAM_ID,
    METADATA_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    SYSVAR_INSTRUCTIONS_ID,
    SYSVAR_SLOT_HASHES_ID,
    TOKEN_PROGRAM_ID,
)
from candy_mint.models.candy_machine import (
    CandyGuardSnapshot,
    CandyMachineSnapshot,
    MintArgs,
    MintLimitGuard,
    TokenPaymentGuard,
)
from candy_mint.utils.errors import DataParsingError

# Offset of the config-line section; the loaded item count is stored there
HIDDEN_SECTION = 850

# Default guard set, in feature-flag bit order
GUARD_ORDER = (
    "botTax",
    "solPayment",
    "tokenPayment",
    "startDate",
    "thirdPartySigner",
    "tokenGate",
    "gatekeeper",
    "endDate",
    "allowList",
    "mintLimit",
    "nftPayment",
    "redeemedAmount",
    "addressGate",
    "nftGate",
    "nftBurn",
    "tokenBurn",
    "freezeSolPayment",
    "freezeTokenPayment",
    "programGate",
    "allocation",
    "token2022Payment",
)

# Serialized sizes of the guards preceding mintLimit
GUARD_SIZES = {
    "botTax": 9,
    "solPayment": 40,
    "tokenPayment": 72,
    "startDate": 8,
    "thirdPartySigner": 32,
    "tokenGate": 40,
    "gatekeeper": 33,
    "endDate": 8,
    "allowList": 32,
    "mintLimit": 3,
}


def account_discriminator(name: str) -> bytes:
    """Anchor account discriminator for ``name``."""
    return hashlib.sha256(f"account:{name}".encode()).digest()[:8]


def instruction_discriminator(name: str) -> bytes:
    """Anchor instruction discriminator for ``name``."""
    return hashlib.sha256(f"global:{name}".encode()).digest()[:8]


class _Reader:
    """Little-endian Borsh cursor over account bytes."""

    def __init__(self, data: bytes, offset: int = 0, data_type: str = "account"):
        self.data = data
        self.offset = offset
        self.data_type = data_type

    def take(self, size: int) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise DataParsingError(
                f"Unexpected end of {self.data_type} data at offset {self.offset}",
                data_type=self.data_type
            )
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def unpack(self, fmt: str) -> int:
        return struct.unpack(fmt, self.take(struct.calcsize(fmt)))[0]

    def u8(self) -> int:
        return self.unpack("<B")

    def u16(self) -> int:
        return self.unpack("<H")

    def u32(self) -> int:
        return self.unpack("<I")

    def u64(self) -> int:
        return self.unpack("<Q")

    def boolean(self) -> bool:
        return self.u8() != 0

    def pubkey(self) -> str:
        return str(Pubkey.from_bytes(self.take(32)))

    def string(self) -> str:
        return self.take(self.u32()).decode("utf-8", errors="replace")

    def skip(self, size: int) -> None:
        self.take(size)


def _check_discriminator(data: bytes, name: str) -> None:
    if data[:8] != account_discriminator(name):
        raise DataParsingError(
            f"Account is not a {name} account",
            data_type=name
        )


def decode_candy_machine(address: str, data: bytes) -> CandyMachineSnapshot:
    """Decode a Candy Machine account.

    Raises:
        DataParsingError: If the data is not a Candy Machine account
    """
    _check_discriminator(data, "CandyMachine")
    reader = _Reader(data, 8, data_type="CandyMachine")
    version = reader.u8()
    token_standard = reader.u8()
    reader.skip(6)  # feature flags
    authority = reader.pubkey()
    mint_authority = reader.pubkey()
    collection_mint = reader.pubkey()
    items_redeemed = reader.u64()

    # CandyMachineData
    items_available = reader.u64()
    reader.string()  # symbol
    reader.u16()  # seller fee basis points
    reader.u64()  # max supply
    reader.boolean()  # is mutable
    for _ in range(reader.u32()):
        reader.skip(32 + 1 + 1)  # creator address, verified, share
    if reader.boolean():
        # config line settings
        reader.string()
        reader.u32()
        reader.string()
        reader.u32()
        reader.boolean()
    has_hidden_settings = reader.boolean()

    if has_hidden_settings:
        items_loaded = items_available
    else:
        items_loaded = _Reader(data, HIDDEN_SECTION, data_type="CandyMachine").u32()

    try:
        return CandyMachineSnapshot(
            public_key=address,
            authority=authority,
            mint_authority=mint_authority,
            collection_mint=collection_mint,
            items_loaded=items_loaded,
            items_redeemed=items_redeemed,
            items_available=items_available,
            token_standard=token_standard,
            version=version,
        )
    except ValueError as e:
        raise DataParsingError(str(e), data_type="CandyMachine") from e


def decode_candy_guard(address: str, data: bytes) -> CandyGuardSnapshot:
    """Decode the default guard set of a Candy Guard account.

    Raises:
        DataParsingError: If the data is not a Candy Guard account
    """
    _check_discriminator(data, "CandyGuard")
    reader = _Reader(data, 8, data_type="CandyGuard")
    base = reader.pubkey()
    reader.u8()  # bump
    authority = reader.pubkey()

    features = reader.u64()
    enabled = []
    for index in range(64):
        if features & (1 << index):
            enabled.append(GUARD_ORDER[index] if index < len(GUARD_ORDER) else f"guard{index}")

    token_payment: Optional[TokenPaymentGuard] = None
    mint_limit: Optional[MintLimitGuard] = None
    for name in GUARD_ORDER[:GUARD_ORDER.index("mintLimit") + 1]:
        if name not in enabled:
            continue
        if name == "tokenPayment":
            token_payment = TokenPaymentGuard(
                amount=reader.u64(),
                mint=reader.pubkey(),
                destination_ata=reader.pubkey(),
            )
        elif name == "mintLimit":
            mint_limit = MintLimitGuard(id=reader.u8(), limit=reader.u16())
        else:
            reader.skip(GUARD_SIZES[name])

    return CandyGuardSnapshot(
        public_key=address,
        base=base,
        authority=authority,
        token_payment=token_payment,
        mint_limit=mint_limit,
        enabled_guards=tuple(enabled),
    )


# PDA helpers

def find_candy_machine_authority_pda(candy_machine: Pubkey,
                                     program_id: str = CANDY_MACHINE_PROGRAM_ID) -> Pubkey:
    return Pubkey.find_program_address(
        [b"candy_machine", bytes(candy_machine)], Pubkey.from_string(program_id)
    )[0]


def find_metadata_pda(mint: Pubkey) -> Pubkey:
    program = Pubkey.from_string(METADATA_PROGRAM_ID)
    return Pubkey.find_program_address([b"metadata", bytes(program), bytes(mint)], program)[0]


def find_master_edition_pda(mint: Pubkey) -> Pubkey:
    program = Pubkey.from_string(METADATA_PROGRAM_ID)
    return Pubkey.find_program_address(
        [b"metadata", bytes(program), bytes(mint), b"edition"], program
    )[0]


def find_token_record_pda(mint: Pubkey, token: Pubkey) -> Pubkey:
    program = Pubkey.from_string(METADATA_PROGRAM_ID)
    return Pubkey.find_program_address(
        [b"metadata", bytes(program), bytes(mint), b"token_record", bytes(token)], program
    )[0]


def find_collection_delegate_record_pda(collection_mint: Pubkey, update_authority: Pubkey,
                                        delegate: Pubkey) -> Pubkey:
    program = Pubkey.from_string(METADATA_PROGRAM_ID)
    return Pubkey.find_program_address(
        [
            b"metadata",
            bytes(program),
            bytes(collection_mint),
            b"collection_delegate",
            bytes(update_authority),
            bytes(delegate),
        ],
        program,
    )[0]


def find_associated_token_address(owner: Pubkey, mint: Pubkey) -> Pubkey:
    return Pubkey.find_program_address(
        [bytes(owner), bytes(Pubkey.from_string(TOKEN_PROGRAM_ID)), bytes(mint)],
        Pubkey.from_string(ASSOCIATED_TOKEN_PROGRAM_ID),
    )[0]


def find_mint_counter_pda(mint_limit_id: int, user: Pubkey, candy_guard: Pubkey,
                          candy_machine: Pubkey,
                          program_id: str = CANDY_GUARD_PROGRAM_ID) -> Pubkey:
    return Pubkey.find_program_address(
        [b"mint_limit", bytes([mint_limit_id]), bytes(user), bytes(candy_guard), bytes(candy_machine)],
        Pubkey.from_string(program_id),
    )[0]


# Instruction builders

def build_compute_limit_instruction(units: int) -> Instruction:
    """Compute-budget directive raising the transaction's unit limit."""
    return set_compute_unit_limit(units)


def _guard_remaining_accounts(machine: CandyMachineSnapshot, guard: CandyGuardSnapshot,
                              args: MintArgs, minter: Pubkey,
                              guard_program_id: str) -> List[AccountMeta]:
    accounts: List[AccountMeta] = []
    if args.token_payment is not None:
        payment_mint = Pubkey.from_string(args.token_payment.mint)
        accounts.append(AccountMeta(find_associated_token_address(minter, payment_mint), False, True))
        accounts.append(AccountMeta(Pubkey.from_string(args.token_payment.destination_ata), False, True))
    if args.mint_limit is not None:
        counter = find_mint_counter_pda(
            args.mint_limit.id,
            minter,
            Pubkey.from_string(guard.public_key),
            Pubkey.from_string(machine.public_key),
            guard_program_id,
        )
        accounts.append(AccountMeta(counter, False, True))
    return accounts


def build_mint_instruction(
    machine: CandyMachineSnapshot,
    guard: CandyGuardSnapshot,
    nft_mint: Pubkey,
    minter: Pubkey,
    args: MintArgs,
    candy_machine_program_id: str = CANDY_MACHINE_PROGRAM_ID,
    candy_guard_program_id: str = CANDY_GUARD_PROGRAM_ID,
    label: Optional[str] = None,
) -> Instruction:
    """Build the Candy Guard ``mint_v2`` instruction.

    ``minter`` pays for and receives the NFT and acts as mint authority.
    Optional accounts that do not apply are filled with the guard program
    ID.
    """
    guard_program = Pubkey.from_string(candy_guard_program_id)
    candy_machine = Pubkey.from_string(machine.public_key)
    collection_mint = Pubkey.from_string(machine.collection_mint)
    collection_update_authority = Pubkey.from_string(machine.authority)
    authority_pda = find_candy_machine_authority_pda(candy_machine, candy_machine_program_id)
    token = find_associated_token_address(minter, nft_mint)
    token_record = (
        find_token_record_pda(nft_mint, token) if machine.is_programmable else guard_program
    )

    accounts = [
        AccountMeta(Pubkey.from_string(guard.public_key), False, False),
        AccountMeta(Pubkey.from_string(candy_machine_program_id), False, False),
        AccountMeta(candy_machine, False, True),
        AccountMeta(authority_pda, False, True),
        AccountMeta(minter, True, True),  # payer
        AccountMeta(minter, True, True),  # minter
        AccountMeta(nft_mint, True, True),
        AccountMeta(minter, True, False),  # nft mint authority
        AccountMeta(find_metadata_pda(nft_mint), False, True),
        AccountMeta(find_master_edition_pda(nft_mint), False, True),
        AccountMeta(token, False, True),
        AccountMeta(token_record, False, True),
        AccountMeta(
            find_collection_delegate_record_pda(collection_mint, collection_update_authority, authority_pda),
            False,
            False,
        ),
        AccountMeta(collection_mint, False, False),
        AccountMeta(find_metadata_pda(collection_mint), False, True),
        AccountMeta(find_master_edition_pda(collection_mint), False, False),
        AccountMeta(collection_update_authority, False, False),
        AccountMeta(Pubkey.from_string(METADATA_PROGRAM_ID), False, False),
        AccountMeta(Pubkey.from_string(TOKEN_PROGRAM_ID), False, False),
        AccountMeta(Pubkey.from_string(ASSOCIATED_TOKEN_PROGRAM_ID), False, False),
        AccountMeta(Pubkey.from_string(SYSTEM_PROGRAM_ID), False, False),
        AccountMeta(Pubkey.from_string(SYSVAR_INSTRUCTIONS_ID), False, False),
        AccountMeta(Pubkey.from_string(SYSVAR_SLOT_HASHES_ID), False, False),
        AccountMeta(guard_program, False, False),  # authorization rules program
        AccountMeta(guard_program, False, False),  # authorization rules
    ]
    accounts.extend(_guard_remaining_accounts(machine, guard, args, minter, candy_guard_program_id))

    data = instruction_discriminator("mint_v2")
    # Token payment and mint limit take no instruction-level arguments
    data += struct.pack("<I", 0)
    if label is None:
        data += b"\x00"
    else:
        encoded = label.encode("utf-8")
        data += b"\x01" + struct.pack("<I", len(encoded)) + encoded

    return Instruction(guard_program, data, accounts)


def build_mint_instructions(
    machine: CandyMachineSnapshot,
    guard: CandyGuardSnapshot,
    nft_mint: Pubkey,
    minter: Pubkey,
    args: MintArgs,
    compute_unit_limit: int,
    candy_machine_program_id: str = CANDY_MACHINE_PROGRAM_ID,
    candy_guard_program_id: str = CANDY_GUARD_PROGRAM_ID,
) -> Tuple[Instruction, Instruction]:
    """Compute-unit limit followed by the guarded mint instruction."""
    return (
        build_compute_limit_instruction(compute_unit_limit),
        build_mint_instruction(
            machine,
            guard,
            nft_mint,
            minter,
            args,
            candy_machine_program_id=candy_machine_program_id,
            candy_guard_program_id=candy_guard_program_id,
        ),
    )
