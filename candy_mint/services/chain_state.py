"""
Chain state fetching for the Candy Mint service.

This module reads the Candy Machine and Candy Guard accounts into
snapshots and reads the payer's balances. Nothing is cached and nothing
is retried at this layer.
"""

from decimal import Decimal
from typing import Optional, Tuple

from candy_mint.config import MintConfig
from candy_mint.models.candy_machine import CandyGuardSnapshot, CandyMachineSnapshot
from candy_mint.programs.candy_machine import decode_candy_guard, decode_candy_machine
from candy_mint.services.base_service import BaseService
from candy_mint.services.rpc_service import RPCService
from candy_mint.utils.errors import CandyMintError, ChainFetchError


class ChainStateFetcher(BaseService):
    """Fetches on-chain candy machine state and payer balances."""

    def __init__(self, rpc: RPCService, config: Optional[MintConfig] = None):
        """Initialize the fetcher.

        Args:
            rpc: RPC service used for all reads
            config: Optional mint configuration
        """
        super().__init__()
        self.rpc = rpc
        self.config = config

    async def _read_account(self, address: str, kind: str) -> bytes:
        try:
            data = await self.rpc.get_account_data(address)
        except CandyMintError as e:
            raise ChainFetchError(
                f"Failed to fetch {kind} account {address}: {e.message}",
                account=address,
                details={"cause": e.code.value}
            ) from e
        if data is None:
            raise ChainFetchError(f"{kind} account {address} not found", account=address)
        return data

    async def fetch_candy_machine(self, machine_id: str) -> CandyMachineSnapshot:
        data = await self._read_account(machine_id, "Candy Machine")
        try:
            return decode_candy_machine(machine_id, data)
        except CandyMintError as e:
            raise ChainFetchError(
                f"Failed to decode Candy Machine {machine_id}: {e.message}",
                account=machine_id
            ) from e

    async def fetch_candy_guard(self, guard_id: str) -> CandyGuardSnapshot:
        data = await self._read_account(guard_id, "Candy Guard")
        try:
            return decode_candy_guard(guard_id, data)
        except CandyMintError as e:
            raise ChainFetchError(
                f"Failed to decode Candy Guard {guard_id}: {e.message}",
                account=guard_id
            ) from e

    async def fetch(
        self,
        machine_id: str,
        guard_id: Optional[str] = None
    ) -> Tuple[CandyMachineSnapshot, CandyGuardSnapshot]:
        """Fetch the machine and guard snapshots.

        Args:
            machine_id: Candy machine address
            guard_id: Candy guard address; defaults to the machine's mint authority

        Returns:
            Tuple of (machine snapshot, guard snapshot)

        Raises:
            ChainFetchError: If either account cannot be fetched or decoded
        """
        async with self.log_timing("fetch_candy_machine_state"):
            machine = await self.fetch_candy_machine(machine_id)
            if guard_id is None:
                guard_id = machine.mint_authority
            elif guard_id != machine.mint_authority:
                self.log_with_context(
                    "warning",
                    "Candy guard does not match the machine mint authority",
                    guard_id=guard_id,
                    mint_authority=machine.mint_authority
                )
            guard = await self.fetch_candy_guard(guard_id)

        self.log_with_context(
            "info",
            "Candy machine state loaded",
            machine=machine_id,
            items_loaded=machine.items_loaded,
            items_redeemed=machine.items_redeemed,
            guards=list(guard.enabled_guards)
        )
        return machine, guard

    async def get_balance(self, identity: str) -> int:
        """Current lamport balance of ``identity``.

        Raises:
            RpcError: If the balance cannot be read
        """
        return await self.rpc.get_balance(identity)

    async def get_token_balance(self, owner: str, mint: str) -> Decimal:
        """Total UI amount of ``mint`` held by ``owner`` across token accounts."""
        accounts = await self.rpc.get_token_accounts_by_owner(owner, mint)
        total = Decimal(0)
        for account in accounts:
            info = account.get("account", {}).get("data", {}).get("parsed", {}).get("info", {})
            amount = info.get("tokenAmount", {}).get("uiAmountString")
            if amount is not None:
                total += Decimal(amount)
        return total
