"""Mint service facade.

This module exposes the minting core to the UI layer: one-time state
initialization, single and batch minting, and display information.
"""

from decimal import Decimal
from typing import Any, Callable, Optional

from candy_mint.config import MintConfig
from candy_mint.constants import TOKEN_DECIMALS_DIVISOR
from candy_mint.models.results import (
    BatchMintResult,
    CandyMachineInfo,
    MintAttemptResult,
    SubmitOptions,
)
from candy_mint.services.base_service import BaseService
from candy_mint.services.batch_mint import BatchMintOrchestrator, SequentialScheduler
from candy_mint.services.chain_state import ChainStateFetcher
from candy_mint.services.mint_executor import MintTransactionExecutor
from candy_mint.services.rpc_service import RPCService
from candy_mint.services.state import ServiceState
from candy_mint.utils.errors import ChainFetchError
from candy_mint.wallet import WalletSession


class MintServiceFacade(BaseService):
    """Entry point for the UI layer.

    Owns the ``ServiceState`` and hands it to the batch orchestrator.
    """

    def __init__(
        self,
        fetcher: ChainStateFetcher,
        executor: MintTransactionExecutor,
        wallet: WalletSession,
        config: MintConfig,
        scheduler: Optional[SequentialScheduler] = None
    ):
        super().__init__()
        self.fetcher = fetcher
        self.wallet = wallet
        self.config = config
        self.state = ServiceState()
        self.orchestrator = BatchMintOrchestrator(
            self.state, executor, fetcher, wallet, config, scheduler=scheduler
        )

    @classmethod
    def create(
        cls,
        rpc: RPCService,
        wallet: WalletSession,
        config: MintConfig,
        focus_hook: Optional[Callable[[], Any]] = None,
        scheduler: Optional[SequentialScheduler] = None
    ) -> "MintServiceFacade":
        """Wire a facade and its collaborators around one RPC service."""
        fetcher = ChainStateFetcher(rpc, config)
        executor = MintTransactionExecutor(rpc, fetcher, wallet, config, focus_hook=focus_hook)
        return cls(fetcher, executor, wallet, config, scheduler=scheduler)

    @property
    def is_initialized(self) -> bool:
        return self.state.is_ready

    async def initialize(self) -> None:
        """Fetch and store the candy machine and candy guard snapshots.

        Each call re-fetches both accounts. On failure the previous
        snapshots are discarded so the service reports not ready.

        Raises:
            ChainFetchError: If either account cannot be loaded
        """
        try:
            machine, guard = await self.fetcher.fetch(
                self.config.candy_machine_id, self.config.candy_guard_id
            )
        except ChainFetchError:
            self.state.clear()
            self.logger.exception("Failed to initialize Candy Machine v3")
            raise
        self.state.replace(machine, guard)
        self.logger.info(f"Candy Machine v3 initialized: {machine.public_key}")

    async def mint(self, count: int = 1, options: Optional[SubmitOptions] = None) -> BatchMintResult:
        """Mint ``count`` NFTs sequentially."""
        return await self.orchestrator.run_batch(
            count, options=options or self.config.batch_submit_options
        )

    async def mint_single(self, options: Optional[SubmitOptions] = None) -> MintAttemptResult:
        """Mint one NFT and return its attempt result."""
        batch = await self.orchestrator.run_batch(
            1, options=options or self.config.single_submit_options
        )
        return batch.per_attempt[0]

    def get_info(self) -> Optional[CandyMachineInfo]:
        """Display summary of the loaded machine, or None before initialization."""
        machine = self.state.machine
        if machine is None:
            return None
        return CandyMachineInfo(
            items_available=machine.items_loaded,
            items_redeemed=machine.items_redeemed,
            items_remaining=machine.items_loaded - machine.items_redeemed,
            price=Decimal(self.config.token_amount) / TOKEN_DECIMALS_DIVISOR,
        )

    async def get_balance(self) -> int:
        """Lamport balance of the connected wallet."""
        return await self.fetcher.get_balance(str(self.wallet.public_key))

    async def get_token_balance(self) -> Decimal:
        """Payment-token balance of the connected wallet."""
        return await self.fetcher.get_token_balance(
            str(self.wallet.public_key), self.config.token_mint
        )
