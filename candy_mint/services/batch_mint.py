"""
Sequential batch minting.

This module drives a bounded series of single mint attempts. Attempts run
strictly one after another, paced by a fixed delay so wallet approval
prompts never overlap, and the batch stops early once the payer runs out
of funds.
"""

import asyncio
from decimal import Decimal
from typing import Awaitable, Callable, List, Optional

from candy_mint.config import MintConfig
from candy_mint.constants import DEFAULT_INTER_MINT_DELAY, TOKEN_DECIMALS_DIVISOR
from candy_mint.models.results import BatchMintResult, MintAttemptResult, SubmitOptions
from candy_mint.services.base_service import BaseService
from candy_mint.services.chain_state import ChainStateFetcher
from candy_mint.services.guard_args import build_mint_args
from candy_mint.services.mint_executor import MintTransactionExecutor, is_insufficient_funds
from candy_mint.services.state import ServiceState
from candy_mint.utils.errors import (
    InsufficientFundsError,
    NotInitializedError,
    ValidationError,
    WalletNotConnectedError,
)
from candy_mint.wallet import WalletSession


class SequentialScheduler:
    """Paces attempts with a fixed delay between consecutive attempts."""

    def __init__(
        self,
        delay: float = DEFAULT_INTER_MINT_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        """
        Args:
            delay: Seconds to wait before every attempt after the first
            sleep: Coroutine used to wait
        """
        if delay < 0:
            raise ValueError(f"Invalid inter-attempt delay: {delay}")
        self.delay = delay
        self._sleep = sleep

    async def pace(self, attempt: int) -> None:
        """Wait as required before 1-based ``attempt`` starts."""
        if attempt > 1 and self.delay > 0:
            await self._sleep(self.delay)


class BatchMintOrchestrator(BaseService):
    """Runs batches of sequential mint attempts against the current state."""

    def __init__(
        self,
        state: ServiceState,
        executor: MintTransactionExecutor,
        fetcher: ChainStateFetcher,
        wallet: WalletSession,
        config: MintConfig,
        scheduler: Optional[SequentialScheduler] = None
    ):
        super().__init__()
        self.state = state
        self.executor = executor
        self.fetcher = fetcher
        self.wallet = wallet
        self.config = config
        self.scheduler = scheduler or SequentialScheduler(config.inter_mint_delay)
        self._lock = asyncio.Lock()

    async def run_batch(self, count: int, options: Optional[SubmitOptions] = None) -> BatchMintResult:
        """Mint ``count`` NFTs one at a time.

        Args:
            count: Number of mints to attempt, at least 1
            options: Submission policy for every attempt in the batch

        Returns:
            Aggregated batch result

        Raises:
            ValidationError: If ``count`` is below 1
            NotInitializedError: If the candy machine state is not loaded
            WalletNotConnectedError: If the wallet is not connected
            InsufficientFundsError: If the balance cannot cover the whole batch
        """
        if count < 1:
            raise ValidationError(f"Mint count must be at least 1, got {count}", details={"count": count})
        if not self.state.is_ready:
            raise NotInitializedError()
        if not self.wallet.connected:
            raise WalletNotConnectedError()

        async with self._lock:
            machine, guard = self.state.machine, self.state.guard
            identity = self.wallet.public_key
            payment = self.config.payment

            total_cost = Decimal(payment.token_amount * count) / TOKEN_DECIMALS_DIVISOR
            self.logger.info(f"Starting mint process for {count} NFT(s), total cost: {total_cost} tokens")

            balance = await self.fetcher.get_balance(str(identity))
            required = self.config.min_fee_reserve_lamports * count
            if balance < required:
                self.log_with_context("warning", "Balance too low for batch", balance=balance, required=required)
                raise InsufficientFundsError(observed=balance, required=required)

            per_attempt: List[MintAttemptResult] = []
            errors: List[str] = []
            minted = 0

            for attempt in range(1, count + 1):
                await self.scheduler.pace(attempt)
                args = build_mint_args(guard, payment)
                result = await self.executor.execute_one(
                    machine, guard, args, identity=identity, options=options, attempt=attempt
                )
                per_attempt.append(result)

                if result.success:
                    minted += 1
                    continue

                errors.append(f"Mint {attempt} failed: {result.error_message}")
                if is_insufficient_funds(result):
                    self.logger.warning(f"Stopping batch after mint {attempt}: insufficient funds")
                    break

            self.log_with_context("info", "Batch finished", requested=count, minted=minted)
            return BatchMintResult(
                total_requested=count,
                total_minted=minted,
                per_attempt=per_attempt,
                errors=errors,
            )
