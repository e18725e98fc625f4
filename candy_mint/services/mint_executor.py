"""
Single mint transaction execution.

This module builds, signs, submits and confirms one guarded mint
transaction. Every failure after the initialization check is reported as
a failed ``MintAttemptResult``; nothing but ``NotInitializedError`` is
raised to the caller.
"""

import inspect
from typing import Any, Callable, Optional, Sequence, Union

import base58
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction

from candy_mint.config import MintConfig
from candy_mint.constants import INSUFFICIENT_FUNDS_MARKERS, UNKNOWN_MINT_ERROR
from candy_mint.models.candy_machine import CandyGuardSnapshot, CandyMachineSnapshot, MintArgs
from candy_mint.models.results import MintAttemptResult, SubmitOptions
from candy_mint.programs.candy_machine import build_mint_instructions
from candy_mint.services.base_service import BaseService
from candy_mint.services.chain_state import ChainStateFetcher
from candy_mint.services.rpc_service import RPCService
from candy_mint.utils.errors import (
    CandyMintError,
    ErrorCode,
    InsufficientFundsError,
    NotInitializedError,
)
from candy_mint.wallet import WalletSession

RawSignature = Union[str, bytes, bytearray, Sequence[int], Signature]


def normalize_signature(raw: RawSignature) -> str:
    """Render a transaction signature in its base58 display form.

    Strings pass through unchanged; raw bytes are base58-encoded.
    """
    if isinstance(raw, str):
        return raw
    if isinstance(raw, Signature):
        return str(raw)
    if isinstance(raw, (bytes, bytearray)):
        return base58.b58encode(bytes(raw)).decode("ascii")
    if isinstance(raw, (list, tuple)):
        return base58.b58encode(bytes(raw)).decode("ascii")
    raise TypeError(f"Unsupported signature type: {type(raw).__name__}")


def describe_error(error: BaseException) -> str:
    """Message text of ``error``, its string form, or a fixed fallback."""
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    text = str(error)
    if text:
        return text
    return UNKNOWN_MINT_ERROR


def is_insufficient_funds(result: MintAttemptResult) -> bool:
    """Whether a failed attempt means the payer cannot afford another mint."""
    if result.success:
        return False
    if result.error_code == ErrorCode.INSUFFICIENT_FUNDS:
        return True
    message = (result.error_message or "").lower()
    return any(marker in message for marker in INSUFFICIENT_FUNDS_MARKERS)


class MintTransactionExecutor(BaseService):
    """Executes exactly one guarded mint transaction."""

    def __init__(
        self,
        rpc: RPCService,
        fetcher: ChainStateFetcher,
        wallet: WalletSession,
        config: MintConfig,
        focus_hook: Optional[Callable[[], Any]] = None
    ):
        """Initialize the executor.

        Args:
            rpc: RPC service used for blockhash lookup and submission
            fetcher: Fetcher used for the pre-submission balance check
            wallet: Wallet that approves the transaction
            config: Mint configuration
            focus_hook: Optional callable run before the wallet prompt
        """
        super().__init__()
        self.rpc = rpc
        self.fetcher = fetcher
        self.wallet = wallet
        self.config = config
        self.focus_hook = focus_hook

    async def _request_focus(self) -> None:
        if self.focus_hook is None:
            return
        try:
            outcome = self.focus_hook()
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            self.logger.warning(f"Could not bring the wallet prompt to the foreground: {str(e)}")

    async def _build_transaction(
        self,
        machine: CandyMachineSnapshot,
        guard: CandyGuardSnapshot,
        args: MintArgs,
        identity: Pubkey,
        asset: Keypair
    ) -> Transaction:
        instructions = build_mint_instructions(
            machine,
            guard,
            asset.pubkey(),
            identity,
            args,
            compute_unit_limit=self.config.compute_unit_limit,
            candy_machine_program_id=self.config.candy_machine_program_id,
            candy_guard_program_id=self.config.candy_guard_program_id,
        )
        blockhash = Hash.from_string(await self.rpc.get_latest_blockhash())
        message = Message.new_with_blockhash(list(instructions), identity, blockhash)
        transaction = Transaction.new_unsigned(message)
        transaction.partial_sign([asset], blockhash)
        return transaction

    async def execute_one(
        self,
        machine: Optional[CandyMachineSnapshot],
        guard: Optional[CandyGuardSnapshot],
        args: MintArgs,
        identity: Optional[Pubkey] = None,
        options: Optional[SubmitOptions] = None,
        attempt: int = 1
    ) -> MintAttemptResult:
        """Mint one NFT.

        Args:
            machine: Current candy machine snapshot
            guard: Current candy guard snapshot
            args: Guard arguments for the mint
            identity: Payer and minter; defaults to the wallet key
            options: Submission policy; defaults to the batch policy
            attempt: 1-based index of this attempt within its batch

        Returns:
            The attempt result

        Raises:
            NotInitializedError: If either snapshot is missing
        """
        if machine is None or guard is None:
            raise NotInitializedError()

        identity = identity or self.wallet.public_key
        options = options or self.config.batch_submit_options
        reserve = self.config.min_fee_reserve_lamports

        try:
            balance = await self.fetcher.get_balance(str(identity))
            if balance < reserve:
                raise InsufficientFundsError(observed=balance, required=reserve)

            asset = Keypair()
            self.log_with_context("info", f"Preparing mint {attempt}", nft_mint=str(asset.pubkey()))
            transaction = await self._build_transaction(machine, guard, args, identity, asset)

            await self._request_focus()
            self.logger.info(f"Prompting wallet to approve mint {attempt}")
            signed = await self.wallet.sign_transaction(transaction)

            raw_signature = await self.rpc.send_and_confirm(bytes(signed), options)
            signature = normalize_signature(raw_signature)
        except Exception as e:
            message = describe_error(e)
            self.logger.error(f"NFT mint {attempt} failed: {message}")
            return MintAttemptResult(
                success=False,
                attempt=attempt,
                error_message=message,
                error_code=e.code if isinstance(e, CandyMintError) else None,
            )

        self.logger.info(f"NFT {attempt} minted successfully. Signature: {signature}")
        return MintAttemptResult(
            success=True,
            attempt=attempt,
            signature=signature,
            minted_asset_id=str(asset.pubkey()),
            nft_name=self.config.nft_name,
        )
