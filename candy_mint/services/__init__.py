"""Services for the Candy Mint package."""

from candy_mint.services.batch_mint import BatchMintOrchestrator, SequentialScheduler
from candy_mint.services.chain_state import ChainStateFetcher
from candy_mint.services.guard_args import build_mint_args
from candy_mint.services.mint_executor import MintTransactionExecutor
from candy_mint.services.mint_service import MintServiceFacade
from candy_mint.services.rpc_service import RPCService
from candy_mint.services.state import ServiceState

__all__ = [
    "BatchMintOrchestrator",
    "ChainStateFetcher",
    "MintServiceFacade",
    "MintTransactionExecutor",
    "RPCService",
    "SequentialScheduler",
    "ServiceState",
    "build_mint_args",
]
