"""API routes for candy machine minting."""

# Standard library imports
from typing import Any, Dict

# Third-party library imports
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

# Internal imports
from candy_mint.logging_config import get_logger, log_with_context
from candy_mint.models.results import BatchMintResult, CandyMachineInfo, MintAttemptResult
from candy_mint.services.mint_service import MintServiceFacade
from candy_mint.utils.errors import NotInitializedError

# Set up logging
logger = get_logger(__name__)

router = APIRouter(
    prefix="/candy-machine",
    tags=["candy machine"],
)

wallet_router = APIRouter(
    prefix="/wallet",
    tags=["wallet"],
)


class MintRequest(BaseModel):
    """Request body for a batch mint."""
    count: int = Field(1, ge=1, description="Number of NFTs to mint")


def get_mint_service(request: Request) -> MintServiceFacade:
    """Mint service stored on the application state."""
    return request.app.state.mint_service


def attempt_status(result: MintAttemptResult) -> str:
    if result.success:
        return "Minted successfully!"
    return f"Mint failed: {result.error_message}"


def batch_status(result: BatchMintResult) -> str:
    if result.total_minted == result.total_requested:
        return "Minted successfully!"
    if result.success:
        return f"Minted {result.total_minted} of {result.total_requested}"
    reason = result.errors[0] if result.errors else "no mint completed"
    return f"Mint failed: {reason}"


@router.post("/initialize", response_model=CandyMachineInfo)
async def initialize(service: MintServiceFacade = Depends(get_mint_service)) -> CandyMachineInfo:
    """(Re)load the candy machine and candy guard state."""
    await service.initialize()
    return service.get_info()


@router.get("/info", response_model=CandyMachineInfo)
async def get_info(service: MintServiceFacade = Depends(get_mint_service)) -> CandyMachineInfo:
    """Items available, redeemed, remaining and the per-mint price."""
    info = service.get_info()
    if info is None:
        raise NotInitializedError()
    return info


@router.post("/mint")
async def mint(
    body: MintRequest,
    service: MintServiceFacade = Depends(get_mint_service)
) -> Dict[str, Any]:
    """Mint a batch of NFTs sequentially.

    Per-attempt failures are reported in the response body; only
    precondition failures produce an error status.
    """
    log_with_context(logger, "info", "Mint requested", count=body.count)
    result = await service.mint(body.count)
    response = result.model_dump(mode="json")
    response["status"] = batch_status(result)
    return response


@router.post("/mint-single")
async def mint_single(service: MintServiceFacade = Depends(get_mint_service)) -> Dict[str, Any]:
    """Mint exactly one NFT."""
    result = await service.mint_single()
    response = result.model_dump(mode="json")
    response["status"] = attempt_status(result)
    return response


@wallet_router.get("/balance")
async def get_wallet_balance(service: MintServiceFacade = Depends(get_mint_service)) -> Dict[str, Any]:
    """Native and payment-token balance of the connected wallet."""
    lamports = await service.get_balance()
    token_balance = await service.get_token_balance()
    return {
        "address": str(service.wallet.public_key),
        "lamports": lamports,
        "token_mint": service.config.token_mint,
        "token_balance": str(token_balance),
    }
