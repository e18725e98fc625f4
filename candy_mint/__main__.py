"""Command-line entry point for the Candy Mint service."""

# Standard library imports
import argparse
import asyncio
import sys
from typing import List, Optional

# Third-party library imports
import uvicorn

# Internal imports
from candy_mint.app import build_mint_service, create_app
from candy_mint.config import get_server_config, get_solana_config
from candy_mint.logging_config import configure_logging, get_logger
from candy_mint.utils.errors import CandyMintError

logger = get_logger("candy_mint")


async def show_info() -> int:
    """Print candy machine availability and wallet balance."""
    service, rpc = build_mint_service()
    try:
        await service.initialize()
        info = service.get_info()
        balance = await service.get_balance()
    finally:
        await rpc.close()

    print(f"Items available: {info.items_available}")
    print(f"Items redeemed:  {info.items_redeemed}")
    print(f"Items remaining: {info.items_remaining}")
    print(f"Price:           {info.price} tokens")
    print(f"Wallet balance:  {balance} lamports")
    return 0


async def run_mint(count: int) -> int:
    """Mint ``count`` NFTs and print each attempt."""
    service, rpc = build_mint_service()
    try:
        await service.initialize()
        result = await service.mint(count)
    finally:
        await rpc.close()

    for attempt in result.per_attempt:
        if attempt.success:
            print(f"Mint {attempt.attempt}: {attempt.minted_asset_id} ({attempt.signature})")
        else:
            print(f"Mint {attempt.attempt} failed: {attempt.error_message}")
    print(f"Minted {result.total_minted} of {result.total_requested}")
    return 0 if result.success else 1


def run_server(port: Optional[int] = None) -> None:
    """Run the HTTP server."""
    config = get_server_config()
    if port is not None:
        config.port = port

    logger.info(f"Starting Candy Mint server on {config.bind_address}")
    logger.info(f"Using Solana RPC URL: {get_solana_config().rpc_url}")

    uvicorn.run(
        create_app(),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="candy-mint", description="Candy Machine v3 minting service")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("info", help="Show candy machine availability and price")

    mint_parser = subparsers.add_parser("mint", help="Mint NFTs")
    mint_parser.add_argument("--count", type=int, default=1, help="Number of NFTs to mint")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--port", type=int, help="Server port")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the Candy Mint command line."""
    args = build_parser().parse_args(argv)

    try:
        configure_logging(get_server_config().log_level)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    try:
        if args.command == "info":
            return asyncio.run(show_info())
        if args.command == "mint":
            return asyncio.run(run_mint(args.count))
        run_server(port=args.port)
        return 0
    except CandyMintError as e:
        logger.error(f"{e.code.value}: {e.message}")
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
