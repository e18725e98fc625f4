"""FastAPI application for the Candy Mint service."""

# Standard library imports
from contextlib import asynccontextmanager
from typing import Optional, Tuple

# Third-party library imports
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Internal imports
from candy_mint import __version__
from candy_mint.api.error_handlers import register_error_handlers
from candy_mint.api.routes import router as candy_machine_router
from candy_mint.api.routes import wallet_router
from candy_mint.config import get_mint_config, get_server_config, get_solana_config
from candy_mint.logging_config import get_logger
from candy_mint.services.mint_service import MintServiceFacade
from candy_mint.services.rpc_service import RPCService
from candy_mint.utils.errors import CandyMintError, ConfigurationError
from candy_mint.wallet import KeypairWallet

logger = get_logger(__name__)


def build_mint_service() -> Tuple[MintServiceFacade, RPCService]:
    """Wire the mint service from environment configuration.

    Returns:
        The facade and the RPC service it talks through; the caller
        owns the RPC service and must close it.

    Raises:
        ConfigurationError: If configuration is missing or invalid
    """
    try:
        solana_config = get_solana_config()
        mint_config = get_mint_config()
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    wallet = KeypairWallet.from_file(mint_config.wallet_keypair_path)
    rpc = RPCService(solana_config)
    return MintServiceFacade.create(rpc, wallet, mint_config), rpc


def create_app(mint_service: Optional[MintServiceFacade] = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        mint_service: Pre-built service. When omitted, one is built from
            environment configuration at startup.
    """
    server_config = get_server_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        rpc = None
        if app.state.mint_service is None:
            app.state.mint_service, rpc = build_mint_service()
            try:
                await app.state.mint_service.initialize()
            except CandyMintError as e:
                # The server stays up; clients retry via /candy-machine/initialize
                logger.error(f"Startup initialization failed: {e.message}")
        logger.info("Candy Mint service started")
        yield
        logger.info("Shutting down Candy Mint service, closing resources...")
        if rpc is not None:
            await rpc.close()

    app = FastAPI(
        title="Candy Mint Service",
        description="Mint NFTs from a Metaplex Candy Machine v3 with token payment",
        version=__version__,
        debug=server_config.debug,
        lifespan=lifespan,
    )
    app.state.mint_service = mint_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=server_config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(candy_machine_router)
    app.include_router(wallet_router)
    register_error_handlers(app)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        service = app.state.mint_service
        return {
            "status": "healthy",
            "initialized": bool(service is not None and service.is_initialized),
        }

    return app
