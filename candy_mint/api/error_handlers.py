"""
Error handlers for the API
"""
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from candy_mint.utils.errors import CandyMintError, ErrorCode

# Setup logger
logger = structlog.get_logger("candy_mint.api.errors")


def register_error_handlers(app: FastAPI) -> None:
    """Register global error handlers for the application"""

    @app.exception_handler(CandyMintError)
    async def candy_mint_error_handler(request: Request, exc: CandyMintError):
        """Handle service errors raised by the minting core"""
        logger.warning(
            "Candy mint error",
            code=exc.code.value,
            message=exc.message,
            path=request.url.path
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions"""
        logger.warning(
            "HTTP exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"code": ErrorCode.UNKNOWN_ERROR.value, "message": str(exc.detail), "details": {}}
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all uncaught exceptions"""
        logger.exception(
            "Uncaught exception",
            exc_info=exc,
            path=request.url.path,
            method=request.method
        )
        return JSONResponse(
            status_code=500,
            content={
                "code": ErrorCode.UNKNOWN_ERROR.value,
                "message": str(exc) if app.debug else "An unexpected error occurred",
                "details": {}
            }
        )
