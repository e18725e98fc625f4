"""
Error definitions for the Candy Mint service.

This module defines the exception hierarchy raised by the minting core.
Only initialization-time and precondition failures are raised to callers;
per-attempt mint failures are reported as result data.
"""

from enum import Enum
from typing import Any, Dict, Optional


class HttpStatus:
    """HTTP status codes attached to service errors."""
    HTTP_400_BAD_REQUEST = 400
    HTTP_401_UNAUTHORIZED = 401
    HTTP_402_PAYMENT_REQUIRED = 402
    HTTP_409_CONFLICT = 409
    HTTP_500_INTERNAL_SERVER_ERROR = 500
    HTTP_502_BAD_GATEWAY = 502
    HTTP_503_SERVICE_UNAVAILABLE = 503
    HTTP_504_GATEWAY_TIMEOUT = 504

status = HttpStatus


class ErrorCode(str, Enum):
    """Error codes for the Candy Mint service."""

    # General errors
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Solana RPC errors
    RPC_ERROR = "RPC_ERROR"
    RPC_TIMEOUT = "RPC_TIMEOUT"
    RPC_CONNECTION_ERROR = "RPC_CONNECTION_ERROR"

    # Data errors
    DATA_PARSING_ERROR = "DATA_PARSING_ERROR"

    # Minting errors
    NOT_INITIALIZED = "NOT_INITIALIZED"
    WALLET_NOT_CONNECTED = "WALLET_NOT_CONNECTED"
    CHAIN_FETCH_ERROR = "CHAIN_FETCH_ERROR"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    TRANSACTION_ERROR = "TRANSACTION_ERROR"


class CandyMintError(Exception):
    """Base exception for all Candy Mint errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize a new Candy Mint error.

        Args:
            message: Error message
            code: Error code
            status_code: HTTP status code
            details: Additional error details
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the error to a dictionary.

        Returns:
            Dictionary representation of the error
        """
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details
        }


class ValidationError(CandyMintError):
    """Exception for validation errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class ConfigurationError(CandyMintError):
    """Exception for invalid or missing configuration."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code=ErrorCode.CONFIGURATION_ERROR,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details
        )


class DataParsingError(CandyMintError):
    """Exception for account data that cannot be decoded."""

    def __init__(
        self,
        message: str,
        data_type: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        if data_type:
            error_details["data_type"] = data_type

        super().__init__(
            message=message,
            code=ErrorCode.DATA_PARSING_ERROR,
            status_code=status.HTTP_502_BAD_GATEWAY,
            details=error_details
        )


class RpcError(CandyMintError):
    """Exception for Solana RPC errors."""

    def __init__(
        self,
        message: str,
        rpc_error: Optional[Dict[str, Any]] = None,
        code: ErrorCode = ErrorCode.RPC_ERROR
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=status.HTTP_502_BAD_GATEWAY,
            details={"rpc_error": rpc_error or {}}
        )


class RpcTimeoutError(RpcError):
    """Exception for Solana RPC timeout errors."""

    def __init__(
        self,
        message: str,
        timeout: float,
        rpc_error: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            rpc_error=rpc_error,
            code=ErrorCode.RPC_TIMEOUT
        )
        self.status_code = status.HTTP_504_GATEWAY_TIMEOUT
        self.details["timeout"] = timeout


class RpcConnectionError(RpcError):
    """Exception for Solana RPC connection errors."""

    def __init__(self, message: str, rpc_error: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            rpc_error=rpc_error,
            code=ErrorCode.RPC_CONNECTION_ERROR
        )


class NotInitializedError(CandyMintError):
    """Raised when minting is requested before the candy machine state is loaded.

    Recoverable by calling ``initialize()`` again.
    """

    def __init__(self, message: str = "Candy Machine v3 not initialized"):
        super().__init__(
            message=message,
            code=ErrorCode.NOT_INITIALIZED,
            status_code=status.HTTP_409_CONFLICT
        )


class WalletNotConnectedError(CandyMintError):
    """Raised when minting is requested without a connected wallet."""

    def __init__(self, message: str = "Wallet not connected"):
        super().__init__(
            message=message,
            code=ErrorCode.WALLET_NOT_CONNECTED,
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class ChainFetchError(CandyMintError):
    """Raised when the candy machine or candy guard account cannot be fetched."""

    def __init__(
        self,
        message: str,
        account: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        if account:
            error_details["account"] = account
        super().__init__(
            message=message,
            code=ErrorCode.CHAIN_FETCH_ERROR,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details=error_details
        )


class InsufficientFundsError(CandyMintError):
    """Raised when the payer balance cannot cover the required fee reserve."""

    def __init__(self, observed: int, required: int):
        super().__init__(
            message=(
                f"Insufficient funds: balance {observed} lamports, "
                f"required {required} lamports"
            ),
            code=ErrorCode.INSUFFICIENT_FUNDS,
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            details={"observed": observed, "required": required}
        )
        self.observed = observed
        self.required = required


class TransactionError(CandyMintError):
    """Wallet rejection, RPC rejection, or confirmation failure of a mint."""

    def __init__(
        self,
        message: str,
        signature: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        if signature:
            error_details["signature"] = signature
        super().__init__(
            message=message,
            code=ErrorCode.TRANSACTION_ERROR,
            status_code=status.HTTP_502_BAD_GATEWAY,
            details=error_details
        )
