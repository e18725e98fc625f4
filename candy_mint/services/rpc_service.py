"""
RPC service for Solana blockchain communication.

This module provides a service for making RPC calls to the Solana blockchain,
with proper error handling, retries, and timeout management. It covers the
calls the minting core needs: account and balance reads, blockhash lookup,
transaction submission and confirmation polling.
"""

import asyncio
import base64
import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from candy_mint.config import SolanaConfig, get_solana_config
from candy_mint.models.results import SubmitOptions
from candy_mint.services.base_service import BaseService, handle_errors
from candy_mint.utils.errors import RpcConnectionError, RpcError, TransactionError

# Commitment levels in increasing order of finality
COMMITMENT_ORDER = ("processed", "confirmed", "finalized")

# Configure logger
logger = logging.getLogger(__name__)


def commitment_reached(observed: Optional[str], required: str) -> bool:
    """Check whether an observed confirmation status satisfies ``required``."""
    if observed not in COMMITMENT_ORDER:
        return False
    return COMMITMENT_ORDER.index(observed) >= COMMITMENT_ORDER.index(required)


class RPCService(BaseService):
    """Service for making RPC requests to the Solana blockchain."""

    def __init__(
        self,
        config: Optional[SolanaConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the RPC service.

        Args:
            config: Solana configuration. Defaults to environment-based config.
            client: Optional pre-built HTTP client
            logger: Optional logger instance
        """
        self.config = config or get_solana_config()
        super().__init__(timeout=self.config.timeout, logger=logger)
        self.rpc_url = self.config.rpc_url
        self.max_retries = self.config.max_retries
        self.client = client or httpx.AsyncClient(timeout=self.config.timeout)
        self.logger.info(f"RPCService initialized with endpoint {self.rpc_url}")

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
        self.logger.info("RPCService closed")

    async def __aenter__(self) -> "RPCService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @handle_errors()
    async def make_request(self, method: str, params: List[Any]) -> Any:
        """
        Make an RPC request to the Solana API.

        Args:
            method: RPC method name
            params: RPC method parameters

        Returns:
            The ``result`` member of the RPC response

        Raises:
            RpcConnectionError: If there is a connection error
            RpcError: If the RPC request fails
        """
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": method,
            "params": params
        }

        # Retry parameters
        initial_retry_delay = 1.0  # starting delay in seconds
        max_retry_delay = 10.0  # maximum delay in seconds
        retriable_status_codes = {408, 429, 500, 502, 503, 504}

        for retry_count in range(self.max_retries + 1):
            wait_time = min(initial_retry_delay * (2 ** retry_count), max_retry_delay)
            try:
                async with self.log_timing(f"rpc_request.{method}"):
                    if retry_count > 0:
                        self.logger.info(f"Retry attempt {retry_count}/{self.max_retries} for {method}")

                    response = await self.client.post(
                        self.rpc_url,
                        json=payload,
                        headers={"Content-Type": "application/json"}
                    )

                    if response.status_code in retriable_status_codes and retry_count < self.max_retries:
                        self.logger.warning(f"HTTP status {response.status_code}, retrying in {wait_time}s: {method}")
                        await asyncio.sleep(wait_time)
                        continue

                    response.raise_for_status()
                    result = response.json()

                    if "error" in result:
                        error = result["error"]
                        message = f"Solana RPC error: {error.get('message', 'Unknown error')}"
                        if "data" in error:
                            message += f" - {json.dumps(error['data'])}"

                        if ("rate limited" in message.lower() or
                                error.get("code") == -32005) and retry_count < self.max_retries:
                            self.logger.warning(f"Rate limited, retrying in {wait_time}s: {method}")
                            await asyncio.sleep(wait_time)
                            continue

                        raise RpcError(message=message, rpc_error=error)

                    return result["result"]

            except RpcError:
                raise

            except httpx.HTTPStatusError as e:
                raise RpcError(
                    message=f"RPC request failed with status {e.response.status_code}",
                    rpc_error={"method": method, "status_code": e.response.status_code}
                )

            except httpx.RequestError as e:
                if retry_count < self.max_retries:
                    self.logger.warning(f"Connection error, retrying in {wait_time}s: {str(e)}")
                    await asyncio.sleep(wait_time)
                    continue

                raise RpcConnectionError(
                    message=f"Connection error during RPC request: {str(e)}",
                    rpc_error={"method": method, "error": str(e)}
                )

        raise RpcError(
            message=f"RPC request failed after {self.max_retries} retries",
            rpc_error={"method": method}
        )

    # Solana RPC methods
    @handle_errors()
    async def get_account_info(self, account: str, encoding: str = "base64") -> Optional[Dict[str, Any]]:
        """
        Get account information.

        Args:
            account: Account address
            encoding: Response encoding

        Returns:
            Account information, or None if the account does not exist
        """
        result = await self.make_request(
            "getAccountInfo",
            [account, {"encoding": encoding, "commitment": self.config.commitment}]
        )
        return result.get("value") if result else None

    async def get_account_data(self, account: str) -> Optional[bytes]:
        """
        Get the raw data of an account.

        Returns:
            Decoded account data, or None if the account does not exist
        """
        info = await self.get_account_info(account, encoding="base64")
        if info is None:
            return None
        data = info.get("data")
        if isinstance(data, list) and data:
            return base64.b64decode(data[0])
        raise RpcError(
            message=f"Unexpected account data encoding for {account}",
            rpc_error={"account": account}
        )

    @handle_errors()
    async def get_balance(self, account: str) -> int:
        """
        Get account balance in lamports.
        """
        result = await self.make_request(
            "getBalance",
            [account, {"commitment": self.config.commitment}]
        )
        return int(result["value"])

    @handle_errors()
    async def get_token_accounts_by_owner(self, owner: str, mint: str) -> List[Dict[str, Any]]:
        """
        Get the parsed token accounts of ``owner`` for ``mint``.
        """
        result = await self.make_request(
            "getTokenAccountsByOwner",
            [owner, {"mint": mint}, {"encoding": "jsonParsed", "commitment": self.config.commitment}]
        )
        return result.get("value", []) if result else []

    @handle_errors()
    async def get_latest_blockhash(self) -> str:
        """
        Get the latest blockhash as a base58 string.
        """
        result = await self.make_request(
            "getLatestBlockhash",
            [{"commitment": self.config.commitment}]
        )
        return result["value"]["blockhash"]

    @handle_errors()
    async def send_transaction(
        self,
        raw_transaction: bytes,
        skip_preflight: bool = False,
        max_retries: Optional[int] = None,
        preflight_commitment: str = "confirmed"
    ) -> str:
        """
        Submit a signed, serialized transaction.

        Returns:
            The transaction signature as returned by the node
        """
        opts: Dict[str, Any] = {
            "encoding": "base64",
            "skipPreflight": skip_preflight,
            "preflightCommitment": preflight_commitment,
        }
        if max_retries is not None:
            opts["maxRetries"] = max_retries
        encoded = base64.b64encode(raw_transaction).decode("ascii")
        return await self.make_request("sendTransaction", [encoded, opts])

    @handle_errors()
    async def get_signature_statuses(self, signatures: List[str]) -> List[Optional[Dict[str, Any]]]:
        """
        Get the statuses of a list of signatures.
        """
        result = await self.make_request(
            "getSignatureStatuses",
            [signatures, {"searchTransactionHistory": False}]
        )
        return result.get("value", []) if result else []

    async def confirm_transaction(
        self,
        signature: str,
        commitment: str = "confirmed",
        timeout: Optional[float] = None,
        poll_interval: Optional[float] = None
    ) -> Dict[str, Any]:
        """
        Poll until ``signature`` reaches ``commitment``.

        Returns:
            The final signature status

        Raises:
            TransactionError: If the transaction failed on-chain or was not
                confirmed in time
        """
        timeout = timeout if timeout is not None else self.config.confirm_timeout
        poll_interval = poll_interval if poll_interval is not None else self.config.confirm_poll_interval
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout

        while True:
            statuses = await self.get_signature_statuses([signature])
            status = statuses[0] if statuses else None
            if status:
                if status.get("err"):
                    raise TransactionError(
                        f"Transaction {signature} failed: {json.dumps(status['err'])}",
                        signature=signature,
                        details={"err": status["err"]}
                    )
                if commitment_reached(status.get("confirmationStatus"), commitment):
                    return status

            if loop.time() >= deadline:
                raise TransactionError(
                    f"Transaction {signature} was not confirmed within {timeout}s",
                    signature=signature
                )
            await asyncio.sleep(poll_interval)

    async def send_and_confirm(self, raw_transaction: bytes, options: SubmitOptions) -> str:
        """
        Submit a transaction and wait for it to reach the requested commitment.

        Returns:
            The transaction signature
        """
        signature = await self.send_transaction(
            raw_transaction,
            skip_preflight=options.skip_preflight,
            max_retries=options.max_retries,
            preflight_commitment=options.commitment
        )
        self.logger.info(f"Transaction submitted: {signature}")
        await self.confirm_transaction(signature, commitment=options.commitment)
        return signature
