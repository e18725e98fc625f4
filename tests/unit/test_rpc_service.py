"""Unit tests for RPCService.

Requests are served by an ``httpx.MockTransport`` so no network is used.
"""

import base64
import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from candy_mint.config import SolanaConfig
from candy_mint.models.results import SubmitOptions
from candy_mint.services.rpc_service import RPCService, commitment_reached
from candy_mint.utils.errors import RpcConnectionError, RpcError, TransactionError

RPC_URL = "https://rpc.test"


def make_service(handler, max_retries=2, **overrides):
    config = SolanaConfig(
        rpc_url=RPC_URL,
        max_retries=max_retries,
        confirm_timeout=overrides.get("confirm_timeout", 5.0),
        confirm_poll_interval=0.0,
    )
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RPCService(config, client=client)


def rpc_result(result):
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": result})


@pytest.fixture(autouse=True)
def no_backoff():
    """Skip retry backoff sleeps."""
    with patch("candy_mint.services.rpc_service.asyncio.sleep", new=AsyncMock()):
        yield


class TestCommitmentReached:
    """Test suite for commitment ordering."""

    def test_ordering(self):
        assert commitment_reached("finalized", "confirmed")
        assert commitment_reached("confirmed", "confirmed")
        assert not commitment_reached("processed", "confirmed")
        assert not commitment_reached(None, "processed")


class TestRPCService:
    """Test suite for RPCService."""

    @pytest.mark.asyncio
    async def test_get_balance(self):
        # Setup
        requests = []

        def handler(request):
            requests.append(json.loads(request.content))
            return rpc_result({"context": {"slot": 1}, "value": 25_000_000})

        service = make_service(handler)

        # Execute
        balance = await service.get_balance("Wallet1111111111111111111111111111111111111")

        # Verify
        assert balance == 25_000_000
        assert requests[0]["method"] == "getBalance"
        assert requests[0]["params"][1] == {"commitment": "confirmed"}
        await service.close()

    @pytest.mark.asyncio
    async def test_get_account_data_decodes_base64(self):
        raw = b"\x01\x02\x03"

        def handler(request):
            return rpc_result({"context": {"slot": 1}, "value": {
                "data": [base64.b64encode(raw).decode(), "base64"],
                "lamports": 1,
            }})

        async with make_service(handler) as service:
            assert await service.get_account_data("Acct") == raw

    @pytest.mark.asyncio
    async def test_missing_account_returns_none(self):
        def handler(request):
            return rpc_result({"context": {"slot": 1}, "value": None})

        async with make_service(handler) as service:
            assert await service.get_account_data("Acct") is None

    @pytest.mark.asyncio
    async def test_retries_on_server_error(self):
        responses = [httpx.Response(503), rpc_result({"value": {"blockhash": "abc", "lastValidBlockHeight": 9}})]

        def handler(request):
            return responses.pop(0)

        async with make_service(handler) as service:
            assert await service.get_latest_blockhash() == "abc"
        assert responses == []

    @pytest.mark.asyncio
    async def test_rpc_error_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1,
                                             "error": {"code": -32602, "message": "Invalid param"}})

        async with make_service(handler) as service:
            with pytest.raises(RpcError) as exc_info:
                await service.get_balance("bad")

        assert "Invalid param" in exc_info.value.message
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_connection_errors_exhaust_retries(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("Connection refused", request=request)

        async with make_service(handler, max_retries=2) as service:
            with pytest.raises(RpcConnectionError):
                await service.get_balance("Acct")

        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_send_and_confirm(self):
        # Setup
        methods = []
        statuses = [
            None,
            {"slot": 5, "confirmations": 0, "err": None, "confirmationStatus": "processed"},
            {"slot": 5, "confirmations": 1, "err": None, "confirmationStatus": "confirmed"},
        ]

        def handler(request):
            body = json.loads(request.content)
            methods.append(body["method"])
            if body["method"] == "sendTransaction":
                assert body["params"][1]["skipPreflight"] is True
                assert body["params"][1]["maxRetries"] == 1
                return rpc_result("sig123")
            return rpc_result({"context": {"slot": 5}, "value": [statuses.pop(0)]})

        # Execute
        async with make_service(handler) as service:
            signature = await service.send_and_confirm(
                b"signed-tx", SubmitOptions(skip_preflight=True, max_retries=1)
            )

        # Verify
        assert signature == "sig123"
        assert methods == ["sendTransaction"] + ["getSignatureStatuses"] * 3

    @pytest.mark.asyncio
    async def test_failed_transaction_raises(self):
        def handler(request):
            return rpc_result({"context": {"slot": 5}, "value": [
                {"slot": 5, "err": {"InstructionError": [1, {"Custom": 6}]}, "confirmationStatus": "confirmed"}
            ]})

        async with make_service(handler) as service:
            with pytest.raises(TransactionError) as exc_info:
                await service.confirm_transaction("sig123")

        assert exc_info.value.details["err"] == {"InstructionError": [1, {"Custom": 6}]}

    @pytest.mark.asyncio
    async def test_unconfirmed_transaction_times_out(self):
        def handler(request):
            return rpc_result({"context": {"slot": 5}, "value": [None]})

        async with make_service(handler) as service:
            with pytest.raises(TransactionError) as exc_info:
                await service.confirm_transaction("sig123", timeout=0.0)

        assert "not confirmed" in exc_info.value.message
