"""Minimal JSON-RPC 2.0 client for public chain endpoints.

Only the handful of read calls the faucet needs: native balances, ERC-20
``balanceOf`` and Solana account existence.
"""

import logging
from typing import Any, Optional

import httpx

from multifaucet.utils.units import hex_to_int

logger = logging.getLogger(__name__)

# ERC-20 balanceOf(address) function selector
BALANCE_OF_SELECTOR = "0x70a08231"


class RpcError(Exception):
    """JSON-RPC call failed (transport error or error envelope)."""


class JsonRpcClient:
    """JSON-RPC client over a shared httpx client."""

    def __init__(self, timeout: float = 10.0, client: Optional[httpx.AsyncClient] = None):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def call(self, rpc_url: str, method: str, params: list) -> Any:
        """Make a JSON-RPC call and return its result.

        Raises:
            RpcError: On transport failure, HTTP error or error envelope
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": 1,
        }

        try:
            response = await self._client.post(rpc_url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise RpcError(f"{method} to {rpc_url} failed: {e}") from e
        except ValueError as e:
            raise RpcError(f"{method} to {rpc_url} returned invalid JSON") from e

        if not isinstance(data, dict):
            raise RpcError(f"{method} to {rpc_url} returned malformed envelope")
        if data.get("error"):
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise RpcError(f"RPC error: {message}")
        if "result" not in data:
            raise RpcError(f"{method} to {rpc_url} returned no result")

        return data["result"]

    async def get_balance(self, rpc_url: str, address: str) -> int:
        """Native balance in smallest units via eth_getBalance."""
        result = await self.call(rpc_url, "eth_getBalance", [address, "latest"])
        return hex_to_int(result)

    async def get_token_balance(
        self, rpc_url: str, token_address: str, wallet_address: str
    ) -> int:
        """ERC-20 balance in smallest units via eth_call to balanceOf."""
        address_padded = wallet_address.lower().replace("0x", "").zfill(64)
        data = f"{BALANCE_OF_SELECTOR}{address_padded}"

        result = await self.call(
            rpc_url,
            "eth_call",
            [{"to": token_address, "data": data}, "latest"],
        )
        return hex_to_int(result)

    async def account_exists(self, rpc_url: str, address: str) -> bool:
        """Whether a Solana account exists (getAccountInfo returns a value)."""
        result = await self.call(
            rpc_url,
            "getAccountInfo",
            [address, {"encoding": "base64"}],
        )
        return bool(result and result.get("value") is not None)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
