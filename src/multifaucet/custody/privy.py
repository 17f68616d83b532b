"""Privy wallet API custody client.

Docs: https://docs.privy.io/api-reference
"""

import logging
from typing import Any, Optional

import httpx

from multifaucet.config import Settings
from multifaucet.custody.base import (
    CustodyClient,
    CustodyError,
    SubmittedTransaction,
    TransactionNotFoundError,
    TransactionRecord,
    WalletInfo,
    WalletNotProvisionedError,
)

logger = logging.getLogger(__name__)


class PrivyCustodyClient(CustodyClient):
    """Custody client backed by the Privy server wallet REST API."""

    def __init__(
        self,
        app_id: str,
        app_secret: str,
        base_url: str = "https://api.privy.io",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize Privy client.

        Args:
            app_id: Privy app id
            app_secret: Privy app secret
            base_url: API base URL
            timeout: Request timeout in seconds
            client: Optional pre-built HTTP client (tests inject a mock transport)
        """
        self.app_id = app_id
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._auth = httpx.BasicAuth(app_id, app_secret)
        self._headers = {
            "privy-app-id": app_id,
            "Content-Type": "application/json",
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> "PrivyCustodyClient":
        return cls(
            app_id=settings.privy_app_id,
            app_secret=settings.privy_app_secret,
            base_url=settings.privy_api_url,
            timeout=settings.custody_timeout,
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Any = None,
        json: Optional[dict] = None,
    ) -> dict:
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers,
                auth=self._auth,
            )
        except httpx.HTTPError as e:
            raise CustodyError(f"Custody request {method} {path} failed: {e}") from e

        if response.status_code >= 400:
            raise CustodyError(
                f"Custody API error {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise CustodyError(f"Malformed custody response for {path}") from e

    async def get_wallet(self, wallet_id: str) -> WalletInfo:
        if not wallet_id:
            raise WalletNotProvisionedError("Custody wallet id not configured")

        try:
            data = await self._request("GET", f"/v1/wallets/{wallet_id}")
        except CustodyError as e:
            if e.status_code != 404:
                raise
            raise WalletNotProvisionedError(
                f"Custody wallet {wallet_id} not found", status_code=404
            ) from e

        address = data.get("address")
        if not address:
            raise WalletNotProvisionedError(f"Custody wallet {wallet_id} has no address")

        return WalletInfo(
            id=data.get("id", wallet_id),
            address=address,
            chain_type=data.get("chain_type", ""),
        )

    async def get_balances(
        self, wallet_id: str, assets: list[str], chains: list[str]
    ) -> list[dict]:
        data = await self._request(
            "GET",
            f"/v1/wallets/{wallet_id}/balance",
            params=[("asset", a) for a in assets] + [("chain", c) for c in chains],
        )
        balances = data.get("balances")
        if not isinstance(balances, list):
            raise CustodyError("Custody balance response missing 'balances'")
        return balances

    async def send_evm_transaction(
        self,
        wallet_id: str,
        caip2: str,
        to: str,
        value: str = "0x0",
        data: Optional[str] = None,
        sponsor: bool = False,
    ) -> SubmittedTransaction:
        transaction: dict[str, Any] = {"to": to, "value": value}
        if data:
            transaction["data"] = data

        body: dict[str, Any] = {
            "method": "eth_sendTransaction",
            "caip2": caip2,
            "chain_type": "ethereum",
            "params": {"transaction": transaction},
        }
        if sponsor:
            body["sponsor"] = True

        result = await self._request("POST", f"/v1/wallets/{wallet_id}/rpc", json=body)
        return self._parse_submission(result, caip2)

    async def sign_and_send_solana(
        self,
        wallet_id: str,
        caip2: str,
        transaction: str,
        sponsor: bool = False,
    ) -> SubmittedTransaction:
        body: dict[str, Any] = {
            "method": "signAndSendTransaction",
            "caip2": caip2,
            "chain_type": "solana",
            "params": {"transaction": transaction, "encoding": "base64"},
        }
        if sponsor:
            body["sponsor"] = True

        result = await self._request("POST", f"/v1/wallets/{wallet_id}/rpc", json=body)
        return self._parse_submission(result, caip2)

    async def get_transaction(self, transaction_id: str) -> TransactionRecord:
        try:
            data = await self._request("GET", f"/v1/transactions/{transaction_id}")
        except CustodyError as e:
            if e.status_code != 404:
                raise
            raise TransactionNotFoundError(
                f"Transaction {transaction_id} not found", status_code=404
            ) from e

        try:
            return TransactionRecord(
                id=data["id"],
                caip2=data["caip2"],
                created_at=int(data.get("created_at", 0)),
                status=data["status"],
                transaction_hash=data.get("transaction_hash"),
                wallet_id=data.get("wallet_id"),
                sponsored=bool(data.get("sponsored", False)),
            )
        except KeyError as e:
            raise CustodyError(f"Custody transaction record missing {e}") from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @staticmethod
    def _parse_submission(result: dict, caip2: str) -> SubmittedTransaction:
        data = result.get("data") or {}
        transaction_id = data.get("transaction_id")
        if not transaction_id:
            raise CustodyError("Custody submission returned no transaction id")

        return SubmittedTransaction(
            transaction_id=transaction_id,
            caip2=data.get("caip2", caip2),
            hash=data.get("hash") or None,
        )
