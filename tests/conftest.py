"""Pytest configuration and fixtures."""

import json
import os
from typing import AsyncGenerator, Optional

import httpx
import pytest
import pytest_asyncio
from solders.keypair import Keypair
from sqlalchemy.ext.asyncio import AsyncSession

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DEBUG"] = "true"
os.environ["PRIVY_APP_ID"] = "test-app"
os.environ["ETHEREUM_WALLET_ID"] = "evm-wallet"
os.environ["SOLANA_WALLET_ID"] = "sol-wallet"

from multifaucet.custody.base import (
    CustodyClient,
    SubmittedTransaction,
    TransactionNotFoundError,
    TransactionRecord,
    WalletInfo,
    WalletNotProvisionedError,
)
from multifaucet.ledger.database import LedgerDatabase
from multifaucet.web.services.rpc import JsonRpcClient

EVM_FAUCET_ADDRESS = "0x" + "11" * 20
EVM_RECIPIENT = "0x" + "ab" * 20
SOLANA_FAUCET_ADDRESS = str(Keypair().pubkey())
SOLANA_RECIPIENT = str(Keypair().pubkey())


def balance_entry(chain: str, asset: str, raw_value: int, decimals: int) -> dict:
    """Custody-style raw balance entry."""
    return {
        "chain": chain,
        "asset": asset,
        "raw_value": str(raw_value),
        "raw_value_decimals": decimals,
        "display_values": {asset: str(raw_value / 10**decimals)},
    }


class FakeCustody(CustodyClient):
    """In-process custody service recording every submission."""

    def __init__(self):
        self.wallets = {
            "evm-wallet": WalletInfo("evm-wallet", EVM_FAUCET_ADDRESS, "ethereum"),
            "sol-wallet": WalletInfo("sol-wallet", SOLANA_FAUCET_ADDRESS, "solana"),
        }
        self.balances: dict[str, list[dict]] = {"evm-wallet": [], "sol-wallet": []}
        self.balance_errors: dict[str, Exception] = {}
        self.transactions: dict[str, list[TransactionRecord]] = {}
        self.submissions: list[dict] = []
        self.submit_error: Optional[Exception] = None
        self.next_hash: Optional[str] = "0xfeed"
        self.transaction_reads = 0

    async def get_wallet(self, wallet_id: str) -> WalletInfo:
        wallet = self.wallets.get(wallet_id)
        if wallet is None:
            raise WalletNotProvisionedError(f"Custody wallet {wallet_id} not found")
        return wallet

    async def get_balances(self, wallet_id, assets, chains):
        if wallet_id in self.balance_errors:
            raise self.balance_errors[wallet_id]
        return [
            entry
            for entry in self.balances.get(wallet_id, [])
            if entry["chain"] in chains and entry["asset"] in assets
        ]

    async def _submit(self, **submission) -> SubmittedTransaction:
        if self.submit_error is not None:
            raise self.submit_error
        self.submissions.append(submission)
        return SubmittedTransaction(
            transaction_id=f"tx-{len(self.submissions)}",
            caip2=submission["caip2"],
            hash=self.next_hash,
        )

    async def send_evm_transaction(
        self, wallet_id, caip2, to, value="0x0", data=None, sponsor=False
    ):
        return await self._submit(
            kind="evm",
            wallet_id=wallet_id,
            caip2=caip2,
            to=to,
            value=value,
            data=data,
            sponsor=sponsor,
        )

    async def sign_and_send_solana(self, wallet_id, caip2, transaction, sponsor=False):
        return await self._submit(
            kind="solana",
            wallet_id=wallet_id,
            caip2=caip2,
            transaction=transaction,
            sponsor=sponsor,
        )

    def add_transaction(self, transaction_id: str, caip2: str, *statuses, tx_hash=None):
        """Queue records returned by successive reads (last one repeats)."""
        self.transactions[transaction_id] = [
            TransactionRecord(
                id=transaction_id,
                caip2=caip2,
                created_at=1700000000000,
                status=status,
                transaction_hash=tx_hash if status != "pending" else None,
            )
            for status in statuses
        ]

    async def get_transaction(self, transaction_id: str) -> TransactionRecord:
        self.transaction_reads += 1
        records = self.transactions.get(transaction_id)
        if not records:
            raise TransactionNotFoundError(f"Transaction {transaction_id} not found", 404)
        if len(records) > 1:
            return records.pop(0)
        return records[0]


class RpcStub:
    """JSON-RPC endpoint stub keyed by (host, method)."""

    def __init__(self):
        self.results: dict[tuple[str, str], dict] = {}
        self.calls: list[tuple[str, str, list]] = []

    def set_result(self, host: str, method: str, result) -> None:
        self.results[(host, method)] = {"result": result}

    def set_error(self, host: str, method: str, message: str) -> None:
        self.results[(host, method)] = {"error": {"code": -32000, "message": message}}

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.calls.append((request.url.host, body["method"], body["params"]))
        reply = self.results.get((request.url.host, body["method"]))
        if reply is None:
            return httpx.Response(503, text="unavailable")
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], **reply})

    def methods(self) -> list[tuple[str, str]]:
        return [(host, method) for host, method, _ in self.calls]


@pytest.fixture
def custody() -> FakeCustody:
    return FakeCustody()


@pytest.fixture
def rpc_stub() -> RpcStub:
    return RpcStub()


@pytest_asyncio.fixture
async def rpc(rpc_stub: RpcStub) -> AsyncGenerator[JsonRpcClient, None]:
    """JSON-RPC client wired to the stub."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(rpc_stub.handler))
    yield JsonRpcClient(client=client)
    await client.aclose()


MEMORY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[LedgerDatabase, None]:
    """In-memory ledger database with tables created."""
    db = LedgerDatabase(MEMORY_DATABASE_URL)
    await db.create_tables()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for testing."""
    async with database.session_factory() as session:
        yield session


@pytest.fixture
def session_provider(database):
    return database.session
