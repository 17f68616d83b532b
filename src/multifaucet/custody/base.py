"""Custody service interface.

The custody service holds the faucet's private keys. It answers balance
lookups for the networks it supports, signs and broadcasts transactions, and
owns the transaction records that the status tracker reads.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TransactionStatus(str, Enum):
    """Status of a custody transaction record."""

    PENDING = "pending"
    BROADCASTED = "broadcasted"
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"
    EXECUTION_REVERTED = "execution_reverted"
    FAILED = "failed"
    REPLACED = "replaced"
    PROVIDER_ERROR = "provider_error"


# Plain string values so raw custody statuses can be tested directly
FINAL_STATUSES = frozenset(
    s.value
    for s in (
        TransactionStatus.CONFIRMED,
        TransactionStatus.FINALIZED,
        TransactionStatus.EXECUTION_REVERTED,
        TransactionStatus.FAILED,
        TransactionStatus.REPLACED,
        TransactionStatus.PROVIDER_ERROR,
    )
)

SUCCESS_STATUSES = frozenset(
    {TransactionStatus.CONFIRMED.value, TransactionStatus.FINALIZED.value}
)


class CustodyError(Exception):
    """Custody API call failed or returned an unusable payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class WalletNotProvisionedError(CustodyError):
    """Custody wallet does not exist or has no address yet."""


class TransactionNotFoundError(CustodyError):
    """Custody service has no record for a transaction id."""


@dataclass
class WalletInfo:
    """A custody wallet."""

    id: str
    address: str
    chain_type: str


@dataclass
class SubmittedTransaction:
    """Custody acknowledgement of a submitted transaction."""

    transaction_id: str
    caip2: str
    hash: Optional[str] = None


@dataclass
class TransactionRecord:
    """Custody-owned transaction record (read-only here)."""

    id: str
    caip2: str
    created_at: int
    status: str
    transaction_hash: Optional[str] = None
    wallet_id: Optional[str] = None
    sponsored: bool = False


class CustodyClient(ABC):
    """Abstract base class for custody service clients."""

    @abstractmethod
    async def get_wallet(self, wallet_id: str) -> WalletInfo:
        """Fetch a custody wallet.

        Raises:
            WalletNotProvisionedError: If the wallet is missing or has no address
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_balances(
        self, wallet_id: str, assets: list[str], chains: list[str]
    ) -> list[dict]:
        """Bulk native/token balance lookup for one wallet.

        Args:
            wallet_id: Custody wallet id
            assets: Asset keys (eth, pol, sol, usdc, ...)
            chains: Custody network aliases (sepolia, base, solana_devnet, ...)

        Returns:
            Raw balance entries with chain, asset, raw_value,
            raw_value_decimals and display_values
        """
        raise NotImplementedError()

    @abstractmethod
    async def send_evm_transaction(
        self,
        wallet_id: str,
        caip2: str,
        to: str,
        value: str = "0x0",
        data: Optional[str] = None,
        sponsor: bool = False,
    ) -> SubmittedTransaction:
        """Sign and broadcast an EVM transaction from a custody wallet."""
        raise NotImplementedError()

    @abstractmethod
    async def sign_and_send_solana(
        self,
        wallet_id: str,
        caip2: str,
        transaction: str,
        sponsor: bool = False,
    ) -> SubmittedTransaction:
        """Sign and broadcast a base64 serialized, unsigned Solana transaction.

        The service replaces the placeholder recent blockhash before signing.
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_transaction(self, transaction_id: str) -> TransactionRecord:
        """Fetch a transaction record.

        Raises:
            TransactionNotFoundError: If no such transaction exists
        """
        raise NotImplementedError()

    async def aclose(self) -> None:
        """Release any held connections."""
        return None
