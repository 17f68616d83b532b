"""Custody service clients."""

from multifaucet.custody.base import (
    FINAL_STATUSES,
    SUCCESS_STATUSES,
    CustodyClient,
    CustodyError,
    SubmittedTransaction,
    TransactionNotFoundError,
    TransactionRecord,
    TransactionStatus,
    WalletInfo,
    WalletNotProvisionedError,
)
from multifaucet.custody.privy import PrivyCustodyClient

__all__ = [
    "FINAL_STATUSES",
    "SUCCESS_STATUSES",
    "CustodyClient",
    "CustodyError",
    "SubmittedTransaction",
    "TransactionNotFoundError",
    "TransactionRecord",
    "TransactionStatus",
    "WalletInfo",
    "WalletNotProvisionedError",
    "PrivyCustodyClient",
]
