"""Ledger module mirroring faucet withdrawals and their custody status."""

from multifaucet.ledger.database import LedgerDatabase, normalize_database_url
from multifaucet.ledger.models import Base, Withdrawal
from multifaucet.ledger.repository import WithdrawalRepository, WithdrawalStore

__all__ = [
    # Models
    "Base",
    "Withdrawal",
    # Database
    "LedgerDatabase",
    "normalize_database_url",
    # Repositories
    "WithdrawalRepository",
    "WithdrawalStore",
]
