"""Request and response contracts for the web layer.

These Pydantic models define the API interface for faucet clients.
"""

from multifaucet.web.contracts.balances import (
    BalanceEntry,
    BalanceResponse,
    FamilyBalances,
    FaucetWallet,
)
from multifaucet.web.contracts.chains import (
    ChainInfo,
    ChainListResponse,
    NetworkInfo,
    TokenInfo,
)
from multifaucet.web.contracts.transactions import TransactionStatusResponse
from multifaucet.web.contracts.transfers import TransferRequest, TransferResult

__all__ = [
    # Balance contracts
    "BalanceEntry",
    "BalanceResponse",
    "FamilyBalances",
    "FaucetWallet",
    # Chain contracts
    "ChainInfo",
    "ChainListResponse",
    "NetworkInfo",
    "TokenInfo",
    # Transaction contracts
    "TransactionStatusResponse",
    # Transfer contracts
    "TransferRequest",
    "TransferResult",
]
