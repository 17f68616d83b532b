"""Web services for faucet operations.

Signing never happens here: transfers are built unsigned (Solana) or as
plain transaction requests (EVM) and handed to the custody service.
"""

from multifaucet.web.services.balance_service import BalanceService
from multifaucet.web.services.faucet_service import FaucetService, TransferValidationError
from multifaucet.web.services.rpc import JsonRpcClient, RpcError
from multifaucet.web.services.transaction_service import (
    TransactionTracker,
    is_final,
    is_successful,
)
from multifaucet.web.services.transfer_service import TransferDispatcher, TransferFailedError

__all__ = [
    "BalanceService",
    "FaucetService",
    "TransferValidationError",
    "JsonRpcClient",
    "RpcError",
    "TransactionTracker",
    "is_final",
    "is_successful",
    "TransferDispatcher",
    "TransferFailedError",
]
