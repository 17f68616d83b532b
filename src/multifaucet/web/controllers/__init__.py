"""HTTP controllers for faucet endpoints.

Every router here sits behind the bearer-token identity gate.
"""

from multifaucet.web.controllers.balances import router as balances_router
from multifaucet.web.controllers.chains import router as chains_router
from multifaucet.web.controllers.transactions import router as transactions_router
from multifaucet.web.controllers.transfers import router as transfers_router

__all__ = [
    "balances_router",
    "chains_router",
    "transactions_router",
    "transfers_router",
]
