"""Faucet balance endpoint.

Balances come fresh from the custody service and public RPC endpoints on
every call; the UI polls this on an interval and after each transfer.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from multifaucet.api.deps import get_faucet_service, require_user
from multifaucet.custody.base import CustodyError, WalletNotProvisionedError
from multifaucet.web.contracts.balances import BalanceResponse
from multifaucet.web.services.faucet_service import FaucetService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/faucet", tags=["balances"])


@router.get("/balance", response_model=BalanceResponse)
async def get_balance(
    user_id: str = Depends(require_user),
    faucet: FaucetService = Depends(get_faucet_service),
) -> BalanceResponse:
    """Get faucet wallet balances across every supported chain.

    Individual chain queries that fail are omitted from the response.
    """
    try:
        return await faucet.get_balances()
    except WalletNotProvisionedError as e:
        logger.error("Faucet wallet unavailable: %s", e)
        raise HTTPException(status_code=502, detail=f"Faucet wallet unavailable: {e}")
    except CustodyError as e:
        logger.error("Balance lookup failed: %s", e)
        raise HTTPException(status_code=502, detail=f"Failed to fetch balance: {e}")
