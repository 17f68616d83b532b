"""Transfer submission endpoint."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from multifaucet.api.deps import get_faucet_service, require_user
from multifaucet.chains import ChainConfigError
from multifaucet.custody.base import CustodyError
from multifaucet.web.contracts.transfers import TransferRequest, TransferResult
from multifaucet.web.services.faucet_service import FaucetService, TransferValidationError
from multifaucet.web.services.transfer_service import TransferFailedError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/faucet", tags=["transfers"])


@router.post("/transfer", response_model=TransferResult, response_model_by_alias=True)
async def request_transfer(
    request: TransferRequest,
    user_id: str = Depends(require_user),
    faucet: FaucetService = Depends(get_faucet_service),
) -> TransferResult:
    """Send faucet funds to a recipient address.

    The response carries the custody transaction id; poll
    /api/faucet/transaction/{id} for finality. Failed submissions are not
    retried since they may already have been broadcast.
    """
    logger.info(
        "Transfer request from %s: %s %s on %s/%s to %s",
        user_id,
        request.amount,
        request.token,
        request.chain_id,
        request.network_mode,
        request.wallet_address,
    )

    try:
        return await faucet.request_transfer(request, user_id)
    except (ChainConfigError, TransferValidationError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except TransferFailedError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except CustodyError as e:
        logger.error("Faucet wallet unavailable: %s", e)
        raise HTTPException(status_code=502, detail=f"Faucet wallet unavailable: {e}")
