"""Transaction status endpoint."""

from fastapi import APIRouter, Depends, HTTPException

from multifaucet.api.deps import get_faucet_service, require_user
from multifaucet.custody.base import CustodyError, TransactionNotFoundError
from multifaucet.web.contracts.transactions import TransactionStatusResponse
from multifaucet.web.services.faucet_service import FaucetService

router = APIRouter(prefix="/api/faucet", tags=["transactions"])


@router.get(
    "/transaction/{transaction_id}",
    response_model=TransactionStatusResponse,
    response_model_by_alias=True,
)
async def get_transaction(
    transaction_id: str,
    user_id: str = Depends(require_user),
    faucet: FaucetService = Depends(get_faucet_service),
) -> TransactionStatusResponse:
    """Get the current status of a custody transaction.

    Clients poll this every few seconds until isFinal is true.
    """
    try:
        return await faucet.get_transaction_status(transaction_id)
    except TransactionNotFoundError:
        raise HTTPException(status_code=404, detail=f"Transaction not found: {transaction_id}")
    except CustodyError as e:
        raise HTTPException(status_code=502, detail=f"Failed to fetch transaction: {e}")
