"""Repository for withdrawal records.

Withdrawals mirror the custody service's transaction records. Writes are
best-effort: ``WithdrawalStore`` logs failures instead of raising so a
database problem never fails a transfer or a status read.
"""

import logging
from decimal import Decimal
from typing import AsyncContextManager, Callable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from multifaucet.ledger.models import Withdrawal

logger = logging.getLogger(__name__)

SessionProvider = Callable[[], AsyncContextManager[AsyncSession]]


class WithdrawalRepository:
    """Database operations on withdrawal records."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_withdrawal(
        self,
        transaction_id: str,
        user_id: str,
        chain_key: str,
        network_mode: str,
        token: str,
        amount: Decimal,
        recipient: str,
        tx_hash: Optional[str] = None,
        explorer_url: Optional[str] = None,
        status: str = "pending",
    ) -> Withdrawal:
        """Create a withdrawal record."""
        withdrawal = Withdrawal(
            transaction_id=transaction_id,
            user_id=user_id,
            chain_key=chain_key,
            network_mode=network_mode,
            token=token,
            amount=amount,
            recipient=recipient,
            tx_hash=tx_hash,
            explorer_url=explorer_url,
            status=status,
        )
        self.session.add(withdrawal)
        await self.session.flush()
        return withdrawal

    async def get_by_transaction_id(self, transaction_id: str) -> Optional[Withdrawal]:
        """Get withdrawal by custody transaction id."""
        stmt = select(Withdrawal).where(Withdrawal.transaction_id == transaction_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_user_withdrawals(self, user_id: str, limit: int = 20) -> list[Withdrawal]:
        """Get a user's most recent withdrawals."""
        stmt = (
            select(Withdrawal)
            .where(Withdrawal.user_id == user_id)
            .order_by(Withdrawal.created_at.desc(), Withdrawal.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update_status(
        self,
        transaction_id: str,
        status: str,
        tx_hash: Optional[str] = None,
        explorer_url: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> Optional[Withdrawal]:
        """Update the mirrored status; returns None if no record exists."""
        withdrawal = await self.get_by_transaction_id(transaction_id)
        if withdrawal is None:
            return None

        withdrawal.status = status
        if tx_hash:
            withdrawal.tx_hash = tx_hash
        if explorer_url:
            withdrawal.explorer_url = explorer_url
        if error_message:
            withdrawal.error_message = error_message
        await self.session.flush()
        return withdrawal


class WithdrawalStore:
    """Best-effort withdrawal persistence over a session provider."""

    def __init__(self, session_provider: SessionProvider):
        self._session_provider = session_provider

    async def record(self, **fields) -> bool:
        """Record a submitted withdrawal; returns False on failure."""
        try:
            async with self._session_provider() as session:
                await WithdrawalRepository(session).create_withdrawal(**fields)
            return True
        except Exception as e:
            logger.warning(
                "Failed to record withdrawal %s: %s", fields.get("transaction_id"), e
            )
            return False

    async def update_status(
        self,
        transaction_id: str,
        status: str,
        tx_hash: Optional[str] = None,
        explorer_url: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> bool:
        """Mirror a status; returns False if nothing was updated."""
        try:
            async with self._session_provider() as session:
                updated = await WithdrawalRepository(session).update_status(
                    transaction_id,
                    status,
                    tx_hash=tx_hash,
                    explorer_url=explorer_url,
                    error_message=error_message,
                )
            return updated is not None
        except Exception as e:
            logger.warning("Failed to update status of %s: %s", transaction_id, e)
            return False
