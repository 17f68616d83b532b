"""Transaction status tracking.

Status machine over custody transaction records:

    pending -> broadcasted -> {confirmed | finalized | execution_reverted |
                               failed | replaced | provider_error}

Once a terminal status is observed the record never changes again.
"""

import asyncio
import logging
from typing import Callable, Optional, Union

from multifaucet.chains import ChainRegistry, get_registry
from multifaucet.custody.base import (
    FINAL_STATUSES,
    SUCCESS_STATUSES,
    CustodyClient,
    TransactionRecord,
    TransactionStatus,
)
from multifaucet.web.contracts.transactions import TransactionStatusResponse

logger = logging.getLogger(__name__)

StatusLike = Union[str, TransactionStatus]


def _status_value(status: StatusLike) -> str:
    if isinstance(status, TransactionStatus):
        return status.value
    return status


def is_final(status: StatusLike) -> bool:
    """True iff no further status changes are expected."""
    return _status_value(status) in FINAL_STATUSES


def is_successful(status: StatusLike) -> bool:
    """True iff the transaction landed (confirmed or finalized)."""
    return _status_value(status) in SUCCESS_STATUSES


class TransactionTracker:
    """Reads custody transaction records and classifies finality."""

    def __init__(
        self,
        custody: CustodyClient,
        registry: Optional[ChainRegistry] = None,
        poll_interval: float = 2.0,
        poll_max_attempts: int = 60,
    ):
        self.custody = custody
        self.registry = registry or get_registry()
        self.poll_interval = poll_interval
        self.poll_max_attempts = poll_max_attempts

    async def fetch_status(self, transaction_id: str) -> TransactionRecord:
        """Single point-in-time read from the custody service."""
        return await self.custody.get_transaction(transaction_id)

    def build_explorer_url(self, record: TransactionRecord) -> Optional[str]:
        """Explorer URL for a record, None until it has a hash."""
        if not record.transaction_hash:
            return None
        return self.registry.build_explorer_url_for_caip2(
            record.caip2, record.transaction_hash
        )

    def to_response(self, record: TransactionRecord) -> TransactionStatusResponse:
        return TransactionStatusResponse(
            id=record.id,
            status=record.status,
            hash=record.transaction_hash,
            explorer_url=self.build_explorer_url(record),
            is_final=is_final(record.status),
            caip2=record.caip2,
            created_at=record.created_at,
        )

    async def poll(
        self,
        transaction_id: str,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
        on_status_change: Optional[Callable[[str], None]] = None,
    ) -> TransactionRecord:
        """Poll until the record reaches a terminal status.

        Args:
            transaction_id: Custody transaction id
            max_attempts: Maximum number of reads (tracker default if None)
            interval: Seconds between reads (tracker default if None)
            on_status_change: Called with each newly observed status

        Returns:
            The terminal record, or the last observed (possibly non-final)
            record once attempts are exhausted
        """
        if max_attempts is None:
            max_attempts = self.poll_max_attempts
        if interval is None:
            interval = self.poll_interval

        record: Optional[TransactionRecord] = None
        last_status: Optional[str] = None

        for attempt in range(max(max_attempts, 1)):
            record = await self.fetch_status(transaction_id)

            if record.status != last_status:
                last_status = record.status
                logger.debug("Transaction %s is %s", transaction_id, record.status)
                if on_status_change is not None:
                    on_status_change(record.status)

            if is_final(record.status):
                return record

            if attempt < max_attempts - 1:
                await asyncio.sleep(interval)

        logger.info(
            "Stopped polling %s after %d attempts (last status %s)",
            transaction_id,
            max_attempts,
            last_status,
        )
        return record
