"""Faucet orchestration for the web layer.

Ties the balance fetcher, transfer dispatcher and status tracker together
behind the checks a caller needs before any funds move:

1. chain / network mode / token resolve in the registry
2. recipient address is well-formed for the chain family
3. amount is positive and representable in the token's smallest unit
4. the faucet wallet holds at least the requested amount

Only then is the transfer dispatched and the withdrawal recorded.
"""

import asyncio
import logging
import re
from decimal import Decimal
from typing import Optional

from solders.pubkey import Pubkey

from multifaucet.chains import ChainFamily, ChainRegistry, TokenType, get_registry
from multifaucet.custody.base import CustodyClient, WalletInfo
from multifaucet.ledger.repository import WithdrawalStore
from multifaucet.utils.units import from_smallest_unit, quantize_down, to_smallest_unit
from multifaucet.web.contracts.balances import BalanceResponse, FamilyBalances, FaucetWallet
from multifaucet.web.contracts.transactions import TransactionStatusResponse
from multifaucet.web.contracts.transfers import TransferRequest, TransferResult
from multifaucet.web.services.balance_service import BalanceService
from multifaucet.web.services.transaction_service import TransactionTracker, is_successful
from multifaucet.web.services.transfer_service import TransferDispatcher, TransferTarget

logger = logging.getLogger(__name__)

EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
SOLANA_ADDRESS_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


class TransferValidationError(ValueError):
    """Transfer request rejected before anything was submitted."""


def is_valid_address(address: str, family: ChainFamily) -> bool:
    """Check recipient address format for a chain family."""
    if not address:
        return False
    if family == ChainFamily.ETHEREUM:
        return bool(EVM_ADDRESS_RE.match(address))

    if not SOLANA_ADDRESS_RE.match(address):
        return False
    try:
        Pubkey.from_string(address)
    except ValueError:
        return False
    return True


def format_available(amount: Decimal, token_type: TokenType) -> str:
    """Format an available balance for error messages."""
    places = Decimal("0.01") if token_type == TokenType.USDC else Decimal("0.0001")
    return str(quantize_down(amount, places))


class FaucetService:
    """Caller-facing faucet operations."""

    def __init__(
        self,
        custody: CustodyClient,
        balances: BalanceService,
        dispatcher: TransferDispatcher,
        tracker: TransactionTracker,
        store: Optional[WithdrawalStore] = None,
        registry: Optional[ChainRegistry] = None,
    ):
        self.custody = custody
        self.balances = balances
        self.dispatcher = dispatcher
        self.tracker = tracker
        self.store = store
        self.registry = registry or get_registry()

    def _wallet_ids(self) -> dict[ChainFamily, str]:
        return {
            ChainFamily.ETHEREUM: self.dispatcher.ethereum_wallet_id,
            ChainFamily.SOLANA: self.dispatcher.solana_wallet_id,
        }

    async def get_wallet(self, family: ChainFamily) -> WalletInfo:
        """Get the faucet wallet for a family.

        Raises:
            WalletNotProvisionedError: Wallet missing or has no address
        """
        return await self.custody.get_wallet(self._wallet_ids()[family])

    async def get_balances(self) -> BalanceResponse:
        """Balances of both faucet wallets across every registered chain."""
        found = await asyncio.gather(*(self.get_wallet(family) for family in ChainFamily))
        wallets = dict(zip(ChainFamily, found))
        entries = await self.balances.fetch_balances(wallets)

        families = {}
        for family, wallet in wallets.items():
            families[family.value] = FamilyBalances(
                balances=entries.get(family, []),
                wallet=FaucetWallet(
                    id=wallet.id, address=wallet.address, chain_type=wallet.chain_type
                ),
            )
        return BalanceResponse(**families)

    async def available_balance(self, target: TransferTarget) -> Decimal:
        """Freshly fetched faucet balance for a transfer target's token."""
        family = target.chain.family
        wallet = await self.get_wallet(family)
        entries = await self.balances.fetch_balances({family: wallet})

        balance_key = self.registry.balance_key(target.chain.key, target.mode)
        entry = BalanceService.find_balance(
            entries.get(family, []), balance_key, target.token.asset_key
        )
        if entry is None:
            logger.warning(
                "No balance entry for %s/%s, treating as empty",
                balance_key,
                target.token.asset_key,
            )
            return Decimal(0)
        return from_smallest_unit(int(entry.raw_value), entry.raw_value_decimals)

    def validate_request(self, request: TransferRequest) -> TransferTarget:
        """Run the checks that need no network access.

        Raises:
            ChainConfigError: Unsupported chain/network/token
            TransferValidationError: Malformed address or amount
        """
        target = self.dispatcher.resolve_target(
            request.chain_id, request.network_mode, request.token
        )

        if not is_valid_address(request.wallet_address, target.chain.family):
            if target.chain.family == ChainFamily.ETHEREUM:
                raise TransferValidationError(
                    "Invalid Ethereum address. Must be 0x followed by 40 hex characters."
                )
            raise TransferValidationError(
                "Invalid Solana address. Must be 32-44 base58 characters."
            )

        amount = request.amount
        if amount is None or not amount.is_finite() or amount <= 0:
            raise TransferValidationError("Please enter a valid amount greater than 0")

        if to_smallest_unit(amount, target.token.decimals) <= 0:
            raise TransferValidationError(
                f"Amount is below the smallest unit of {target.token.symbol}"
            )

        return target

    async def request_transfer(self, request: TransferRequest, user_id: str) -> TransferResult:
        """Validate, check balance, dispatch and record one transfer.

        Raises:
            ChainConfigError: Unsupported chain/network/token
            TransferValidationError: Bad address, amount or insufficient balance
            WalletNotProvisionedError: Faucet wallet unavailable
            TransferFailedError: Submission failed
        """
        target = self.validate_request(request)

        available = await self.available_balance(target)
        if request.amount > available:
            raise TransferValidationError(
                "Insufficient faucet balance. Available: "
                f"{format_available(available, target.token_type)} {target.token.symbol}"
            )

        result = await self.dispatcher.dispatch_target(
            target, request.wallet_address, request.amount
        )

        if self.store is not None:
            await self.store.record(
                transaction_id=result.transaction_id,
                user_id=user_id,
                chain_key=target.chain.key,
                network_mode=target.mode.value,
                token=target.token_type.value,
                amount=request.amount,
                recipient=request.wallet_address,
                tx_hash=result.hash,
                explorer_url=result.explorer_url,
            )

        return result

    async def get_transaction_status(self, transaction_id: str) -> TransactionStatusResponse:
        """Read a transaction's status and mirror it into the store.

        Raises:
            TransactionNotFoundError: Unknown transaction id
            CustodyError: Custody lookup failed
        """
        record = await self.tracker.fetch_status(transaction_id)
        response = self.tracker.to_response(record)

        if self.store is not None:
            error_message = None
            if response.is_final and not is_successful(response.status):
                error_message = f"Transaction {response.status}"
            await self.store.update_status(
                transaction_id,
                response.status,
                tx_hash=response.hash,
                explorer_url=response.explorer_url,
                error_message=error_message,
            )

        return response
