"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from multifaucet import __version__
from multifaucet.auth.identity import IdentityVerifier
from multifaucet.chains import ChainRegistry, get_registry
from multifaucet.config import Settings, get_settings
from multifaucet.custody.base import CustodyClient
from multifaucet.custody.privy import PrivyCustodyClient
from multifaucet.ledger.database import LedgerDatabase
from multifaucet.ledger.repository import WithdrawalStore
from multifaucet.web.services.balance_service import BalanceService
from multifaucet.web.services.faucet_service import FaucetService
from multifaucet.web.services.rpc import JsonRpcClient
from multifaucet.web.services.transaction_service import TransactionTracker
from multifaucet.web.services.transfer_service import TransferDispatcher

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    await app.state.database.create_tables()
    yield
    # Shutdown
    await app.state.custody.aclose()
    await app.state.rpc.aclose()
    await app.state.verifier.aclose()
    await app.state.database.dispose()


def create_app(
    settings: Optional[Settings] = None,
    custody: Optional[CustodyClient] = None,
    rpc: Optional[JsonRpcClient] = None,
    verifier: Optional[IdentityVerifier] = None,
    store: Optional[WithdrawalStore] = None,
    database: Optional[LedgerDatabase] = None,
    registry: Optional[ChainRegistry] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Collaborators not passed in are built from settings.
    """
    settings = settings or get_settings()
    registry = registry or get_registry()
    custody = custody or PrivyCustodyClient.from_settings(settings)
    rpc = rpc or JsonRpcClient(timeout=settings.rpc_timeout)
    verifier = verifier or IdentityVerifier.from_settings(settings)
    database = database or LedgerDatabase.from_settings(settings)
    store = store or WithdrawalStore(database.session)

    app = FastAPI(
        title="Multifaucet API",
        description="Multi-chain token faucet backed by custodial hot wallets",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    dispatcher = TransferDispatcher(
        custody,
        rpc,
        ethereum_wallet_id=settings.ethereum_wallet_id,
        solana_wallet_id=settings.solana_wallet_id,
        registry=registry,
    )
    app.state.settings = settings
    app.state.registry = registry
    app.state.custody = custody
    app.state.rpc = rpc
    app.state.verifier = verifier
    app.state.database = database
    app.state.faucet = FaucetService(
        custody,
        balances=BalanceService(custody, rpc, registry=registry),
        dispatcher=dispatcher,
        tracker=TransactionTracker(
            custody,
            registry=registry,
            poll_interval=settings.poll_interval,
            poll_max_attempts=settings.poll_max_attempts,
        ),
        store=store,
        registry=registry,
    )

    # Register routes
    from multifaucet.api.routes import health
    from multifaucet.web.controllers import (
        balances_router,
        chains_router,
        transactions_router,
        transfers_router,
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(balances_router)
    app.include_router(transfers_router)
    app.include_router(transactions_router)
    app.include_router(chains_router)

    return app


# Default app instance
app = create_app()
