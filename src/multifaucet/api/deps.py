"""FastAPI dependencies shared by the faucet routers."""

import logging
from typing import Optional

from fastapi import Header, HTTPException, Request

from multifaucet.auth.identity import AuthenticationError, IdentityVerifier
from multifaucet.chains import ChainRegistry
from multifaucet.web.services.faucet_service import FaucetService

logger = logging.getLogger(__name__)


def get_faucet_service(request: Request) -> FaucetService:
    return request.app.state.faucet


def get_chain_registry(request: Request) -> ChainRegistry:
    return request.app.state.registry


def get_verifier(request: Request) -> IdentityVerifier:
    return request.app.state.verifier


async def require_user(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> str:
    """Authenticate the bearer token and return the user id."""
    if not authorization:
        raise HTTPException(status_code=401, detail="Authorization header required")

    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=401, detail="Bearer token required")

    try:
        return await get_verifier(request).verify(token)
    except AuthenticationError as e:
        logger.info("Rejected bearer token: %s", e)
        raise HTTPException(status_code=401, detail="Invalid or expired token")
