"""Balance contracts.

Balances are fetched fresh on every request from the custody service and
public RPC endpoints; nothing is cached server-side.
"""

from typing import Optional

from pydantic import BaseModel, Field


class BalanceEntry(BaseModel):
    """Balance of one asset on one chain/network."""

    chain: str = Field(..., description="Balance key (custody alias or chain_mode)")
    asset: str = Field(..., description="Asset key (eth, pol, sol, usdc, ...)")
    raw_value: str = Field(..., description="Raw balance in smallest units")
    raw_value_decimals: int = Field(..., description="Token decimals")
    display_values: dict[str, str] = Field(
        default_factory=dict, description="Human-readable values keyed by unit"
    )


class FaucetWallet(BaseModel):
    """A faucet hot wallet."""

    id: str = Field(..., description="Custody wallet id")
    address: str = Field(..., description="On-chain address")
    chain_type: Optional[str] = Field(None, description="Wallet family")


class FamilyBalances(BaseModel):
    """Balances held by one faucet wallet family."""

    balances: list[BalanceEntry] = Field(default_factory=list)
    wallet: FaucetWallet


class BalanceResponse(BaseModel):
    """Faucet balances across every registered chain, per wallet family."""

    ethereum: Optional[FamilyBalances] = None
    solana: Optional[FamilyBalances] = None
