"""Transfer contracts.

Wire format is camelCase to match the faucet UI.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TransferRequest(BaseModel):
    """A user's request for faucet funds."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    wallet_address: str = Field(..., description="Recipient address")
    amount: Decimal = Field(..., description="Amount in the token's display units")
    chain_id: str = Field(..., description="Chain key (ethereum, base, solana, ...)")
    network_mode: str = Field(default="testnet", description="mainnet or testnet")
    token: str = Field(default="native", description="native or usdc")


class TransferResult(BaseModel):
    """Outcome of a submitted transfer.

    Finality is tracked separately through the transaction status endpoint.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = Field(..., description="Whether the custody service accepted it")
    transaction_id: str = Field(..., description="Custody transaction id")
    chain: str = Field(..., description="Chain key")
    hash: Optional[str] = Field(None, description="Transaction hash once broadcast")
    explorer_url: Optional[str] = Field(None, description="Explorer link for the hash")
    amount: Decimal = Field(..., description="Requested amount (echoed)")
    to: str = Field(..., description="Recipient address (echoed)")
