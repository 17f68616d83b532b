"""Chain listing contracts."""

from typing import Optional

from pydantic import BaseModel, Field


class TokenInfo(BaseModel):
    """A token requestable on a network."""

    type: str = Field(..., description="native or usdc")
    symbol: str = Field(..., description="Token symbol")
    decimals: int = Field(..., description="Token decimals")
    address: Optional[str] = Field(None, description="Contract/mint (None for native)")


class NetworkInfo(BaseModel):
    """One network mode of a chain."""

    mode: str = Field(..., description="mainnet or testnet")
    name: str = Field(..., description="Network display name")
    caip2: str = Field(..., description="Chain-namespace identifier")
    balance_key: str = Field(..., description="Key used in balance entries")
    gas_sponsored: bool = Field(default=False)
    tokens: list[TokenInfo] = Field(default_factory=list)


class ChainInfo(BaseModel):
    """A supported chain."""

    id: str = Field(..., description="Chain key")
    name: str = Field(..., description="Chain display name")
    type: str = Field(..., description="Wallet family (ethereum or solana)")
    networks: list[NetworkInfo] = Field(default_factory=list)


class ChainListResponse(BaseModel):
    """All supported chains."""

    chains: list[ChainInfo] = Field(default_factory=list)
    total: int = Field(default=0)
