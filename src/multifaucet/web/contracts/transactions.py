"""Transaction status contracts."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TransactionStatusResponse(BaseModel):
    """Point-in-time status of a custody transaction."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Custody transaction id")
    status: str = Field(..., description="pending, broadcasted, confirmed, ...")
    hash: Optional[str] = Field(None, description="Transaction hash if broadcast")
    explorer_url: Optional[str] = Field(None, description="Link to explorer")
    is_final: bool = Field(..., description="No further status changes expected")
    caip2: str = Field(..., description="Chain-namespace identifier")
    created_at: int = Field(..., description="Creation time (unix ms)")
