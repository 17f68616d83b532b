"""Web boundary layer.

- contracts: pydantic request/response models
- services: balance, transfer and status logic over the custody service
- controllers: FastAPI routers under /api/faucet
"""

__all__ = [
    "contracts",
    "services",
    "controllers",
]
