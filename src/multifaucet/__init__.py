"""Multi-chain token faucet backed by a wallet custody service."""

__version__ = "0.1.0"
