"""Balance service for the faucet's hot wallets.

Produces one normalized balance list spanning every registered
chain/network/token, whether the value came from the custody service's bulk
endpoint or from a raw JSON-RPC call. Individual query failures are dropped
(logged) so the faucet keeps working with partial data.
"""

import asyncio
import logging
from typing import Optional

from multifaucet.chains import (
    STABLECOIN_DECIMALS,
    ChainFamily,
    ChainRegistry,
    RpcChain,
    get_registry,
)
from multifaucet.custody.base import CustodyClient, WalletInfo
from multifaucet.utils.concurrency import gather_settled
from multifaucet.utils.units import format_display
from multifaucet.web.contracts.balances import BalanceEntry
from multifaucet.web.services.rpc import JsonRpcClient

logger = logging.getLogger(__name__)


class BalanceService:
    """Service for fetching faucet wallet balances."""

    def __init__(
        self,
        custody: CustodyClient,
        rpc: JsonRpcClient,
        registry: Optional[ChainRegistry] = None,
    ):
        self.custody = custody
        self.rpc = rpc
        self.registry = registry or get_registry()

    async def fetch_balances(
        self, wallets: dict[ChainFamily, WalletInfo]
    ) -> dict[ChainFamily, list[BalanceEntry]]:
        """Fetch balances for every family wallet.

        Custody lookups run one call per family; RPC-only chains run one
        eth_getBalance per chain plus one balanceOf per configured stablecoin.
        Everything runs concurrently.

        Args:
            wallets: Faucet wallet per family (a missing family is skipped)

        Returns:
            Balance entries per family: custody entries, then RPC native
            entries, then RPC stablecoin entries
        """
        aliases = self.registry.custody_aliases_by_family()
        assets = self.registry.custody_assets_by_family()

        custody_queries = []
        custody_labels = []
        for family, wallet in wallets.items():
            if not aliases.get(family):
                continue
            custody_queries.append(
                self._fetch_custody_balances(family, wallet, assets[family], aliases[family])
            )
            custody_labels.append(f"custody:{family.value}")

        native_queries = []
        native_labels = []
        token_queries = []
        token_labels = []
        evm_wallet = wallets.get(ChainFamily.ETHEREUM)
        if evm_wallet is not None:
            for chain in self.registry.rpc_only_chains():
                native_queries.append(self.fetch_native_balance(chain, evm_wallet.address))
                native_labels.append(f"eth_getBalance:{chain.balance_key}")
                if chain.stablecoin_address:
                    token_queries.append(
                        self.fetch_stablecoin_balance(chain, evm_wallet.address)
                    )
                    token_labels.append(f"balanceOf:{chain.balance_key}")

        custody_results, native_results, token_results = await asyncio.gather(
            gather_settled(custody_queries, custody_labels),
            gather_settled(native_queries, native_labels),
            gather_settled(token_queries, token_labels),
        )

        merged: dict[ChainFamily, list[BalanceEntry]] = {family: [] for family in wallets}
        for family, entries in custody_results:
            merged[family].extend(entries)
        if evm_wallet is not None:
            merged[ChainFamily.ETHEREUM].extend(native_results)
            merged[ChainFamily.ETHEREUM].extend(token_results)

        logger.info(
            "Fetched balances: %s",
            {family.value: len(entries) for family, entries in merged.items()},
        )
        return merged

    async def _fetch_custody_balances(
        self,
        family: ChainFamily,
        wallet: WalletInfo,
        assets: list[str],
        chains: list[str],
    ) -> tuple[ChainFamily, list[BalanceEntry]]:
        raw = await self.custody.get_balances(wallet.id, assets, chains)
        return family, [BalanceEntry.model_validate(entry) for entry in raw]

    async def fetch_native_balance(self, chain: RpcChain, address: str) -> BalanceEntry:
        """Native balance of an RPC-only chain."""
        raw_value = await self.rpc.get_balance(chain.rpc_url, address)
        asset = chain.symbol.lower()
        return BalanceEntry(
            chain=chain.balance_key,
            asset=asset,
            raw_value=str(raw_value),
            raw_value_decimals=chain.decimals,
            display_values={asset: format_display(raw_value, chain.decimals)},
        )

    async def fetch_stablecoin_balance(self, chain: RpcChain, address: str) -> BalanceEntry:
        """Stablecoin balance of an RPC-only chain via balanceOf."""
        raw_value = await self.rpc.get_token_balance(
            chain.rpc_url, chain.stablecoin_address, address
        )
        return BalanceEntry(
            chain=chain.balance_key,
            asset="usdc",
            raw_value=str(raw_value),
            raw_value_decimals=STABLECOIN_DECIMALS,
            display_values={"usdc": format_display(raw_value, STABLECOIN_DECIMALS)},
        )

    @staticmethod
    def find_balance(
        balances: list[BalanceEntry], balance_key: str, asset_key: str
    ) -> Optional[BalanceEntry]:
        """Find the entry for a (balance key, asset key) pair."""
        for entry in balances:
            if entry.chain == balance_key and entry.asset == asset_key:
                return entry
        return None
