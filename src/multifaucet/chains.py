"""Chain registry for every chain, network mode and token the faucet serves.

Supports 8 chains across two families:
- EVM: Ethereum, Base, Optimism, Arbitrum, Polygon (custody-backed balances)
- EVM: Avalanche, Monad (raw JSON-RPC balances, custody cannot query them)
- Solana (custody-backed balances, RPC for token-account lookups)

Every other module goes through ``ChainRegistry`` instead of hard-coding
chain facts, so adding a chain only touches ``CHAINS`` below.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Optional, Union

logger = logging.getLogger(__name__)


class ChainFamily(str, Enum):
    """Wallet family; the custody service keeps one wallet per family."""

    ETHEREUM = "ethereum"
    SOLANA = "solana"


class NetworkMode(str, Enum):
    """Network mode of a chain."""

    MAINNET = "mainnet"
    TESTNET = "testnet"


class TokenType(str, Enum):
    """Token a faucet user can request."""

    NATIVE = "native"
    USDC = "usdc"


# Stablecoin decimals are fixed at issuance for every chain we serve
STABLECOIN_DECIMALS = 6


class ChainConfigError(ValueError):
    """Requested chain/network/token combination is not served."""

    message = "Unsupported chain configuration"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)


class InvalidChainError(ChainConfigError):
    message = "Invalid chain"


class InvalidNetworkModeError(ChainConfigError):
    message = "Invalid network mode"


class UnsupportedTokenError(ChainConfigError):
    message = "Token not supported on this chain/network"


# ======================
# Balance sources
# ======================
# Which service answers balance queries for a network. Exactly one of these
# is attached to each NetworkConfig so callers branch on the variant rather
# than probing optional fields.

@dataclass(frozen=True)
class CustodyBacked:
    """Custody service supports this network natively."""

    alias: str


@dataclass(frozen=True)
class RpcBacked:
    """Custody service does not know this network; use raw JSON-RPC."""

    rpc_url: str


@dataclass(frozen=True)
class CustodyAndRpc:
    """Custody answers balances; RPC is still needed for account lookups."""

    alias: str
    rpc_url: str


BalanceSource = Union[CustodyBacked, RpcBacked, CustodyAndRpc]


@dataclass(frozen=True)
class ExplorerConfig:
    """Block explorer transaction URL parts."""

    url: str
    suffix: str = ""

    def tx_url(self, tx_hash: str) -> str:
        return f"{self.url}{tx_hash}{self.suffix}"


@dataclass(frozen=True)
class NetworkConfig:
    """Configuration of one chain in one network mode."""

    name: str
    caip2: str  # <namespace>:<reference>
    explorer: ExplorerConfig
    source: BalanceSource
    gas_sponsored: bool = False

    @property
    def custody_alias(self) -> Optional[str]:
        if isinstance(self.source, (CustodyBacked, CustodyAndRpc)):
            return self.source.alias
        return None

    @property
    def rpc_url(self) -> Optional[str]:
        if isinstance(self.source, (RpcBacked, CustodyAndRpc)):
            return self.source.rpc_url
        return None

    @property
    def uses_custody_balances(self) -> bool:
        return not isinstance(self.source, RpcBacked)


@dataclass(frozen=True)
class TokenDescriptor:
    """Token symbol, precision and (for non-native tokens) contract per mode."""

    symbol: str
    decimals: int
    addresses: dict[NetworkMode, str] = field(default_factory=dict)

    @property
    def asset_key(self) -> str:
        """Asset key used in balance entries (lowercase symbol)."""
        return self.symbol.lower()

    def address_for(self, mode: NetworkMode) -> Optional[str]:
        return self.addresses.get(mode)


@dataclass(frozen=True)
class ChainDescriptor:
    """A logical chain such as "ethereum" or "solana"."""

    key: str
    name: str
    family: ChainFamily
    networks: dict[NetworkMode, NetworkConfig]
    native: TokenDescriptor
    stablecoin: Optional[TokenDescriptor] = None


@dataclass(frozen=True)
class RpcChain:
    """A chain/network whose balances must be read over raw JSON-RPC."""

    chain_key: str
    mode: NetworkMode
    balance_key: str
    rpc_url: str
    symbol: str
    decimals: int
    stablecoin_address: Optional[str] = None


# ======================
# Chain Table
# ======================

def _usdc(mainnet: Optional[str], testnet: Optional[str]) -> TokenDescriptor:
    addresses = {}
    if mainnet:
        addresses[NetworkMode.MAINNET] = mainnet
    if testnet:
        addresses[NetworkMode.TESTNET] = testnet
    return TokenDescriptor(symbol="USDC", decimals=STABLECOIN_DECIMALS, addresses=addresses)


CHAINS: dict[str, ChainDescriptor] = {
    # Ethereum
    "ethereum": ChainDescriptor(
        key="ethereum",
        name="Ethereum",
        family=ChainFamily.ETHEREUM,
        networks={
            NetworkMode.MAINNET: NetworkConfig(
                name="Ethereum",
                caip2="eip155:1",
                explorer=ExplorerConfig("https://etherscan.io/tx/"),
                source=CustodyBacked("ethereum"),
            ),
            NetworkMode.TESTNET: NetworkConfig(
                name="Sepolia",
                caip2="eip155:11155111",
                explorer=ExplorerConfig("https://sepolia.etherscan.io/tx/"),
                source=CustodyBacked("sepolia"),
            ),
        },
        native=TokenDescriptor(symbol="ETH", decimals=18),
        stablecoin=_usdc(
            "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
            "0x1c7D4B196Cb0C7B01d743Fbc6116a902379C7238",
        ),
    ),

    # Base - gas sponsored on both networks
    "base": ChainDescriptor(
        key="base",
        name="Base",
        family=ChainFamily.ETHEREUM,
        networks={
            NetworkMode.MAINNET: NetworkConfig(
                name="Base",
                caip2="eip155:8453",
                explorer=ExplorerConfig("https://basescan.org/tx/"),
                source=CustodyBacked("base"),
                gas_sponsored=True,
            ),
            NetworkMode.TESTNET: NetworkConfig(
                name="Base Sepolia",
                caip2="eip155:84532",
                explorer=ExplorerConfig("https://sepolia.basescan.org/tx/"),
                source=CustodyBacked("base_sepolia"),
                gas_sponsored=True,
            ),
        },
        native=TokenDescriptor(symbol="ETH", decimals=18),
        stablecoin=_usdc(
            "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
            "0x036CbD53842c5426634e7929541eC2318f3dCF7e",
        ),
    ),

    # Optimism
    "optimism": ChainDescriptor(
        key="optimism",
        name="Optimism",
        family=ChainFamily.ETHEREUM,
        networks={
            NetworkMode.MAINNET: NetworkConfig(
                name="Optimism",
                caip2="eip155:10",
                explorer=ExplorerConfig("https://optimistic.etherscan.io/tx/"),
                source=CustodyBacked("optimism"),
            ),
            NetworkMode.TESTNET: NetworkConfig(
                name="Optimism Sepolia",
                caip2="eip155:11155420",
                explorer=ExplorerConfig("https://sepolia-optimism.etherscan.io/tx/"),
                source=CustodyBacked("optimism_sepolia"),
            ),
        },
        native=TokenDescriptor(symbol="ETH", decimals=18),
        stablecoin=_usdc(
            "0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85",
            "0x5fd84259d66Cd46123540766Be93DFE6D43130D7",
        ),
    ),

    # Arbitrum
    "arbitrum": ChainDescriptor(
        key="arbitrum",
        name="Arbitrum",
        family=ChainFamily.ETHEREUM,
        networks={
            NetworkMode.MAINNET: NetworkConfig(
                name="Arbitrum One",
                caip2="eip155:42161",
                explorer=ExplorerConfig("https://arbiscan.io/tx/"),
                source=CustodyBacked("arbitrum"),
            ),
            NetworkMode.TESTNET: NetworkConfig(
                name="Arbitrum Sepolia",
                caip2="eip155:421614",
                explorer=ExplorerConfig("https://sepolia.arbiscan.io/tx/"),
                source=CustodyBacked("arbitrum_sepolia"),
            ),
        },
        native=TokenDescriptor(symbol="ETH", decimals=18),
        stablecoin=_usdc(
            "0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
            "0x75faf114eafb1BDbe2F0316DF893fd58CE46AA4d",
        ),
    ),

    # Polygon
    "polygon": ChainDescriptor(
        key="polygon",
        name="Polygon",
        family=ChainFamily.ETHEREUM,
        networks={
            NetworkMode.MAINNET: NetworkConfig(
                name="Polygon",
                caip2="eip155:137",
                explorer=ExplorerConfig("https://polygonscan.com/tx/"),
                source=CustodyBacked("polygon"),
            ),
            NetworkMode.TESTNET: NetworkConfig(
                name="Polygon Amoy",
                caip2="eip155:80002",
                explorer=ExplorerConfig("https://amoy.polygonscan.com/tx/"),
                source=CustodyBacked("polygon_amoy"),
            ),
        },
        native=TokenDescriptor(symbol="POL", decimals=18),
        stablecoin=_usdc(
            "0x3c499c542cEF5E3811e1192ce70d8cC03d5c3359",
            "0x41E94Eb019C0762f9Bfcf9Fb1E58725BfB0e7582",
        ),
    ),

    # Avalanche C-Chain - not supported by custody balance lookups
    "avalanche": ChainDescriptor(
        key="avalanche",
        name="Avalanche",
        family=ChainFamily.ETHEREUM,
        networks={
            NetworkMode.MAINNET: NetworkConfig(
                name="Avalanche C-Chain",
                caip2="eip155:43114",
                explorer=ExplorerConfig("https://snowtrace.io/tx/"),
                source=RpcBacked("https://api.avax.network/ext/bc/C/rpc"),
            ),
            NetworkMode.TESTNET: NetworkConfig(
                name="Avalanche Fuji",
                caip2="eip155:43113",
                explorer=ExplorerConfig("https://testnet.snowtrace.io/tx/"),
                source=RpcBacked("https://api.avax-test.network/ext/bc/C/rpc"),
            ),
        },
        native=TokenDescriptor(symbol="AVAX", decimals=18),
        stablecoin=_usdc(
            "0xB97EF9Ef8734C71904D8002F8b6Bc66Dd9c48a6E",
            "0x5425890298aed601595a70AB815c96711a31Bc65",
        ),
    ),

    # Monad - testnet only, no stablecoin deployment
    "monad": ChainDescriptor(
        key="monad",
        name="Monad",
        family=ChainFamily.ETHEREUM,
        networks={
            NetworkMode.TESTNET: NetworkConfig(
                name="Monad Testnet",
                caip2="eip155:10143",
                explorer=ExplorerConfig("https://testnet.monadexplorer.com/tx/"),
                source=RpcBacked("https://testnet-rpc.monad.xyz"),
            ),
        },
        native=TokenDescriptor(symbol="MON", decimals=18),
    ),

    # Solana - gas sponsored on both networks
    "solana": ChainDescriptor(
        key="solana",
        name="Solana",
        family=ChainFamily.SOLANA,
        networks={
            NetworkMode.MAINNET: NetworkConfig(
                name="Solana",
                caip2="solana:5eykt4UsFv8P8NJdTREpY1vzqKqZKvdp",
                explorer=ExplorerConfig("https://explorer.solana.com/tx/"),
                source=CustodyAndRpc("solana", "https://api.mainnet-beta.solana.com"),
                gas_sponsored=True,
            ),
            NetworkMode.TESTNET: NetworkConfig(
                name="Solana Devnet",
                caip2="solana:EtWTRABZaYq6iMfeYKouRu166VU2xqa1",
                explorer=ExplorerConfig("https://explorer.solana.com/tx/", "?cluster=devnet"),
                source=CustodyAndRpc("solana_devnet", "https://api.devnet.solana.com"),
                gas_sponsored=True,
            ),
        },
        native=TokenDescriptor(symbol="SOL", decimals=9),
        stablecoin=_usdc(
            "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
            "4zMMC9srt5Ri5X14GAgXhaHii3GnPAEERYPJgZJDncDU",
        ),
    ),
}


# ======================
# Helper Functions
# ======================

def parse_network_mode(mode: Union[str, NetworkMode, None]) -> Optional[NetworkMode]:
    """Parse a network mode, returning None for unknown values."""
    if isinstance(mode, NetworkMode):
        return mode
    if not mode:
        return None
    try:
        return NetworkMode(mode.lower())
    except ValueError:
        return None


def format_chain_network(chain_key: str, mode: NetworkMode) -> str:
    """Format a chain key with its network mode.

    - "avalanche" + testnet -> "avalanche_testnet"
    - "avalanche" + mainnet -> "avalanche"
    """
    if mode == NetworkMode.TESTNET:
        return f"{chain_key}_testnet"
    return chain_key


class ChainRegistry:
    """Read-only lookups over a static chain table.

    All lookups are pure functions of the table; unknown chain keys or modes
    yield None rather than raising so callers can map them to client errors.
    """

    def __init__(self, chains: Optional[dict[str, ChainDescriptor]] = None):
        self._chains = dict(chains if chains is not None else CHAINS)
        self._by_caip2: dict[str, tuple[str, NetworkMode]] = {}
        for chain in self._chains.values():
            for mode, network in chain.networks.items():
                self._by_caip2[network.caip2] = (chain.key, mode)

    # Chain lookups
    def get_chain(self, chain_key: str) -> Optional[ChainDescriptor]:
        """Get chain descriptor by key."""
        if not chain_key:
            return None
        return self._chains.get(chain_key.lower())

    def list_chains(self) -> list[ChainDescriptor]:
        """Get all chain descriptors."""
        return list(self._chains.values())

    def resolve(
        self, chain_key: str, mode: Union[str, NetworkMode, None]
    ) -> Optional[NetworkConfig]:
        """Resolve the network config for a chain and mode."""
        chain = self.get_chain(chain_key)
        network_mode = parse_network_mode(mode)
        if chain is None or network_mode is None:
            return None
        return chain.networks.get(network_mode)

    def find_by_caip2(self, caip2: str) -> Optional[tuple[str, NetworkMode]]:
        """Reverse lookup of (chain key, mode) by chain-namespace identifier."""
        return self._by_caip2.get(caip2)

    # Token lookups
    def native_token(self, chain_key: str) -> Optional[TokenDescriptor]:
        """Get the native token; present for every valid chain key."""
        chain = self.get_chain(chain_key)
        return chain.native if chain else None

    def token(
        self, chain_key: str, token_type: Union[str, TokenType]
    ) -> Optional[TokenDescriptor]:
        """Get the descriptor for a token type on a chain."""
        chain = self.get_chain(chain_key)
        if chain is None:
            return None
        try:
            token_type = TokenType(token_type)
        except ValueError:
            return None
        if token_type == TokenType.NATIVE:
            return chain.native
        return chain.stablecoin

    def stablecoin_address(
        self, chain_key: str, mode: Union[str, NetworkMode, None]
    ) -> Optional[str]:
        """Get stablecoin contract/mint address, None if unsupported."""
        chain = self.get_chain(chain_key)
        network_mode = parse_network_mode(mode)
        if chain is None or network_mode is None or chain.stablecoin is None:
            return None
        if network_mode not in chain.networks:
            return None
        return chain.stablecoin.address_for(network_mode)

    def supported_tokens(self, chain_key: str, mode: Union[str, NetworkMode]) -> list[TokenType]:
        """List token types requestable on a chain/network."""
        if self.resolve(chain_key, mode) is None:
            return []
        tokens = [TokenType.NATIVE]
        if self.stablecoin_address(chain_key, mode):
            tokens.append(TokenType.USDC)
        return tokens

    def supports_gas_sponsorship(
        self, chain_key: str, mode: Union[str, NetworkMode, None]
    ) -> bool:
        network = self.resolve(chain_key, mode)
        return bool(network and network.gas_sponsored)

    def balance_key(self, chain_key: str, mode: Union[str, NetworkMode]) -> Optional[str]:
        """Chain key used in balance entries for a chain/network.

        Custody-backed networks report balances under their custody alias;
        RPC-backed ones use the chain key suffixed with the mode.
        """
        network = self.resolve(chain_key, mode)
        if network is None:
            return None
        if network.custody_alias:
            return network.custody_alias
        chain = self.get_chain(chain_key)
        return format_chain_network(chain.key, parse_network_mode(mode))

    # Explorer URLs
    def build_explorer_url(
        self, chain_key: str, mode: Union[str, NetworkMode, None], tx_hash: Optional[str]
    ) -> Optional[str]:
        """Build explorer URL for a transaction on a chain/network."""
        network = self.resolve(chain_key, mode)
        if network is None or not tx_hash:
            return None
        return network.explorer.tx_url(tx_hash)

    def build_explorer_url_for_caip2(
        self, caip2: str, tx_hash: Optional[str]
    ) -> Optional[str]:
        """Build explorer URL knowing only the chain-namespace identifier."""
        found = self.find_by_caip2(caip2)
        if found is None:
            return None
        chain_key, mode = found
        return self.build_explorer_url(chain_key, mode, tx_hash)

    # Balance source partitioning
    def custody_aliases_by_family(
        self, mode: Union[str, NetworkMode, None] = None
    ) -> dict[ChainFamily, list[str]]:
        """Custody network aliases per wallet family (all modes if mode is None)."""
        network_mode = parse_network_mode(mode)
        aliases: dict[ChainFamily, list[str]] = {family: [] for family in ChainFamily}
        for chain in self._chains.values():
            for chain_mode, network in chain.networks.items():
                if network_mode is not None and chain_mode != network_mode:
                    continue
                if network.custody_alias:
                    aliases[chain.family].append(network.custody_alias)
        return aliases

    def custody_assets_by_family(self) -> dict[ChainFamily, list[str]]:
        """Asset keys to request from the custody service per wallet family."""
        assets: dict[ChainFamily, list[str]] = {family: [] for family in ChainFamily}
        for chain in self._chains.values():
            if not any(n.uses_custody_balances for n in chain.networks.values()):
                continue
            keys = [chain.native.asset_key]
            if chain.stablecoin is not None:
                keys.append(chain.stablecoin.asset_key)
            for key in keys:
                if key not in assets[chain.family]:
                    assets[chain.family].append(key)
        return assets

    def rpc_only_chains(self, mode: Union[str, NetworkMode, None] = None) -> list[RpcChain]:
        """Chains/networks whose balances must be fetched over raw RPC."""
        network_mode = parse_network_mode(mode)
        result = []
        for chain in self._chains.values():
            for chain_mode, network in chain.networks.items():
                if network_mode is not None and chain_mode != network_mode:
                    continue
                if not isinstance(network.source, RpcBacked):
                    continue
                result.append(
                    RpcChain(
                        chain_key=chain.key,
                        mode=chain_mode,
                        balance_key=format_chain_network(chain.key, chain_mode),
                        rpc_url=network.source.rpc_url,
                        symbol=chain.native.symbol,
                        decimals=chain.native.decimals,
                        stablecoin_address=(
                            chain.stablecoin.address_for(chain_mode)
                            if chain.stablecoin
                            else None
                        ),
                    )
                )
        return result


@lru_cache
def get_registry() -> ChainRegistry:
    """Get the registry over the built-in chain table."""
    return ChainRegistry()
