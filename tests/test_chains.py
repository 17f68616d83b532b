"""Tests for the chain registry and amount conversion."""

from decimal import Decimal

import pytest

from multifaucet.chains import (
    CHAINS,
    ChainFamily,
    ChainRegistry,
    NetworkMode,
    TokenType,
    format_chain_network,
    parse_network_mode,
)
from multifaucet.utils.units import (
    format_display,
    from_smallest_unit,
    hex_to_int,
    int_to_hex,
    to_smallest_unit,
)


@pytest.fixture
def registry() -> ChainRegistry:
    return ChainRegistry()


def all_networks():
    for chain in CHAINS.values():
        for mode in chain.networks:
            yield chain.key, mode


class TestResolve:
    """Tests for network resolution."""

    @pytest.mark.parametrize("chain_key,mode", list(all_networks()))
    def test_every_network_has_caip2_and_explorer(self, registry, chain_key, mode):
        network = registry.resolve(chain_key, mode)

        assert network is not None
        assert network.caip2
        assert ":" in network.caip2
        assert network.explorer.url

    @pytest.mark.parametrize("chain_key,mode", list(all_networks()))
    def test_rpc_present_without_custody_alias(self, registry, chain_key, mode):
        network = registry.resolve(chain_key, mode)

        assert network.custody_alias or network.rpc_url

    def test_unknown_chain(self, registry):
        assert registry.resolve("dogecoin", "testnet") is None
        assert registry.resolve("", "testnet") is None

    def test_unknown_mode(self, registry):
        assert registry.resolve("ethereum", "devnet") is None
        assert registry.resolve("ethereum", None) is None

    def test_mode_not_served(self, registry):
        assert registry.resolve("monad", "mainnet") is None
        assert registry.resolve("monad", "testnet") is not None

    def test_mode_string_is_case_insensitive(self, registry):
        assert registry.resolve("base", "TESTNET") == registry.resolve("base", NetworkMode.TESTNET)

    def test_lookups_are_idempotent(self, registry):
        assert registry.resolve("solana", "testnet") == registry.resolve("solana", "testnet")
        assert registry.stablecoin_address("base", "mainnet") == registry.stablecoin_address(
            "base", "mainnet"
        )
        assert registry.rpc_only_chains() == registry.rpc_only_chains()
        assert registry.custody_aliases_by_family() == registry.custody_aliases_by_family()


class TestTokens:
    """Tests for token lookups."""

    def test_native_token_for_every_chain(self, registry):
        for chain_key in CHAINS:
            assert registry.native_token(chain_key) is not None

    def test_native_decimals(self, registry):
        assert registry.native_token("ethereum").decimals == 18
        assert registry.native_token("solana").decimals == 9
        assert registry.native_token("polygon").symbol == "POL"

    def test_stablecoin_address(self, registry):
        assert (
            registry.stablecoin_address("ethereum", "testnet")
            == "0x1c7D4B196Cb0C7B01d743Fbc6116a902379C7238"
        )
        assert (
            registry.stablecoin_address("solana", "testnet")
            == "4zMMC9srt5Ri5X14GAgXhaHii3GnPAEERYPJgZJDncDU"
        )

    def test_stablecoin_missing(self, registry):
        assert registry.stablecoin_address("monad", "testnet") is None
        assert registry.stablecoin_address("monad", "mainnet") is None
        assert registry.stablecoin_address("nope", "testnet") is None

    def test_stablecoin_decimals(self, registry):
        assert registry.token("base", TokenType.USDC).decimals == 6
        assert registry.token("base", "usdc").symbol == "USDC"
        assert registry.token("base", "doge") is None

    def test_supported_tokens(self, registry):
        assert registry.supported_tokens("base", "testnet") == [TokenType.NATIVE, TokenType.USDC]
        assert registry.supported_tokens("monad", "testnet") == [TokenType.NATIVE]
        assert registry.supported_tokens("monad", "mainnet") == []


class TestSponsorship:
    """Tests for gas sponsorship flags."""

    def test_sponsored_networks(self, registry):
        assert registry.supports_gas_sponsorship("base", "mainnet")
        assert registry.supports_gas_sponsorship("solana", "testnet")

    def test_unsponsored_networks(self, registry):
        assert not registry.supports_gas_sponsorship("ethereum", "testnet")
        assert not registry.supports_gas_sponsorship("avalanche", "mainnet")
        assert not registry.supports_gas_sponsorship("unknown", "mainnet")


class TestExplorerUrls:
    """Tests for explorer URL construction."""

    def test_forward_lookup(self, registry):
        url = registry.build_explorer_url("ethereum", "testnet", "0xabc")
        assert url == "https://sepolia.etherscan.io/tx/0xabc"

    def test_suffix(self, registry):
        url = registry.build_explorer_url("solana", "testnet", "5sig")
        assert url == "https://explorer.solana.com/tx/5sig?cluster=devnet"

    def test_missing_hash(self, registry):
        assert registry.build_explorer_url("ethereum", "testnet", None) is None
        assert registry.build_explorer_url("ethereum", "testnet", "") is None

    def test_reverse_lookup_by_caip2(self, registry):
        assert (
            registry.build_explorer_url_for_caip2("eip155:84532", "0xabc")
            == "https://sepolia.basescan.org/tx/0xabc"
        )
        assert registry.find_by_caip2("eip155:10143") == ("monad", NetworkMode.TESTNET)

    def test_reverse_lookup_unknown(self, registry):
        assert registry.build_explorer_url_for_caip2("eip155:999999", "0xabc") is None

    @pytest.mark.parametrize("chain_key,mode", list(all_networks()))
    def test_reverse_matches_forward(self, registry, chain_key, mode):
        network = registry.resolve(chain_key, mode)
        assert registry.build_explorer_url_for_caip2(
            network.caip2, "0x1"
        ) == registry.build_explorer_url(chain_key, mode, "0x1")


class TestBalanceSources:
    """Tests for custody vs RPC partitioning."""

    def test_custody_aliases_by_family(self, registry):
        aliases = registry.custody_aliases_by_family("testnet")

        assert "sepolia" in aliases[ChainFamily.ETHEREUM]
        assert "base_sepolia" in aliases[ChainFamily.ETHEREUM]
        assert aliases[ChainFamily.SOLANA] == ["solana_devnet"]
        assert "base" not in aliases[ChainFamily.ETHEREUM]

    def test_custody_aliases_all_modes(self, registry):
        aliases = registry.custody_aliases_by_family()

        assert set(aliases[ChainFamily.SOLANA]) == {"solana", "solana_devnet"}
        assert "ethereum" in aliases[ChainFamily.ETHEREUM]

    def test_rpc_only_chains(self, registry):
        chains = {(c.chain_key, c.mode): c for c in registry.rpc_only_chains()}

        assert set(chains) == {
            ("avalanche", NetworkMode.MAINNET),
            ("avalanche", NetworkMode.TESTNET),
            ("monad", NetworkMode.TESTNET),
        }
        fuji = chains[("avalanche", NetworkMode.TESTNET)]
        assert fuji.balance_key == "avalanche_testnet"
        assert fuji.symbol == "AVAX"
        assert fuji.rpc_url.startswith("https://")
        assert fuji.stablecoin_address
        assert chains[("monad", NetworkMode.TESTNET)].stablecoin_address is None

    def test_rpc_only_chains_by_mode(self, registry):
        chains = registry.rpc_only_chains("mainnet")
        assert [(c.chain_key, c.balance_key) for c in chains] == [("avalanche", "avalanche")]

    def test_balance_key(self, registry):
        assert registry.balance_key("base", "testnet") == "base_sepolia"
        assert registry.balance_key("avalanche", "testnet") == "avalanche_testnet"
        assert registry.balance_key("solana", "mainnet") == "solana"
        assert registry.balance_key("monad", "mainnet") is None


class TestHelpers:
    """Tests for mode parsing helpers."""

    def test_parse_network_mode(self):
        assert parse_network_mode("mainnet") == NetworkMode.MAINNET
        assert parse_network_mode(NetworkMode.TESTNET) == NetworkMode.TESTNET
        assert parse_network_mode("regtest") is None
        assert parse_network_mode(None) is None

    def test_format_chain_network(self):
        assert format_chain_network("monad", NetworkMode.TESTNET) == "monad_testnet"
        assert format_chain_network("avalanche", NetworkMode.MAINNET) == "avalanche"


class TestUnits:
    """Tests for smallest-unit conversion."""

    def test_round_trip(self):
        raw = to_smallest_unit(Decimal("1.5"), 18)

        assert raw == 1500000000000000000
        assert from_smallest_unit(raw, 18) == Decimal("1.5")

    def test_stablecoin_precision(self):
        assert to_smallest_unit(Decimal("10.25"), 6) == 10250000

    def test_floors_sub_unit_remainder(self):
        assert to_smallest_unit(Decimal("0.0000019"), 6) == 1
        assert to_smallest_unit(Decimal("0.0000001"), 6) == 0
        assert to_smallest_unit(Decimal("1.9999999999"), 9) == 1999999999

    def test_float_input(self):
        assert to_smallest_unit(0.1, 18) == 100000000000000000

    def test_beyond_default_precision(self):
        assert to_smallest_unit(Decimal("100000000000"), 18) == 10**29
        assert to_smallest_unit(Decimal("123456789012345678901234567.5"), 18) == (
            123456789012345678901234567 * 10**18 + 5 * 10**17
        )
        assert from_smallest_unit(10**40 + 1, 18) == Decimal("10000000000000000000000.000000000000000001")

    def test_non_finite_rejected(self):
        with pytest.raises(ValueError):
            to_smallest_unit(Decimal("Infinity"), 18)

    def test_format_display(self):
        assert format_display(1500000000000000000, 18) == "1.5"
        assert format_display("2000000", 6) == "2"
        assert format_display(0, 9) == "0"

    def test_hex(self):
        assert hex_to_int("0x0") == 0
        assert hex_to_int("0x") == 0
        assert hex_to_int("0x2386f26fc10000") == 10**16
        assert int_to_hex(10**16) == "0x2386f26fc10000"
