"""Tests for caller-facing faucet validation and orchestration."""

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from conftest import (
    EVM_FAUCET_ADDRESS,
    EVM_RECIPIENT,
    SOLANA_FAUCET_ADDRESS,
    SOLANA_RECIPIENT,
    FakeCustody,
    balance_entry,
)

from multifaucet.chains import ChainFamily, InvalidChainError, TokenType, UnsupportedTokenError
from multifaucet.custody.base import CustodyError, WalletNotProvisionedError
from multifaucet.web.contracts.transfers import TransferRequest
from multifaucet.web.services.balance_service import BalanceService
from multifaucet.web.services.faucet_service import (
    FaucetService,
    TransferValidationError,
    format_available,
    is_valid_address,
)
from multifaucet.web.services.transaction_service import TransactionTracker
from multifaucet.web.services.transfer_service import TransferDispatcher, TransferFailedError


@pytest.fixture
def store():
    store = AsyncMock()
    store.record.return_value = True
    store.update_status.return_value = True
    return store


@pytest.fixture
def faucet(custody, rpc, store):
    return FaucetService(
        custody,
        balances=BalanceService(custody, rpc),
        dispatcher=TransferDispatcher(
            custody, rpc, ethereum_wallet_id="evm-wallet", solana_wallet_id="sol-wallet"
        ),
        tracker=TransactionTracker(custody),
        store=store,
    )


def transfer_request(chain_id, amount, to, network_mode="testnet", token="native"):
    return TransferRequest(
        wallet_address=to,
        amount=Decimal(amount),
        chain_id=chain_id,
        network_mode=network_mode,
        token=token,
    )


class TestAddressValidation:
    """Tests for recipient address format checks."""

    def test_evm_addresses(self):
        assert is_valid_address(EVM_RECIPIENT, ChainFamily.ETHEREUM)
        assert is_valid_address("0x" + "AbCd" * 10, ChainFamily.ETHEREUM)
        assert not is_valid_address("0x1234", ChainFamily.ETHEREUM)
        assert not is_valid_address("ab" * 20, ChainFamily.ETHEREUM)
        assert not is_valid_address("0x" + "zz" * 20, ChainFamily.ETHEREUM)
        assert not is_valid_address(SOLANA_RECIPIENT, ChainFamily.ETHEREUM)

    def test_solana_addresses(self):
        assert is_valid_address(SOLANA_RECIPIENT, ChainFamily.SOLANA)
        assert not is_valid_address(EVM_RECIPIENT, ChainFamily.SOLANA)
        assert not is_valid_address("0OIl" * 10, ChainFamily.SOLANA)
        assert not is_valid_address("short", ChainFamily.SOLANA)
        assert not is_valid_address("", ChainFamily.SOLANA)


class TestValidateRequest:
    """Tests for checks that run before any network call."""

    def test_registry_errors_come_first(self, faucet):
        with pytest.raises(InvalidChainError):
            faucet.validate_request(transfer_request("dogecoin", "-1", "bad"))

    def test_unsupported_token(self, faucet):
        with pytest.raises(UnsupportedTokenError):
            faucet.validate_request(transfer_request("monad", "1", EVM_RECIPIENT, token="usdc"))

    def test_bad_evm_address(self, faucet):
        with pytest.raises(TransferValidationError, match="Invalid Ethereum address"):
            faucet.validate_request(transfer_request("base", "1", SOLANA_RECIPIENT))

    def test_bad_solana_address(self, faucet):
        with pytest.raises(TransferValidationError, match="Invalid Solana address"):
            faucet.validate_request(transfer_request("solana", "1", EVM_RECIPIENT))

    @pytest.mark.parametrize("amount", ["0", "-0.5"])
    def test_non_positive_amount(self, faucet, amount):
        with pytest.raises(TransferValidationError, match="valid amount greater than 0"):
            faucet.validate_request(transfer_request("base", amount, EVM_RECIPIENT))

    def test_amount_below_smallest_unit(self, faucet):
        with pytest.raises(TransferValidationError, match="smallest unit"):
            faucet.validate_request(
                transfer_request("base", "0.0000001", EVM_RECIPIENT, token="usdc")
            )

    def test_valid_request(self, faucet):
        target = faucet.validate_request(transfer_request("solana", "1", SOLANA_RECIPIENT))

        assert target.chain.family == ChainFamily.SOLANA
        assert target.token.symbol == "SOL"


class TestRequestTransfer:
    """Tests for the full transfer flow."""

    @pytest.mark.asyncio
    async def test_insufficient_balance_rejected_before_submission(self, faucet, custody, store):
        custody.balances["evm-wallet"] = [balance_entry("base_sepolia", "eth", 2 * 10**18, 18)]

        with pytest.raises(TransferValidationError) as exc_info:
            await faucet.request_transfer(
                transfer_request("base", "2.5", EVM_RECIPIENT), user_id="user-1"
            )

        assert str(exc_info.value) == "Insufficient faucet balance. Available: 2.0000 ETH"
        assert custody.submissions == []
        store.record.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_amount_beyond_default_precision(self, faucet, custody, store):
        custody.balances["evm-wallet"] = [balance_entry("sepolia", "eth", 2 * 10**18, 18)]

        with pytest.raises(TransferValidationError) as exc_info:
            await faucet.request_transfer(
                transfer_request("ethereum", "100000000000", EVM_RECIPIENT), user_id="user-1"
            )

        assert str(exc_info.value) == "Insufficient faucet balance. Available: 2.0000 ETH"
        assert custody.submissions == []
        store.record.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stablecoin_balance_message(self, faucet, custody):
        custody.balances["evm-wallet"] = [balance_entry("sepolia", "usdc", 1_234_567, 6)]

        with pytest.raises(TransferValidationError, match="Available: 1.23 USDC"):
            await faucet.request_transfer(
                transfer_request("ethereum", "5", EVM_RECIPIENT, token="usdc"), user_id="user-1"
            )

    @pytest.mark.asyncio
    async def test_missing_balance_entry_counts_as_empty(self, faucet, custody):
        with pytest.raises(TransferValidationError, match="Available: 0.0000 ETH"):
            await faucet.request_transfer(
                transfer_request("base", "0.01", EVM_RECIPIENT), user_id="user-1"
            )

        assert custody.submissions == []

    @pytest.mark.asyncio
    async def test_transfer_dispatched_and_recorded(self, faucet, custody, store):
        custody.balances["evm-wallet"] = [balance_entry("base_sepolia", "eth", 2 * 10**18, 18)]
        custody.next_hash = "0xabc"

        result = await faucet.request_transfer(
            transfer_request("base", "0.01", EVM_RECIPIENT), user_id="user-1"
        )

        assert result.transaction_id == "tx-1"
        assert result.explorer_url == "https://sepolia.basescan.org/tx/0xabc"
        assert custody.submissions[0]["sponsor"] is True
        store.record.assert_awaited_once_with(
            transaction_id="tx-1",
            user_id="user-1",
            chain_key="base",
            network_mode="testnet",
            token="native",
            amount=Decimal("0.01"),
            recipient=EVM_RECIPIENT,
            tx_hash="0xabc",
            explorer_url="https://sepolia.basescan.org/tx/0xabc",
        )

    @pytest.mark.asyncio
    async def test_exact_balance_is_allowed(self, faucet, custody):
        custody.balances["sol-wallet"] = [balance_entry("solana_devnet", "sol", 10**9, 9)]

        result = await faucet.request_transfer(
            transfer_request("solana", "1", SOLANA_RECIPIENT), user_id="user-1"
        )

        assert result.chain == "solana"
        assert custody.submissions[0]["kind"] == "solana"

    @pytest.mark.asyncio
    async def test_rpc_backed_balance_check(self, faucet, custody, rpc_stub):
        rpc_stub.set_result("api.avax-test.network", "eth_getBalance", hex(3 * 10**18))

        await faucet.request_transfer(
            transfer_request("avalanche", "1", EVM_RECIPIENT), user_id="user-1"
        )

        assert custody.submissions[0]["caip2"] == "eip155:43113"

    @pytest.mark.asyncio
    async def test_submission_failure(self, faucet, custody, store):
        custody.balances["evm-wallet"] = [balance_entry("sepolia", "eth", 10**18, 18)]
        custody.submit_error = CustodyError("nonce too low")

        with pytest.raises(TransferFailedError, match="nonce too low"):
            await faucet.request_transfer(
                transfer_request("ethereum", "0.1", EVM_RECIPIENT), user_id="user-1"
            )

        store.record.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unprovisioned_wallet(self, faucet, custody):
        del custody.wallets["sol-wallet"]

        with pytest.raises(WalletNotProvisionedError):
            await faucet.request_transfer(
                transfer_request("solana", "1", SOLANA_RECIPIENT), user_id="user-1"
            )


class TestBalancesAndStatus:
    """Tests for balance listing and status mirroring."""

    @pytest.mark.asyncio
    async def test_get_balances(self, faucet, custody):
        custody.balances["sol-wallet"] = [balance_entry("solana_devnet", "sol", 10**9, 9)]

        response = await faucet.get_balances()

        assert response.ethereum.wallet.address == EVM_FAUCET_ADDRESS
        assert response.solana.wallet.address == SOLANA_FAUCET_ADDRESS
        assert [e.asset for e in response.solana.balances] == ["sol"]

    @pytest.mark.asyncio
    async def test_status_is_mirrored(self, faucet, custody, store):
        custody.add_transaction("tx-9", "eip155:11155111", "confirmed", tx_hash="0xdef")

        response = await faucet.get_transaction_status("tx-9")

        assert response.is_final is True
        store.update_status.assert_awaited_once_with(
            "tx-9",
            "confirmed",
            tx_hash="0xdef",
            explorer_url="https://sepolia.etherscan.io/tx/0xdef",
            error_message=None,
        )

    @pytest.mark.asyncio
    async def test_status_survives_store_failure(self, faucet, custody, store):
        store.update_status.return_value = False
        custody.add_transaction("tx-9", "eip155:11155111", "pending")

        response = await faucet.get_transaction_status("tx-9")

        assert response.status == "pending"


class TestFormatting:
    def test_format_available(self):
        assert format_available(Decimal("1.23456"), TokenType.USDC) == "1.23"
        assert format_available(Decimal("0.123456789"), TokenType.NATIVE) == "0.1234"

    def test_format_large_balance(self):
        amount = Decimal(str(10**40) + ".123456")

        assert format_available(amount, TokenType.NATIVE) == str(10**40) + ".1234"


class WalletRendezvous(FakeCustody):
    """Each wallet lookup waits until both families have been requested."""

    def __init__(self):
        super().__init__()
        self.requested: list[str] = []
        self.both_requested = asyncio.Event()

    async def get_wallet(self, wallet_id: str):
        self.requested.append(wallet_id)
        if len(self.requested) == 2:
            self.both_requested.set()
        await asyncio.wait_for(self.both_requested.wait(), timeout=1)
        return await super().get_wallet(wallet_id)


class TestWalletLookup:
    @pytest.mark.asyncio
    async def test_family_wallets_fetched_concurrently(self, rpc, store):
        custody = WalletRendezvous()
        faucet = FaucetService(
            custody,
            balances=BalanceService(custody, rpc),
            dispatcher=TransferDispatcher(
                custody, rpc, ethereum_wallet_id="evm-wallet", solana_wallet_id="sol-wallet"
            ),
            tracker=TransactionTracker(custody),
            store=store,
        )

        response = await faucet.get_balances()

        assert sorted(custody.requested) == ["evm-wallet", "sol-wallet"]
        assert response.ethereum.wallet.address == EVM_FAUCET_ADDRESS
