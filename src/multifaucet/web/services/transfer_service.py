"""Transfer dispatcher.

Validates a transfer request against the chain registry and submits exactly
one transfer through the custody service:

- EVM native: value transfer, no call data
- EVM stablecoin: ERC-20 transfer(address,uint256) call to the token contract
- Solana native: system-program transfer
- Solana stablecoin: SPL token transfer between associated token accounts,
  creating the recipient's account first when it does not exist yet

Solana transactions are serialized unsigned with a placeholder blockhash;
the custody service substitutes a recent blockhash and signs. No retries:
a failed submission may already have been broadcast.
"""

import base64
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from solders.hash import Hash
from solders.instruction import Instruction
from solders.message import Message
from solders.pubkey import Pubkey
from solders.system_program import TransferParams as SystemTransferParams
from solders.system_program import transfer as system_transfer
from solders.transaction import Transaction
from spl.token.constants import TOKEN_PROGRAM_ID
from spl.token.instructions import (
    create_associated_token_account,
    get_associated_token_address,
    transfer,
)
from spl.token.models import TransferParams
from web3 import Web3

from multifaucet.chains import (
    ChainDescriptor,
    ChainFamily,
    ChainRegistry,
    InvalidChainError,
    InvalidNetworkModeError,
    NetworkConfig,
    NetworkMode,
    TokenDescriptor,
    TokenType,
    UnsupportedTokenError,
    get_registry,
    parse_network_mode,
)
from multifaucet.custody.base import CustodyClient, SubmittedTransaction
from multifaucet.utils.units import int_to_hex, to_smallest_unit
from multifaucet.web.contracts.transfers import TransferRequest, TransferResult
from multifaucet.web.services.rpc import JsonRpcClient

logger = logging.getLogger(__name__)

# ERC-20 transfer(address,uint256) function selector
ERC20_TRANSFER_SELECTOR = "0xa9059cbb"


class TransferFailedError(RuntimeError):
    """Transfer could not be encoded or submitted."""


@dataclass(frozen=True)
class TransferTarget:
    """Registry facts resolved for one transfer."""

    chain: ChainDescriptor
    mode: NetworkMode
    network: NetworkConfig
    token_type: TokenType
    token: TokenDescriptor
    token_address: Optional[str] = None

    @property
    def sponsored(self) -> bool:
        return self.network.gas_sponsored


def encode_erc20_transfer(recipient: str, amount: int) -> str:
    """ABI-encode an ERC-20 transfer(address,uint256) call."""
    to_padded = Web3.to_checksum_address(recipient).lower().replace("0x", "").zfill(64)
    amount_hex = hex(amount)[2:].zfill(64)
    return f"{ERC20_TRANSFER_SELECTOR}{to_padded}{amount_hex}"


def build_unsigned_transaction(instructions: list[Instruction], payer: Pubkey) -> str:
    """Serialize instructions into a base64 unsigned transaction.

    The blockhash is the all-zero placeholder (base58 "111...1"); the custody
    service replaces it with a recent one before signing.
    """
    message = Message.new_with_blockhash(instructions, payer, Hash.default())
    transaction = Transaction.new_unsigned(message)
    return base64.b64encode(bytes(transaction)).decode("ascii")


def solana_native_instructions(
    sender: Pubkey, recipient: Pubkey, lamports: int
) -> list[Instruction]:
    return [
        system_transfer(
            SystemTransferParams(from_pubkey=sender, to_pubkey=recipient, lamports=lamports)
        )
    ]


def solana_token_instructions(
    sender: Pubkey,
    recipient: Pubkey,
    mint: Pubkey,
    amount: int,
    create_recipient_account: bool,
) -> list[Instruction]:
    """SPL token transfer, optionally preceded by recipient account creation.

    Account creation is paid by the sender (rent is roughly 0.002 SOL).
    """
    sender_account = get_associated_token_address(sender, mint)
    recipient_account = get_associated_token_address(recipient, mint)

    instructions = []
    if create_recipient_account:
        instructions.append(
            create_associated_token_account(payer=sender, owner=recipient, mint=mint)
        )
    instructions.append(
        transfer(
            TransferParams(
                program_id=TOKEN_PROGRAM_ID,
                source=sender_account,
                dest=recipient_account,
                owner=sender,
                amount=amount,
            )
        )
    )
    return instructions


class TransferDispatcher:
    """Builds and submits chain-specific transfers via the custody service."""

    def __init__(
        self,
        custody: CustodyClient,
        rpc: JsonRpcClient,
        ethereum_wallet_id: str,
        solana_wallet_id: str,
        registry: Optional[ChainRegistry] = None,
    ):
        self.custody = custody
        self.rpc = rpc
        self.ethereum_wallet_id = ethereum_wallet_id
        self.solana_wallet_id = solana_wallet_id
        self.registry = registry or get_registry()

    def resolve_target(self, chain_key: str, network_mode: str, token: str) -> TransferTarget:
        """Resolve registry facts for a transfer, first failure wins.

        Raises:
            InvalidChainError: Unknown chain key
            InvalidNetworkModeError: Mode not served for this chain
            UnsupportedTokenError: Token not available on this chain/network
        """
        chain = self.registry.get_chain(chain_key)
        if chain is None:
            raise InvalidChainError()

        mode = parse_network_mode(network_mode)
        network = self.registry.resolve(chain.key, mode)
        if network is None:
            raise InvalidNetworkModeError()

        try:
            token_type = TokenType((token or "").lower())
        except ValueError:
            raise UnsupportedTokenError() from None

        token_address = None
        if token_type != TokenType.NATIVE:
            token_address = self.registry.stablecoin_address(chain.key, mode)
            if not token_address:
                raise UnsupportedTokenError()

        return TransferTarget(
            chain=chain,
            mode=mode,
            network=network,
            token_type=token_type,
            token=self.registry.token(chain.key, token_type),
            token_address=token_address,
        )

    async def dispatch(self, request: TransferRequest) -> TransferResult:
        """Validate and submit one transfer.

        Raises:
            ChainConfigError: Unsupported chain/network/token (nothing submitted)
            TransferFailedError: Encoding, derivation or submission failed
        """
        target = self.resolve_target(request.chain_id, request.network_mode, request.token)
        return await self.dispatch_target(target, request.wallet_address, request.amount)

    async def dispatch_target(
        self, target: TransferTarget, recipient: str, amount: Decimal
    ) -> TransferResult:
        """Submit a transfer for an already-resolved target."""
        try:
            if target.chain.family == ChainFamily.ETHEREUM:
                submitted = await self._send_evm(target, recipient, amount)
            else:
                submitted = await self._send_solana(target, recipient, amount)
        except Exception as e:
            logger.error(
                "Transfer of %s %s on %s/%s to %s failed: %s",
                amount,
                target.token.symbol,
                target.chain.key,
                target.mode.value,
                recipient,
                e,
            )
            raise TransferFailedError(f"Transfer failed: {e}") from e

        logger.info(
            "Transaction submitted: %s, hash: %s (%s %s on %s/%s)",
            submitted.transaction_id,
            submitted.hash,
            amount,
            target.token.symbol,
            target.chain.key,
            target.mode.value,
        )

        return TransferResult(
            success=True,
            transaction_id=submitted.transaction_id,
            chain=target.chain.key,
            hash=submitted.hash,
            explorer_url=self.registry.build_explorer_url(
                target.chain.key, target.mode, submitted.hash
            ),
            amount=amount,
            to=recipient,
        )

    async def _send_evm(
        self, target: TransferTarget, recipient: str, amount: Decimal
    ) -> SubmittedTransaction:
        raw_amount = to_smallest_unit(amount, target.token.decimals)

        if target.token_type == TokenType.NATIVE:
            return await self.custody.send_evm_transaction(
                self.ethereum_wallet_id,
                caip2=target.network.caip2,
                to=recipient,
                value=int_to_hex(raw_amount),
                sponsor=target.sponsored,
            )

        return await self.custody.send_evm_transaction(
            self.ethereum_wallet_id,
            caip2=target.network.caip2,
            to=target.token_address,
            value="0x0",
            data=encode_erc20_transfer(recipient, raw_amount),
            sponsor=target.sponsored,
        )

    async def _send_solana(
        self, target: TransferTarget, recipient: str, amount: Decimal
    ) -> SubmittedTransaction:
        wallet = await self.custody.get_wallet(self.solana_wallet_id)
        sender = Pubkey.from_string(wallet.address)
        recipient_key = Pubkey.from_string(recipient)
        raw_amount = to_smallest_unit(amount, target.token.decimals)

        if target.token_type == TokenType.NATIVE:
            instructions = solana_native_instructions(sender, recipient_key, raw_amount)
        else:
            mint = Pubkey.from_string(target.token_address)
            recipient_account = get_associated_token_address(recipient_key, mint)
            exists = await self.rpc.account_exists(
                target.network.rpc_url, str(recipient_account)
            )
            if not exists:
                logger.info(
                    "Creating associated token account %s for %s",
                    recipient_account,
                    recipient,
                )
            instructions = solana_token_instructions(
                sender,
                recipient_key,
                mint,
                raw_amount,
                create_recipient_account=not exists,
            )

        return await self.custody.sign_and_send_solana(
            self.solana_wallet_id,
            caip2=target.network.caip2,
            transaction=build_unsigned_transaction(instructions, sender),
            sponsor=target.sponsored,
        )
