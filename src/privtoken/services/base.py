"""Base interfaces for the services a token relies on.

A token never builds, signs or broadcasts transactions itself. It gathers
coins, then hands everything to one of these services:

- ExchangeRateService: is the token tradable against the native coin
- CoinInventory: spendable coins of an account
- TransactionSender: transfer, burn, liquidity contribution, trade
- BridgeService: temporary deposit addresses and bridge history
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from privtoken.models import AccountKeySet, Coin, PaymentInfo, TokenIdentity, TxHistory


@dataclass(frozen=True)
class DepositParams:
    """Parameters shared by all deposit address generators."""

    payment_address: str
    wallet_address: str
    token_id: str
    currency_type: Optional[str]
    token_contract_id: Optional[str] = None  # ERC20 only


class ExchangeRateService(ABC):
    """Looks up whether a token has a market rate."""

    @abstractmethod
    async def has_exchange_rate(self, token_id: str) -> bool:
        """Check if the token can be priced against the native coin.

        Args:
            token_id: Token to look up

        Returns:
            True if a rate exists
        """
        pass


class CoinInventory(ABC):
    """Lists spendable coins."""

    @abstractmethod
    async def get_available_coins(
        self, account: AccountKeySet, token_id: Optional[str]
    ) -> list[Coin]:
        """List spendable coins of an account.

        Args:
            account: Account keys
            token_id: Token to list, None for the native coin

        Returns:
            Spendable coins
        """
        pass


class TransactionSender(ABC):
    """Builds, signs and broadcasts token transactions.

    Every method returns the history record of the submitted transaction.
    """

    @abstractmethod
    async def send_privacy_token(
        self,
        *,
        account: AccountKeySet,
        native_coins: Sequence[Coin],
        privacy_coins: Sequence[Coin],
        native_fee: Decimal,
        privacy_fee: Decimal,
        payments: Sequence[PaymentInfo],
        token: TokenIdentity,
    ) -> TxHistory:
        pass

    @abstractmethod
    async def send_burning_request(
        self,
        *,
        account: AccountKeySet,
        native_coins: Sequence[Coin],
        privacy_coins: Sequence[Coin],
        native_fee: Decimal,
        privacy_fee: Decimal,
        token: TokenIdentity,
        outchain_address: str,
        burning_amount: Decimal,
    ) -> TxHistory:
        pass

    @abstractmethod
    async def send_pde_contribution(
        self,
        *,
        account: AccountKeySet,
        native_coins: Sequence[Coin],
        privacy_coins: Sequence[Coin],
        native_fee: Decimal,
        privacy_fee: Decimal,
        token: TokenIdentity,
        pair_id: str,
        contributed_amount: Decimal,
    ) -> TxHistory:
        pass

    @abstractmethod
    async def send_pde_trade_request(
        self,
        *,
        account: AccountKeySet,
        native_coins: Sequence[Coin],
        privacy_coins: Sequence[Coin],
        native_fee: Decimal,
        privacy_fee: Decimal,
        trading_fee: Decimal,
        token: TokenIdentity,
        token_id_buy: str,
        sell_amount: Decimal,
        minimum_acceptable_amount: Decimal,
    ) -> TxHistory:
        pass


class BridgeService(ABC):
    """Cross-chain bridge API."""

    @abstractmethod
    async def gen_eth_deposit_address(self, params: DepositParams) -> str:
        """Generate a temporary deposit address for Ethereum."""
        pass

    @abstractmethod
    async def gen_erc20_deposit_address(self, params: DepositParams) -> str:
        """Generate a temporary deposit address for an ERC20 token.

        ``params.token_contract_id`` is set.
        """
        pass

    @abstractmethod
    async def gen_centralized_deposit_address(self, params: DepositParams) -> str:
        """Generate a temporary deposit address at the custodial bridge."""
        pass

    @abstractmethod
    async def get_history(self, payment_address: str, token_id: str) -> list:
        """Get deposit/withdraw history of an account for a token."""
        pass


@dataclass
class TokenServices:
    """Services injected into a token."""

    exchange_rates: ExchangeRateService
    coins: CoinInventory
    sender: TransactionSender
    bridge: BridgeService
