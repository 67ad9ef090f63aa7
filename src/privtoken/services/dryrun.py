"""Dry-run services for development and testing (nothing leaves the process)."""

import logging
import secrets
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from privtoken.errors import CollaboratorError
from privtoken.models import (
    AccountKeySet,
    BridgeHistoryRecord,
    Coin,
    PaymentInfo,
    TokenIdentity,
    TxHistory,
)
from privtoken.services.base import (
    BridgeService,
    CoinInventory,
    DepositParams,
    ExchangeRateService,
    TransactionSender,
)

logger = logging.getLogger(__name__)


class DryRunExchangeRates(ExchangeRateService):
    """Simulated rate lookup.

    With no token list every token has a rate.
    """

    def __init__(self, rated_tokens: Optional[Iterable[str]] = None):
        self.rated_tokens = set(rated_tokens) if rated_tokens is not None else None

    async def has_exchange_rate(self, token_id: str) -> bool:
        if self.rated_tokens is None:
            return True
        return token_id in self.rated_tokens


class DryRunCoinInventory(CoinInventory):
    """In-memory coin inventory keyed by token id (None = native coin)."""

    def __init__(self):
        self._coins: dict[Optional[str], list[Coin]] = {}

    def add_coins(self, token_id: Optional[str], *values) -> list[Coin]:
        """Credit coins of the given values.

        Returns:
            The created coins
        """
        created = []
        for value in values:
            coin = Coin(
                coin_id=f"sim_coin_{secrets.token_hex(8)}",
                value=Decimal(str(value)),
                token_id=token_id,
            )
            created.append(coin)
        self._coins.setdefault(token_id, []).extend(created)
        return created

    async def get_available_coins(
        self, account: AccountKeySet, token_id: Optional[str]
    ) -> list[Coin]:
        return list(self._coins.get(token_id, []))


def _total(coins: Sequence[Coin]) -> Decimal:
    return sum((coin.value for coin in coins), Decimal("0"))


class DryRunTransactionSender(TransactionSender):
    """Simulated sender.

    Checks that the given coins cover amount plus fees, then records a
    fake transaction instead of broadcasting.
    """

    def __init__(self):
        self.submitted: list[TxHistory] = []

    def _check_funds(
        self, label: str, coins: Sequence[Coin], required: Decimal
    ) -> None:
        available = _total(coins)
        if available < required:
            raise CollaboratorError(
                f"Insufficient {label} balance: {available} < {required}",
                service="dryrun",
            )

    def _record(
        self,
        token: TokenIdentity,
        operation: str,
        native_fee: Decimal,
        privacy_fee: Decimal,
        amount: Decimal,
        **details,
    ) -> TxHistory:
        history = TxHistory(
            tx_id=f"sim_tx_{secrets.token_hex(32)}",
            token_id=token.token_id,
            operation=operation,
            native_fee=native_fee,
            privacy_fee=privacy_fee,
            amount=amount,
            details=details,
        )
        self.submitted.append(history)
        logger.info(f"[SIMULATED] {operation}: {amount} {token.symbol} tx {history.tx_id}")
        return history

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
        amount = sum((payment.amount for payment in payments), Decimal("0"))
        self._check_funds("native", native_coins, native_fee)
        self._check_funds(token.symbol, privacy_coins, amount + privacy_fee)
        return self._record(
            token, "transfer", native_fee, privacy_fee, amount,
            receivers=[payment.payment_address for payment in payments],
        )

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
        self._check_funds("native", native_coins, native_fee)
        self._check_funds(token.symbol, privacy_coins, burning_amount + privacy_fee)
        return self._record(
            token, "burning", native_fee, privacy_fee, burning_amount,
            outchain_address=outchain_address,
        )

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
        self._check_funds("native", native_coins, native_fee)
        self._check_funds(token.symbol, privacy_coins, contributed_amount + privacy_fee)
        return self._record(
            token, "pde_contribution", native_fee, privacy_fee, contributed_amount,
            pair_id=pair_id,
        )

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
        self._check_funds("native", native_coins, native_fee)
        self._check_funds(token.symbol, privacy_coins, sell_amount + trading_fee + privacy_fee)
        return self._record(
            token, "trade_request", native_fee, privacy_fee, sell_amount,
            token_id_buy=token_id_buy,
            minimum_acceptable_amount=str(minimum_acceptable_amount),
            trading_fee=str(trading_fee),
        )


class DryRunBridgeService(BridgeService):
    """Simulated bridge with deterministic fake deposit addresses.

    Every generated address shows up in the history as a pending deposit.
    """

    def __init__(self):
        self._history: dict[tuple[str, str], list[BridgeHistoryRecord]] = {}

    def _generate(self, branch: str, params: DepositParams) -> str:
        address = f"sim:{branch}:{params.token_id[:8]}:{params.payment_address[:8]}"
        rows = self._history.setdefault((params.payment_address, params.token_id), [])
        rows.append(
            BridgeHistoryRecord(
                id=len(rows) + 1,
                address=address,
                status=0,
                status_message="Pending",
                created_at=datetime.now(timezone.utc),
            )
        )
        return address

    async def gen_eth_deposit_address(self, params: DepositParams) -> str:
        return self._generate("eth", params)

    async def gen_erc20_deposit_address(self, params: DepositParams) -> str:
        if not params.token_contract_id:
            raise CollaboratorError("ERC20 deposit requires a token contract id", service="dryrun")
        return self._generate("erc20", params)

    async def gen_centralized_deposit_address(self, params: DepositParams) -> str:
        return self._generate("centralized", params)

    async def get_history(self, payment_address: str, token_id: str) -> list:
        return list(self._history.get((payment_address, token_id), []))
