"""Privacy token held by a wallet account.

Operation flow (transfer, burning, PDE contribution, trade request):
1. Validate parameters, first failure wins
2. Gather native and token coins
3. Hand everything to the transaction sender
4. Log and return the history record

Bridge operations require bridge info and never touch the coin inventory.
Every failure is logged and re-raised unchanged.
"""

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional, Sequence

from privtoken.bridge import DepositBranch, is_bridge_erc20, is_bridge_ethereum, select_deposit_branch
from privtoken.config import Settings, get_settings
from privtoken.errors import UnsupportedCapabilityError, ValidationError
from privtoken.models import (
    AccountKeySet,
    BridgeConfig,
    Coin,
    DepositAddress,
    PaymentInfo,
    PrivacyTokenDescription,
    TokenIdentity,
    TxHistory,
)
from privtoken.services.base import DepositParams, TokenServices
from privtoken.services.factory import create_token_services, get_token_services
from privtoken.validation import (
    ensure_valid,
    required_amount,
    required_payment_info_list,
    required_string,
    to_amount,
)

logger = logging.getLogger(__name__)


class PrivacyToken:
    """A privacy token of one account.

    Usage:
        token = PrivacyToken(account, {"tokenId": "...", "name": "...", "symbol": "..."})
        history = await token.transfer([PaymentInfo(address, Decimal("1"))], 10, 0)
    """

    is_privacy_token = True

    def __init__(
        self,
        account_key_set: AccountKeySet,
        description: Any,
        services: Optional[TokenServices] = None,
        settings: Optional[Settings] = None,
        log: Optional[logging.Logger] = None,
    ):
        """Initialize token.

        Args:
            account_key_set: Keys of the owning account
            description: PrivacyTokenDescription or API mapping
            services: Services to delegate to. If None, a bundle is built from
                settings when given, else the process-wide bundle is used
            settings: Settings (cached ones if None)
            log: Logger receiving operation logs

        Raises:
            ValidationError: If an argument is missing or the description is invalid
        """
        if account_key_set is None:
            raise ValidationError("account_key_set", "is required")
        if description is None:
            raise ValidationError("privacy_token_description", "is required")
        if not isinstance(description, PrivacyTokenDescription):
            description = PrivacyTokenDescription.parse(description)

        self._settings = settings or get_settings()
        self._account = account_key_set
        self._identity = TokenIdentity(
            token_id=description.token_id,
            name=description.name,
            symbol=description.symbol,
        )
        self._total_supply = description.supply_amount
        self._bridge_info = BridgeConfig.coerce(description.bridge_info)
        if services is None:
            services = create_token_services(settings) if settings is not None else get_token_services()
        self._services = services
        self._log = log or logger

    def __repr__(self) -> str:
        return f"PrivacyToken(token_id={self.token_id!r}, symbol={self.symbol!r})"

    @property
    def account_key_set(self) -> AccountKeySet:
        return self._account

    @property
    def identity(self) -> TokenIdentity:
        return self._identity

    @property
    def token_id(self) -> str:
        return self._identity.token_id

    @property
    def name(self) -> str:
        return self._identity.name

    @property
    def symbol(self) -> str:
        return self._identity.symbol

    @property
    def total_supply(self) -> Decimal:
        """Supply reported by the token API, informational only."""
        return self._total_supply

    @property
    def bridge_info(self) -> Optional[BridgeConfig]:
        return self._bridge_info

    @property
    def bridge_erc20_token(self) -> bool:
        return is_bridge_erc20(self._bridge_info)

    @property
    def bridge_ethereum(self) -> bool:
        return is_bridge_ethereum(
            self.token_id, self._bridge_info, self._settings.ethereum_token_id
        )

    # ======================
    # Queries
    # ======================

    async def has_exchange_rate(self) -> bool:
        return await self._services.exchange_rates.has_exchange_rate(self.token_id)

    async def get_available_coins(self) -> list[Coin]:
        """Spendable coins of this token."""
        return await self._services.coins.get_available_coins(self._account, self.token_id)

    async def get_native_available_coins(self) -> list[Coin]:
        """Spendable coins of the native currency."""
        return await self._services.coins.get_available_coins(self._account, None)

    async def get_available_balance(self) -> Decimal:
        return _balance(await self.get_available_coins())

    async def get_native_available_balance(self) -> Decimal:
        return _balance(await self.get_native_available_coins())

    # ======================
    # Transactions
    # ======================

    async def transfer(
        self,
        payment_list: Sequence[Any],
        native_fee: Any,
        privacy_fee: Any,
    ) -> TxHistory:
        """Send this token privately to one or more receivers.

        Args:
            payment_list: PaymentInfo entries (or mappings) with positive amounts
            native_fee: Fee paid in the native coin
            privacy_fee: Fee paid in this token

        Returns:
            History record of the submitted transaction
        """
        params = {
            "payment_list": payment_list,
            "native_fee": native_fee,
            "privacy_fee": privacy_fee,
        }
        try:
            ensure_valid(
                required_payment_info_list("payment_list", payment_list),
                required_amount("native_fee", native_fee),
                required_amount("privacy_fee", privacy_fee),
            )
            payments = [PaymentInfo.coerce(item) for item in payment_list]
            params["payment_list"] = [(p.payment_address, str(p.amount)) for p in payments]

            self._log_attempt("transfer", "transfer", params)

            native_coins, privacy_coins = await self._gather_coins()
            history = await self._services.sender.send_privacy_token(
                account=self._account,
                native_coins=native_coins,
                privacy_coins=privacy_coins,
                native_fee=to_amount(native_fee),
                privacy_fee=to_amount(privacy_fee),
                payments=payments,
                token=self._identity,
            )
        except Exception as e:
            self._log_failure("transfer", "transfer", params, e)
            raise

        self._log_success("transfer", "transferred", history)
        return history

    async def burning(
        self,
        outchain_address: str,
        burning_amount: Any,
        native_fee: Any,
        privacy_fee: Any,
    ) -> TxHistory:
        """Burn tokens to release the same amount on the external chain.

        Args:
            outchain_address: Receiving address on the external chain
            burning_amount: Amount to burn
            native_fee: Fee paid in the native coin
            privacy_fee: Fee paid in this token
        """
        params = {
            "outchain_address": outchain_address,
            "burning_amount": burning_amount,
            "native_fee": native_fee,
            "privacy_fee": privacy_fee,
        }
        try:
            ensure_valid(
                required_string("outchain_address", outchain_address),
                required_amount("burning_amount", burning_amount),
                required_amount("native_fee", native_fee),
                required_amount("privacy_fee", privacy_fee),
            )

            self._log_attempt("burning", "send burning request", params)

            native_coins, privacy_coins = await self._gather_coins()
            history = await self._services.sender.send_burning_request(
                account=self._account,
                native_coins=native_coins,
                privacy_coins=privacy_coins,
                native_fee=to_amount(native_fee),
                privacy_fee=to_amount(privacy_fee),
                token=self._identity,
                outchain_address=outchain_address,
                burning_amount=to_amount(burning_amount),
            )
        except Exception as e:
            self._log_failure("burning", "send burning request", params, e)
            raise

        self._log_success("burning", "sent burning request", history)
        return history

    async def pde_contribution(
        self,
        pair_id: str,
        contributed_amount: Any,
        native_fee: Any,
        privacy_fee: Any,
    ) -> TxHistory:
        """Contribute liquidity to a PDE pool pair."""
        params = {
            "pair_id": pair_id,
            "contributed_amount": contributed_amount,
            "native_fee": native_fee,
            "privacy_fee": privacy_fee,
        }
        try:
            ensure_valid(
                required_string("pair_id", pair_id),
                required_amount("contributed_amount", contributed_amount),
                required_amount("native_fee", native_fee),
                required_amount("privacy_fee", privacy_fee),
            )

            self._log_attempt("pde_contribution", "send PDE contribution request", params)

            native_coins, privacy_coins = await self._gather_coins()
            history = await self._services.sender.send_pde_contribution(
                account=self._account,
                native_coins=native_coins,
                privacy_coins=privacy_coins,
                native_fee=to_amount(native_fee),
                privacy_fee=to_amount(privacy_fee),
                token=self._identity,
                pair_id=pair_id,
                contributed_amount=to_amount(contributed_amount),
            )
        except Exception as e:
            self._log_failure("pde_contribution", "send PDE contribution request", params, e)
            raise

        self._log_success("pde_contribution", "sent PDE contribution request", history)
        return history

    async def request_trade(
        self,
        token_id_buy: str,
        sell_amount: Any,
        minimum_acceptable_amount: Any,
        native_fee: Any,
        privacy_fee: Any,
        trading_fee: Any,
    ) -> TxHistory:
        """Sell this token for token_id_buy through the PDE pool.

        Args:
            token_id_buy: Token to receive
            sell_amount: Amount of this token to sell
            minimum_acceptable_amount: Trade fails if it would receive less
            native_fee: Fee paid in the native coin
            privacy_fee: Fee paid in this token
            trading_fee: Fee paid to the pool
        """
        params = {
            "token_id_buy": token_id_buy,
            "sell_amount": sell_amount,
            "minimum_acceptable_amount": minimum_acceptable_amount,
            "native_fee": native_fee,
            "privacy_fee": privacy_fee,
            "trading_fee": trading_fee,
        }
        try:
            ensure_valid(
                required_string("token_id_buy", token_id_buy),
                required_amount("sell_amount", sell_amount),
                required_amount("minimum_acceptable_amount", minimum_acceptable_amount),
                required_amount("native_fee", native_fee),
                required_amount("privacy_fee", privacy_fee),
                required_amount("trading_fee", trading_fee),
            )

            self._log_attempt("request_trade", "send trade request", params)

            native_coins, privacy_coins = await self._gather_coins()
            history = await self._services.sender.send_pde_trade_request(
                account=self._account,
                native_coins=native_coins,
                privacy_coins=privacy_coins,
                native_fee=to_amount(native_fee),
                privacy_fee=to_amount(privacy_fee),
                trading_fee=to_amount(trading_fee),
                token=self._identity,
                token_id_buy=token_id_buy,
                sell_amount=to_amount(sell_amount),
                minimum_acceptable_amount=to_amount(minimum_acceptable_amount),
            )
        except Exception as e:
            self._log_failure("request_trade", "send trade request", params, e)
            raise

        self._log_success("request_trade", "sent trade request", history)
        return history

    # ======================
    # Bridge
    # ======================

    async def bridge_generate_deposit_address(self) -> DepositAddress:
        """Generate a temporary address for depositing from the external chain.

        The address expires after the configured TTL (60 minutes by default).

        Raises:
            UnsupportedCapabilityError: If the token is not bridgeable
        """
        payment_address = self._account.payment_address
        params = {
            "currency_type": self._bridge_info.currency_type if self._bridge_info else None,
            "payment_address": payment_address,
        }
        try:
            bridge_info = self._require_bridge("deposit")

            self._log_attempt("bridge_generate_deposit_address", "create deposit request", params)

            deposit_params = DepositParams(
                payment_address=payment_address,
                wallet_address=payment_address,
                token_id=self.token_id,
                currency_type=bridge_info.currency_type,
            )
            bridge = self._services.bridge
            branch = select_deposit_branch(
                self.token_id, bridge_info, self._settings.ethereum_token_id
            )
            params["branch"] = branch.value

            if branch is DepositBranch.ETHEREUM:
                address = await bridge.gen_eth_deposit_address(deposit_params)
            elif branch is DepositBranch.ERC20:
                address = await bridge.gen_erc20_deposit_address(
                    replace(deposit_params, token_contract_id=bridge_info.contract_id)
                )
            else:
                address = await bridge.gen_centralized_deposit_address(deposit_params)
        except Exception as e:
            self._log_failure("bridge_generate_deposit_address", "generate temp deposit address", params, e)
            raise

        issued_at = datetime.now(timezone.utc)
        ttl = self._settings.deposit_address_ttl
        deposit = DepositAddress(
            address=address,
            token_id=self.token_id,
            issued_at=issued_at,
            expires_at=issued_at + ttl,
        )

        self._log.info(f"Generated temp deposit address successfully: {address}")
        self._log.warning(
            f"The temp deposit address ({address}) is only available in "
            f"{int(ttl.total_seconds() // 60)} mins from now"
        )
        return deposit

    async def bridge_get_history(self) -> list:
        """Deposit/withdraw history of this account for the token.

        Raises:
            UnsupportedCapabilityError: If the token is not bridgeable
        """
        params = {"payment_address": self._account.payment_address}
        try:
            self._require_bridge("bridge history")
            histories = await self._services.bridge.get_history(
                self._account.payment_address, self.token_id
            )
        except Exception as e:
            self._log_failure("bridge_get_history", "get bridge history", params, e)
            raise

        self._log.info(f"Get bridge history successfully: {len(histories)} records")
        return histories

    # ======================
    # Helpers
    # ======================

    def _require_bridge(self, capability: str) -> BridgeConfig:
        if self._bridge_info is None:
            raise UnsupportedCapabilityError(self.token_id, capability)
        return self._bridge_info

    async def _gather_coins(self) -> tuple[list[Coin], list[Coin]]:
        """Native and token coins, queried concurrently.

        If one query fails the other is cancelled before the error propagates.
        """
        tasks = [
            asyncio.ensure_future(self.get_native_available_coins()),
            asyncio.ensure_future(self.get_available_coins()),
        ]
        try:
            native_coins, privacy_coins = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return native_coins, privacy_coins

    def _log_attempt(self, operation: str, action: str, params: dict) -> None:
        self._log.info(
            f"Privacy token {self.token_id} {action}",
            extra={"operation": operation, "token_id": self.token_id, "params": params},
        )

    def _log_success(self, operation: str, action: str, history: TxHistory) -> None:
        self._log.info(
            f"Privacy token {self.token_id} {action} successfully with tx id {history.tx_id}",
            extra={"operation": operation, "token_id": self.token_id, "tx_id": history.tx_id},
        )

    def _log_failure(self, operation: str, action: str, params: dict, error: Exception) -> None:
        self._log.error(
            f"Privacy token {self.token_id} {action} failed: {error}",
            extra={
                "operation": operation,
                "token_id": self.token_id,
                "params": params,
                "error": repr(error),
            },
        )


def _balance(coins: Sequence[Coin]) -> Decimal:
    return sum((coin.value for coin in coins), Decimal("0"))
