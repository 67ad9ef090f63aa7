"""Pytest configuration and fixtures."""

import os
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

# Set test environment
os.environ["PRIVTOKEN_ENVIRONMENT"] = "test"
os.environ["PRIVTOKEN_PROVIDER"] = "dryrun"

from privtoken.config import Settings, get_settings
from privtoken.models import AccountKeySet, Coin, TxHistory
from privtoken.services.base import (
    BridgeService,
    CoinInventory,
    ExchangeRateService,
    TokenServices,
    TransactionSender,
)
from privtoken.services.factory import reset_token_services

ETH_TOKEN_ID = "e" * 64
TOKEN_ID = "a" * 64


@pytest.fixture(autouse=True)
def reset_globals():
    """Clear cached settings and services around each test."""
    get_settings.cache_clear()
    reset_token_services()
    yield
    get_settings.cache_clear()
    reset_token_services()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, ethereum_token_id=ETH_TOKEN_ID)


@pytest.fixture
def account() -> AccountKeySet:
    return AccountKeySet(
        payment_address="12S5Lrs1XeQLbqN4ySyKtjAjd2d7sBP2tjFijzmp6avrrkQCNFMpkXm3FPzj2Wcu2ZNqJEmh9JriVuRErVwhuQnLmWSaggobEWsBEci",
        private_key="112t8roafGgHL1rhAP9632Yef3sx5k8xgp8cwK4MCJsCL1UWcxXvpzg97N4dwvcD735iKf31Q2ZgrAvKfVjeSUEvnzKJyyJD3GqqSZdxN4or",
    )


@pytest.fixture
def description() -> dict:
    return {
        "tokenId": TOKEN_ID,
        "name": "Privacy Dai",
        "symbol": "pDAI",
        "supplyAmount": 1000,
        "bridgeInfo": {"currencyType": "ERC20", "contractID": "0x6B175474E89094C44Da98b954EedeAC495271d0F"},
    }


@pytest.fixture
def native_coins() -> list[Coin]:
    return [Coin(coin_id="n1", value=Decimal("100")), Coin(coin_id="n2", value=Decimal("50"))]


@pytest.fixture
def privacy_coins() -> list[Coin]:
    return [Coin(coin_id="p1", value=Decimal("500"), token_id=TOKEN_ID)]


@pytest.fixture
def mock_services(native_coins, privacy_coins) -> TokenServices:
    """Services backed by mocks, with coins and tx ids preset."""
    coins = MagicMock(spec=CoinInventory)

    async def get_available_coins(account, token_id):
        return native_coins if token_id is None else privacy_coins

    coins.get_available_coins.side_effect = get_available_coins

    sender = MagicMock(spec=TransactionSender)
    for method in (
        sender.send_privacy_token,
        sender.send_burning_request,
        sender.send_pde_contribution,
        sender.send_pde_trade_request,
    ):
        method.return_value = TxHistory(tx_id="tx_123", token_id=TOKEN_ID, operation="test")

    bridge = MagicMock(spec=BridgeService)
    bridge.gen_eth_deposit_address.return_value = "0xETHDEPOSIT"
    bridge.gen_erc20_deposit_address.return_value = "0xERC20DEPOSIT"
    bridge.gen_centralized_deposit_address.return_value = "bnb1centralized"
    bridge.get_history.return_value = []

    exchange_rates = MagicMock(spec=ExchangeRateService)
    exchange_rates.has_exchange_rate.return_value = True

    return TokenServices(
        exchange_rates=exchange_rates,
        coins=coins,
        sender=sender,
        bridge=bridge,
    )
