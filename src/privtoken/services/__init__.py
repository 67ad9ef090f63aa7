"""Services a token delegates to: coins, sending, bridge, exchange rates."""

from privtoken.services.base import (
    BridgeService,
    CoinInventory,
    DepositParams,
    ExchangeRateService,
    TokenServices,
    TransactionSender,
)
from privtoken.services.factory import (
    create_token_services,
    get_token_services,
    reset_token_services,
)

__all__ = [
    "BridgeService",
    "CoinInventory",
    "DepositParams",
    "ExchangeRateService",
    "TokenServices",
    "TransactionSender",
    "create_token_services",
    "get_token_services",
    "reset_token_services",
]
