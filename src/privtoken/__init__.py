"""Privacy token operations for wallet accounts.

Validates caller input, gathers coins, and hands transfers, burns, PDE
contributions, trades and bridge requests to the configured services.
"""

from privtoken.errors import (
    CollaboratorError,
    TokenOperationError,
    UnsupportedCapabilityError,
    ValidationError,
)
from privtoken.models import (
    AccountKeySet,
    BridgeConfig,
    Coin,
    CurrencyType,
    DepositAddress,
    PaymentInfo,
    PrivacyTokenDescription,
    TokenIdentity,
    TxHistory,
)
from privtoken.token import PrivacyToken

__version__ = "0.1.0"

__all__ = [
    "PrivacyToken",
    # Models
    "AccountKeySet",
    "BridgeConfig",
    "Coin",
    "CurrencyType",
    "DepositAddress",
    "PaymentInfo",
    "PrivacyTokenDescription",
    "TokenIdentity",
    "TxHistory",
    # Errors
    "CollaboratorError",
    "TokenOperationError",
    "UnsupportedCapabilityError",
    "ValidationError",
]
