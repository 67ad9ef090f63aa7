"""Value types exchanged between a token and its services.

Internal values are dataclasses; payloads that come from the token and
bridge APIs are parsed with pydantic.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from privtoken.errors import ValidationError


class CurrencyType(str, Enum):
    """Currency of the external chain a bridged token maps to."""

    ETH = "ETH"
    BTC = "BTC"
    ERC20 = "ERC20"
    BNB = "BNB"
    BNB_BEP2 = "BNB_BEP2"
    USD = "USD"


# Currency codes used by the token and bridge APIs
CURRENCY_CODES = {
    CurrencyType.ETH: 1,
    CurrencyType.BTC: 2,
    CurrencyType.ERC20: 3,
    CurrencyType.BNB: 4,
    CurrencyType.BNB_BEP2: 5,
    CurrencyType.USD: 6,
}

_CURRENCY_BY_CODE = {code: currency for currency, code in CURRENCY_CODES.items()}


def normalize_currency_type(value: Any) -> Any:
    """Map a currency name or API code to CurrencyType; unknown values pass through."""
    if value is None or isinstance(value, CurrencyType) or isinstance(value, bool):
        return value
    if isinstance(value, int):
        return _CURRENCY_BY_CODE.get(value, value)
    if isinstance(value, str):
        if value.isdigit():
            return _CURRENCY_BY_CODE.get(int(value), value)
        try:
            return CurrencyType(value)
        except ValueError:
            return value
    return value


@dataclass(frozen=True)
class TokenIdentity:
    """Identity of a token on the privacy chain."""

    token_id: str
    name: str
    symbol: str


@dataclass(frozen=True)
class BridgeConfig:
    """Bridge settings of a token. Present only for bridgeable tokens.

    Known currency names and API codes (3 for ERC20) become CurrencyType.
    """

    currency_type: Any = None
    contract_id: Optional[str] = None
    extra: dict = field(default_factory=dict, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "currency_type", normalize_currency_type(self.currency_type))

    @classmethod
    def coerce(cls, value: Any) -> Optional["BridgeConfig"]:
        """Build a BridgeConfig from API data, keeping unknown keys verbatim."""
        if value is None or isinstance(value, BridgeConfig):
            return value
        if not isinstance(value, Mapping):
            raise ValidationError("bridge_info", "must be a mapping")

        data = dict(value)
        currency_type = _pop_first(data, "currency_type", "currencyType", "CurrencyType")
        contract_id = _pop_first(data, "contract_id", "contractID", "ContractID")
        return cls(currency_type=currency_type, contract_id=contract_id, extra=data)


@dataclass
class AccountKeySet:
    """Keys of the wallet account that holds the token."""

    payment_address: str
    private_key: Optional[str] = field(default=None, repr=False)
    read_only_key: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True)
class PaymentInfo:
    """One destination of a private transfer."""

    payment_address: str
    amount: Decimal
    message: str = ""

    @classmethod
    def coerce(cls, value: Any) -> "PaymentInfo":
        """Accept a PaymentInfo or a mapping in API or snake_case form."""
        if isinstance(value, PaymentInfo):
            return value
        data = dict(value)
        return cls(
            payment_address=_pop_first(data, "payment_address", "paymentAddressStr", "paymentAddress"),
            amount=Decimal(str(_pop_first(data, "amount"))),
            message=_pop_first(data, "message") or "",
        )


@dataclass
class Coin:
    """A spendable output owned by the account."""

    coin_id: str
    value: Decimal
    token_id: Optional[str] = None  # None = native coin


@dataclass
class TxHistory:
    """Acknowledgment of a submitted transaction."""

    tx_id: str
    token_id: str
    operation: str
    native_fee: Decimal = Decimal("0")
    privacy_fee: Decimal = Decimal("0")
    amount: Decimal = Decimal("0")
    details: dict = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class DepositAddress:
    """Temporary address for depositing external funds into the bridge.

    Only valid until ``expires_at``; a new one must be generated afterwards.
    """

    address: str
    token_id: str
    issued_at: datetime
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if the address is past its validity window."""
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at

    def __str__(self) -> str:
        return self.address


class PrivacyTokenDescription(BaseModel):
    """Token description as returned by the token list API."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    token_id: str = Field(..., min_length=1, alias="tokenId")
    name: str = Field(..., min_length=1)
    symbol: str = Field(..., min_length=1)
    supply_amount: Decimal = Field(default=Decimal("0"), alias="supplyAmount")
    bridge_info: Optional[Any] = Field(default=None, alias="bridgeInfo")

    @classmethod
    def parse(cls, data: Any) -> "PrivacyTokenDescription":
        """Parse API data, raising the package ValidationError on failure."""
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            first = e.errors()[0]
            loc = ".".join(str(part) for part in first["loc"]) or "privacy_token_description"
            raise ValidationError(loc, first["msg"]) from e


class BridgeHistoryRecord(BaseModel):
    """One row of the bridge deposit/withdraw history."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[int] = Field(default=None, alias="ID")
    address: Optional[str] = Field(default=None, alias="Address")
    status: Optional[int] = Field(default=None, alias="Status")
    status_message: Optional[str] = Field(default=None, alias="StatusMessage")
    currency_type: Optional[int] = Field(default=None, alias="CurrencyType")
    amount: Optional[Decimal] = Field(default=None, alias="ReceivedAmount")
    privacy_tx: Optional[str] = Field(default=None, alias="IncognitoTx")
    created_at: Optional[datetime] = Field(default=None, alias="CreatedAt")
    expired_at: Optional[datetime] = Field(default=None, alias="ExpiredAt")


def _pop_first(data: dict, *keys: str) -> Any:
    """Pop the first present key out of data."""
    for key in keys:
        if key in data:
            return data.pop(key)
    return None
