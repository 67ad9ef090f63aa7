"""Parameter checks for token operations.

Each check is a pure function returning a CheckResult. Operations list their
checks in order and call ensure_valid(), which raises on the first failure
before any service is touched.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping, Optional

from privtoken.errors import ValidationError
from privtoken.models import PaymentInfo


class FailureKind(str, Enum):
    """Why a parameter was rejected."""

    MISSING = "missing"
    WRONG_TYPE = "wrong_type"
    EMPTY = "empty"
    NEGATIVE = "negative"
    NOT_POSITIVE = "not_positive"


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a single parameter check."""

    field: str
    kind: Optional[FailureKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.kind is None

    def to_error(self) -> ValidationError:
        return ValidationError(self.field, self.message)


def _ok(name: str) -> CheckResult:
    return CheckResult(field=name)


def _fail(name: str, kind: FailureKind, message: str) -> CheckResult:
    return CheckResult(field=name, kind=kind, message=message)


def to_amount(value: Any) -> Optional[Decimal]:
    """Convert a numeric value to Decimal.

    Returns None for non-numeric input, booleans, NaN and infinities.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            return None
    else:
        return None

    if not amount.is_finite():
        return None
    return amount


def check_required(name: str, value: Any) -> CheckResult:
    if value is None:
        return _fail(name, FailureKind.MISSING, "is required")
    return _ok(name)


def check_string(name: str, value: Any) -> CheckResult:
    """Non-empty string."""
    if not isinstance(value, str):
        return _fail(name, FailureKind.WRONG_TYPE, "must be a string")
    if not value.strip():
        return _fail(name, FailureKind.EMPTY, "must not be empty")
    return _ok(name)


def check_amount(name: str, value: Any) -> CheckResult:
    """Non-negative number."""
    amount = to_amount(value)
    if amount is None:
        return _fail(name, FailureKind.WRONG_TYPE, "must be a number")
    if amount < 0:
        return _fail(name, FailureKind.NEGATIVE, "must not be negative")
    return _ok(name)


def check_payment_info(name: str, value: Any) -> CheckResult:
    """A destination address and a positive amount."""
    if isinstance(value, PaymentInfo):
        address, amount = value.payment_address, value.amount
    elif isinstance(value, Mapping):
        address = _first(value, "payment_address", "paymentAddressStr", "paymentAddress")
        amount = value.get("amount")
    else:
        return _fail(name, FailureKind.WRONG_TYPE, "must be a payment info")

    result = check_string(f"{name}.payment_address", address)
    if not result.ok:
        return result

    parsed = to_amount(amount)
    if parsed is None:
        return _fail(f"{name}.amount", FailureKind.WRONG_TYPE, "must be a number")
    if parsed <= 0:
        return _fail(f"{name}.amount", FailureKind.NOT_POSITIVE, "must be positive")
    return _ok(name)


def check_payment_info_list(name: str, value: Any) -> CheckResult:
    """Non-empty list of valid payment infos."""
    if not isinstance(value, (list, tuple)):
        return _fail(name, FailureKind.WRONG_TYPE, "must be a list")
    if not value:
        return _fail(name, FailureKind.EMPTY, "must not be empty")
    for index, item in enumerate(value):
        result = check_payment_info(f"{name}[{index}]", item)
        if not result.ok:
            return result
    return _ok(name)


def required_string(name: str, value: Any) -> CheckResult:
    result = check_required(name, value)
    return result if not result.ok else check_string(name, value)


def required_amount(name: str, value: Any) -> CheckResult:
    result = check_required(name, value)
    return result if not result.ok else check_amount(name, value)


def required_payment_info_list(name: str, value: Any) -> CheckResult:
    result = check_required(name, value)
    return result if not result.ok else check_payment_info_list(name, value)


def first_failure(*results: CheckResult) -> Optional[CheckResult]:
    """Return the first failed result, in argument order."""
    for result in results:
        if not result.ok:
            return result
    return None


def ensure_valid(*results: CheckResult) -> None:
    """Raise ValidationError for the first failed result.

    Raises:
        ValidationError: If any check failed
    """
    failure = first_failure(*results)
    if failure is not None:
        raise failure.to_error()


def _first(data: Mapping, *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None
