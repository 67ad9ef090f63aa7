"""Bridge branch selection.

A bridgeable token deposits through exactly one generator:
1. Ethereum itself (token id matches the configured Ethereum token)
2. An ERC20 token (bridge currency type is ERC20)
3. Anything else goes through the centralized custody bridge
"""

from enum import Enum
from typing import Optional

from privtoken.models import BridgeConfig, CurrencyType


class DepositBranch(str, Enum):
    """Deposit address generator to use for a token."""

    ETHEREUM = "eth"
    ERC20 = "erc20"
    CENTRALIZED = "centralized"


def is_bridge_erc20(bridge_info: Optional[BridgeConfig]) -> bool:
    """True if the token is bridged from an ERC20 contract."""
    return bridge_info is not None and bridge_info.currency_type == CurrencyType.ERC20


def is_bridge_ethereum(
    token_id: str, bridge_info: Optional[BridgeConfig], ethereum_token_id: str
) -> bool:
    """True if the token is the bridged Ethereum coin."""
    return bridge_info is not None and token_id == ethereum_token_id


def select_deposit_branch(
    token_id: str, bridge_info: BridgeConfig, ethereum_token_id: str
) -> DepositBranch:
    """Pick the deposit generator for a bridgeable token.

    The Ethereum check wins over the currency type.
    """
    if is_bridge_ethereum(token_id, bridge_info, ethereum_token_id):
        return DepositBranch.ETHEREUM
    if is_bridge_erc20(bridge_info):
        return DepositBranch.ERC20
    return DepositBranch.CENTRALIZED
