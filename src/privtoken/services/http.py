"""HTTP clients for the bridge API and the exchange rate lookup.

Bridge API:
- POST eta/generate: deposit address for Ethereum and ERC20 tokens
- POST ota/generate: deposit address at the centralized custody bridge
- GET eta/history: deposit/withdraw history of an account for a token

Responses are wrapped as {"Result": ..., "Error": ...}.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from privtoken.errors import CollaboratorError
from privtoken.models import CURRENCY_CODES, BridgeHistoryRecord, normalize_currency_type
from privtoken.services.base import BridgeService, DepositParams, ExchangeRateService

logger = logging.getLogger(__name__)

# Address type for deposit addresses
ADDRESS_TYPE_DEPOSIT = 1


def currency_code(currency_type: Any) -> Any:
    """Map a currency type to the bridge API code; unknown values pass through."""
    currency = normalize_currency_type(currency_type)
    return CURRENCY_CODES.get(currency, currency)


class _ApiClient:
    """Shared request/response handling."""

    service = "api"

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize client.

        Args:
            base_url: API base URL
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}/{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{self.service} request {method} {path} failed: {e}")
            raise CollaboratorError(f"{self.service} request failed: {e}", service=self.service) from e

        if response.status_code != 200:
            logger.warning(f"{self.service} API error: {response.status_code} on {path}")
            raise CollaboratorError(
                f"{self.service} API returned {response.status_code}",
                service=self.service,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise CollaboratorError(f"{self.service} API returned invalid JSON", service=self.service) from e

        if isinstance(data, dict):
            if data.get("Error"):
                raise CollaboratorError(
                    f"{self.service} API error: {data['Error']}", service=self.service
                )
            if "Result" in data:
                return data["Result"]
        return data


class HttpBridgeService(_ApiClient, BridgeService):
    """Bridge API client."""

    service = "bridge"

    def _deposit_body(self, params: DepositParams) -> dict:
        return {
            "CurrencyType": currency_code(params.currency_type),
            "AddressType": ADDRESS_TYPE_DEPOSIT,
            "WalletAddress": params.wallet_address,
            "PaymentAddress": params.payment_address,
        }

    def _address_from(self, result: Any) -> str:
        address = result.get("Address") if isinstance(result, dict) else None
        if not address:
            raise CollaboratorError("bridge API returned no deposit address", service=self.service)
        return address

    async def gen_eth_deposit_address(self, params: DepositParams) -> str:
        result = await self._request("POST", "eta/generate", json=self._deposit_body(params))
        return self._address_from(result)

    async def gen_erc20_deposit_address(self, params: DepositParams) -> str:
        body = self._deposit_body(params)
        body["PrivacyTokenAddress"] = params.token_id
        body["TokenContractID"] = params.token_contract_id
        result = await self._request("POST", "eta/generate", json=body)
        return self._address_from(result)

    async def gen_centralized_deposit_address(self, params: DepositParams) -> str:
        body = self._deposit_body(params)
        body["PrivacyTokenAddress"] = params.token_id
        result = await self._request("POST", "ota/generate", json=body)
        return self._address_from(result)

    async def get_history(self, payment_address: str, token_id: str) -> list:
        result = await self._request(
            "GET",
            "eta/history",
            params={"WalletAddress": payment_address, "PrivacyTokenAddress": token_id},
        )
        if not isinstance(result, list):
            raise CollaboratorError("bridge API returned malformed history", service=self.service)
        try:
            return [BridgeHistoryRecord.model_validate(row) for row in result]
        except PydanticValidationError as e:
            raise CollaboratorError(f"bridge API returned malformed history: {e}", service=self.service) from e


class HttpExchangeRateService(_ApiClient, ExchangeRateService):
    """Exchange rate lookup through the liquidity pool list.

    A token has a rate when a funded pool pairs it with the native coin.
    """

    service = "exchange_rate"

    def __init__(
        self,
        base_url: str,
        native_token_id: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(base_url, timeout=timeout, transport=transport)
        self.native_token_id = native_token_id

    async def has_exchange_rate(self, token_id: str) -> bool:
        pairs = await self._request("GET", "pdex/pairs")
        if not isinstance(pairs, list):
            raise CollaboratorError("pool list is malformed", service=self.service)

        for pair in pairs:
            if not isinstance(pair, dict):
                raise CollaboratorError("pool list is malformed", service=self.service)
            ids = {pair.get("Token1ID"), pair.get("Token2ID")}
            if ids != {token_id, self.native_token_id}:
                continue
            pools = (pair.get("Token1PoolValue", 0), pair.get("Token2PoolValue", 0))
            try:
                funded = all(Decimal(str(value)) > 0 for value in pools)
            except (InvalidOperation, TypeError) as e:
                logger.warning(f"Malformed pool values for {token_id}: {pools}")
                raise CollaboratorError(
                    f"pool values are malformed: {pools}", service=self.service
                ) from e
            if funded:
                return True
        return False
