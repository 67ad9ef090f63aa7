"""Tests for dry-run and HTTP services."""

import json
from decimal import Decimal

import httpx
import pytest

from privtoken import CollaboratorError, PaymentInfo, PrivacyToken
from privtoken.models import BridgeHistoryRecord
from privtoken.services.base import DepositParams, TokenServices
from privtoken.services.dryrun import (
    DryRunBridgeService,
    DryRunCoinInventory,
    DryRunExchangeRates,
    DryRunTransactionSender,
)
from privtoken.services.http import HttpBridgeService, HttpExchangeRateService, currency_code

TOKEN_ID = "a" * 64
NATIVE_ID = "0" * 63 + "4"


@pytest.fixture
def dryrun_services() -> TokenServices:
    return TokenServices(
        exchange_rates=DryRunExchangeRates(rated_tokens=[TOKEN_ID]),
        coins=DryRunCoinInventory(),
        sender=DryRunTransactionSender(),
        bridge=DryRunBridgeService(),
    )


@pytest.fixture
def funded_token(account, description, dryrun_services, settings) -> PrivacyToken:
    dryrun_services.coins.add_coins(None, 100, 50)
    dryrun_services.coins.add_coins(TOKEN_ID, 300, 200)
    return PrivacyToken(account, description, services=dryrun_services, settings=settings)


class TestDryRunFlow:
    """End-to-end token operations against dry-run services."""

    @pytest.mark.asyncio
    async def test_transfer(self, funded_token, dryrun_services):
        history = await funded_token.transfer([PaymentInfo("receiver", Decimal("400"))], 10, 5)

        assert history.tx_id.startswith("sim_tx_")
        assert history.operation == "transfer"
        assert history.amount == Decimal("400")
        assert dryrun_services.sender.submitted == [history]

    @pytest.mark.asyncio
    async def test_insufficient_balance(self, funded_token, dryrun_services):
        with pytest.raises(CollaboratorError, match="Insufficient"):
            await funded_token.transfer([PaymentInfo("receiver", Decimal("500"))], 10, 5)

        assert dryrun_services.sender.submitted == []

    @pytest.mark.asyncio
    async def test_insufficient_native_fee(self, funded_token):
        with pytest.raises(CollaboratorError, match="native"):
            await funded_token.burning("0xabc", 1, 1000, 0)

    @pytest.mark.asyncio
    async def test_burning_contribution_and_trade(self, funded_token, dryrun_services):
        burn = await funded_token.burning("0xabc", 10, 1, 0)
        contribution = await funded_token.pde_contribution("pair-1", 20, 1, 0)
        trade = await funded_token.request_trade("b" * 64, 30, 25, 1, 0, 1)

        assert [h.operation for h in dryrun_services.sender.submitted] == [
            "burning", "pde_contribution", "trade_request",
        ]
        assert burn.details == {"outchain_address": "0xabc"}
        assert contribution.details == {"pair_id": "pair-1"}
        assert trade.details["token_id_buy"] == "b" * 64

    @pytest.mark.asyncio
    async def test_balance(self, funded_token):
        assert await funded_token.get_available_balance() == Decimal("500")
        assert await funded_token.get_native_available_balance() == Decimal("150")

    @pytest.mark.asyncio
    async def test_exchange_rate(self, funded_token):
        assert await funded_token.has_exchange_rate() is True
        assert await DryRunExchangeRates(rated_tokens=[]).has_exchange_rate(TOKEN_ID) is False
        assert await DryRunExchangeRates().has_exchange_rate("anything") is True

    @pytest.mark.asyncio
    async def test_deposit_then_history(self, funded_token, account):
        deposit = await funded_token.bridge_generate_deposit_address()
        histories = await funded_token.bridge_get_history()

        assert deposit.address.startswith("sim:erc20:")
        assert len(histories) == 1
        assert histories[0].address == deposit.address

    @pytest.mark.asyncio
    async def test_erc20_without_contract_fails(self):
        bridge = DryRunBridgeService()
        params = DepositParams("addr", "addr", TOKEN_ID, "ERC20")

        with pytest.raises(CollaboratorError):
            await bridge.gen_erc20_deposit_address(params)


def json_transport(handler):
    """MockTransport that records requests and returns handler(request) as JSON."""
    requests = []

    def respond(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        status, body = handler(request)
        return httpx.Response(status, json=body)

    return httpx.MockTransport(respond), requests


class TestHttpBridgeService:
    """Tests for the bridge API client."""

    @pytest.mark.asyncio
    async def test_eth_deposit_address(self):
        transport, requests = json_transport(lambda r: (200, {"Result": {"Address": "0xdeposit"}, "Error": None}))
        bridge = HttpBridgeService("https://bridge.test/", transport=transport)

        address = await bridge.gen_eth_deposit_address(DepositParams("pay", "pay", TOKEN_ID, "ETH"))

        assert address == "0xdeposit"
        assert str(requests[0].url) == "https://bridge.test/eta/generate"
        body = json.loads(requests[0].content)
        assert body == {"CurrencyType": 1, "AddressType": 1, "WalletAddress": "pay", "PaymentAddress": "pay"}

    @pytest.mark.asyncio
    async def test_erc20_deposit_address(self):
        transport, requests = json_transport(lambda r: (200, {"Result": {"Address": "0xerc20"}}))
        bridge = HttpBridgeService("https://bridge.test", transport=transport)

        address = await bridge.gen_erc20_deposit_address(
            DepositParams("pay", "pay", TOKEN_ID, "ERC20", token_contract_id="0xABC")
        )

        assert address == "0xerc20"
        body = json.loads(requests[0].content)
        assert body["CurrencyType"] == 3
        assert body["TokenContractID"] == "0xABC"
        assert body["PrivacyTokenAddress"] == TOKEN_ID

    @pytest.mark.asyncio
    async def test_centralized_deposit_address(self):
        transport, requests = json_transport(lambda r: (200, {"Result": {"Address": "bnb1xyz"}}))
        bridge = HttpBridgeService("https://bridge.test", transport=transport)

        address = await bridge.gen_centralized_deposit_address(DepositParams("pay", "pay", TOKEN_ID, "BNB_BEP2"))

        assert address == "bnb1xyz"
        assert requests[0].url.path == "/ota/generate"

    @pytest.mark.asyncio
    async def test_history(self):
        rows = [{"ID": 1, "Address": "0xdeposit", "Status": 2, "ReceivedAmount": "1.5"}]
        transport, requests = json_transport(lambda r: (200, {"Result": rows}))
        bridge = HttpBridgeService("https://bridge.test", transport=transport)

        history = await bridge.get_history("pay", TOKEN_ID)

        assert history == [BridgeHistoryRecord(id=1, address="0xdeposit", status=2, amount=Decimal("1.5"))]
        assert requests[0].url.params["WalletAddress"] == "pay"
        assert requests[0].url.params["PrivacyTokenAddress"] == TOKEN_ID

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        transport, _ = json_transport(lambda r: (503, {"Error": "maintenance"}))
        bridge = HttpBridgeService("https://bridge.test", transport=transport)

        with pytest.raises(CollaboratorError) as exc:
            await bridge.gen_eth_deposit_address(DepositParams("pay", "pay", TOKEN_ID, "ETH"))

        assert exc.value.status_code == 503
        assert exc.value.service == "bridge"

    @pytest.mark.asyncio
    async def test_api_error_raises(self):
        transport, _ = json_transport(lambda r: (200, {"Result": None, "Error": {"Code": -1, "Message": "invalid"}}))
        bridge = HttpBridgeService("https://bridge.test", transport=transport)

        with pytest.raises(CollaboratorError, match="invalid"):
            await bridge.gen_eth_deposit_address(DepositParams("pay", "pay", TOKEN_ID, "ETH"))

    @pytest.mark.asyncio
    async def test_missing_address_raises(self):
        transport, _ = json_transport(lambda r: (200, {"Result": {}}))
        bridge = HttpBridgeService("https://bridge.test", transport=transport)

        with pytest.raises(CollaboratorError):
            await bridge.gen_eth_deposit_address(DepositParams("pay", "pay", TOKEN_ID, "ETH"))

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def fail(request):
            raise httpx.ConnectError("refused", request=request)

        bridge = HttpBridgeService("https://bridge.test", transport=httpx.MockTransport(fail))

        with pytest.raises(CollaboratorError, match="refused"):
            await bridge.get_history("pay", TOKEN_ID)

    def test_currency_code(self):
        assert currency_code("ERC20") == 3
        assert currency_code(3) == 3
        assert currency_code(7) == 7
        assert currency_code(None) is None


class TestHttpExchangeRateService:
    """Tests for the pool-based exchange rate lookup."""

    PAIRS = [
        {"Token1ID": NATIVE_ID, "Token2ID": TOKEN_ID, "Token1PoolValue": 1000, "Token2PoolValue": 50},
        {"Token1ID": "c" * 64, "Token2ID": NATIVE_ID, "Token1PoolValue": 0, "Token2PoolValue": 10},
    ]

    @pytest.mark.asyncio
    async def test_funded_pool(self):
        transport, requests = json_transport(lambda r: (200, {"Result": self.PAIRS}))
        service = HttpExchangeRateService("https://api.test", NATIVE_ID, transport=transport)

        assert await service.has_exchange_rate(TOKEN_ID) is True
        assert requests[0].url.path == "/pdex/pairs"

    @pytest.mark.asyncio
    async def test_empty_pool_or_missing_pair(self):
        transport, _ = json_transport(lambda r: (200, {"Result": self.PAIRS}))
        service = HttpExchangeRateService("https://api.test", NATIVE_ID, transport=transport)

        assert await service.has_exchange_rate("c" * 64) is False
        assert await service.has_exchange_rate("d" * 64) is False

    @pytest.mark.asyncio
    async def test_malformed_response(self):
        transport, _ = json_transport(lambda r: (200, {"Result": {"pairs": []}}))
        service = HttpExchangeRateService("https://api.test", NATIVE_ID, transport=transport)

        with pytest.raises(CollaboratorError):
            await service.has_exchange_rate(TOKEN_ID)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("pool_value", [None, "lots", {"amount": 5}])
    async def test_malformed_pool_value(self, pool_value):
        pairs = [{"Token1ID": NATIVE_ID, "Token2ID": TOKEN_ID, "Token1PoolValue": pool_value, "Token2PoolValue": 50}]
        transport, _ = json_transport(lambda r: (200, {"Result": pairs}))
        service = HttpExchangeRateService("https://api.test", NATIVE_ID, transport=transport)

        with pytest.raises(CollaboratorError) as exc:
            await service.has_exchange_rate(TOKEN_ID)

        assert exc.value.service == "exchange_rate"

    @pytest.mark.asyncio
    async def test_non_mapping_pair(self):
        transport, _ = json_transport(lambda r: (200, {"Result": ["not-a-pair"]}))
        service = HttpExchangeRateService("https://api.test", NATIVE_ID, transport=transport)

        with pytest.raises(CollaboratorError):
            await service.has_exchange_rate(TOKEN_ID)
