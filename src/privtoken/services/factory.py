"""Factory for the services injected into tokens."""

import logging
from typing import Optional

from privtoken.config import Settings, get_settings
from privtoken.services.base import TokenServices
from privtoken.services.dryrun import (
    DryRunBridgeService,
    DryRunCoinInventory,
    DryRunExchangeRates,
    DryRunTransactionSender,
)
from privtoken.services.http import HttpBridgeService, HttpExchangeRateService

logger = logging.getLogger(__name__)

# Singleton instance
_services_instance: Optional[TokenServices] = None


def create_token_services(settings: Settings) -> TokenServices:
    """Build the services selected by PRIVTOKEN_PROVIDER.

    - dryrun (default): everything simulated in memory
    - http: bridge and exchange rates over HTTP; coins and transaction
      sending stay simulated since this package never signs or broadcasts
    """
    provider_name = settings.provider.lower()

    if provider_name == "http":
        logger.info(f"Using HTTP bridge at {settings.bridge_api_url}")
        return TokenServices(
            exchange_rates=HttpExchangeRateService(
                settings.api_url,
                native_token_id=settings.native_token_id,
                timeout=settings.http_timeout,
            ),
            coins=DryRunCoinInventory(),
            sender=DryRunTransactionSender(),
            bridge=HttpBridgeService(settings.bridge_api_url, timeout=settings.http_timeout),
        )

    if provider_name != "dryrun":
        logger.warning(f"Unknown provider '{settings.provider}', falling back to dryrun")

    return TokenServices(
        exchange_rates=DryRunExchangeRates(),
        coins=DryRunCoinInventory(),
        sender=DryRunTransactionSender(),
        bridge=DryRunBridgeService(),
    )


def get_token_services(settings: Optional[Settings] = None) -> TokenServices:
    """Get the configured services, created once per process."""
    global _services_instance

    if _services_instance is not None:
        return _services_instance

    _services_instance = create_token_services(settings or get_settings())
    return _services_instance


def reset_token_services() -> None:
    """Reset services instance (useful for testing)."""
    global _services_instance
    _services_instance = None
