"""OSRS real-time prices API client package."""

from prices_client.base import BaseClient, safe_request, set_api_config
from prices_client.prices import PricesClient

__all__ = [
    # Base
    "BaseClient",
    "safe_request",
    "set_api_config",
    # Clients
    "PricesClient",
]
