"""Prices API client - mapping, latest prices, aggregates, history."""

from prices_client.prices.client import PricesClient
from prices_client.prices.schemas import (
    AggregateSchema,
    ItemMappingSchema,
    LatestPriceSchema,
    TimeseriesPointSchema,
)

__all__ = [
    "PricesClient",
    "ItemMappingSchema",
    "LatestPriceSchema",
    "AggregateSchema",
    "TimeseriesPointSchema",
]
