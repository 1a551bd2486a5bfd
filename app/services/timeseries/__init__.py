"""Timeseries - tiered price-history cache and update notifications."""

from app.services.timeseries.cache import REFRESH_PRIORITY, Fetcher, TimeseriesCache
from app.services.timeseries.events import EventBus, Subscription

__all__ = [
    "REFRESH_PRIORITY",
    "Fetcher",
    "TimeseriesCache",
    "EventBus",
    "Subscription",
]
