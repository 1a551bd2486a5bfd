"""Prices API schemas - mapping, latest prices, aggregates, history."""

from pydantic import BaseModel, Field


class ItemMappingSchema(BaseModel):
    """Static item metadata from /mapping."""

    id: int
    name: str
    examine: str | None = None
    members: bool = False
    lowalch: int | None = None
    highalch: int | None = None
    limit: int | None = None
    value: int | None = None
    icon: str | None = None

    class Config:
        populate_by_name = True


class LatestPriceSchema(BaseModel):
    """Most recent instant-buy and instant-sell prices from /latest."""

    high: int | None = None
    high_time: int | None = Field(alias="highTime", default=None)
    low: int | None = None
    low_time: int | None = Field(alias="lowTime", default=None)

    class Config:
        populate_by_name = True


class AggregateSchema(BaseModel):
    """Windowed averages and volumes from /5m, /1h, /6h and /24h."""

    avg_high_price: float | None = Field(alias="avgHighPrice", default=None)
    high_price_volume: int = Field(alias="highPriceVolume", default=0)
    avg_low_price: float | None = Field(alias="avgLowPrice", default=None)
    low_price_volume: int = Field(alias="lowPriceVolume", default=0)

    class Config:
        populate_by_name = True


class TimeseriesPointSchema(AggregateSchema):
    """One bucket from /timeseries."""

    timestamp: int
