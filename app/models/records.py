"""Market record - per-item facts assembled from the price API."""

from pydantic import Field

from app.models.common import BaseSchema


class Record(BaseSchema):
    """One tradeable item with its latest prices and volumes."""

    id: int
    name: str
    members: bool = False
    limit: int | None = None
    highalch: int | None = None

    low: int | None = None
    low_time: int | None = Field(alias="lowTime", default=None)
    high: int | None = None
    high_time: int | None = Field(alias="highTime", default=None)

    volume: int | None = None

    avg_5m: float | None = Field(alias="avg5m", default=None)
    high_vol_5m: int = Field(alias="highVol5m", default=0)
    low_vol_5m: int = Field(alias="lowVol5m", default=0)

    avg_1h: float | None = Field(alias="avg1h", default=None)
    high_vol_1h: int = Field(alias="highVol1h", default=0)
    low_vol_1h: int = Field(alias="lowVol1h", default=0)

    avg_6h: float | None = Field(alias="avg6h", default=None)
    high_vol_6h: int = Field(alias="highVol6h", default=0)
    low_vol_6h: int = Field(alias="lowVol6h", default=0)

    avg_24h: float | None = Field(alias="avg24h", default=None)
    high_vol_24h: int = Field(alias="highVol24h", default=0)
    low_vol_24h: int = Field(alias="lowVol24h", default=0)

    favorite: bool = False

    class Config:
        populate_by_name = True
        extra = "allow"
