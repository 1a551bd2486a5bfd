"""Join the upstream price maps into records."""

from collections.abc import Iterable, Mapping

import polars as pl
from loguru import logger
from pydantic import ValidationError

from app.models import Record
from prices_client.prices import AggregateSchema, ItemMappingSchema, LatestPriceSchema

ITEM_SCHEMA = {
    "id": pl.Int64,
    "name": pl.Utf8,
    "members": pl.Boolean,
    "limit": pl.Int64,
    "highalch": pl.Int64,
}
PRICE_SCHEMA = {
    "id": pl.Int64,
    "high": pl.Int64,
    "highTime": pl.Int64,
    "low": pl.Int64,
    "lowTime": pl.Int64,
}
VOLUME_SCHEMA = {"id": pl.Int64, "volume": pl.Int64}


def _aggregate_schema(window: str) -> dict:
    return {
        "id": pl.Int64,
        f"avg{window}": pl.Float64,
        f"highVol{window}": pl.Int64,
        f"lowVol{window}": pl.Int64,
    }


def _mapping_frame(mapping: Iterable[ItemMappingSchema | dict]) -> pl.DataFrame:
    rows = []
    for m in mapping:
        try:
            item = m if isinstance(m, ItemMappingSchema) else ItemMappingSchema.model_validate(m)
        except ValidationError as e:
            logger.warning("Skipping invalid mapping entry: {}", e)
            continue
        rows.append(
            {
                "id": item.id,
                "name": item.name,
                "members": item.members,
                "limit": item.limit,
                "highalch": item.highalch,
            }
        )
    return pl.DataFrame(rows, schema=ITEM_SCHEMA).with_row_index("_order")


def _price_frame(latest: Mapping[str, dict]) -> pl.DataFrame:
    rows = []
    for item_id, raw in latest.items():
        price = LatestPriceSchema.model_validate(raw)
        rows.append(
            {
                "id": int(item_id),
                "high": price.high,
                "highTime": price.high_time,
                "low": price.low,
                "lowTime": price.low_time,
            }
        )
    return pl.DataFrame(rows, schema=PRICE_SCHEMA)


def _aggregate_frame(data: Mapping[str, dict] | None, window: str) -> pl.DataFrame:
    rows = []
    for item_id, raw in (data or {}).items():
        agg = AggregateSchema.model_validate(raw)
        rows.append(
            {
                "id": int(item_id),
                f"avg{window}": agg.avg_high_price,
                f"highVol{window}": agg.high_price_volume,
                f"lowVol{window}": agg.low_price_volume,
            }
        )
    return pl.DataFrame(rows, schema=_aggregate_schema(window))


def build_records(
    latest: Mapping[str, dict],
    mapping: Iterable[ItemMappingSchema | dict],
    five_minute: Mapping[str, dict] | None,
    one_hour: Mapping[str, dict] | None,
    volumes: Mapping[str, int],
    favorites: Iterable[int] = (),
    six_hour: Mapping[str, dict] | None = None,
    one_day: Mapping[str, dict] | None = None,
) -> list[Record]:
    """Records for items with both prices and a non-zero daily volume, in mapping order."""
    items = _mapping_frame(mapping)
    prices = _price_frame(latest)
    vols = pl.DataFrame(
        [{"id": int(k), "volume": v} for k, v in volumes.items()],
        schema=VOLUME_SCHEMA,
    )

    df = (
        items.join(prices, on="id", how="inner")
        .join(vols, on="id", how="inner")
        .filter(
            pl.col("high").is_not_null()
            & (pl.col("high") > 0)
            & pl.col("low").is_not_null()
            & (pl.col("low") > 0)
            & pl.col("volume").is_not_null()
            & (pl.col("volume") > 0)
        )
    )

    windows = {"5m": five_minute, "1h": one_hour, "6h": six_hour, "24h": one_day}
    for window, data in windows.items():
        df = df.join(_aggregate_frame(data, window), on="id", how="left").with_columns(
            pl.col(f"highVol{window}").fill_null(0),
            pl.col(f"lowVol{window}").fill_null(0),
        )

    favorite_ids = pl.Series("favorites", list(favorites), dtype=pl.Int64)
    df = df.with_columns(pl.col("id").is_in(favorite_ids).alias("favorite")).sort("_order").drop("_order")

    records = [Record.model_validate(row) for row in df.iter_rows(named=True)]
    logger.debug("Built {} records from {} mapped items", len(records), items.height)
    return records
