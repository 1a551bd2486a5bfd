"""Preset columns seeded on first load."""

from app.models import Column, ColumnFormat, ValueType

CURRENCY = ColumnFormat.CURRENCY
PERCENTAGE = ColumnFormat.PERCENTAGE
DECIMAL = ColumnFormat.DECIMAL
RELATIVE = ColumnFormat.RELATIVE_TIME


def _col(
    id: str,
    name: str,
    expression: str,
    group: str,
    description: str,
    fmt: ColumnFormat | None = None,
    value_type: ValueType = ValueType.NUMBER,
    enabled: bool = True,
) -> Column:
    return Column(
        id=id,
        name=name,
        expression=expression,
        value_type=value_type,
        format=fmt,
        enabled=enabled,
        is_preset=True,
        group=group,
        description=description,
    )


def _pressure(side: str, window: str) -> str:
    vol = "highVol" if side == "buy" else "lowVol"
    total = f"(record.highVol{window} + record.lowVol{window})"
    return f"{total} > 0 ? (record.{vol}{window} / {total}) * 100 : 0"


PRESET_COLUMNS: list[Column] = [
    # Core
    _col("favorite", "Fav", "record.favorite", "Core", "Favorite items", value_type=ValueType.BOOLEAN),
    _col("name", "Item", "record.name", "Core", "The name of the item", value_type=ValueType.STRING),
    _col("limit", "Buy Limit", "record.limit", "Core", "Buy limit every 4 hours", CURRENCY),
    _col("members", "Members", "record.members", "Core", "Whether the item is members only", value_type=ValueType.BOOLEAN),
    _col("low", "Buy Price", "record.low", "Core", "Current lowest price someone is selling for (instant buy)", CURRENCY),
    _col("lowTime", "Most Recent Buy", "record.lowTime", "Core", "Time of the latest low price update", RELATIVE),
    _col("high", "Sell Price", "record.high", "Core", "Current highest price someone is buying for (instant sell)", CURRENCY),
    _col("highTime", "Most Recent Sell", "record.highTime", "Core", "Time of the latest high price update", RELATIVE),
    _col("itemId", "ID", "record.id", "Core", "The unique item ID", DECIMAL, enabled=False),
    _col("highTimeDelta", "High Time Delta", "now - record.highTime", "Core", "Seconds since last high price update", DECIMAL, enabled=False),
    _col("lowTimeDelta", "Low Time Delta", "now - record.lowTime", "Core", "Seconds since last low price update", DECIMAL, enabled=False),
    # Profit
    _col("profit", "Margin", "round((record.high * 0.98) - record.low)", "Profit", "Profit per item after 2% tax", CURRENCY),
    _col("roi", "ROI %", "((record.high * 0.98 - record.low) / record.low) * 100", "Profit", "Return on investment after tax", PERCENTAGE),
    _col("potentialProfit", "Potential Profit", "record.limit * columns.profit", "Profit", "Max profit per 4 hours (Limit * Margin)", CURRENCY),
    _col("marginVolume", "Margin * Volume", "record.volume * columns.profit", "Profit", "Potential daily profit (Volume * Margin)", CURRENCY, enabled=False),
    # Volume
    _col("volume", "Daily Volume", "record.volume", "Volume", "Items traded in the last 24 hours", CURRENCY),
    _col("total5mVol", "5m Vol", "record.highVol5m + record.lowVol5m", "Volume", "Volume traded in the last 5 minutes", CURRENCY, enabled=False),
    _col("total1hVol", "1h Vol", "record.highVol1h + record.lowVol1h", "Volume", "Volume traded in the last hour", CURRENCY, enabled=False),
    _col("total6hVol", "6h Vol", "record.highVol6h + record.lowVol6h", "Volume", "Volume traded in the last 6 hours", CURRENCY, enabled=False),
    _col("total24hVol", "24h Vol (Calc)", "record.highVol24h + record.lowVol24h", "Volume", "Volume traded in the last 24 hours", CURRENCY, enabled=False),
    _col(
        "volRatio",
        "Vol Ratio",
        "columns.total1hVol > 0 ? columns.total5mVol / columns.total1hVol : 0",
        "Volume",
        "Ratio of 5-minute to 1-hour volume",
        DECIMAL,
        enabled=False,
    ),
    # Averages
    _col("avg5m", "5m Avg", "record.avg5m", "Averages", "Average price over the last 5 minutes", CURRENCY, enabled=False),
    _col("avg1h", "1h Avg", "record.avg1h", "Averages", "Average price over the last hour", CURRENCY, enabled=False),
    _col("avg6h", "6h Avg", "record.avg6h", "Averages", "Average price over the last 6 hours", CURRENCY, enabled=False),
    _col("avg24h", "24h Avg", "record.avg24h", "Averages", "Average price over the last 24 hours", CURRENCY, enabled=False),
    # Pressure
    _col("buyPressure5m", "Buy Pressure (5m)", _pressure("buy", "5m"), "Pressure", "Share of 5m volume that was buys", PERCENTAGE, enabled=False),
    _col("sellPressure5m", "Sell Pressure (5m)", _pressure("sell", "5m"), "Pressure", "Share of 5m volume that was sells", PERCENTAGE, enabled=False),
    _col("buyPressure1h", "Buy Pressure (1h)", _pressure("buy", "1h"), "Pressure", "Share of 1h volume that was buys", PERCENTAGE, enabled=False),
    _col("sellPressure1h", "Sell Pressure (1h)", _pressure("sell", "1h"), "Pressure", "Share of 1h volume that was sells", PERCENTAGE, enabled=False),
    # Alchemy
    _col("alchValue", "High Alch", "record.highalch", "Alchemy", "High alchemy value of the item", CURRENCY, enabled=False),
    _col(
        "alchMargin",
        "Alch Margin",
        "record.highalch > 0 ? round(record.highalch - record.low) : 0",
        "Alchemy",
        "Profit from high alching after buying at current price",
        CURRENCY,
        enabled=False,
    ),
    # Market signals
    _col(
        "priceDropStrength",
        "Price Drop Strength",
        "record.avg5m > 0 and record.avg1h > 0 ? max(0, (record.avg1h - record.avg5m) / record.avg1h) : 0",
        "Market Signals",
        "Short-term price drop versus the hourly average",
        DECIMAL,
        enabled=False,
    ),
    _col(
        "volatilityRatio",
        "Volatility Ratio",
        "record.avg1h > 0 and record.avg24h > 0 ? abs((record.avg1h - record.avg24h) / record.avg24h) : 0",
        "Market Signals",
        "Distance of the hourly average from the daily average",
        DECIMAL,
        enabled=False,
    ),
    _col(
        "suggestedQuantity",
        "Suggested Quantity",
        "min(record.limit, max(1, floor(((record.volume / 24) + columns.total1hVol / 2) * 0.5)))",
        "Market Signals",
        "Recommended buy quantity from the buy limit and recent volume",
        DECIMAL,
        enabled=False,
    ),
    # History
    _col(
        "trend24h",
        "24h Trend",
        "avg(field(slice(timeseries(record.id, '1h'), -24), 'avgHighPrice'))",
        "History",
        "Average hourly sell price over the last day (needs cached history)",
        CURRENCY,
        enabled=False,
    ),
]
