"""Preset filters seeded on first load. All start disabled."""

from app.models import Filter, FilterExpression

# (source dose id, dose count, target 4-dose id)
DECANT_SOURCES = {
    "Prayer": [(139, 3, 2434), (141, 2, 2434), (143, 1, 2434)],
    "Stamina": [(12627, 3, 12625), (12629, 2, 12625), (12631, 1, 12625)],
}


# dose count -> (target potions sold, source potions bought)
DECANT_TRADES = {3: (3, 4), 2: (1, 2), 1: (1, 4)}


def _decant(source: int, doses: int, target: int) -> FilterExpression:
    sold, bought = DECANT_TRADES[doses]
    produced = f"{sold} * " if sold > 1 else ""
    code = (
        f"record.id == {source} and record.volume > 100000 and "
        f"(({produced}getRecord({target}, 'high') * 0.98) - ({bought} * record.low)) > "
        f"(({bought} * record.low) * 0.01)"
    )
    return FilterExpression(code=code, action=f"Decant {doses}→4", highlight_target=str(target))


PRESET_FILTERS: list[Filter] = [
    Filter(
        id="f2p_only",
        name="F2P Only",
        expressions=[FilterExpression(code="record.members == false")],
        enabled=False,
        is_preset=True,
        category="Restrictions",
        description="Show only Free-to-Play items",
    ),
    Filter(
        id="buy_under_5m",
        name="Buy < 5m Avg",
        expressions=[FilterExpression(code="columns.low < columns.avg5m")],
        enabled=False,
        is_preset=True,
        category="Price",
        description="Current buy price is lower than 5 minute average",
    ),
    Filter(
        id="high_volume",
        name="High Volume (>10k)",
        expressions=[FilterExpression(code="columns.volume >= 10000")],
        enabled=False,
        is_preset=True,
        category="Volume",
        description="Daily volume greater than 10,000",
    ),
    Filter(
        id="high_roi",
        name="High ROI (>5%)",
        expressions=[FilterExpression(code="columns.roi >= 5")],
        enabled=False,
        is_preset=True,
        category="Profit",
        description="Return on Investment greater than 5%",
    ),
    Filter(
        id="high_profit",
        name="High Profit (>10k)",
        expressions=[FilterExpression(code="columns.profit >= 10000")],
        enabled=False,
        is_preset=True,
        category="Profit",
        description="Profit per item greater than 10,000 GP",
    ),
    Filter(
        id="potential_flip",
        name="Potential Flip",
        expressions=[FilterExpression(code="columns.roi > 2 and columns.volume > 1000 and columns.profit > 1000")],
        enabled=False,
        is_preset=True,
        category="Strategy",
        description="ROI > 2%, Vol > 1000, Profit > 1000",
    ),
    Filter(
        id="decanting_opportunities",
        name="Decanting Opportunities",
        expressions=[_decant(*source) for sources in DECANT_SOURCES.values() for source in sources],
        enabled=False,
        independent=True,
        is_preset=True,
        category="Strategy",
        description="Find profitable decanting opportunities for Prayer and Stamina potions",
    ),
]
