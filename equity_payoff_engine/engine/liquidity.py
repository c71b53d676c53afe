from dataclasses import dataclass


@dataclass(frozen=True)
class Liquidation:
    units_sold: float
    proceeds: float
    remaining_units: float
    unfunded: float


def sell_for_shortfall(shortfall: float, spot_price: float, units_held: float) -> Liquidation:
    """
    Sells enough units at `spot_price` to cover `shortfall` dollars.
    Sales clamp at the units held; whatever stays uncovered is returned as `unfunded`.
    """
    if shortfall <= 0:
        return Liquidation(0.0, 0.0, units_held, 0.0)
    if spot_price <= 0 or units_held <= 0:
        return Liquidation(0.0, 0.0, max(0.0, units_held), shortfall)
    units = min(shortfall / spot_price, units_held)
    proceeds = units * spot_price
    return Liquidation(
        units_sold=units,
        proceeds=proceeds,
        remaining_units=max(0.0, units_held - units),
        unfunded=max(0.0, shortfall - proceeds),
    )


def execute_payoff(debt: float, spot_price: float, units_held: float) -> Liquidation:
    """Liquidates exactly `debt` dollars of the position to retire the loan."""
    return sell_for_shortfall(debt, spot_price, units_held)
