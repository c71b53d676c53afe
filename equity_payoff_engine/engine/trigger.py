from .types import PayoffTrigger, TriggerType


def trigger_met(trigger: PayoffTrigger, asset_value: float, debt_balance: float) -> bool:
    """
    percentage:      asset worth at least `value`% of the remaining debt
    retained_amount: at least `value` dollars of asset left after retiring the debt
    """
    kind = TriggerType(trigger.type)
    if kind is TriggerType.PERCENTAGE:
        return asset_value >= debt_balance * (trigger.value / 100.0)
    if kind is TriggerType.RETAINED_AMOUNT:
        return asset_value - debt_balance >= trigger.value
    return False


def can_retire(asset_value: float, debt_balance: float) -> bool:
    return debt_balance > 0 and asset_value >= debt_balance
