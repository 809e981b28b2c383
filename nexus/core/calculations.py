"""
Arithmetic helpers for derived business values.

Every derived figure the API reports (margins, stock status, occupancy,
utilization, loyalty tiers) is computed here from plain numbers, so that
list views, stats endpoints and CSV exports agree with each other.
"""

from decimal import Decimal, ROUND_HALF_UP

from nexus.models.enums import StockStatus, LoyaltyTier, CreditStatus

# Lifetime points needed to reach each tier
TIER_THRESHOLDS: dict[LoyaltyTier, int] = {
    LoyaltyTier.BRONZE: 0,
    LoyaltyTier.SILVER: 1000,
    LoyaltyTier.GOLD: 5000,
    LoyaltyTier.PLATINUM: 15000,
}

TIER_ORDER: list[LoyaltyTier] = [
    LoyaltyTier.BRONZE,
    LoyaltyTier.SILVER,
    LoyaltyTier.GOLD,
    LoyaltyTier.PLATINUM,
]


def to_float(value) -> float:
    """Coerce Numeric column values (Decimal / None) to float."""
    if value is None:
        return 0.0
    return float(value)


def round_money(value) -> float:
    """Round half-up to 2 decimal places."""
    quantized = Decimal(str(to_float(value))).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return float(quantized)


def percentage(part, whole) -> float:
    """part / whole * 100, or 0 when whole is zero."""
    whole = to_float(whole)
    if whole == 0:
        return 0.0
    return to_float(part) / whole * 100


# Inventory


def stock_threshold(min_stock_level: int | None, default: int) -> int:
    """Low-stock threshold; an unset or zero level falls back to the default."""
    return min_stock_level or default


def stock_status(quantity: int, threshold: int) -> StockStatus:
    if quantity == 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= threshold:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def profit_margin(price, cost_price) -> float:
    """(price - cost) / price * 100; 0 for unpriced products."""
    price = to_float(price)
    if price == 0:
        return 0.0
    return (price - to_float(cost_price)) / price * 100


def value_at_risk(price, quantity: int, threshold: int) -> float:
    """
    Value at risk for a stock alert row.

    Out-of-stock rows report the stock value (price * quantity); low-stock
    rows report the unit shortfall below the threshold.
    """
    if quantity == 0:
        return to_float(price) * quantity
    return float(max(threshold - quantity, 0))


# Credit


def available_credit(credit_limit, current_balance) -> float:
    return round_money(to_float(credit_limit) - to_float(current_balance))


def credit_status(credit_limit, current_balance, overdue_amount) -> CreditStatus:
    if to_float(overdue_amount) > 0:
        return CreditStatus.OVERDUE
    if to_float(credit_limit) > 0 and to_float(current_balance) >= to_float(credit_limit):
        return CreditStatus.AT_LIMIT
    return CreditStatus.GOOD


# Loyalty


def tier_for_points(lifetime_points: int) -> LoyaltyTier:
    tier = LoyaltyTier.BRONZE
    for candidate in TIER_ORDER:
        if lifetime_points >= TIER_THRESHOLDS[candidate]:
            tier = candidate
    return tier


def next_tier(tier: LoyaltyTier) -> LoyaltyTier:
    """The tier after `tier`; platinum is its own next tier."""
    index = TIER_ORDER.index(tier)
    return TIER_ORDER[min(index + 1, len(TIER_ORDER) - 1)]


def next_tier_points(tier: LoyaltyTier) -> int:
    """Lifetime points required for the next tier, 0 at the top tier."""
    if tier == LoyaltyTier.PLATINUM:
        return 0
    return TIER_THRESHOLDS[next_tier(tier)]


def points_to_next_tier(lifetime_points: int, tier: LoyaltyTier) -> int:
    target = next_tier_points(tier)
    if target == 0:
        return 0
    return max(target - lifetime_points, 0)


def tier_progress(tier_points: int, next_points: int) -> float:
    """Progress toward the next tier in percent, capped at 100."""
    if next_points <= 0:
        return 100.0
    return min(tier_points / next_points * 100, 100.0)
