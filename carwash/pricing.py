# carwash/pricing.py
"""Vehicle-size pricing and the loyalty programme."""

from dataclasses import dataclass
from typing import Optional

# Larger vehicles take longer to wash.
VEHICLE_MULTIPLIERS = {
    "small_car": 1.0,
    "medium_car": 1.2,
    "large_car": 1.4,
    "suv": 1.6,
    "van": 1.8,
    "other": 1.3,
}

# tier -> (minimum points, discount)
LOYALTY_TIERS = {
    "BRONZE": (0, 0.0),
    "SILVER": (150, 0.05),
    "GOLD": (300, 0.10),
    "PLATINUM": (600, 0.15),
}

POINTS_PER_EURO = 1
MINIMUM_PRICE_RATIO = 0.5


@dataclass
class PriceQuote:
    original_price: int
    vehicle_price: int
    loyalty_discount: int
    final_price: int
    multiplier: float


def vehicle_multiplier(vehicle_type: str) -> float:
    return VEHICLE_MULTIPLIERS.get(vehicle_type, 1.0)


def calculate_total_price(base_price_cents: int, vehicle_type: str, discount: float = 0.0) -> PriceQuote:
    """Apply the vehicle multiplier, then the loyalty discount.

    The final price never drops below half the base price.
    """
    multiplier = vehicle_multiplier(vehicle_type)
    vehicle_price = round(base_price_cents * multiplier)
    discount_amount = round(vehicle_price * discount)
    final_price = max(vehicle_price - discount_amount, round(base_price_cents * MINIMUM_PRICE_RATIO))
    return PriceQuote(
        original_price=base_price_cents,
        vehicle_price=vehicle_price,
        loyalty_discount=discount_amount,
        final_price=final_price,
        multiplier=multiplier,
    )


def calculate_tier(points: int) -> str:
    tier = "BRONZE"
    for name, (min_points, _) in LOYALTY_TIERS.items():
        if points >= min_points:
            tier = name
    return tier


def tier_discount(tier: str) -> float:
    return LOYALTY_TIERS.get(tier, LOYALTY_TIERS["BRONZE"])[1]


def points_for(amount_cents: int) -> int:
    return (amount_cents // 100) * POINTS_PER_EURO


def next_tier(points: int) -> Optional[dict]:
    for name, (min_points, _) in LOYALTY_TIERS.items():
        if min_points > points:
            return {"name": name, "points_needed": min_points - points}
    return None
