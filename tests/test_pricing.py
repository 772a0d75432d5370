"""Tests for vehicle pricing and loyalty tiers."""

import pytest

from carwash.pricing import calculate_tier, calculate_total_price, next_tier, points_for, tier_discount


@pytest.mark.parametrize(
    "vehicle, expected",
    [
        ("small_car", 2500),
        ("medium_car", 3000),
        ("large_car", 3500),
        ("suv", 4000),
        ("van", 4500),
        ("other", 3250),
        ("spaceship", 2500),
    ],
)
def test_vehicle_multiplier(vehicle, expected):
    quote = calculate_total_price(2500, vehicle)
    assert quote.vehicle_price == expected
    assert quote.final_price == expected
    assert quote.loyalty_discount == 0


def test_loyalty_discount_applies_after_vehicle_multiplier():
    quote = calculate_total_price(5000, "suv", 0.10)
    assert quote.vehicle_price == 8000
    assert quote.loyalty_discount == 800
    assert quote.final_price == 7200
    assert quote.multiplier == 1.6


def test_final_price_never_below_half_of_base():
    quote = calculate_total_price(1000, "small_car", 0.9)
    assert quote.final_price == 500


@pytest.mark.parametrize(
    "points, tier",
    [(0, "BRONZE"), (149, "BRONZE"), (150, "SILVER"), (299, "SILVER"), (300, "GOLD"), (600, "PLATINUM"), (5000, "PLATINUM")],
)
def test_calculate_tier(points, tier):
    assert calculate_tier(points) == tier


def test_tier_discount():
    assert tier_discount("BRONZE") == 0.0
    assert tier_discount("SILVER") == 0.05
    assert tier_discount("PLATINUM") == 0.15
    assert tier_discount("UNKNOWN") == 0.0


def test_points_count_whole_euros():
    assert points_for(2599) == 25
    assert points_for(99) == 0


def test_next_tier():
    assert next_tier(100) == {"name": "SILVER", "points_needed": 50}
    assert next_tier(300) == {"name": "PLATINUM", "points_needed": 300}
    assert next_tier(600) is None
