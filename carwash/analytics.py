# carwash/analytics.py
"""
Reporting figures for the admin dashboard.

The functions take already loaded rows and only do arithmetic, so the
routes decide what to query. Money is reported in whole euros except where
a field name ends in `_cents`.
"""

from collections import Counter, defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Tuple

from carwash.pricing import LOYALTY_TIERS
from carwash.schemas import BookingStatus

TIME_RANGES = ("today", "week", "month", "year", "30days", "90days")
REVENUE_STATUSES = (BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value)
TREND_DAYS = 30
TOP_N = 10


def date_range(time_range: str, today: date) -> Tuple[date, date]:
    """Inclusive (start, end) dates for a named reporting range."""
    if time_range == "today":
        return today, today
    if time_range == "week":
        start = today - timedelta(days=today.weekday())
        return start, start + timedelta(days=6)
    if time_range == "month":
        start = today.replace(day=1)
        next_month = (start + timedelta(days=32)).replace(day=1)
        return start, next_month - timedelta(days=1)
    if time_range == "year":
        return today.replace(month=1, day=1), today.replace(month=12, day=31)
    if time_range == "30days":
        return today - timedelta(days=30), today
    if time_range == "90days":
        return today - timedelta(days=90), today
    raise ValueError(f"Unknown time range: {time_range}")


def _euros(cents) -> int:
    return round((cents or 0) / 100)


def _percentage(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole else 0


def revenue_summary(bookings: List) -> dict:
    total_cents = sum(b.price_cents for b in bookings)
    confirmed_cents = sum(b.price_cents for b in bookings if b.status in REVENUE_STATUSES)
    return {
        "total": _euros(total_cents),
        "confirmed": _euros(confirmed_cents),
        "average": _euros(total_cents / len(bookings)) if bookings else 0,
    }


def booking_summary(bookings: List) -> dict:
    total = len(bookings)
    by_status = Counter(b.status for b in bookings)
    completed = by_status.get(BookingStatus.COMPLETED.value, 0)

    return {
        "total": total,
        "confirmed": sum(by_status.get(s, 0) for s in REVENUE_STATUSES),
        "conversion_rate": round(completed / total * 100, 2) if total else 0.0,
        "status_distribution": [
            {"status": status, "count": count, "percentage": _percentage(count, total)}
            for status, count in by_status.most_common()
        ],
    }


def service_popularity(bookings: List, service_names: Dict[int, str]) -> List[dict]:
    counts = Counter(b.service_id for b in bookings)
    revenue = defaultdict(int)
    for b in bookings:
        revenue[b.service_id] += b.price_cents

    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))[:TOP_N]
    return [
        {
            "service_id": service_id,
            "service_name": service_names.get(service_id, "Unknown Service"),
            "bookings": count,
            "revenue": _euros(revenue[service_id]),
            "average_price": _euros(revenue[service_id] / count),
        }
        for service_id, count in ranked
    ]


def vehicle_distribution(bookings: List) -> List[dict]:
    total = len(bookings)
    grouped = defaultdict(list)
    for b in bookings:
        grouped[b.vehicle_type].append(b.price_cents)

    rows = [
        {
            "type": vehicle_type,
            "count": len(prices),
            "average_price": _euros(sum(prices) / len(prices)),
            "percentage": _percentage(len(prices), total),
        }
        for vehicle_type, prices in grouped.items()
    ]
    rows.sort(key=lambda row: (-row["count"], row["type"]))
    return rows


def popular_time_slots(bookings: List) -> List[dict]:
    counts = Counter(b.start_time.strftime("%H:%M") for b in bookings)
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))[:TOP_N]
    return [{"time": slot, "bookings": count} for slot, count in ranked]


def daily_trends(bookings: Iterable, today: date, days: int = TREND_DAYS) -> List[dict]:
    """Bookings and revenue per day for the last `days` days, oldest first."""
    first = today - timedelta(days=days - 1)
    per_day = {first + timedelta(days=i): [0, 0] for i in range(days)}
    for b in bookings:
        if b.date in per_day:
            per_day[b.date][0] += 1
            per_day[b.date][1] += b.price_cents

    return [
        {"date": day, "bookings": count, "revenue": _euros(cents)}
        for day, (count, cents) in sorted(per_day.items())
    ]


def loyalty_distribution(customers: List) -> List[dict]:
    grouped = defaultdict(list)
    for c in customers:
        grouped[c.loyalty_tier].append(c)

    rows = []
    for tier in LOYALTY_TIERS:
        members = grouped.get(tier)
        if not members:
            continue
        rows.append({
            "tier": tier,
            "customers": len(members),
            "average_points": round(sum(c.loyalty_points for c in members) / len(members)),
            "average_spent": _euros(sum(c.total_spent_cents for c in members) / len(members)),
        })
    return rows


def customer_metrics(customers: List, today: date) -> dict:
    total = len(customers)
    repeat = [c for c in customers if c.visit_count >= 2]
    month_start = today.replace(day=1)

    return {
        "total": total,
        "new_this_month": sum(1 for c in customers if c.joined_at.date() >= month_start),
        # averages over repeat customers only
        "average_visits": round(sum(c.visit_count for c in repeat) / len(repeat), 2) if repeat else 0.0,
        "average_spent": _euros(sum(c.total_spent_cents for c in repeat) / len(repeat)) if repeat else 0,
        "repeat_customers": len(repeat),
        "retention_rate": _percentage(len(repeat), total),
    }


def customer_summary(customers: List) -> dict:
    total = len(customers)
    tiers = Counter(c.loyalty_tier for c in customers)
    total_value = sum(c.total_spent_cents for c in customers)
    repeat = sum(1 for c in customers if c.visit_count >= 2)

    return {
        "total_customers": total,
        "loyalty_distribution": {tier: tiers.get(tier, 0) for tier in LOYALTY_TIERS},
        "total_loyalty_points": sum(c.loyalty_points for c in customers),
        "total_customer_value_cents": total_value,
        "average_customer_value_cents": round(total_value / total) if total else 0,
        "repeat_customers": repeat,
        "retention_rate": _percentage(repeat, total),
    }
