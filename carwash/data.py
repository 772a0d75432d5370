# carwash/data.py
# Default catalogue and opening hours, loaded into an empty database.

from datetime import time

from sqlmodel import Session, select

from carwash.config import settings

SERVICES = [
    # name, description, category, price_cents, duration_minutes, capacity
    ("Hand Wash", "Careful hand wash that restores the paint's freshness.", "wash", 2500, 30, 2),
    ("Hand Wash + Quick Wax", "Light wax for shine and protection right after washing.", "wash", 3000, 40, 2),
    ("Hand Wash + Interior Cleaning", "Carpets, vacuuming, windows and dust removal.", "wash", 5500, 60, 2),
    ("Hand Wash + Normal Wax", "Wax coating that keeps shine and protection for 2-3 months.", "wash", 7000, 90, 2),
    ("Hand Wash + Hard Wax", "Long-lasting six month protection with hard wax.", "wash", 11000, 120, 1),
    ("Paint Surface Polishing", "Three step polishing with hand waxing.", "wash", 35000, 240, 1),
    ("Tire Change", "Tire change and pressure check.", "tires", 2000, 30, 2),
    ("Tire Wash", "Clean tires and rims inside and out.", "tires", 1000, 20, 2),
    ("Tire Hotel", "Seasonal tire storage.", "tires", 6900, 15, 4),
    ("Engine Wash", "Clean engine bay, at the customer's own risk.", "extra", 2000, 30, 2),
    ("Odor Removal with Ozone", "Ozone treatment removes unpleasant odours.", "extra", 5000, 60, 1),
]

# day_of_week -> (open, close, break) ; None = closed
BUSINESS_HOURS = {
    0: (time(8, 0), time(17, 0), None),
    1: (time(8, 0), time(17, 0), None),
    2: (time(8, 0), time(17, 0), None),
    3: (time(8, 0), time(17, 0), None),
    4: (time(8, 0), time(17, 0), None),
    5: (time(10, 0), time(16, 0), None),
    6: None,
}


def seed_defaults(session: Session):
    from carwash.auth import hash_password
    from carwash.models import BusinessHours, Service, User

    for name, description, category, price_cents, duration_minutes, capacity in SERVICES:
        session.add(Service(
            name=name,
            description=description,
            category=category,
            price_cents=price_cents,
            duration_minutes=duration_minutes,
            capacity=capacity,
        ))

    for day, hours in BUSINESS_HOURS.items():
        if session.get(BusinessHours, day) is not None:
            continue
        if hours is None:
            session.add(BusinessHours(day_of_week=day, is_open=False, start_time=time(0, 0), end_time=time(0, 0)))
            continue
        start, end, lunch = hours
        session.add(BusinessHours(
            day_of_week=day,
            start_time=start,
            end_time=end,
            break_start=lunch[0] if lunch else None,
            break_end=lunch[1] if lunch else None,
        ))

    admin = session.exec(select(User).where(User.email == settings.admin_email)).first()
    if admin is None:
        session.add(User(
            email=settings.admin_email,
            password_hash=hash_password(settings.admin_password),
            role="admin",
        ))

    session.commit()
