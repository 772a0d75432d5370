# carwash/bookings.py
# Booking helpers shared by the public and admin routes.

import logging
import secrets
import string
from datetime import datetime, date, time
from typing import List, Optional

from fastapi import HTTPException
from sqlmodel import Session, select

from carwash.config import settings
from carwash.core import ACTIVE_STATUSES, TimeSlot, end_time_for, find_slot, generate_slots
from carwash.models import Booking, BusinessHours, Customer, Holiday, Service
from carwash import pricing

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 8


def generate_confirmation_code() -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def unique_confirmation_code(session: Session) -> str:
    while True:
        code = generate_confirmation_code()
        taken = session.exec(select(Booking).where(Booking.confirmation_code == code)).first()
        if taken is None:
            return code


def get_active_service(session: Session, service_id: int) -> Service:
    service = session.get(Service, service_id)
    if service is None or not service.is_active:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


def get_booking_by_code(session: Session, code: str) -> Booking:
    booking = session.exec(
        select(Booking).where(Booking.confirmation_code == code.upper())
    ).first()
    if booking is None:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking


def slots_for_day(
    session: Session,
    day: date,
    service: Service,
    now: Optional[datetime] = None,
    exclude_id: Optional[int] = None,
) -> List[TimeSlot]:
    holiday = session.exec(select(Holiday).where(Holiday.date == day)).first()
    if holiday is not None:
        return []

    hours = session.get(BusinessHours, day.weekday())

    bookings_for_day = session.exec(
        select(Booking)
        .where(Booking.date == day)
        .where(Booking.status.in_(ACTIVE_STATUSES))
    ).all()

    return generate_slots(
        day,
        service.duration_minutes,
        hours,
        bookings_for_day,
        capacity=service.capacity,
        now=now or datetime.now(),
        interval_minutes=settings.slot_interval_minutes,
        exclude_id=exclude_id,
    )


def ensure_slot_available(session: Session, day: date, start_time: time, service: Service,
                          exclude_id: Optional[int] = None):
    if datetime.combine(day, start_time) <= datetime.now():
        raise HTTPException(status_code=422, detail="Cannot book a time in the past")

    slot = find_slot(slots_for_day(session, day, service, exclude_id=exclude_id), start_time)
    if slot is None:
        raise HTTPException(status_code=422, detail="Start time is outside bookable hours")
    if not slot.available:
        raise HTTPException(status_code=409, detail="Time slot is not available")


def get_or_create_customer(session: Session, name: str, email: str, phone: Optional[str]) -> Customer:
    email = email.strip().lower()
    customer = session.exec(select(Customer).where(Customer.email == email)).first()
    if customer is None:
        customer = Customer(name=name, email=email, phone=phone)
        session.add(customer)
        session.flush()
        logger.info(f"New customer created: {email}")
    return customer


def award_loyalty_points(customer: Customer, amount_cents: int):
    customer.loyalty_points += pricing.points_for(amount_cents)
    customer.total_spent_cents += amount_cents
    customer.visit_count += 1
    customer.last_visit = datetime.now()

    new_tier = pricing.calculate_tier(customer.loyalty_points)
    if new_tier != customer.loyalty_tier:
        logger.info(f"Customer {customer.id} promoted to {new_tier} tier")
        customer.loyalty_tier = new_tier


def hours_until(booking: Booking, now: Optional[datetime] = None) -> float:
    now = now or datetime.now()
    return (booking.starts_at - now).total_seconds() / 3600


def end_time(start_time: time, service: Service) -> time:
    return end_time_for(start_time, service.duration_minutes)
