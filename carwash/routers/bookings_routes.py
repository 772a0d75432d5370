# carwash/routers/bookings_routes.py

import logging
from datetime import datetime, date

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from carwash.bookings import (
    award_loyalty_points,
    end_time,
    ensure_slot_available,
    get_active_service,
    get_booking_by_code,
    get_or_create_customer,
    hours_until,
    slots_for_day,
    unique_confirmation_code,
)
from carwash.config import settings
from carwash.db import get_session
from carwash.models import Booking
from carwash.pricing import calculate_total_price, tier_discount
from carwash.recaptcha import verify_recaptcha
from carwash.schemas import (
    AvailabilityResponse,
    BookingCreate,
    BookingCreated,
    BookingDetail,
    BookingPublic,
    BookingStatus,
    CancelRequest,
    RescheduleRequest,
)
from carwash import workflow

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/bookings",
    tags=["bookings"],
)

MODIFIABLE_STATUSES = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)


@router.get("/availability", response_model=AvailabilityResponse)
def booking_availability(
    date: date,
    service_id: int,
    session: Session = Depends(get_session),
):
    service = get_active_service(session, service_id)
    slots = slots_for_day(session, date, service)

    return {
        "date": date,
        "service": service,
        "time_slots": [{"time": s.time, "available": s.available} for s in slots],
        "summary": {
            "total": len(slots),
            "available": sum(1 for s in slots if s.available),
        },
    }


@router.post("", response_model=BookingCreated, status_code=201)
def create_booking(
    data: BookingCreate,
    request: Request,
    session: Session = Depends(get_session),
):
    client_ip = request.client.host if request.client else None
    captcha = verify_recaptcha(data.recaptcha_token, action="booking", ip=client_ip)
    if not captcha.success:
        raise HTTPException(status_code=400, detail=f"reCAPTCHA verification failed: {captcha.error}")

    # 1) Validate service and slot
    service = get_active_service(session, data.service_id)
    ensure_slot_available(session, data.date, data.start_time, service)

    # 2) Customer and price (discount from the tier held before this visit)
    customer = get_or_create_customer(session, data.customer_name, data.customer_email, data.customer_phone)
    quote = calculate_total_price(service.price_cents, data.vehicle_type, tier_discount(customer.loyalty_tier))

    # 3) Create booking
    booking = Booking(
        service_id=service.id,
        customer_id=customer.id,
        vehicle_type=data.vehicle_type,
        date=data.date,
        start_time=data.start_time,
        end_time=end_time(data.start_time, service),
        duration_minutes=service.duration_minutes,
        price_cents=quote.final_price,
        status=BookingStatus.PENDING.value,
        customer_name=data.customer_name,
        customer_email=customer.email,
        customer_phone=data.customer_phone,
        license_plate=data.license_plate,
        notes=data.notes,
        confirmation_code=unique_confirmation_code(session),
    )
    session.add(booking)
    award_loyalty_points(customer, quote.final_price)
    session.add(customer)

    try:
        session.flush()  # fills booking.id
        workflow.record_history(session, booking, None, BookingStatus.PENDING, changed_by=customer.email)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Booking could not be created, please try again")

    session.refresh(booking)
    session.refresh(customer)
    logger.info(f"Booking {booking.id} created ({booking.confirmation_code}) for {booking.date} {booking.start_time}")

    return {
        "booking": booking,
        "pricing": {
            "original_price": quote.original_price,
            "vehicle_price": quote.vehicle_price,
            "loyalty_discount": quote.loyalty_discount,
            "final_price": quote.final_price,
            "multiplier": quote.multiplier,
        },
        "loyalty_tier": customer.loyalty_tier,
    }


@router.get("/{confirmation_code}", response_model=BookingDetail)
def get_booking(
    confirmation_code: str,
    session: Session = Depends(get_session),
):
    booking = get_booking_by_code(session, confirmation_code)
    remaining = hours_until(booking)

    return {
        "booking": booking,
        "can_modify": remaining >= settings.modification_notice_hours and booking.status in MODIFIABLE_STATUSES,
        "hours_until_booking": round(remaining, 1),
        "status_label": workflow.status_label(booking.status),
        "available_transitions": [
            workflow.transition_to_dict(t)
            for t in workflow.available_transitions(booking.status, "customer", booking)
        ],
    }


@router.post("/{confirmation_code}/reschedule", response_model=BookingPublic)
def reschedule_booking(
    confirmation_code: str,
    change: RescheduleRequest,
    session: Session = Depends(get_session),
):
    booking = get_booking_by_code(session, confirmation_code)

    if booking.status not in MODIFIABLE_STATUSES:
        raise HTTPException(status_code=409, detail=f"Booking cannot be rescheduled in status {booking.status}")
    if hours_until(booking) < settings.modification_notice_hours:
        raise HTTPException(
            status_code=422,
            detail=f"Bookings cannot be changed less than {settings.modification_notice_hours} hours before the appointment",
        )

    service = get_active_service(session, booking.service_id)
    ensure_slot_available(session, change.new_date, change.new_start_time, service, exclude_id=booking.id)

    old_start = booking.starts_at
    booking.date = change.new_date
    booking.start_time = change.new_start_time
    booking.end_time = end_time(change.new_start_time, service)

    session.add(booking)
    session.commit()
    session.refresh(booking)

    logger.info(f"Booking {booking.id} rescheduled: {old_start} -> {booking.starts_at}")
    return booking


@router.post("/{confirmation_code}/cancel", response_model=BookingPublic)
def cancel_booking(
    confirmation_code: str,
    cancel: CancelRequest,
    session: Session = Depends(get_session),
):
    booking = get_booking_by_code(session, confirmation_code)

    if workflow.find_transition(booking.status, BookingStatus.CANCELLED) is None:
        raise HTTPException(status_code=409, detail=f"Booking cannot be cancelled in status {booking.status}")
    if hours_until(booking) < settings.modification_notice_hours:
        raise HTTPException(
            status_code=422,
            detail=f"Bookings cannot be changed less than {settings.modification_notice_hours} hours before the appointment",
        )

    try:
        booking = workflow.execute_transition(
            session,
            booking,
            BookingStatus.CANCELLED,
            "customer",
            changed_by=booking.customer_email,
            reason=cancel.reason or "Cancelled by customer",
            now=datetime.now(),
        )
    except workflow.TransitionNotAllowed:
        raise HTTPException(
            status_code=403,
            detail=f"Confirmed bookings can only be cancelled {settings.cancellation_notice_hours} hours in advance",
        )

    return booking
