# carwash/routers/admin_routes.py

import logging
from datetime import datetime, timedelta, date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlmodel import Session, select

from carwash.auth import get_current_user
from carwash.db import get_session
from carwash.deps import require_role
from carwash.models import Booking, BookingStatusHistory, Customer, Service
from carwash.pricing import next_tier, tier_discount
from carwash.schemas import (
    Analytics,
    AutoProgressSummary,
    BookingPublic,
    BookingStatus,
    CustomerList,
    DashboardStats,
    StatusChangeRequest,
    StatusHistoryPublic,
    WorkflowConfig,
    WorkflowValidation,
)
from carwash import analytics, workflow

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
)


def _get_booking(session: Session, booking_id: int) -> Booking:
    booking = session.get(Booking, booking_id)
    if booking is None:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking


def _history(session: Session, booking_id: int) -> List[BookingStatusHistory]:
    return session.exec(
        select(BookingStatusHistory)
        .where(BookingStatusHistory.booking_id == booking_id)
        .order_by(BookingStatusHistory.created_at, BookingStatusHistory.id)
    ).all()


@router.get("/dashboard", response_model=DashboardStats)
def dashboard_stats(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin", "staff")

    today = date.today()
    week_start = today - timedelta(days=today.weekday())
    week_end = week_start + timedelta(days=6)
    month_start = today.replace(day=1)
    next_month = (month_start + timedelta(days=32)).replace(day=1)

    today_bookings = session.exec(
        select(func.count(Booking.id)).where(Booking.date == today)
    ).one()
    week_bookings = session.exec(
        select(func.count(Booking.id))
        .where(Booking.date >= week_start)
        .where(Booking.date <= week_end)
    ).one()
    month_revenue_cents = session.exec(
        select(func.coalesce(func.sum(Booking.price_cents), 0))
        .where(Booking.date >= month_start)
        .where(Booking.date < next_month)
        .where(Booking.status.in_(analytics.REVENUE_STATUSES))
    ).one()
    pending_bookings = session.exec(
        select(func.count(Booking.id)).where(Booking.status == BookingStatus.PENDING.value)
    ).one()
    recent_bookings = session.exec(
        select(Booking).order_by(Booking.created_at.desc(), Booking.id.desc()).limit(10)
    ).all()

    return {
        "today_bookings": today_bookings,
        "week_bookings": week_bookings,
        "month_revenue": round(month_revenue_cents / 100),
        "pending_bookings": pending_bookings,
        "recent_bookings": recent_bookings,
    }


@router.get("/bookings", response_model=List[BookingPublic])
def list_bookings(
    status: Optional[str] = "all",
    on_date: Optional[date] = None,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin", "staff")

    statuses = [s.value for s in BookingStatus]
    if status != "all" and status not in statuses:
        raise HTTPException(status_code=422, detail=f"status must be one of {', '.join(statuses)} or 'all'")

    stmt = select(Booking)
    if on_date is not None:
        stmt = stmt.where(Booking.date == on_date)
    if status != "all":
        stmt = stmt.where(Booking.status == status)

    stmt = stmt.order_by(Booking.date, Booking.start_time)
    return session.exec(stmt).all()


@router.patch("/bookings/{booking_id}/status", response_model=BookingPublic)
def change_booking_status(
    booking_id: int,
    change: StatusChangeRequest,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin", "staff")
    booking = _get_booking(session, booking_id)

    if workflow.find_transition(booking.status, change.status) is None:
        raise HTTPException(
            status_code=422,
            detail=f"No transition from {booking.status} to {change.status.value}",
        )

    try:
        booking = workflow.execute_transition(
            session,
            booking,
            change.status,
            current_user["role"],
            changed_by=current_user["email"],
            reason=change.reason,
            notes=change.notes,
        )
    except workflow.TransitionNotAllowed as e:
        raise HTTPException(status_code=403, detail=str(e))
    except workflow.ReasonRequired as e:
        raise HTTPException(status_code=422, detail=str(e))

    return booking


@router.get("/bookings/{booking_id}/history", response_model=List[StatusHistoryPublic])
def booking_history(
    booking_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin", "staff")
    _get_booking(session, booking_id)
    return list(reversed(_history(session, booking_id)))


@router.get("/bookings/{booking_id}/workflow", response_model=WorkflowValidation)
def validate_booking_workflow(
    booking_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin", "staff")
    booking = _get_booking(session, booking_id)
    return workflow.validate_history(booking, _history(session, booking_id))


@router.get("/workflow", response_model=WorkflowConfig)
def workflow_config(current_user: dict = Depends(get_current_user)):
    require_role(current_user, "admin", "staff")
    return workflow.workflow_config()


@router.post("/bookings/auto-progress", response_model=AutoProgressSummary)
def auto_progress(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")
    return workflow.auto_progress_bookings(session, datetime.now())


@router.get("/customers", response_model=CustomerList)
def list_customers(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin", "staff")

    customers = session.exec(
        select(Customer).order_by(Customer.total_spent_cents.desc(), Customer.id)
    ).all()

    rows = [
        {
            "id": c.id,
            "name": c.name,
            "email": c.email,
            "phone": c.phone,
            "loyalty_points": c.loyalty_points,
            "loyalty_tier": c.loyalty_tier,
            "discount": tier_discount(c.loyalty_tier),
            "total_spent_cents": c.total_spent_cents,
            "visit_count": c.visit_count,
            "last_visit": c.last_visit,
            "next_tier": next_tier(c.loyalty_points),
        }
        for c in customers
    ]
    return {"customers": rows, "summary": analytics.customer_summary(customers)}


@router.get("/analytics", response_model=Analytics)
def booking_analytics(
    time_range: str = "30days",
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin", "staff")

    if time_range not in analytics.TIME_RANGES:
        raise HTTPException(
            status_code=422,
            detail=f"time_range must be one of {', '.join(analytics.TIME_RANGES)}",
        )

    today = date.today()
    start, end = analytics.date_range(time_range, today)

    bookings = session.exec(
        select(Booking).where(Booking.date >= start).where(Booking.date <= end)
    ).all()
    recent = session.exec(
        select(Booking).where(Booking.date > today - timedelta(days=analytics.TREND_DAYS)).where(Booking.date <= today)
    ).all()
    customers = session.exec(select(Customer)).all()
    services = session.exec(select(Service)).all()

    return {
        "time_range": time_range,
        "date_range": {"start": start, "end": end},
        "revenue": analytics.revenue_summary(bookings),
        "bookings": analytics.booking_summary(bookings),
        "customers": analytics.customer_metrics(customers, today),
        "services": {
            "popularity": analytics.service_popularity(bookings, {s.id: s.name for s in services}),
            "total_services": len(services),
        },
        "vehicles": analytics.vehicle_distribution(bookings),
        "loyalty": analytics.loyalty_distribution(customers),
        "trends": {
            "daily_bookings": analytics.daily_trends(recent, today),
            "popular_time_slots": analytics.popular_time_slots(bookings),
        },
    }
