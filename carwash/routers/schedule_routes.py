# carwash/routers/schedule_routes.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from carwash.auth import get_current_user
from carwash.db import get_session
from carwash.deps import require_role
from carwash.models import BusinessHours, Holiday
from carwash.schemas import BusinessHoursSchema, BusinessHoursUpdate, HolidayCreate, HolidayPublic

router = APIRouter(
    prefix="/schedule",
    tags=["schedule"],
)


@router.get("/hours", response_model=List[BusinessHoursSchema])
def list_business_hours(session: Session = Depends(get_session)):
    return session.exec(select(BusinessHours).order_by(BusinessHours.day_of_week)).all()


@router.put("/hours/{day_of_week}", response_model=BusinessHoursSchema)
def set_business_hours(
    day_of_week: int,
    hours: BusinessHoursUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")
    if not (0 <= day_of_week <= 6):
        raise HTTPException(status_code=422, detail="day_of_week must be an integer between 0 and 6")

    if hours.is_open and hours.start_time >= hours.end_time:
        raise HTTPException(status_code=422, detail="start_time must be before end_time")

    if (hours.break_start is None) != (hours.break_end is None):
        raise HTTPException(status_code=422, detail="break_start and break_end must be set together")
    if hours.break_start is not None:
        if hours.break_start >= hours.break_end:
            raise HTTPException(status_code=422, detail="break_start must be before break_end")
        if hours.break_start < hours.start_time or hours.break_end > hours.end_time:
            raise HTTPException(status_code=422, detail="Break must be within opening hours")

    # Upsert: one row per weekday (day_of_week is PK)
    db_hours = session.get(BusinessHours, day_of_week)
    if db_hours is None:
        db_hours = BusinessHours(day_of_week=day_of_week, **hours.model_dump())
        session.add(db_hours)
    else:
        for key, value in hours.model_dump().items():
            setattr(db_hours, key, value)
        session.add(db_hours)

    session.commit()
    session.refresh(db_hours)
    return db_hours


@router.get("/holidays", response_model=List[HolidayPublic])
def list_holidays(session: Session = Depends(get_session)):
    return session.exec(select(Holiday).order_by(Holiday.date)).all()


@router.post("/holidays", response_model=HolidayPublic, status_code=201)
def create_holiday(
    holiday: HolidayCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    db_holiday = Holiday(date=holiday.date, name=holiday.name)
    session.add(db_holiday)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="A holiday already exists for that date")

    session.refresh(db_holiday)
    return db_holiday


@router.delete("/holidays/{holiday_id}", status_code=204)
def delete_holiday(
    holiday_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    holiday = session.get(Holiday, holiday_id)
    if holiday is None:
        raise HTTPException(status_code=404, detail="Holiday not found")

    session.delete(holiday)
    session.commit()
