# carwash/models.py

from typing import Optional
from datetime import datetime, date as Date, time

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import SQLModel, Field

# Timestamps are naive local wall-clock time, like the booking date and
# start_time columns they are compared against.


class Service(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    name: str = Field(index=True)
    description: str = ""
    category: str = "wash"  # wash, tires, extra
    price_cents: int
    duration_minutes: int
    capacity: int = 1  # vehicles served at the same time
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime)


class BusinessHours(SQLModel, table=True):
    day_of_week: int = Field(primary_key=True)  # 0=Mon ... 6=Sun
    is_open: bool = True
    start_time: time
    end_time: time
    break_start: Optional[time] = None
    break_end: Optional[time] = None


class Holiday(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    date: Date = Field(index=True, unique=True)
    name: str


class Customer(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    phone: Optional[str] = None
    loyalty_points: int = 0
    total_spent_cents: int = 0
    visit_count: int = 0
    loyalty_tier: str = "BRONZE"
    last_visit: Optional[datetime] = Field(default=None, sa_type=DateTime)
    joined_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime)


class Booking(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("confirmation_code", name="uq_booking_confirmation_code"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    service_id: int = Field(foreign_key="service.id", index=True)
    customer_id: Optional[int] = Field(default=None, foreign_key="customer.id")

    vehicle_type: str
    date: Date = Field(index=True)
    start_time: time
    end_time: time
    duration_minutes: int
    price_cents: int
    status: str = "PENDING"

    customer_name: str
    customer_email: str = Field(index=True)
    customer_phone: str
    license_plate: Optional[str] = None
    notes: Optional[str] = None
    admin_notes: Optional[str] = None
    cancellation_reason: Optional[str] = None

    confirmation_code: str
    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime)
    cancelled_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    completed_at: Optional[datetime] = Field(default=None, sa_type=DateTime)

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.date, self.start_time)

    @property
    def ends_at(self) -> datetime:
        return datetime.combine(self.date, self.end_time)


class BookingStatusHistory(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    booking_id: int = Field(foreign_key="booking.id", index=True)
    from_status: Optional[str] = None
    to_status: str
    changed_by: str = "system"
    reason: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime)


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    role: str  # admin or staff


class PushSubscription(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    endpoint: str = Field(index=True, unique=True)
    p256dh: str
    auth: str
    user_agent: Optional[str] = None
    customer_email: Optional[str] = Field(default=None, index=True)
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime)
    last_used: Optional[datetime] = Field(default=None, sa_type=DateTime)


class NotificationPreference(SQLModel, table=True):
    customer_email: str = Field(primary_key=True)
    booking_reminders: bool = True
    payment_confirmations: bool = True
    promotional_offers: bool = False
    status_updates: bool = True
    marketing_emails: bool = False
    sms_notifications: bool = True
    push_notifications: bool = True
    reminder_hours_before: int = 24
