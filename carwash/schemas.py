# carwash/schemas.py

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl
from enum import Enum
from datetime import datetime, date, time
from typing import Dict, List, Optional


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserRole(str, Enum):
    admin = "admin"
    staff = "staff"


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


class UserPublic(BaseModel):
    id: int
    email: str
    role: UserRole


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    role: UserRole


# Services

class ServiceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: str = ""
    category: str = "wash"
    price_cents: int = Field(gt=0)
    duration_minutes: int = Field(gt=0, le=8 * 60)
    capacity: int = Field(default=1, ge=1)
    is_active: bool = True


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = None
    category: Optional[str] = None
    price_cents: Optional[int] = Field(default=None, gt=0)
    duration_minutes: Optional[int] = Field(default=None, gt=0, le=8 * 60)
    capacity: Optional[int] = Field(default=None, ge=1)
    is_active: Optional[bool] = None


class ServicePublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    category: str
    price_cents: int
    duration_minutes: int
    capacity: int
    is_active: bool


# Opening hours

class BusinessHoursSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    day_of_week: int = Field(ge=0, le=6)  # 0=Mon ... 6=Sun
    is_open: bool = True
    start_time: time
    end_time: time
    break_start: Optional[time] = None
    break_end: Optional[time] = None


class BusinessHoursUpdate(BaseModel):
    is_open: bool = True
    start_time: time
    end_time: time
    break_start: Optional[time] = None
    break_end: Optional[time] = None


class HolidayCreate(BaseModel):
    date: date
    name: str = Field(min_length=1, max_length=120)


class HolidayPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    date: date
    name: str


# Bookings

class TimeSlotPublic(BaseModel):
    time: str
    available: bool


class AvailabilitySummary(BaseModel):
    total: int
    available: int


class AvailabilityResponse(BaseModel):
    date: date
    service: ServicePublic
    time_slots: List[TimeSlotPublic]
    summary: AvailabilitySummary


class BookingCreate(BaseModel):
    service_id: int
    vehicle_type: str = Field(min_length=1, max_length=60)
    date: date
    start_time: time
    customer_name: str = Field(min_length=2, max_length=100)
    customer_email: EmailStr
    customer_phone: str = Field(min_length=5, max_length=30)
    license_plate: Optional[str] = Field(default=None, max_length=20)
    notes: Optional[str] = Field(default=None, max_length=1000)
    recaptcha_token: Optional[str] = None


class BookingPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    confirmation_code: str
    service_id: int
    vehicle_type: str
    date: date
    start_time: time
    end_time: time
    duration_minutes: int
    price_cents: int
    status: BookingStatus
    customer_name: str
    customer_email: str
    customer_phone: str
    license_plate: Optional[str] = None
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime


class PriceBreakdown(BaseModel):
    original_price: int
    vehicle_price: int
    loyalty_discount: int
    final_price: int
    multiplier: float


class BookingCreated(BaseModel):
    booking: BookingPublic
    pricing: PriceBreakdown
    loyalty_tier: str


class TransitionPublic(BaseModel):
    from_status: Optional[BookingStatus] = None
    to_status: BookingStatus
    label: str
    requires_reason: bool
    allowed_by: List[str]


class BookingDetail(BaseModel):
    booking: BookingPublic
    can_modify: bool
    hours_until_booking: float
    status_label: str
    available_transitions: List[TransitionPublic]


class RescheduleRequest(BaseModel):
    new_date: date
    new_start_time: time


class CancelRequest(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class StatusChangeRequest(BaseModel):
    status: BookingStatus
    reason: Optional[str] = Field(default=None, max_length=500)
    notes: Optional[str] = Field(default=None, max_length=1000)


class StatusHistoryPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    booking_id: int
    from_status: Optional[BookingStatus] = None
    to_status: BookingStatus
    changed_by: str
    reason: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime


class WorkflowValidation(BaseModel):
    is_valid: bool
    errors: List[str]
    warnings: List[str]


class WorkflowConfig(BaseModel):
    statuses: List[BookingStatus]
    transitions: List[TransitionPublic]


# Admin

class DashboardStats(BaseModel):
    today_bookings: int
    week_bookings: int
    month_revenue: int  # whole euros
    pending_bookings: int
    recent_bookings: List[BookingPublic]


class NextTier(BaseModel):
    name: str
    points_needed: int


class CustomerPublic(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    loyalty_points: int
    loyalty_tier: str
    discount: float
    total_spent_cents: int
    visit_count: int
    last_visit: Optional[datetime] = None
    next_tier: Optional[NextTier] = None


class CustomerSummary(BaseModel):
    total_customers: int
    loyalty_distribution: Dict[str, int]
    total_loyalty_points: int
    total_customer_value_cents: int
    average_customer_value_cents: int
    repeat_customers: int
    retention_rate: int  # percent


class CustomerList(BaseModel):
    customers: List[CustomerPublic]
    summary: CustomerSummary


class AutoProgressSummary(BaseModel):
    processed_bookings: int
    marked_no_show: int
    failed: int


# Analytics (money in whole euros)

class DateRange(BaseModel):
    start: date
    end: date


class RevenueStats(BaseModel):
    total: int
    confirmed: int
    average: int


class StatusShare(BaseModel):
    status: BookingStatus
    count: int
    percentage: int


class BookingStats(BaseModel):
    total: int
    confirmed: int
    conversion_rate: float
    status_distribution: List[StatusShare]


class CustomerStats(BaseModel):
    total: int
    new_this_month: int
    average_visits: float
    average_spent: int
    repeat_customers: int
    retention_rate: int


class ServicePopularity(BaseModel):
    service_id: int
    service_name: str
    bookings: int
    revenue: int
    average_price: int


class ServiceStats(BaseModel):
    popularity: List[ServicePopularity]
    total_services: int


class VehicleShare(BaseModel):
    type: str
    count: int
    average_price: int
    percentage: int


class TierStats(BaseModel):
    tier: str
    customers: int
    average_points: int
    average_spent: int


class DailyTrend(BaseModel):
    date: date
    bookings: int
    revenue: int


class SlotPopularity(BaseModel):
    time: str
    bookings: int


class Trends(BaseModel):
    daily_bookings: List[DailyTrend]
    popular_time_slots: List[SlotPopularity]


class Analytics(BaseModel):
    time_range: str
    date_range: DateRange
    revenue: RevenueStats
    bookings: BookingStats
    customers: CustomerStats
    services: ServiceStats
    vehicles: List[VehicleShare]
    loyalty: List[TierStats]
    trends: Trends


# Notifications

class SubscriptionCreate(BaseModel):
    endpoint: HttpUrl
    p256dh: str = Field(min_length=1)
    auth: str = Field(min_length=1)
    user_agent: Optional[str] = None
    customer_email: Optional[EmailStr] = None


class UnsubscribeRequest(BaseModel):
    endpoint: HttpUrl


class SubscriptionPublic(BaseModel):
    id: int
    endpoint: str
    is_active: bool


class NotificationPreferences(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    customer_email: EmailStr
    booking_reminders: bool = True
    payment_confirmations: bool = True
    promotional_offers: bool = False
    status_updates: bool = True
    marketing_emails: bool = False
    sms_notifications: bool = True
    push_notifications: bool = True
    reminder_hours_before: int = Field(default=24, ge=1, le=168)


class NotificationPreferencesUpdate(BaseModel):
    customer_email: EmailStr
    booking_reminders: Optional[bool] = None
    payment_confirmations: Optional[bool] = None
    promotional_offers: Optional[bool] = None
    status_updates: Optional[bool] = None
    marketing_emails: Optional[bool] = None
    sms_notifications: Optional[bool] = None
    push_notifications: Optional[bool] = None
    reminder_hours_before: Optional[int] = Field(default=None, ge=1, le=168)
