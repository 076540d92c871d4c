# salon_app/schemas.py

from pydantic import BaseModel, Field
from enum import Enum
from datetime import datetime, date as Date
from typing import List, Optional, Union


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserRole(str, Enum):
    owner = "owner"
    customer = "customer"


class UserPublic(BaseModel):
    id: int
    email: str
    role: UserRole


class UserCreate(BaseModel):
    email: str
    password: str = Field(min_length=8, max_length=72)
    role: UserRole


# Salons and catalog

class SalonCreate(BaseModel):
    name: str = Field(min_length=1)
    slug: str = Field(min_length=1, pattern=r"^[a-z0-9-]+$")
    timezone: Optional[str] = None


class SalonUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    timezone: Optional[str] = None


class SalonPublic(BaseModel):
    id: int
    name: str
    slug: str
    owner_id: int
    timezone: Optional[str] = None


class ServiceCreate(BaseModel):
    name: str = Field(min_length=1)
    duration: int = Field(gt=0)  # minutes
    price: float = Field(default=0, ge=0)


class ServicePublic(BaseModel):
    id: int
    salon_id: int
    name: str
    duration: int
    price: float


class StaffCreate(BaseModel):
    name: str = Field(min_length=1)
    phone: Optional[str] = None
    priority_order: int = 999


class StaffPublic(BaseModel):
    id: int
    salon_id: int
    name: str
    phone: Optional[str] = None
    priority_order: int = 999


class StaffServiceLink(BaseModel):
    duration: Optional[int] = Field(default=None, gt=0)


class StaffServicePublic(BaseModel):
    id: int
    staff_id: int
    service_id: int
    duration: Optional[int] = None


# Schedules

class ScheduleCreate(BaseModel):
    staff_id: int
    day_of_week: Optional[int] = None  # 0=Sun ... 6=Sat, recurring
    date: Optional[Date] = None        # specific date override
    start_time: str
    end_time: str
    break_start: Optional[str] = None
    break_end: Optional[str] = None


class ScheduleUpdate(BaseModel):
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    break_start: Optional[str] = None
    break_end: Optional[str] = None


class SchedulePublic(BaseModel):
    id: int
    staff_id: int
    day_of_week: Optional[int] = None
    date: Optional[Date] = None
    start_time: str
    end_time: str
    break_start: Optional[str] = None
    break_end: Optional[str] = None


class ScheduleMatchOut(SchedulePublic):
    is_specific_match: bool


class ScheduleResolution(BaseModel):
    staff_id: int
    salon_id: int
    timezone: str
    target_date: Date
    day_of_week: int
    day_start: datetime
    schedules: List[ScheduleMatchOut]
    specific: Optional[SchedulePublic] = None
    recurring: Optional[SchedulePublic] = None
    final: Optional[SchedulePublic] = None
    rule: str


# Appointments and booking

class AppointmentStatus(str, Enum):
    pending = "PENDING"
    confirmed = "CONFIRMED"
    checked_in = "CHECKED_IN"
    in_progress = "IN_PROGRESS"
    completed = "COMPLETED"
    cancelled = "CANCELLED"


class BookingCreate(BaseModel):
    salon_id: int
    staff_id: int
    service_ids: List[int] = Field(min_length=1)
    date: Date
    time: str  # "HH:mm", salon-local
    customer_name: str = Field(min_length=1)
    customer_phone: str = Field(min_length=1)
    notes: Optional[str] = None


class AppointmentCreate(BaseModel):
    """Owner-entered appointment; without a staff member it waits in the calendar."""
    salon_id: int
    staff_id: Optional[int] = None
    service_ids: List[int] = Field(min_length=1)
    date: Date
    time: str  # "HH:mm", salon-local
    customer_name: str = Field(min_length=1)
    customer_phone: str = Field(min_length=1)
    notes: Optional[str] = None


class AppointmentMove(BaseModel):
    appointment_id: int
    staff_id: int
    date: Date
    time: str  # "HH:mm", salon-local


class AppointmentServiceItemPublic(BaseModel):
    service_id: int
    name: str
    price: float
    duration: int


class AppointmentPublic(BaseModel):
    id: int
    salon_id: int
    staff_id: Optional[int] = None
    service_id: int
    customer_name: str
    customer_phone: str
    starts_at: datetime
    ends_at: datetime
    status: AppointmentStatus
    notes: Optional[str] = None
    services: List[AppointmentServiceItemPublic] = []


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class TimeSlot(BaseModel):
    time: str
    available: bool
    reason: Optional[str] = None


class AvailableTimesResponse(BaseModel):
    times: List[Union[TimeSlot, str]]
    reason: str  # AVAILABLE, ALL_BOOKED or NO_SCHEDULE


class AvailableStaffResponse(BaseModel):
    staff: List[StaffPublic]


# Calendar

class WorkingHours(BaseModel):
    start: str
    end: str
    break_start: Optional[str] = None
    break_end: Optional[str] = None


class CalendarStaff(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None
    priority_order: int
    schedule_rule: str
    working_hours: Optional[WorkingHours] = None
    appointments: List[AppointmentPublic]


class CalendarDay(BaseModel):
    date: Date
    timezone: str
    staff: List[CalendarStaff]
    waiting_list: List[AppointmentPublic]
