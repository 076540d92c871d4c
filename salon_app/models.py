# salon_app/models.py

from typing import Optional
from datetime import datetime, date as Date

from sqlalchemy import Index, UniqueConstraint, text
from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    role: str  # owner or customer


class Salon(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    slug: str = Field(index=True, unique=True)
    owner_id: int = Field(foreign_key="user.id", index=True)
    timezone: Optional[str] = None  # IANA name, None -> default salon timezone


class Service(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    salon_id: int = Field(foreign_key="salon.id", index=True)
    name: str
    duration: int  # minutes
    price: float = 0


class Staff(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    salon_id: int = Field(foreign_key="salon.id", index=True)
    name: str
    phone: Optional[str] = None
    priority_order: int = 999


class StaffService(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("staff_id", "service_id", name="uq_staff_service"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    staff_id: int = Field(foreign_key="staff.id", index=True)
    service_id: int = Field(foreign_key="service.id", index=True)
    duration: Optional[int] = None  # overrides Service.duration for this staff member


class StaffSchedule(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    staff_id: int = Field(foreign_key="staff.id", index=True)

    # exactly one of these is set: a specific date override or a recurring weekday
    date: Optional[Date] = Field(default=None, index=True)
    day_of_week: Optional[int] = None  # 0=Sun ... 6=Sat

    start_time: str  # "HH:mm", salon-local
    end_time: str
    break_start: Optional[str] = None
    break_end: Optional[str] = None


class Appointment(SQLModel, table=True):
    __table_args__ = (
        # one live appointment per staff start time; cancelled rows free the slot
        Index(
            "uq_staff_start",
            "staff_id",
            "starts_at",
            unique=True,
            sqlite_where=text("status != 'CANCELLED'"),
            postgresql_where=text("status != 'CANCELLED'"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    salon_id: int = Field(foreign_key="salon.id", index=True)
    staff_id: Optional[int] = Field(default=None, foreign_key="staff.id", index=True)
    service_id: int = Field(foreign_key="service.id")  # main (first) service

    customer_name: str
    customer_phone: str

    # naive UTC instants
    starts_at: datetime = Field(index=True)
    ends_at: datetime
    status: str = "PENDING"
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class AppointmentServiceItem(SQLModel, table=True):
    # one row per booked service, copied at booking time
    id: Optional[int] = Field(default=None, primary_key=True)
    appointment_id: int = Field(foreign_key="appointment.id", index=True)
    service_id: int = Field(foreign_key="service.id")
    name: str
    price: float
    duration: int  # minutes, after the staff override
