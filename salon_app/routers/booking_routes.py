# salon_app/routers/booking_routes.py
#
# Public booking endpoints (no login): the booking wizard asks for free
# times for a staff member, free staff for a time, then books.

import logging
from datetime import date, datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session, select

from salon_app.db import get_session
from salon_app.models import Appointment, Staff
from salon_app.schemas import (
    AppointmentPublic,
    AppointmentStatus,
    AvailableStaffResponse,
    AvailableTimesResponse,
    BookingCreate,
)
from salon_app.availability import available_times, slot_conflict
from salon_app.booking import (
    build_service_items,
    check_hhmm,
    check_staff_slot,
    get_salon_or_404,
    get_staff_or_404,
    load_services,
    save_appointment,
    staff_day_appointments,
    staff_duration,
    staff_overrides,
    staff_schedules,
    with_service_items,
)
from salon_app.core import parse_hhmm
from salon_app.scheduling import resolve_schedule
from salon_app.timezone import salon_local_to_utc

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/booking",
    tags=["booking"],
)


@router.get("/available-times", response_model=AvailableTimesResponse)
def get_available_times(
    salon_id: int,
    staff_id: int,
    date: date,
    service_ids: List[int] = Query(...),
    include_details: bool = False,
    session: Session = Depends(get_session),
):
    # 1) Lookups
    salon = get_salon_or_404(session, salon_id)
    get_staff_or_404(session, salon_id, staff_id)
    services = load_services(session, salon_id, service_ids)
    duration = staff_duration(session, staff_id, services)

    # 2) Which hours apply on that salon-local day
    resolved = resolve_schedule(staff_schedules(session, staff_id), date, salon.timezone)
    if not resolved.is_available:
        return {"times": [], "reason": "NO_SCHEDULE"}

    # 3) Slots minus past, break and booked
    appts = staff_day_appointments(session, staff_id, resolved.local_date, resolved.timezone)
    times = available_times(resolved, duration, appts, include_details=include_details)

    if include_details:
        any_free = any(t["available"] for t in times)
    else:
        any_free = bool(times)
    return {"times": times, "reason": "AVAILABLE" if any_free else "ALL_BOOKED"}


@router.get("/available-staff", response_model=AvailableStaffResponse)
def get_available_staff(
    salon_id: int,
    date: date,
    time: str,
    service_ids: List[int] = Query(...),
    session: Session = Depends(get_session),
):
    check_hhmm(time)

    salon = get_salon_or_404(session, salon_id)
    services = load_services(session, salon_id, service_ids)

    all_staff = session.exec(
        select(Staff).where(Staff.salon_id == salon_id).order_by(Staff.priority_order, Staff.id)
    ).all()

    available = []
    for staff in all_staff:
        duration = staff_duration(session, staff.id, services)
        resolved = resolve_schedule(staff_schedules(session, staff.id), date, salon.timezone)
        if not resolved.is_available:
            continue
        appts = staff_day_appointments(session, staff.id, resolved.local_date, resolved.timezone)
        if slot_conflict(resolved, parse_hhmm(time), duration, appts) is None:
            available.append(staff)

    return {"staff": available}


@router.post("", response_model=AppointmentPublic, status_code=201)
def create_booking(
    booking: BookingCreate,
    session: Session = Depends(get_session),
):
    # 1) Validate request
    check_hhmm(booking.time)

    salon = get_salon_or_404(session, booking.salon_id)
    get_staff_or_404(session, booking.salon_id, booking.staff_id)
    services = load_services(session, booking.salon_id, booking.service_ids)
    overrides = staff_overrides(session, booking.staff_id, services)
    items = build_service_items(services, overrides)
    duration = sum(item.duration for item in items)

    # 2) Prevent booking in the past
    if salon_local_to_utc(booking.date, booking.time, salon.timezone) < datetime.utcnow():
        raise HTTPException(status_code=422, detail="Cannot book an appointment in the past")

    # 3) Working hours, break, double-booking
    starts_at, ends_at = check_staff_slot(
        session, salon, booking.staff_id, booking.date, booking.time, duration
    )

    # 4) Create and save appointment; first service is the main one
    db_appt = Appointment(
        salon_id=booking.salon_id,
        staff_id=booking.staff_id,
        service_id=services[0].id,
        customer_name=booking.customer_name,
        customer_phone=booking.customer_phone,
        starts_at=starts_at,
        ends_at=ends_at,
        status=AppointmentStatus.confirmed.value,
        notes=booking.notes,
    )
    save_appointment(session, db_appt, items)
    logger.info(f"Appointment {db_appt.id} booked for staff {db_appt.staff_id} at {db_appt.starts_at} UTC")
    return with_service_items(session, [db_appt])[0]
