# salon_app/routers/calendar_routes.py

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from salon_app.db import get_session
from salon_app.models import Appointment, Service, Staff, StaffSchedule
from salon_app.schemas import AppointmentMove, AppointmentPublic, AppointmentStatus, CalendarDay
from salon_app.auth import get_current_user
from salon_app.booking import (
    check_hhmm,
    check_staff_slot,
    get_staff_or_404,
    save_appointment,
    service_items_for,
    staff_overrides,
    with_service_items,
)
from salon_app.deps import get_owned_salon
from salon_app.scheduling import resolve_schedule
from salon_app.timezone import get_salon_tz, salon_day_bounds_utc

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/calendar",
    tags=["calendar"],
)

# statuses shown in staff columns
ACTIVE_STATUSES = [
    AppointmentStatus.pending.value,
    AppointmentStatus.confirmed.value,
    AppointmentStatus.checked_in.value,
    AppointmentStatus.in_progress.value,
]


@router.get("/day", response_model=CalendarDay)
def calendar_day(
    salon_id: int,
    date: date,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    salon = get_owned_salon(session, salon_id, current_user)
    tz = get_salon_tz(salon.timezone)
    day_start, day_end = salon_day_bounds_utc(date, tz)

    staff_list = session.exec(
        select(Staff).where(Staff.salon_id == salon_id).order_by(Staff.priority_order, Staff.id)
    ).all()

    columns = []
    for staff in staff_list:
        schedules = session.exec(
            select(StaffSchedule).where(StaffSchedule.staff_id == staff.id).order_by(StaffSchedule.id)
        ).all()
        resolved = resolve_schedule(schedules, date, tz)

        appointments = session.exec(
            select(Appointment)
            .where(Appointment.staff_id == staff.id)
            .where(Appointment.starts_at >= day_start)
            .where(Appointment.starts_at < day_end)
            .where(Appointment.status.in_(ACTIVE_STATUSES))
            .order_by(Appointment.starts_at)
        ).all()

        columns.append({
            "id": staff.id,
            "name": staff.name,
            "phone": staff.phone,
            "priority_order": staff.priority_order,
            "schedule_rule": resolved.match.value,
            "working_hours": resolved.working_hours(),
            "appointments": with_service_items(session, appointments),
        })

    # pending appointments nobody has picked up yet
    waiting_list = session.exec(
        select(Appointment)
        .where(Appointment.salon_id == salon_id)
        .where(Appointment.staff_id.is_(None))
        .where(Appointment.status == AppointmentStatus.pending.value)
        .where(Appointment.starts_at >= day_start)
        .where(Appointment.starts_at < day_end)
        .order_by(Appointment.created_at)
    ).all()

    return {
        "date": date,
        "timezone": tz.key,
        "staff": columns,
        "waiting_list": with_service_items(session, waiting_list),
    }


@router.post("/move", response_model=AppointmentPublic)
def move_appointment(
    move: AppointmentMove,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    # 1) Find the appointment and check the salon is ours
    check_hhmm(move.time)
    target = session.get(Appointment, move.appointment_id)
    if target is None:
        raise HTTPException(status_code=404, detail="Appointment not found")
    salon = get_owned_salon(session, target.salon_id, current_user)
    get_staff_or_404(session, salon.id, move.staff_id)

    if target.status == AppointmentStatus.cancelled.value:
        raise HTTPException(status_code=409, detail="Appointment already cancelled")

    # 2) Recompute durations with the new staff member's overrides
    items = service_items_for(session, target.id)
    service_ids = [item.service_id for item in items] or [target.service_id]
    services = session.exec(select(Service).where(Service.id.in_(service_ids))).all()
    overrides = staff_overrides(session, move.staff_id, services)
    defaults = {s.id: s.duration for s in services}
    for item in items:
        override = overrides.get(item.service_id)
        item.duration = override if override is not None else defaults.get(item.service_id, item.duration)
    if items:
        duration = sum(item.duration for item in items)
    else:
        override = overrides.get(target.service_id)
        duration = override if override is not None else defaults[target.service_id]

    # 3) The new slot must fit the staff member's resolved day
    starts_at, ends_at = check_staff_slot(
        session, salon, move.staff_id, move.date, move.time, duration, exclude_id=target.id
    )

    # 4) Assign and auto-confirm
    target.staff_id = move.staff_id
    target.starts_at = starts_at
    target.ends_at = ends_at
    target.status = AppointmentStatus.confirmed.value
    save_appointment(session, target, items)
    logger.info(f"Appointment {target.id} moved to staff {target.staff_id} at {target.starts_at} UTC")
    return with_service_items(session, [target])[0]
