# salon_app/booking.py
#
# Lookups and slot checks shared by the public booking wizard, owner-entered
# appointments and calendar moves.

import logging
from datetime import date, timedelta
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .availability import slot_conflict, total_duration
from .core import is_valid_hhmm, parse_hhmm
from .models import Appointment, AppointmentServiceItem, Salon, Service, Staff, StaffSchedule, StaffService
from .scheduling import resolve_schedule
from .schemas import AppointmentStatus
from .timezone import salon_day_bounds_utc, salon_local_to_utc

logger = logging.getLogger(__name__)

CONFLICT_ERRORS = {
    "no_schedule": (422, "Staff is not scheduled to work that day"),
    "outside_hours": (422, "Appointment must be within working hours"),
    "break": (422, "Appointment overlaps a break"),
    "booked": (409, "Appointment overlaps an existing appointment"),
}


def check_hhmm(value: str):
    if not is_valid_hhmm(value):
        raise HTTPException(status_code=422, detail=f"Invalid time format: {value}")


def get_salon_or_404(session: Session, salon_id: int) -> Salon:
    salon = session.get(Salon, salon_id)
    if salon is None:
        raise HTTPException(status_code=404, detail="Salon not found")
    return salon


def get_staff_or_404(session: Session, salon_id: int, staff_id: int) -> Staff:
    staff = session.get(Staff, staff_id)
    if staff is None or staff.salon_id != salon_id:
        raise HTTPException(status_code=404, detail="Staff not found")
    return staff


def load_services(session: Session, salon_id: int, service_ids: List[int]) -> List[Service]:
    if not service_ids:
        raise HTTPException(status_code=422, detail="No services selected")
    unique_ids = list(dict.fromkeys(service_ids))
    services = session.exec(
        select(Service).where(Service.id.in_(unique_ids)).where(Service.salon_id == salon_id)
    ).all()
    if len(services) != len(unique_ids):
        raise HTTPException(status_code=404, detail="Some services not found")
    # keep the order the customer picked them in
    by_id = {s.id: s for s in services}
    return [by_id[i] for i in unique_ids]


def staff_overrides(session: Session, staff_id: Optional[int], services: List[Service]) -> dict:
    """Per-service duration overrides for one staff member, keyed by service id."""
    if staff_id is None:
        return {}
    links = session.exec(
        select(StaffService)
        .where(StaffService.staff_id == staff_id)
        .where(StaffService.service_id.in_([s.id for s in services]))
    ).all()
    return {link.service_id: link.duration for link in links}


def staff_duration(session: Session, staff_id: Optional[int], services: List[Service]) -> int:
    return total_duration(services, staff_overrides(session, staff_id, services))


def staff_schedules(session: Session, staff_id: int) -> List[StaffSchedule]:
    return session.exec(
        select(StaffSchedule).where(StaffSchedule.staff_id == staff_id).order_by(StaffSchedule.id)
    ).all()


def staff_day_appointments(
    session: Session,
    staff_id: int,
    day: date,
    tz,
    exclude_id: Optional[int] = None,
) -> List[Appointment]:
    day_start, day_end = salon_day_bounds_utc(day, tz)
    stmt = (
        select(Appointment)
        .where(Appointment.staff_id == staff_id)
        .where(Appointment.starts_at >= day_start)
        .where(Appointment.starts_at < day_end)
        .where(Appointment.status != AppointmentStatus.cancelled.value)
    )
    if exclude_id is not None:
        stmt = stmt.where(Appointment.id != exclude_id)
    return session.exec(stmt.order_by(Appointment.starts_at)).all()


def check_staff_slot(
    session: Session,
    salon: Salon,
    staff_id: int,
    day: date,
    hhmm: str,
    duration: int,
    exclude_id: Optional[int] = None,
):
    """Resolve the staff member's hours for ``day`` and reject a clashing slot.

    Returns the naive-UTC ``(starts_at, ends_at)`` of the slot.
    """
    resolved = resolve_schedule(staff_schedules(session, staff_id), day, salon.timezone)
    starts_at = salon_local_to_utc(day, hhmm, resolved.timezone)

    appts = staff_day_appointments(session, staff_id, resolved.local_date, resolved.timezone, exclude_id)
    conflict = slot_conflict(resolved, parse_hhmm(hhmm), duration, appts)
    if conflict is not None:
        status_code, detail = CONFLICT_ERRORS[conflict]
        logger.info(f"Slot rejected for staff {staff_id} at {day} {hhmm}: {conflict}")
        raise HTTPException(status_code=status_code, detail=detail)

    return starts_at, starts_at + timedelta(minutes=duration)


def build_service_items(services: List[Service], overrides: dict) -> List[AppointmentServiceItem]:
    items = []
    for service in services:
        duration = overrides.get(service.id)
        items.append(AppointmentServiceItem(
            service_id=service.id,
            name=service.name,
            price=service.price,
            duration=duration if duration is not None else service.duration,
        ))
    return items


def save_appointment(session: Session, appointment: Appointment, items=()) -> Appointment:
    """Commit an appointment with its service rows; a taken start time is a 409."""
    session.add(appointment)
    try:
        session.flush()
        for item in items:
            item.appointment_id = appointment.id
            session.add(item)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Appointment already exists for that start time")

    session.refresh(appointment)
    return appointment


def service_items_for(session: Session, appointment_id: int) -> List[AppointmentServiceItem]:
    return session.exec(
        select(AppointmentServiceItem)
        .where(AppointmentServiceItem.appointment_id == appointment_id)
        .order_by(AppointmentServiceItem.id)
    ).all()


def with_service_items(session: Session, appointments) -> List[dict]:
    """Appointment payloads including the booked service rows."""
    ids = [a.id for a in appointments]
    by_appt = {}
    if ids:
        items = session.exec(
            select(AppointmentServiceItem)
            .where(AppointmentServiceItem.appointment_id.in_(ids))
            .order_by(AppointmentServiceItem.id)
        ).all()
        for item in items:
            by_appt.setdefault(item.appointment_id, []).append(item.model_dump())

    return [{**a.model_dump(), "services": by_appt.get(a.id, [])} for a in appointments]
