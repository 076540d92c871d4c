# salon_app/routers/appointments_routes.py

import logging
from datetime import date, timedelta
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from salon_app.db import get_session
from salon_app.models import Appointment
from salon_app.schemas import AppointmentCreate, AppointmentPublic, AppointmentStatus, AppointmentStatusUpdate
from salon_app.auth import get_current_user
from salon_app.booking import (
    build_service_items,
    check_hhmm,
    check_staff_slot,
    get_staff_or_404,
    load_services,
    save_appointment,
    staff_overrides,
    with_service_items,
)
from salon_app.deps import get_owned_salon
from salon_app.timezone import salon_day_bounds_utc, salon_local_to_utc

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/appointments",
    tags=["appointments"],
)


def _get_owned_appointment(session: Session, appt_id: int, current_user: dict) -> Appointment:
    target = session.get(Appointment, appt_id)
    if target is None:
        raise HTTPException(status_code=404, detail="Appointment not found")
    get_owned_salon(session, target.salon_id, current_user)
    return target


@router.post("", response_model=AppointmentPublic, status_code=201)
def create_appointment(
    appt: AppointmentCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    # 1) Validate request and ownership
    check_hhmm(appt.time)
    salon = get_owned_salon(session, appt.salon_id, current_user)
    services = load_services(session, appt.salon_id, appt.service_ids)

    # 2) Durations follow the staff member's overrides when one is assigned
    if appt.staff_id is not None:
        get_staff_or_404(session, appt.salon_id, appt.staff_id)
    items = build_service_items(services, staff_overrides(session, appt.staff_id, services))
    duration = sum(item.duration for item in items)

    # 3) Assigned appointments must fit the staff member's day; unassigned ones wait
    if appt.staff_id is not None:
        starts_at, ends_at = check_staff_slot(session, salon, appt.staff_id, appt.date, appt.time, duration)
    else:
        starts_at = salon_local_to_utc(appt.date, appt.time, salon.timezone)
        ends_at = starts_at + timedelta(minutes=duration)

    db_appt = Appointment(
        salon_id=appt.salon_id,
        staff_id=appt.staff_id,
        service_id=services[0].id,
        customer_name=appt.customer_name,
        customer_phone=appt.customer_phone,
        starts_at=starts_at,
        ends_at=ends_at,
        status=AppointmentStatus.pending.value,
        notes=appt.notes,
    )
    save_appointment(session, db_appt, items)
    logger.info(f"Appointment {db_appt.id} entered by {current_user['email']} (staff {db_appt.staff_id})")
    return with_service_items(session, [db_appt])[0]


@router.get("", response_model=List[AppointmentPublic])
def list_appointments(
    salon_id: int,
    date: Optional[date] = None,
    status: Optional[AppointmentStatus] = None,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    salon = get_owned_salon(session, salon_id, current_user)

    stmt = select(Appointment).where(Appointment.salon_id == salon_id)

    if date is not None:
        # salon-local day, not the server's
        day_start, day_end = salon_day_bounds_utc(date, salon.timezone)
        stmt = stmt.where(Appointment.starts_at >= day_start).where(Appointment.starts_at < day_end)

    if status is not None:
        stmt = stmt.where(Appointment.status == status.value)

    stmt = stmt.order_by(Appointment.starts_at)
    return with_service_items(session, session.exec(stmt).all())


@router.patch("/{appt_id}/status", response_model=AppointmentPublic)
def update_appointment_status(
    appt_id: int,
    update: AppointmentStatusUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    target = _get_owned_appointment(session, appt_id, current_user)

    if target.status == AppointmentStatus.cancelled.value:
        raise HTTPException(status_code=409, detail="Appointment already cancelled")

    target.status = update.status.value
    session.add(target)
    session.commit()
    session.refresh(target)
    logger.info(f"Appointment {target.id} -> {target.status}")
    return with_service_items(session, [target])[0]


@router.patch("/{appt_id}/cancel", response_model=AppointmentPublic)
def cancel_appointment(
    appt_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    # 1) Find the appointment and check the salon is ours
    target = _get_owned_appointment(session, appt_id, current_user)

    # 2) Already cancelled?
    if target.status == AppointmentStatus.cancelled.value:
        raise HTTPException(status_code=409, detail="Appointment already cancelled")

    # 3) Cancel and persist
    target.status = AppointmentStatus.cancelled.value
    session.add(target)
    session.commit()
    session.refresh(target)

    return with_service_items(session, [target])[0]
