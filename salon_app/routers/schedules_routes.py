# salon_app/routers/schedules_routes.py

import logging
from datetime import date
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from salon_app.db import get_session
from salon_app.models import Salon, Staff, StaffSchedule
from salon_app.schemas import (
    ScheduleCreate,
    ScheduleUpdate,
    SchedulePublic,
    ScheduleResolution,
)
from salon_app.auth import get_current_user
from salon_app.deps import get_owned_salon, get_owned_staff
from salon_app.core import is_valid_hhmm, parse_hhmm
from salon_app.scheduling import find_recurring, find_specific, is_specific_match, resolve_schedule

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/schedules",
    tags=["schedules"],
)


def validate_hours(start_time, end_time, break_start=None, break_end=None):
    for value in (start_time, end_time):
        if not is_valid_hhmm(value):
            raise HTTPException(status_code=422, detail=f"Invalid time format: {value}")
    if parse_hhmm(start_time) >= parse_hhmm(end_time):
        raise HTTPException(status_code=422, detail="start_time must be before end_time")

    if break_start is None and break_end is None:
        return
    if break_start is None or break_end is None:
        raise HTTPException(status_code=422, detail="break_start and break_end must be set together")
    for value in (break_start, break_end):
        if not is_valid_hhmm(value):
            raise HTTPException(status_code=422, detail=f"Invalid time format: {value}")
    if parse_hhmm(break_start) >= parse_hhmm(break_end):
        raise HTTPException(status_code=422, detail="break_start must be before break_end")
    if parse_hhmm(break_start) < parse_hhmm(start_time) or parse_hhmm(break_end) > parse_hhmm(end_time):
        raise HTTPException(status_code=422, detail="Break must be within working hours")


def _find_duplicate(session: Session, staff_id: int, on_date, day_of_week) -> Optional[StaffSchedule]:
    stmt = select(StaffSchedule).where(StaffSchedule.staff_id == staff_id)
    if on_date is not None:
        stmt = stmt.where(StaffSchedule.date == on_date)
    else:
        stmt = stmt.where(StaffSchedule.date.is_(None)).where(StaffSchedule.day_of_week == day_of_week)
    return session.exec(stmt).first()


@router.get("", response_model=List[SchedulePublic])
def list_schedules(
    staff_id: Optional[int] = None,
    salon_id: Optional[int] = None,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    if staff_id is None and salon_id is None:
        raise HTTPException(status_code=422, detail="staff_id or salon_id is required")

    stmt = select(StaffSchedule)
    if staff_id is not None:
        get_owned_staff(session, staff_id, current_user)
        stmt = stmt.where(StaffSchedule.staff_id == staff_id)
    if salon_id is not None:
        get_owned_salon(session, salon_id, current_user)
        stmt = stmt.join(Staff, Staff.id == StaffSchedule.staff_id).where(Staff.salon_id == salon_id)

    stmt = stmt.order_by(StaffSchedule.day_of_week, StaffSchedule.date, StaffSchedule.start_time)
    return session.exec(stmt).all()


@router.post("", response_model=SchedulePublic, status_code=201)
def create_schedule(
    schedule: ScheduleCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    get_owned_staff(session, schedule.staff_id, current_user)

    # 1) Exactly one of: recurring weekday, specific date
    if (schedule.day_of_week is None) == (schedule.date is None):
        raise HTTPException(status_code=422, detail="Set exactly one of day_of_week or date")
    if schedule.day_of_week is not None and not (0 <= schedule.day_of_week <= 6):
        raise HTTPException(status_code=422, detail="day_of_week must be an integer between 0 and 6")

    # 2) Clock strings
    validate_hours(schedule.start_time, schedule.end_time, schedule.break_start, schedule.break_end)

    # 3) One entry per staff member per day
    if _find_duplicate(session, schedule.staff_id, schedule.date, schedule.day_of_week) is not None:
        raise HTTPException(status_code=409, detail="Schedule already exists for this day")

    db_schedule = StaffSchedule(**schedule.model_dump())
    session.add(db_schedule)
    session.commit()
    session.refresh(db_schedule)
    return db_schedule


@router.get("/resolve", response_model=ScheduleResolution)
def resolve_staff_schedule(
    staff_id: int,
    date: date,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    staff = get_owned_staff(session, staff_id, current_user)
    salon = session.get(Salon, staff.salon_id)

    schedules = session.exec(
        select(StaffSchedule).where(StaffSchedule.staff_id == staff_id).order_by(StaffSchedule.id)
    ).all()

    resolved = resolve_schedule(schedules, date, salon.timezone)
    tz = resolved.timezone

    return {
        "staff_id": staff.id,
        "salon_id": salon.id,
        "timezone": tz,
        "target_date": resolved.local_date,
        "day_of_week": resolved.day_of_week,
        "day_start": resolved.day_start,
        "schedules": [
            {**s.model_dump(), "is_specific_match": is_specific_match(s, resolved.local_date, tz)}
            for s in schedules
        ],
        "specific": find_specific(schedules, resolved.local_date, tz),
        "recurring": find_recurring(schedules, resolved.local_date, tz),
        "final": resolved.schedule,
        "rule": resolved.match.value,
    }


@router.put("/{schedule_id}", response_model=SchedulePublic)
def update_schedule(
    schedule_id: int,
    changes: ScheduleUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    db_schedule = session.get(StaffSchedule, schedule_id)
    if db_schedule is None:
        raise HTTPException(status_code=404, detail="Schedule not found")
    get_owned_staff(session, db_schedule.staff_id, current_user)

    updates = changes.model_dump(exclude_unset=True)
    merged = {
        "start_time": updates.get("start_time", db_schedule.start_time),
        "end_time": updates.get("end_time", db_schedule.end_time),
        "break_start": updates.get("break_start", db_schedule.break_start),
        "break_end": updates.get("break_end", db_schedule.break_end),
    }
    validate_hours(**merged)

    for key, value in merged.items():
        setattr(db_schedule, key, value)

    session.add(db_schedule)
    session.commit()
    session.refresh(db_schedule)
    return db_schedule


@router.delete("/{schedule_id}")
def delete_schedule(
    schedule_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    db_schedule = session.get(StaffSchedule, schedule_id)
    if db_schedule is None:
        raise HTTPException(status_code=404, detail="Schedule not found")
    get_owned_staff(session, db_schedule.staff_id, current_user)

    session.delete(db_schedule)
    session.commit()
    return {"message": "Schedule deleted"}
