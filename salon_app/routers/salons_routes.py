# salon_app/routers/salons_routes.py

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from salon_app.db import get_session
from salon_app.models import Salon, Service, Staff, StaffService
from salon_app.schemas import (
    SalonCreate,
    SalonUpdate,
    SalonPublic,
    ServiceCreate,
    ServicePublic,
    StaffCreate,
    StaffPublic,
    StaffServiceLink,
    StaffServicePublic,
)
from salon_app.auth import get_current_user
from salon_app.deps import require_role, get_owned_salon
from salon_app.timezone import is_known_timezone

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/salons",
    tags=["salons"],
)


def _check_timezone(tz):
    if tz is not None and not is_known_timezone(tz):
        raise HTTPException(status_code=422, detail=f"Unknown timezone: {tz}")


@router.post("", response_model=SalonPublic, status_code=201)
def create_salon(
    salon: SalonCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "owner")
    _check_timezone(salon.timezone)

    db_salon = Salon(
        name=salon.name,
        slug=salon.slug,
        owner_id=current_user["id"],
        timezone=salon.timezone,
    )
    session.add(db_salon)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Slug already taken")

    session.refresh(db_salon)
    logger.info(f"Salon {db_salon.slug} created by {current_user['email']}")
    return db_salon


@router.get("", response_model=List[SalonPublic])
def list_my_salons(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "owner")
    return session.exec(
        select(Salon).where(Salon.owner_id == current_user["id"]).order_by(Salon.id)
    ).all()


@router.get("/{salon_id}", response_model=SalonPublic)
def get_salon(
    salon_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return get_owned_salon(session, salon_id, current_user)


@router.patch("/{salon_id}", response_model=SalonPublic)
def update_salon(
    salon_id: int,
    changes: SalonUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    salon = get_owned_salon(session, salon_id, current_user)
    _check_timezone(changes.timezone)

    if changes.name is not None:
        salon.name = changes.name
    if changes.timezone is not None:
        salon.timezone = changes.timezone

    session.add(salon)
    session.commit()
    session.refresh(salon)
    return salon


# Services

@router.post("/{salon_id}/services", response_model=ServicePublic, status_code=201)
def create_service(
    salon_id: int,
    service: ServiceCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    get_owned_salon(session, salon_id, current_user)

    db_service = Service(salon_id=salon_id, **service.model_dump())
    session.add(db_service)
    session.commit()
    session.refresh(db_service)
    return db_service


@router.get("/{salon_id}/services", response_model=List[ServicePublic])
def list_services(
    salon_id: int,
    session: Session = Depends(get_session),
):
    # public: the booking wizard lists services before login
    if session.get(Salon, salon_id) is None:
        raise HTTPException(status_code=404, detail="Salon not found")
    return session.exec(
        select(Service).where(Service.salon_id == salon_id).order_by(Service.name)
    ).all()


# Staff

@router.post("/{salon_id}/staff", response_model=StaffPublic, status_code=201)
def create_staff(
    salon_id: int,
    staff: StaffCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    get_owned_salon(session, salon_id, current_user)

    db_staff = Staff(salon_id=salon_id, **staff.model_dump())
    session.add(db_staff)
    session.commit()
    session.refresh(db_staff)
    return db_staff


@router.get("/{salon_id}/staff", response_model=List[StaffPublic])
def list_staff(
    salon_id: int,
    session: Session = Depends(get_session),
):
    if session.get(Salon, salon_id) is None:
        raise HTTPException(status_code=404, detail="Salon not found")
    return session.exec(
        select(Staff).where(Staff.salon_id == salon_id).order_by(Staff.priority_order, Staff.id)
    ).all()


@router.put("/{salon_id}/staff/{staff_id}/services/{service_id}", response_model=StaffServicePublic)
def link_staff_service(
    salon_id: int,
    staff_id: int,
    service_id: int,
    link: StaffServiceLink,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    get_owned_salon(session, salon_id, current_user)

    staff = session.get(Staff, staff_id)
    service = session.get(Service, service_id)
    if staff is None or staff.salon_id != salon_id:
        raise HTTPException(status_code=404, detail="Staff not found")
    if service is None or service.salon_id != salon_id:
        raise HTTPException(status_code=404, detail="Service not found")

    # upsert: one row per (staff, service)
    db_link = session.exec(
        select(StaffService)
        .where(StaffService.staff_id == staff_id)
        .where(StaffService.service_id == service_id)
    ).first()
    if db_link is None:
        db_link = StaffService(staff_id=staff_id, service_id=service_id, duration=link.duration)
        session.add(db_link)
    else:
        db_link.duration = link.duration

    session.commit()
    session.refresh(db_link)
    return db_link
