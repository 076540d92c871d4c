# salon_app/deps.py

from fastapi import HTTPException
from sqlmodel import Session

from .models import Salon, Staff


def require_role(user: dict, role: str):
    if user["role"] != role:
        raise HTTPException(status_code=403, detail="Forbidden")


def get_owned_salon(session: Session, salon_id: int, user: dict) -> Salon:
    require_role(user, "owner")
    salon = session.get(Salon, salon_id)
    if salon is None:
        raise HTTPException(status_code=404, detail="Salon not found")
    if salon.owner_id != user["id"]:
        raise HTTPException(status_code=403, detail="Forbidden")
    return salon


def get_owned_staff(session: Session, staff_id: int, user: dict) -> Staff:
    require_role(user, "owner")
    staff = session.get(Staff, staff_id)
    if staff is None:
        raise HTTPException(status_code=404, detail="Staff not found")
    get_owned_salon(session, staff.salon_id, user)
    return staff
