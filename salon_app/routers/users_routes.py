# salon_app/routers/users_routes.py

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from salon_app.db import get_session
from salon_app.models import User
from salon_app.schemas import UserCreate, UserPublic
from salon_app.auth import get_current_user, hash_password

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["users"],
)


@router.get("/me", response_model=UserPublic)
def me(current_user: dict = Depends(get_current_user)):
    return current_user


@router.post("/users", status_code=201, response_model=UserPublic)
def create_user(
    user: UserCreate,
    session: Session = Depends(get_session),
):
    # 1) Check if email already exists
    existing = session.exec(
        select(User).where(User.email == user.email)
    ).first()
    if existing is not None:
        raise HTTPException(status_code=409, detail="Email already registered")

    # 2) Create user in DB
    db_user = User(
        email=user.email,
        password_hash=hash_password(user.password),
        role=user.role.value,
    )

    session.add(db_user)
    session.commit()
    session.refresh(db_user)  # fills db_user.id
    logger.info(f"Registered {db_user.role} {db_user.email}")

    # 3) Return public user
    return {
        "id": db_user.id,
        "email": db_user.email,
        "role": db_user.role,
    }
