# salon_app/routers/auth_routes.py

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session, select

from salon_app.db import get_session
from salon_app.models import User
from salon_app.schemas import Token
from salon_app.auth import verify_password, create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


@router.post("/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: Session = Depends(get_session),
):
    # Swagger OAuth2 "password" flow uses "username" field
    email = form_data.username

    user = session.exec(
        select(User).where(User.email == email)
    ).first()

    if user is None or not verify_password(form_data.password, user.password_hash):
        logger.info(f"Failed login for {email}")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token({"sub": user.email})
    return {"access_token": token, "token_type": "bearer"}
