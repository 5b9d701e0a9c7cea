# barber_booking/routers/accounts_routes.py

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session

from barber_booking.db import get_session
from barber_booking.models import User
from barber_booking.config import settings
from barber_booking.schemas import Token, UserCreate, UserPublic, UserRole
from barber_booking.auth import (
    account_view,
    authenticate_user,
    find_user,
    get_current_user,
    hash_password,
    issue_token,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["accounts"],
)


@router.get("/me", response_model=UserPublic)
def me(current_user: dict = Depends(get_current_user)):
    return current_user


@router.post("/users", status_code=201, response_model=UserPublic)
def create_user(
    user: UserCreate,
    session: Session = Depends(get_session),
):
    if find_user(session, user.email) is not None:
        raise HTTPException(status_code=409, detail="Email already registered")
    if user.role == UserRole.admin and settings.env == "production":
        raise HTTPException(status_code=403, detail="Admin accounts cannot self-register")

    db_user = User(
        email=user.email,
        password_hash=hash_password(user.password),
        full_name=user.full_name,
        role=user.role.value,
    )
    session.add(db_user)
    session.commit()
    session.refresh(db_user)  # fills db_user.id
    logger.info("Registered %s as %s", db_user.email, db_user.role)

    return account_view(db_user)


@router.post("/auth/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: Session = Depends(get_session),
):
    # Swagger OAuth2 "password" flow uses "username" field
    user = authenticate_user(session, form_data.username, form_data.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return {"access_token": issue_token(user), "token_type": "bearer"}
