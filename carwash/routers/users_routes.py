# carwash/routers/users_routes.py

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from carwash.db import get_session
from carwash.deps import require_role
from carwash.models import User
from carwash.schemas import UserCreate, UserPublic
from carwash.auth import get_current_user, hash_password

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
    current_user: dict = Depends(get_current_user),
):
    # Staff accounts are created by an admin
    require_role(current_user, "admin")

    existing = session.exec(
        select(User).where(User.email == user.email)
    ).first()
    if existing is not None:
        raise HTTPException(status_code=409, detail="Email already registered")

    db_user = User(
        email=user.email,
        password_hash=hash_password(user.password),
        role=user.role.value,
    )

    session.add(db_user)
    session.commit()
    session.refresh(db_user)  # fills db_user.id

    logger.info(f"User {db_user.email} ({db_user.role}) created by {current_user['email']}")
    return db_user
