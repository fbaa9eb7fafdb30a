from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.db import get_db
from backend.db_models import UserORM
from backend.deps import get_current_user
from backend.schemas import AuthResponse, LoginRequest, RegisterRequest, Token, UserRead
from backend.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _ensure_email_unique(db: Session, email: str) -> None:
    existing = db.query(UserORM).filter(UserORM.email == email).first()
    if existing:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists with this email")


def _issue_token(user: UserORM) -> Token:
    return Token(access_token=create_access_token(user.id, email=user.email))


@router.post("/register", response_model=AuthResponse)
def register(payload: RegisterRequest, db: Session = Depends(get_db)) -> AuthResponse:
    email = payload.email.lower()
    _ensure_email_unique(db, email)

    user = UserORM(
        email=email,
        hashed_password=hash_password(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        last_login=datetime.utcnow(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)

    return AuthResponse(
        message="User registered successfully",
        token=_issue_token(user),
        user=UserRead.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> AuthResponse:
    email = payload.email.lower()
    user = db.query(UserORM).filter(UserORM.email == email).first()
    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Inactive user")

    user.last_login = datetime.utcnow()
    db.commit()
    db.refresh(user)

    return AuthResponse(
        message="Login successful",
        token=_issue_token(user),
        user=UserRead.model_validate(user),
    )


@router.get("/me", response_model=UserRead)
def me(user: UserORM = Depends(get_current_user)) -> UserRead:
    return UserRead.model_validate(user)
