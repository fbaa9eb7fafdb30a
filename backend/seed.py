from __future__ import annotations

from sqlalchemy.orm import Session

from backend.db import SessionLocal
from backend.db_models import UserORM
from backend.security import hash_password

DEMO_USER_ID = "demo-user"
DEMO_EMAIL = "demo@example.com"


def ensure_demo_user(db: Session) -> UserORM:
    user = db.query(UserORM).filter(UserORM.id == DEMO_USER_ID).first()
    if not user:
        user = UserORM(
            id=DEMO_USER_ID,
            email=DEMO_EMAIL,
            hashed_password=hash_password("password"),
            first_name="Demo",
            last_name="User",
            is_active=True,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
    return user


def seed_demo_data() -> None:
    """Seed the demo account used when AUTH_BYPASS is enabled."""
    with SessionLocal() as db:
        ensure_demo_user(db)
