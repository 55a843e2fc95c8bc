# leasehold/services/users.py
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db import unit_of_work
from ..domain.audit import audit_write, snapshot
from ..errors import ConflictError
from ..models import User, UserRole
from ..schemas import UserCreate, UserUpdate
from .lookups import delete_row, must_get_user

log = logging.getLogger(__name__)


def describe_role(role: UserRole) -> str:
    match role:
        case UserRole.ADMIN:
            return "system administration"
        case UserRole.PROPERTY_OWNER:
            return "lists and manages properties"
        case UserRole.TENANT:
            return "rents properties"


def create_user(db: Session, data: UserCreate) -> User:
    if db.scalar(select(User.id).where(User.username == data.username)) is not None:
        raise ConflictError("Username already exists")
    if db.scalar(select(User.id).where(User.email == data.email)) is not None:
        raise ConflictError("Email already exists")

    try:
        with unit_of_work(db):
            row = User(**data.model_dump(), active=True)
            db.add(row)
            db.flush()
            audit_write(db, action="user.create", entity_type="User", entity_id=row.id, after=snapshot(row))
    except IntegrityError as exc:
        # lost a race with a concurrent insert of the same username or email
        raise ConflictError("Username or email already exists") from exc
    db.refresh(row)
    log.info("user created", extra={"user_id": row.id})
    return row


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.scalar(select(User).where(User.username == username))


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.scalar(select(User).where(User.email == email))


def list_users(db: Session) -> list[User]:
    return list(db.scalars(select(User).order_by(User.id)).all())


def list_by_role(db: Session, role: UserRole) -> list[User]:
    return list(db.scalars(select(User).where(User.role == role).order_by(User.id)).all())


def list_active(db: Session) -> list[User]:
    return list(db.scalars(select(User).where(User.active.is_(True)).order_by(User.id)).all())


def update_user(db: Session, user_id: int, data: UserUpdate) -> User:
    row = must_get_user(db, user_id)
    before = snapshot(row)
    with unit_of_work(db):
        row.first_name = data.first_name
        row.last_name = data.last_name
        row.phone_number = data.phone_number
        db.flush()
        audit_write(db, action="user.update", entity_type="User", entity_id=row.id, before=before, after=snapshot(row))
    db.refresh(row)
    return row


def _set_active(db: Session, user_id: int, active: bool) -> User:
    row = must_get_user(db, user_id)
    with unit_of_work(db):
        row.active = active
        db.flush()
        audit_write(
            db,
            action="user.activate" if active else "user.deactivate",
            entity_type="User",
            entity_id=row.id,
            after={"active": active},
        )
    db.refresh(row)
    return row


def deactivate_user(db: Session, user_id: int) -> User:
    return _set_active(db, user_id, False)


def activate_user(db: Session, user_id: int) -> User:
    return _set_active(db, user_id, True)


def delete_user(db: Session, user_id: int) -> None:
    row = must_get_user(db, user_id)
    with unit_of_work(db):
        before = snapshot(row)
        delete_row(db, row, label=f"User {user_id}")
        audit_write(db, action="user.delete", entity_type="User", entity_id=user_id, before=before)
    log.info("user deleted", extra={"user_id": user_id})
