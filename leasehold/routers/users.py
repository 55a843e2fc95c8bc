# leasehold/routers/users.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import NotFoundError
from ..models import UserRole
from ..schemas import UserCreate, UserOut, UserUpdate
from ..services import users as svc

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserOut, status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    return svc.create_user(db, payload)


@router.get("", response_model=list[UserOut])
def list_users(
    role: UserRole | None = Query(default=None),
    active_only: bool = Query(default=False),
    db: Session = Depends(get_db),
):
    if role is not None:
        rows = svc.list_by_role(db, role)
        return [u for u in rows if u.active] if active_only else rows
    return svc.list_active(db) if active_only else svc.list_users(db)


@router.get("/by-username/{username}", response_model=UserOut)
def get_by_username(username: str, db: Session = Depends(get_db)):
    row = svc.get_user_by_username(db, username)
    if row is None:
        raise NotFoundError(f"User not found with username: {username}")
    return row


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: int, db: Session = Depends(get_db)):
    row = svc.get_user(db, user_id)
    if row is None:
        raise NotFoundError.for_id("User", user_id)
    return row


@router.put("/{user_id}", response_model=UserOut)
def update_user(user_id: int, payload: UserUpdate, db: Session = Depends(get_db)):
    return svc.update_user(db, user_id, payload)


@router.post("/{user_id}/deactivate", response_model=UserOut)
def deactivate_user(user_id: int, db: Session = Depends(get_db)):
    return svc.deactivate_user(db, user_id)


@router.post("/{user_id}/activate", response_model=UserOut)
def activate_user(user_id: int, db: Session = Depends(get_db)):
    return svc.activate_user(db, user_id)


@router.delete("/{user_id}")
def delete_user(user_id: int, db: Session = Depends(get_db)):
    svc.delete_user(db, user_id)
    return {"ok": True}
