# leasehold/routers/reports.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..domain import reports
from ..domain.clock import Clock
from .deps import get_clock

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/dashboard", response_model=dict)
def dashboard(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    return reports.dashboard(db, clock=clock)


@router.get("/properties", response_model=dict)
def property_report(db: Session = Depends(get_db)):
    return reports.property_report(db).as_dict()


@router.get("/agreements", response_model=dict)
def agreement_report(db: Session = Depends(get_db)):
    return reports.agreement_report(db).as_dict()


@router.get("/tenants", response_model=dict)
def tenant_report(db: Session = Depends(get_db)):
    return reports.tenant_report(db).as_dict()


@router.get("/users", response_model=dict)
def user_report(db: Session = Depends(get_db)):
    return reports.user_report(db).as_dict()
