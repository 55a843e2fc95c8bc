# leasehold/routers/agreements.py
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..domain.clock import Clock
from ..errors import InvalidArgumentError, NotFoundError
from ..models import AgreementStatus
from ..schemas import AgreementCreate, AgreementOut, AgreementTerms, TransitionOut
from ..services import agreements as svc, queries
from .deps import get_clock

router = APIRouter(prefix="/agreements", tags=["agreements"])


def _transition_out(row) -> TransitionOut:
    return TransitionOut(agreement=AgreementOut.model_validate(row), property_status=row.property.status)


@router.post("", response_model=AgreementOut, status_code=201)
def create_agreement(payload: AgreementCreate, db: Session = Depends(get_db)):
    return svc.create_agreement(db, payload)


@router.get("", response_model=list[AgreementOut])
def list_agreements(status: AgreementStatus | None = Query(default=None), db: Session = Depends(get_db)):
    if status is not None:
        return svc.list_by_status(db, status)
    return svc.list_agreements(db)


@router.get("/active", response_model=list[AgreementOut])
def list_active(db: Session = Depends(get_db)):
    return queries.list_active_agreements(db)


@router.get("/expired", response_model=list[AgreementOut])
def list_expired(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    return queries.list_expired_agreements(db, clock=clock)


@router.get("/expiring", response_model=list[AgreementOut])
def list_expiring(
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    days: int | None = Query(default=None, ge=0),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    Either an explicit [start, end] window or `days` from today. With neither,
    the configured default window is used. Half a window is a 400.
    """
    if (start is None) != (end is None):
        raise InvalidArgumentError("both start and end are required for a date window")
    if start is not None:
        return queries.list_expiring_between(db, start, end)
    window = days if days is not None else settings.expiring_window_days
    return queries.list_expiring_within(db, window, clock=clock)


@router.get("/{agreement_id}", response_model=AgreementOut)
def get_agreement(agreement_id: int, db: Session = Depends(get_db)):
    row = svc.get_agreement(db, agreement_id)
    if row is None:
        raise NotFoundError.for_id("Rental agreement", agreement_id)
    return row


@router.put("/{agreement_id}", response_model=AgreementOut)
def update_agreement(agreement_id: int, payload: AgreementTerms, db: Session = Depends(get_db)):
    return svc.update_agreement(db, agreement_id, payload)


@router.delete("/{agreement_id}")
def delete_agreement(agreement_id: int, db: Session = Depends(get_db)):
    svc.delete_agreement(db, agreement_id)
    return {"ok": True}


@router.post("/{agreement_id}/activate", response_model=TransitionOut)
def activate(agreement_id: int, db: Session = Depends(get_db)):
    return _transition_out(svc.activate_agreement(db, agreement_id))


@router.post("/{agreement_id}/terminate", response_model=TransitionOut)
def terminate(agreement_id: int, db: Session = Depends(get_db)):
    return _transition_out(svc.terminate_agreement(db, agreement_id))


@router.post("/{agreement_id}/expire", response_model=TransitionOut)
def expire(agreement_id: int, db: Session = Depends(get_db)):
    return _transition_out(svc.expire_agreement(db, agreement_id))


@router.post("/{agreement_id}/renew", response_model=TransitionOut)
def renew(
    agreement_id: int,
    payload: AgreementTerms | None = Body(default=None),
    db: Session = Depends(get_db),
):
    """Returns the successor agreement. Without a body the next term repeats the current one."""
    return _transition_out(svc.renew_agreement(db, agreement_id, payload))
