# leasehold/domain/audit.py
from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from ..models import AuditEvent


def _dumps(v: Optional[dict[str, Any]]) -> Optional[str]:
    if v is None:
        return None
    return json.dumps(v, sort_keys=True, default=str)


def snapshot(row: Any) -> dict[str, Any]:
    """Column values of a mapped row, for before/after payloads."""
    return {c.key: getattr(row, c.key) for c in inspect(row).mapper.column_attrs}


def audit_write(
    db: Session,
    *,
    action: str,
    entity_type: str,
    entity_id: Any,
    before: Optional[dict[str, Any]] = None,
    after: Optional[dict[str, Any]] = None,
    actor_user_id: Optional[int] = None,
) -> AuditEvent:
    """
    Adds an audit row to the current transaction. Never commits: the row lands
    or disappears together with the change it describes.
    """
    row = AuditEvent(
        actor_user_id=actor_user_id,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        before_json=_dumps(before),
        after_json=_dumps(after),
        created_at=datetime.utcnow(),
    )
    db.add(row)
    return row
