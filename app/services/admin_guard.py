"""Keeps at least one admin in the system across deletions and demotions."""

import logging
from typing import Literal

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import InvariantViolationError
from app.models.user import ROLE_ADMIN, User

logger = logging.getLogger(__name__)

LAST_ADMIN_MESSAGES = {
    "delete": "Cannot delete the last admin",
    "demote": "Cannot demote the last admin",
}


def count_admins(db: Session, lock: bool = False) -> int:
    """
    Count admin users. With lock=True the admin rows are selected FOR UPDATE,
    so a concurrent delete/demote waits and re-counts after this transaction.
    """
    stmt = select(User.id).where(User.role == ROLE_ADMIN)
    if lock:
        stmt = stmt.with_for_update()
    return len(db.scalars(stmt).all())


def ensure_admin_remains(db: Session, action: Literal["delete", "demote"]) -> None:
    """Raise InvariantViolationError if removing one admin would leave none."""
    if count_admins(db, lock=True) <= 1:
        logger.warning("Rejected %s of the last admin", action, extra={"action": action})
        raise InvariantViolationError(LAST_ADMIN_MESSAGES[action])
