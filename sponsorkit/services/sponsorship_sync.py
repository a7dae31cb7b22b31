"""
Keeps ``Child.is_sponsored`` equal to "has at least one active sponsorship".

Every write path that can change a child's active-sponsorship count calls
``sync_child_sponsorship_status`` inside its own transaction, before the
single commit. Reads trust the stored flag.
"""
from __future__ import annotations
import logging
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from sponsorkit.models import Child, Sponsorship, utcnow
from sponsorkit.utils.errors import NotFoundError

logger = logging.getLogger(__name__)


def count_active_sponsorships(session: Session, child_id: int) -> int:
    stmt = (
        select(func.count(Sponsorship.id))
        .where(Sponsorship.child_id == child_id, Sponsorship.is_active.is_(True))
    )
    return int(session.execute(stmt).scalar_one())


def sync_child_sponsorship_status(session: Session, child_id: int) -> bool:
    """
    Recompute and store the child's ``is_sponsored`` flag.

    Pending changes are flushed first so the count sees them. Also stamps
    ``last_profile_update``. Idempotent; errors propagate to the caller's
    transaction.
    """
    session.flush()
    child = session.get(Child, child_id)
    if child is None:
        raise NotFoundError("Child not found")
    sponsored = count_active_sponsorships(session, child_id) > 0
    if child.is_sponsored != sponsored:
        logger.info("child %s is_sponsored %s -> %s", child_id, child.is_sponsored, sponsored)
    child.is_sponsored = sponsored
    child.last_profile_update = utcnow()
    session.flush()
    return sponsored
