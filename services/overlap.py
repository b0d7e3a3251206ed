"""Half-open [start, end) overlap checks against active slots."""
from datetime import date, time

from sqlalchemy import text, update

from models import db
from models.infrastructure import Infrastructure
from models.slot import Slot, SlotStatus


def overlapping_query(infrastructure_id: int, booking_date: date, start: time, end: time, exclude_id: int = None):
    q = Slot.query.filter(
        Slot.infrastructure_id == infrastructure_id,
        Slot.booking_date == booking_date,
        Slot.status.in_(SlotStatus.ACTIVE),
        Slot.start_time < end,
        Slot.end_time > start,
    )
    if exclude_id is not None:
        q = q.filter(Slot.id != exclude_id)
    return q


def has_overlap(infrastructure_id: int, booking_date: date, start: time, end: time, exclude_id: int = None) -> bool:
    return overlapping_query(infrastructure_id, booking_date, start, end, exclude_id).first() is not None


def lock_infrastructure_day(infrastructure_id: int, booking_date: date):
    """
    Serialise writers of one (infrastructure, date) until the current
    transaction ends. Must run before the overlap check it protects.
    """
    bind = db.session.get_bind()
    if bind.dialect.name == "postgresql":
        db.session.execute(
            text("SELECT pg_advisory_xact_lock(:infra, :day)"),
            {"infra": infrastructure_id, "day": booking_date.toordinal()},
        )
        return
    # no-op write: opens the transaction holding the write lock (RESERVED on SQLite)
    db.session.execute(
        update(Infrastructure)
        .where(Infrastructure.id == infrastructure_id)
        .values(id=Infrastructure.id)
        .execution_options(synchronize_session=False)
    )
