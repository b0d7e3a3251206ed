"""Single and batch slot generation."""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta

from flask import current_app

from models import db
from models.slot import Slot, SlotKind, SlotStatus
from services.errors import OverlapConflict, PastDateError, ValidationError
from services.infrastructure import get_active_infrastructure
from services.overlap import has_overlap, lock_infrastructure_day
from utils.clock import local_today

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    created: int = 0
    skipped: int = 0
    slot_ids: list = field(default_factory=list)

    def to_dict(self):
        return {"created": self.created, "skipped": self.skipped, "slot_ids": self.slot_ids}


def candidate_windows(daily_start_time: time, slot_duration_minutes: int, slots_per_day: int):
    """Back-to-back [start, end) windows; candidate k starts at daily_start + k * duration."""
    if slot_duration_minutes is None or slot_duration_minutes <= 0:
        raise ValidationError("Slot duration must be a positive number of minutes")
    if slots_per_day is None or slots_per_day < 1:
        raise ValidationError("Number of slots per day must be at least 1")

    base = datetime.combine(date.min, daily_start_time)
    step = timedelta(minutes=slot_duration_minutes)
    if (base + step * slots_per_day).date() != base.date():
        raise ValidationError("All slots of a day must end before midnight")

    windows = []
    for k in range(slots_per_day):
        start = base + step * k
        windows.append((start.time(), (start + step).time()))
    return windows


def _new_timeslot(infrastructure_id: int, booking_date: date, start: time, end: time) -> Slot:
    return Slot(
        infrastructure_id=infrastructure_id,
        booking_date=booking_date,
        start_time=start,
        end_time=end,
        kind=SlotKind.TIMESLOT,
        status=SlotStatus.AVAILABLE,
    )


def create_slot(infrastructure_id: int, booking_date: date, start: time, end: time, today: date = None) -> Slot:
    if end <= start:
        raise ValidationError("end_time must be after start_time")
    today = today or local_today()
    if booking_date < today:
        raise PastDateError("Slot date cannot be in the past", booking_date=booking_date.isoformat())

    get_active_infrastructure(infrastructure_id)

    try:
        lock_infrastructure_day(infrastructure_id, booking_date)
        if has_overlap(infrastructure_id, booking_date, start, end):
            raise OverlapConflict("Time range overlaps an existing slot")

        slot = _new_timeslot(infrastructure_id, booking_date, start, end)
        db.session.add(slot)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Created slot %s for infrastructure %s on %s %s-%s",
                slot.id, infrastructure_id, booking_date, start, end)
    return slot


def create_batch(
    infrastructure_id: int,
    start_date: date,
    end_date: date,
    daily_start_time: time,
    slot_duration_minutes: int,
    slots_per_day: int,
    today: date = None,
) -> BatchResult:
    """
    Expand the batch into daily candidate windows and insert each one that
    does not overlap. Overlapping candidates are skipped and counted; they
    never abort the rest of the batch. All input errors are raised before
    anything is written.
    """
    windows = candidate_windows(daily_start_time, slot_duration_minutes, slots_per_day)

    if end_date < start_date:
        raise ValidationError("End date must be on or after start date")
    today = today or local_today()
    if start_date < today:
        raise PastDateError("Start date cannot be in the past", start_date=start_date.isoformat())

    day_count = (end_date - start_date).days + 1
    max_days = current_app.config.get("MAX_BATCH_DAYS", 366)
    if day_count > max_days:
        raise ValidationError(f"Date range cannot exceed {max_days} days")

    get_active_infrastructure(infrastructure_id)

    result = BatchResult()
    try:
        for offset in range(day_count):
            day = start_date + timedelta(days=offset)
            lock_infrastructure_day(infrastructure_id, day)

            for start, end in windows:
                if has_overlap(infrastructure_id, day, start, end):
                    result.skipped += 1
                    continue
                slot = _new_timeslot(infrastructure_id, day, start, end)
                db.session.add(slot)
                db.session.flush()
                result.slot_ids.append(slot.id)
                result.created += 1

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Batch for infrastructure %s (%s..%s): created=%s skipped=%s",
                infrastructure_id, start_date, end_date, result.created, result.skipped)
    return result
