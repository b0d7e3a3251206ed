"""Booking transitions, each a conditional UPDATE on the current status."""
import logging
from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy import update

from models import db
from models.slot import Slot, SlotKind, SlotStatus, can_transition
from services.actor import Actor
from services.errors import (
    AlreadyClaimed,
    InvalidStatus,
    MissingRequiredAnswers,
    NotFoundError,
    ValidationError,
    WithinCutoffWindow,
)
from services.infrastructure import ensure_infrastructure_access, manager_emails
from services.notifications import NotificationEvent, notify_safely
from services.overlap import lock_infrastructure_day
from services.questions import missing_required
from utils.clock import local_now

logger = logging.getLogger(__name__)


def _conditional_update(slot_id: int, from_statuses, **values) -> bool:
    result = db.session.execute(
        update(Slot)
        .where(Slot.id == slot_id, Slot.status.in_(tuple(from_statuses)))
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def _load(booking_id: int) -> Slot:
    slot = db.session.get(Slot, booking_id)
    if not slot:
        raise NotFoundError("Booking not found", booking_id=booking_id)
    return slot


def _load_for_staff(booking_id: int, actor: Actor) -> Slot:
    slot = _load(booking_id)
    ensure_infrastructure_access(actor, slot.infrastructure_id)
    return slot


def _require_status(slot: Slot, target: str):
    if not can_transition(slot.status, target):
        raise InvalidStatus(
            f"Cannot move booking from {slot.status} to {target}",
            booking_id=slot.id,
            status=slot.status,
        )


def get_booking_for(actor: Actor, booking_id: int) -> Slot:
    """Owners see their own bookings, staff the bookings of infrastructures they manage."""
    slot = _load(booking_id)
    if actor.is_staff:
        ensure_infrastructure_access(actor, slot.infrastructure_id)
    elif slot.kind != SlotKind.BOOKING or slot.user_email != actor.email:
        raise NotFoundError("Booking not found", booking_id=booking_id)
    return slot


def request_booking(slot_id: int, user_email: str, purpose: str = "", answers=(), now: datetime = None) -> Slot:
    slot = db.session.get(Slot, slot_id)
    if not slot:
        raise NotFoundError("Timeslot not found", slot_id=slot_id)
    if slot.kind != SlotKind.TIMESLOT or slot.status != SlotStatus.AVAILABLE:
        raise AlreadyClaimed("Timeslot is not available", slot_id=slot_id)

    now = now or local_now()
    if slot.start_datetime <= now:
        raise ValidationError("Cannot book past or started timeslots", slot_id=slot_id)

    answers = list(answers or ())
    provider = current_app.extensions["question_provider"]
    known = provider.question_ids(slot.infrastructure_id)
    if known is not None:
        unknown = sorted(a.question_id for a in answers if a.question_id not in known)
        if unknown:
            raise ValidationError("Answers reference unknown questions", question_ids=unknown)

    missing = missing_required(provider.required_question_ids(slot.infrastructure_id), answers)
    if missing:
        raise MissingRequiredAnswers(missing)

    try:
        claimed = db.session.execute(
            update(Slot)
            .where(
                Slot.id == slot_id,
                Slot.kind == SlotKind.TIMESLOT,
                Slot.status == SlotStatus.AVAILABLE,
            )
            .values(
                kind=SlotKind.BOOKING,
                status=SlotStatus.PENDING,
                user_email=user_email,
                purpose=purpose or "",
            )
            .execution_options(synchronize_session=False)
        ).rowcount == 1
        if not claimed:
            raise AlreadyClaimed("Timeslot is not available", slot_id=slot_id)

        for answer in answers:
            db.session.add(answer.to_row(slot_id))
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Booking %s requested by %s", slot.id, user_email)
    notify_safely(
        NotificationEvent.BOOKING_REQUESTED,
        slot,
        manager_emails(slot.infrastructure_id) + [user_email],
    )
    return slot


def approve(booking_id: int, actor: Actor) -> Slot:
    slot = _load_for_staff(booking_id, actor)
    _require_status(slot, SlotStatus.APPROVED)

    try:
        if not _conditional_update(slot.id, (SlotStatus.PENDING,), status=SlotStatus.APPROVED):
            raise InvalidStatus("Booking is no longer pending", booking_id=booking_id)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Booking %s approved by %s", slot.id, actor.email)
    notify_safely(NotificationEvent.BOOKING_APPROVED, slot, [slot.user_email])
    return slot


def reject(booking_id: int, actor: Actor) -> Slot:
    """
    Reject a pending booking and put an identical available timeslot back
    into the pool. Returns the new timeslot.
    """
    slot = _load_for_staff(booking_id, actor)
    _require_status(slot, SlotStatus.REJECTED)

    try:
        lock_infrastructure_day(slot.infrastructure_id, slot.booking_date)
        if not _conditional_update(slot.id, (SlotStatus.PENDING,), status=SlotStatus.REJECTED):
            raise InvalidStatus("Booking is no longer pending", booking_id=booking_id)

        replacement = Slot(
            infrastructure_id=slot.infrastructure_id,
            booking_date=slot.booking_date,
            start_time=slot.start_time,
            end_time=slot.end_time,
            kind=SlotKind.TIMESLOT,
            status=SlotStatus.AVAILABLE,
        )
        db.session.add(replacement)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Booking %s rejected by %s, slot %s reopened", slot.id, actor.email, replacement.id)
    notify_safely(NotificationEvent.BOOKING_REJECTED, slot, [slot.user_email])
    return replacement


def cancel(booking_id: int, actor: Actor, now: datetime = None) -> Slot:
    """
    End users may cancel their own pending/approved bookings until the
    cutoff before start; staff may cancel at any time. Unlike ``reject``,
    no replacement timeslot is created.
    """
    if actor.is_staff:
        slot = _load_for_staff(booking_id, actor)
    else:
        slot = _load(booking_id)
        if slot.kind != SlotKind.BOOKING or slot.user_email != actor.email:
            raise NotFoundError("Booking not found", booking_id=booking_id)

    _require_status(slot, SlotStatus.CANCELED)

    if not actor.is_staff:
        cutoff_hours = current_app.config.get("CANCEL_CUTOFF_HOURS", 24)
        now = now or local_now()
        if not now < slot.start_datetime - timedelta(hours=cutoff_hours):
            raise WithinCutoffWindow(
                f"Bookings cannot be canceled within {cutoff_hours} hours of start",
                booking_id=booking_id,
            )

    try:
        if not _conditional_update(slot.id, (SlotStatus.PENDING, SlotStatus.APPROVED), status=SlotStatus.CANCELED):
            raise InvalidStatus("Booking can no longer be canceled", booking_id=booking_id)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Booking %s canceled by %s (%s)", slot.id, actor.email, actor.role.value)
    recipients = [slot.user_email]
    if not actor.is_staff:
        recipients += manager_emails(slot.infrastructure_id)
    notify_safely(NotificationEvent.BOOKING_CANCELED, slot, recipients)
    return slot
