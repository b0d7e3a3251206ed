from datetime import datetime, timedelta

import pytest
from sqlalchemy.orm.attributes import set_committed_value

from models import db
from models.question import BookingAnswer, InfrastructureQuestion
from models.slot import Slot, SlotKind, SlotStatus
from services import booking as booking_service
from services.errors import (
    AlreadyClaimed,
    InvalidStatus,
    MissingRequiredAnswers,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
    WithinCutoffWindow,
)
from services.notifications import NotificationEvent
from services.questions import FileAnswer, TextAnswer

from conftest import ADMIN, FACULTY, MANAGER, MANAGER_EMAIL, OTHER_MANAGER, STUDENT, STUDENT_EMAIL


def _active_count(infra_id, day):
    return Slot.query.filter(
        Slot.infrastructure_id == infra_id,
        Slot.booking_date == day,
        Slot.status.in_(SlotStatus.ACTIVE),
    ).count()


@pytest.fixture
def pending(make_slot, future_day):
    slot = make_slot(future_day, "10:00", "11:00")
    return booking_service.request_booking(slot.id, STUDENT_EMAIL, "XRD run")


# ---------- request ----------
def test_request_claims_the_timeslot(make_slot, future_day, dispatcher, infrastructure):
    slot = make_slot(future_day, "10:00", "11:00")

    booking = booking_service.request_booking(slot.id, STUDENT_EMAIL, "Protein imaging")

    assert booking.id == slot.id
    assert booking.kind == SlotKind.BOOKING
    assert booking.status == SlotStatus.PENDING
    assert booking.user_email == STUDENT_EMAIL
    assert booking.purpose == "Protein imaging"
    assert dispatcher.sent == [
        (NotificationEvent.BOOKING_REQUESTED, slot.id, sorted([MANAGER_EMAIL, STUDENT_EMAIL])),
    ]


def test_sequential_requests_only_first_wins(make_slot, future_day):
    slot = make_slot(future_day, "10:00", "11:00")
    outcomes = []
    for i in range(5):
        try:
            booking_service.request_booking(slot.id, f"user{i}@example.org", "")
            outcomes.append("ok")
        except (AlreadyClaimed, NotFoundError):
            outcomes.append("conflict")

    assert outcomes.count("ok") == 1
    assert outcomes.count("conflict") == 4
    rows = Slot.query.filter_by(status=SlotStatus.PENDING).all()
    assert [r.user_email for r in rows] == ["user0@example.org"]


def test_stale_read_loses_to_conditional_update(make_slot, future_day):
    slot = make_slot(future_day, "10:00", "11:00")
    booking_service.request_booking(slot.id, "first@example.org", "")

    # second requester still sees the row as an available timeslot
    stale = db.session.get(Slot, slot.id)
    set_committed_value(stale, "status", SlotStatus.AVAILABLE)
    set_committed_value(stale, "kind", SlotKind.TIMESLOT)

    with pytest.raises(AlreadyClaimed):
        booking_service.request_booking(slot.id, "second@example.org", "")

    fresh = db.session.get(Slot, slot.id)
    assert fresh.user_email == "first@example.org"
    assert fresh.status == SlotStatus.PENDING


def test_request_unknown_slot(app):
    with pytest.raises(NotFoundError):
        booking_service.request_booking(12345, STUDENT_EMAIL, "")


def test_request_started_slot_is_rejected(make_slot, future_day):
    slot = make_slot(future_day, "10:00", "11:00")
    now = datetime.combine(future_day, slot.start_time) + timedelta(minutes=5)
    with pytest.raises(ValidationError):
        booking_service.request_booking(slot.id, STUDENT_EMAIL, "", now=now)


def test_missing_required_answers_leaves_slot_untouched(make_slot, future_day, required_question, dispatcher):
    slot = make_slot(future_day, "10:00", "11:00")

    with pytest.raises(MissingRequiredAnswers) as exc:
        booking_service.request_booking(slot.id, STUDENT_EMAIL, "", [TextAnswer(required_question.id, "   ")])

    assert exc.value.missing_question_ids == [required_question.id]
    fresh = db.session.get(Slot, slot.id)
    assert fresh.status == SlotStatus.AVAILABLE
    assert fresh.kind == SlotKind.TIMESLOT
    assert BookingAnswer.query.count() == 0
    assert dispatcher.sent == []


def test_answers_are_persisted(make_slot, future_day, required_question, infrastructure):
    optional = InfrastructureQuestion(
        infrastructure_id=infrastructure.id,
        question_text="Safety sheet",
        question_type="document",
        is_required=False,
    )
    db.session.add(optional)
    db.session.commit()
    slot = make_slot(future_day, "10:00", "11:00")

    booking_service.request_booking(slot.id, STUDENT_EMAIL, "", [
        TextAnswer(required_question.id, "Cryo sample"),
        FileAnswer(optional.id, "uploads/42/sds.pdf", "sds.pdf"),
    ])

    rows = {a.question_id: a for a in BookingAnswer.query.filter_by(booking_id=slot.id).all()}
    assert rows[required_question.id].answer_text == "Cryo sample"
    assert rows[required_question.id].document_path is None
    assert rows[optional.id].answer_text == "sds.pdf"
    assert rows[optional.id].document_path == "uploads/42/sds.pdf"


def test_file_answer_satisfies_required_question(make_slot, future_day, required_question):
    slot = make_slot(future_day, "10:00", "11:00")
    booking = booking_service.request_booking(
        slot.id, STUDENT_EMAIL, "", [FileAnswer(required_question.id, "uploads/form.pdf")],
    )
    assert booking.status == SlotStatus.PENDING


def test_answer_to_foreign_question_is_rejected(make_slot, future_day):
    slot = make_slot(future_day, "10:00", "11:00")
    with pytest.raises(ValidationError):
        booking_service.request_booking(slot.id, STUDENT_EMAIL, "", [TextAnswer(999, "x")])


def test_dispatcher_failure_does_not_fail_request(make_slot, future_day, dispatcher):
    dispatcher.fail = True
    slot = make_slot(future_day, "10:00", "11:00")

    booking = booking_service.request_booking(slot.id, STUDENT_EMAIL, "")

    assert booking.status == SlotStatus.PENDING
    assert db.session.get(Slot, slot.id).status == SlotStatus.PENDING


# ---------- approve ----------
def test_approve_pending(pending, dispatcher):
    booking = booking_service.approve(pending.id, MANAGER)
    assert booking.status == SlotStatus.APPROVED
    assert dispatcher.sent[-1] == (NotificationEvent.BOOKING_APPROVED, pending.id, [STUDENT_EMAIL])


def test_approve_twice_is_invalid_status(pending):
    booking_service.approve(pending.id, MANAGER)
    with pytest.raises(InvalidStatus):
        booking_service.approve(pending.id, MANAGER)


def test_approve_available_timeslot_is_invalid_status(make_slot, future_day):
    slot = make_slot(future_day, "10:00", "11:00")
    with pytest.raises(InvalidStatus):
        booking_service.approve(slot.id, MANAGER)


def test_approve_unknown_booking(app, infrastructure):
    with pytest.raises(NotFoundError):
        booking_service.approve(4242, MANAGER)


def test_unassigned_manager_cannot_approve_admin_can(pending):
    with pytest.raises(PermissionDeniedError):
        booking_service.approve(pending.id, OTHER_MANAGER)
    assert db.session.get(Slot, pending.id).status == SlotStatus.PENDING

    assert booking_service.approve(pending.id, ADMIN).status == SlotStatus.APPROVED


# ---------- reject ----------
def test_reject_regenerates_exactly_one_slot(pending, infrastructure, future_day, dispatcher):
    before = _active_count(infrastructure.id, future_day)

    replacement = booking_service.reject(pending.id, MANAGER)

    original = db.session.get(Slot, pending.id)
    assert original.status == SlotStatus.REJECTED
    assert original.kind == SlotKind.BOOKING
    assert replacement.id != original.id
    assert replacement.kind == SlotKind.TIMESLOT
    assert replacement.status == SlotStatus.AVAILABLE
    assert replacement.booking_date == future_day
    assert replacement.start_time.strftime("%H:%M") == "10:00"
    assert replacement.end_time.strftime("%H:%M") == "11:00"
    assert replacement.user_email is None
    assert _active_count(infrastructure.id, future_day) == before
    assert Slot.query.count() == 2
    assert dispatcher.sent[-1] == (NotificationEvent.BOOKING_REJECTED, pending.id, [STUDENT_EMAIL])


def test_reject_approved_is_invalid_status(pending):
    booking_service.approve(pending.id, MANAGER)
    with pytest.raises(InvalidStatus):
        booking_service.reject(pending.id, MANAGER)
    assert Slot.query.count() == 1


def test_rejected_slot_can_be_requested_again(pending):
    replacement = booking_service.reject(pending.id, MANAGER)
    again = booking_service.request_booking(replacement.id, "someone@example.org", "")
    assert again.status == SlotStatus.PENDING


# ---------- cancel ----------
def _start(slot):
    return datetime.combine(slot.booking_date, slot.start_time)


def test_user_cancel_outside_cutoff(pending, dispatcher):
    now = _start(pending) - timedelta(hours=48)
    booking = booking_service.cancel(pending.id, STUDENT, now=now)
    assert booking.status == SlotStatus.CANCELED
    event, _, recipients = dispatcher.sent[-1]
    assert event == NotificationEvent.BOOKING_CANCELED
    assert recipients == sorted([STUDENT_EMAIL, MANAGER_EMAIL])


def test_user_cancel_within_cutoff_fails_manager_succeeds(pending):
    now = _start(pending) - timedelta(hours=23)

    with pytest.raises(WithinCutoffWindow):
        booking_service.cancel(pending.id, STUDENT, now=now)
    assert db.session.get(Slot, pending.id).status == SlotStatus.PENDING

    booking = booking_service.cancel(pending.id, MANAGER, now=now)
    assert booking.status == SlotStatus.CANCELED


def test_cutoff_boundary_is_exclusive(pending):
    now = _start(pending) - timedelta(hours=24)
    with pytest.raises(WithinCutoffWindow):
        booking_service.cancel(pending.id, STUDENT, now=now)


def test_cancel_approved_does_not_recreate_slot(pending):
    booking_service.approve(pending.id, MANAGER)
    booking_service.cancel(pending.id, MANAGER)

    assert Slot.query.count() == 1
    assert db.session.get(Slot, pending.id).status == SlotStatus.CANCELED


def test_user_cannot_cancel_someone_elses_booking(pending):
    now = _start(pending) - timedelta(hours=48)
    with pytest.raises(NotFoundError):
        booking_service.cancel(pending.id, FACULTY, now=now)


def test_cancel_terminal_booking_is_invalid_status(pending):
    now = _start(pending) - timedelta(hours=48)
    booking_service.cancel(pending.id, STUDENT, now=now)
    with pytest.raises(InvalidStatus):
        booking_service.cancel(pending.id, STUDENT, now=now)
    with pytest.raises(InvalidStatus):
        booking_service.cancel(pending.id, MANAGER)


def test_cancel_available_timeslot_is_invalid_status(make_slot, future_day):
    slot = make_slot(future_day, "10:00", "11:00")
    with pytest.raises(InvalidStatus):
        booking_service.cancel(slot.id, MANAGER)


def test_get_booking_visibility(pending):
    assert booking_service.get_booking_for(STUDENT, pending.id).id == pending.id
    assert booking_service.get_booking_for(MANAGER, pending.id).id == pending.id
    with pytest.raises(NotFoundError):
        booking_service.get_booking_for(FACULTY, pending.id)
    with pytest.raises(PermissionDeniedError):
        booking_service.get_booking_for(OTHER_MANAGER, pending.id)
