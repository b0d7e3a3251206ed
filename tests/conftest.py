from datetime import date, datetime, time, timedelta

import pytest

from app import create_app
from config import TestConfig
from models import db
from models.infrastructure import Infrastructure, InfrastructureManager
from models.question import InfrastructureQuestion
from models.slot import Slot, SlotKind, SlotStatus
from services.actor import Actor, Role

MANAGER_EMAIL = "manager@example.org"
OTHER_MANAGER_EMAIL = "other.manager@example.org"
ADMIN_EMAIL = "admin@example.org"
STUDENT_EMAIL = "student@example.org"
FACULTY_EMAIL = "faculty@example.org"

MANAGER = Actor(id="m-1", email=MANAGER_EMAIL, role=Role.MANAGER)
OTHER_MANAGER = Actor(id="m-2", email=OTHER_MANAGER_EMAIL, role=Role.MANAGER)
ADMIN = Actor(id="a-1", email=ADMIN_EMAIL, role=Role.ADMIN)
STUDENT = Actor(id="s-1", email=STUDENT_EMAIL, role=Role.STUDENT)
FACULTY = Actor(id="f-1", email=FACULTY_EMAIL, role=Role.FACULTY)


class RecordingDispatcher:
    def __init__(self):
        self.sent = []
        self.fail = False

    def notify(self, event, slot, recipients):
        if self.fail:
            raise RuntimeError("smtp down")
        self.sent.append((event, slot.id, sorted(recipients)))

    def events(self):
        return [e for e, _, _ in self.sent]


def headers_for(actor: Actor):
    return {
        "X-Actor-Id": actor.id,
        "X-Actor-Email": actor.email,
        "X-Actor-Role": actor.role.value,
    }


def t(value: str) -> time:
    return datetime.strptime(value, "%H:%M").time()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def app(dispatcher):
    app = create_app(TestConfig, notification_dispatcher=dispatcher)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def future_day():
    return date.today() + timedelta(days=30)


@pytest.fixture
def infrastructure(app):
    infra = Infrastructure(name="Cryo-EM Microscope", location="Building A")
    db.session.add(infra)
    db.session.flush()
    db.session.add(InfrastructureManager(infrastructure_id=infra.id, user_email=MANAGER_EMAIL))
    db.session.commit()
    return infra


@pytest.fixture
def make_slot(app, infrastructure):
    def _make(day, start="10:00", end="11:00", kind=SlotKind.TIMESLOT,
              status=SlotStatus.AVAILABLE, user_email=None, infrastructure_id=None):
        slot = Slot(
            infrastructure_id=infrastructure_id or infrastructure.id,
            booking_date=day,
            start_time=t(start),
            end_time=t(end),
            kind=kind,
            status=status,
            user_email=user_email,
        )
        db.session.add(slot)
        db.session.commit()
        return slot
    return _make


@pytest.fixture
def required_question(infrastructure):
    q = InfrastructureQuestion(
        infrastructure_id=infrastructure.id,
        question_text="Which sample type?",
        question_type="text",
        is_required=True,
    )
    db.session.add(q)
    db.session.commit()
    return q
