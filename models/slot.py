from datetime import datetime
from models.db import db


class SlotKind:
    TIMESLOT = "timeslot"   # unclaimed, offered to users
    BOOKING = "booking"     # claimed by user_email

    ALL = (TIMESLOT, BOOKING)


class SlotStatus:
    AVAILABLE = "available"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELED = "canceled"
    COMPLETED = "completed"

    ALL = (AVAILABLE, PENDING, APPROVED, REJECTED, CANCELED, COMPLETED)
    # rows in these states occupy their time window
    ACTIVE = (AVAILABLE, PENDING, APPROVED)
    TERMINAL = (REJECTED, CANCELED, COMPLETED)


# Directed edges of the slot lifecycle; nothing leaves a terminal state.
ALLOWED_TRANSITIONS = {
    SlotStatus.AVAILABLE: {SlotStatus.PENDING, SlotStatus.COMPLETED},
    SlotStatus.PENDING: {SlotStatus.APPROVED, SlotStatus.REJECTED, SlotStatus.CANCELED, SlotStatus.COMPLETED},
    SlotStatus.APPROVED: {SlotStatus.CANCELED, SlotStatus.COMPLETED},
    SlotStatus.REJECTED: set(),
    SlotStatus.CANCELED: set(),
    SlotStatus.COMPLETED: set(),
}


def can_transition(from_status: str, to_status: str) -> bool:
    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


class Slot(db.Model):
    __tablename__ = "slots"

    id = db.Column(db.Integer, primary_key=True)

    infrastructure_id = db.Column(db.Integer, db.ForeignKey("infrastructures.id"), nullable=False, index=True)
    booking_date = db.Column(db.Date, nullable=False)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)

    kind = db.Column(db.String(20), nullable=False, default=SlotKind.TIMESLOT)
    status = db.Column(db.String(20), nullable=False, default=SlotStatus.AVAILABLE, index=True)

    # only set once the row is claimed (kind=booking)
    user_email = db.Column(db.String(255), nullable=True, index=True)
    purpose = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    answers = db.relationship("BookingAnswer", back_populates="booking", order_by="BookingAnswer.question_id")

    __table_args__ = (
        db.Index("ix_slots_infrastructure_date", "infrastructure_id", "booking_date"),
    )

    @property
    def start_datetime(self) -> datetime:
        return datetime.combine(self.booking_date, self.start_time)

    @property
    def end_datetime(self) -> datetime:
        return datetime.combine(self.booking_date, self.end_time)

    @property
    def is_active(self) -> bool:
        return self.status in SlotStatus.ACTIVE

    def to_dict(self):
        return {
            "id": self.id,
            "infrastructure_id": self.infrastructure_id,
            "booking_date": self.booking_date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "kind": self.kind,
            "status": self.status,
            "user_email": self.user_email,
            "purpose": self.purpose,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Slot {self.id} infra={self.infrastructure_id} {self.booking_date} {self.start_time}-{self.end_time} {self.kind}/{self.status}>"
