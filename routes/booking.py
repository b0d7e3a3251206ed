from flask import Blueprint, request, jsonify, g

from models.slot import Slot, SlotKind, SlotStatus
from routes._parsing import parse_int
from security.rbac import require_roles
from services import booking as booking_service
from services.actor import Role
from services.errors import ValidationError
from services.questions import parse_answers
from utils.audit import log_event
from utils.auth_context import login_required

booking_bp = Blueprint("booking", __name__, url_prefix="/bookings")


# ---------- USERS: request a booking (DOUBLE-BOOKING SAFE) ----------
@booking_bp.post("")
@login_required
def request_booking():
    data = request.get_json(silent=True) or {}
    slot_id = parse_int(data.get("slot_id"), "slot_id")
    purpose = (data.get("purpose") or "").strip()
    answers = parse_answers(data.get("answers"))

    slot = booking_service.request_booking(slot_id, g.actor.email, purpose, answers)

    log_event("BOOKING_REQUEST", entity="booking", entity_id=slot.id, metadata={"answers": len(answers)})
    return jsonify(id=slot.id, status=slot.status, booking=slot.to_dict()), 201


# ---------- USERS: my bookings ----------
@booking_bp.get("/me")
@login_required
def my_bookings():
    status = request.args.get("status")
    if status and status not in SlotStatus.ALL:
        raise ValidationError(f"Unknown status {status!r}")

    q = Slot.query.filter_by(kind=SlotKind.BOOKING, user_email=g.actor.email)
    if status:
        q = q.filter_by(status=status)

    rows = q.order_by(Slot.booking_date.desc(), Slot.start_time.desc()).all()
    return jsonify([b.to_dict() for b in rows]), 200


@booking_bp.get("/<int:booking_id>")
@login_required
def get_booking(booking_id: int):
    slot = booking_service.get_booking_for(g.actor, booking_id)
    out = slot.to_dict()
    out["answers"] = [a.to_dict() for a in slot.answers]
    return jsonify(out), 200


# ---------- STAFF: approve / reject ----------
@booking_bp.post("/<int:booking_id>/approve")
@require_roles(Role.MANAGER)
def approve_booking(booking_id: int):
    slot = booking_service.approve(booking_id, g.actor)

    log_event("BOOKING_APPROVE", entity="booking", entity_id=slot.id)
    return jsonify(message="Booking approved", id=slot.id, status=slot.status), 200


@booking_bp.post("/<int:booking_id>/reject")
@require_roles(Role.MANAGER)
def reject_booking(booking_id: int):
    replacement = booking_service.reject(booking_id, g.actor)

    log_event("BOOKING_REJECT", entity="booking", entity_id=booking_id, metadata={"new_slot_id": replacement.id})
    return jsonify(message="Booking rejected", id=booking_id, new_slot_id=replacement.id), 200


# ---------- USERS + STAFF: cancel (cutoff applies to users only) ----------
@booking_bp.post("/<int:booking_id>/cancel")
@login_required
def cancel_booking(booking_id: int):
    slot = booking_service.cancel(booking_id, g.actor)

    log_event("BOOKING_CANCEL", entity="booking", entity_id=slot.id, metadata={"role": g.actor.role.value})
    return jsonify(message="Booking canceled", id=slot.id, status=slot.status), 200
