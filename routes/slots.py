from flask import Blueprint, request, jsonify, g

from models.slot import Slot, SlotKind, SlotStatus
from routes._parsing import parse_date, parse_int, parse_time
from security.rbac import require_roles
from services.actor import Role
from services.errors import ValidationError
from services.generator import create_batch, create_slot
from services.infrastructure import ensure_infrastructure_access, get_active_infrastructure
from utils.audit import log_event
from utils.auth_context import login_required
from utils.clock import local_today

slots_bp = Blueprint("slots", __name__)


# ---------- STAFF: create one slot ----------
@slots_bp.post("/slots")
@require_roles(Role.MANAGER)
def create_single_slot():
    data = request.get_json(silent=True) or {}
    infrastructure_id = parse_int(data.get("infrastructure_id"), "infrastructure_id")
    booking_date = parse_date(data.get("booking_date"), "booking_date")
    start = parse_time(data.get("start_time"), "start_time")
    end = parse_time(data.get("end_time"), "end_time")

    get_active_infrastructure(infrastructure_id)
    ensure_infrastructure_access(g.actor, infrastructure_id)
    slot = create_slot(infrastructure_id, booking_date, start, end)

    log_event("SLOT_CREATE", entity="slot", entity_id=slot.id)
    return jsonify(slot.to_dict()), 201


# ---------- STAFF: batch slots ----------
@slots_bp.post("/slots/batch")
@require_roles(Role.MANAGER)
def create_slot_batch():
    data = request.get_json(silent=True) or {}
    infrastructure_id = parse_int(data.get("infrastructure_id"), "infrastructure_id")
    start_date = parse_date(data.get("start_date"), "start_date")
    end_date = parse_date(data.get("end_date"), "end_date")
    daily_start_time = parse_time(data.get("daily_start_time"), "daily_start_time")
    duration = parse_int(data.get("slot_duration_minutes"), "slot_duration_minutes")
    slots_per_day = parse_int(data.get("slots_per_day"), "slots_per_day")

    get_active_infrastructure(infrastructure_id)
    ensure_infrastructure_access(g.actor, infrastructure_id)
    result = create_batch(
        infrastructure_id,
        start_date,
        end_date,
        daily_start_time,
        duration,
        slots_per_day,
    )

    log_event(
        "SLOT_BATCH_CREATE",
        entity="infrastructure",
        entity_id=infrastructure_id,
        metadata={"created": result.created, "skipped": result.skipped},
    )
    return jsonify(result.to_dict()), 201


# ---------- USERS: view available slots ----------
@slots_bp.get("/infrastructures/<int:infrastructure_id>/slots")
@login_required
def list_available_slots(infrastructure_id: int):
    get_active_infrastructure(infrastructure_id)

    # optional filters: date, or start_date/end_date (YYYY-MM-DD)
    day = parse_date(request.args.get("date"), "date", required=False)
    start_date = parse_date(request.args.get("start_date"), "start_date", required=False)
    end_date = parse_date(request.args.get("end_date"), "end_date", required=False)

    q = Slot.query.filter(
        Slot.infrastructure_id == infrastructure_id,
        Slot.kind == SlotKind.TIMESLOT,
        Slot.status == SlotStatus.AVAILABLE,
        Slot.booking_date >= local_today(),
    )
    if day:
        q = q.filter(Slot.booking_date == day)
    if start_date:
        q = q.filter(Slot.booking_date >= start_date)
    if end_date:
        q = q.filter(Slot.booking_date <= end_date)

    slots = q.order_by(Slot.booking_date.asc(), Slot.start_time.asc()).all()
    return jsonify([s.to_dict() for s in slots]), 200


# ---------- STAFF: every row of an infrastructure ----------
@slots_bp.get("/infrastructures/<int:infrastructure_id>/entries")
@require_roles(Role.MANAGER)
def list_all_entries(infrastructure_id: int):
    get_active_infrastructure(infrastructure_id)
    ensure_infrastructure_access(g.actor, infrastructure_id)

    start_date = parse_date(request.args.get("start_date"), "start_date", required=False)
    end_date = parse_date(request.args.get("end_date"), "end_date", required=False)
    limit = parse_int(request.args.get("limit"), "limit", required=False)
    if limit is not None and limit < 1:
        raise ValidationError("limit must be positive")

    q = Slot.query.filter(Slot.infrastructure_id == infrastructure_id)
    if start_date:
        q = q.filter(Slot.booking_date >= start_date)
    if end_date:
        q = q.filter(Slot.booking_date <= end_date)

    q = q.order_by(Slot.booking_date.desc(), Slot.start_time.asc())
    if limit:
        q = q.limit(limit)
    return jsonify([s.to_dict() for s in q.all()]), 200
