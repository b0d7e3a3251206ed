from flask import Blueprint, jsonify

from security.rbac import require_roles
from services.actor import Role
from services.sweeper import sweep
from utils.audit import log_event

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


# Force update of past slot statuses (same work as the scheduled sweeper)
@admin_bp.post("/sweep")
@require_roles(Role.MANAGER)
def force_sweep():
    updated = sweep()
    log_event("SLOT_SWEEP_FORCED", metadata={"updated_count": updated})
    return jsonify(updated_count=updated), 200
