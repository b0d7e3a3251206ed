import json
import logging
from flask import g, has_request_context, request
from sqlalchemy.exc import SQLAlchemyError
from models import db
from models.audit_log import AuditLog

logger = logging.getLogger(__name__)

def log_event(action: str, entity=None, entity_id=None, metadata=None):
    """Runs after the audited change is committed, so a failed write is only logged."""
    actor = getattr(g, "actor", None) if has_request_context() else None
    ip = user_agent = None
    if has_request_context():
        ip = request.headers.get("X-Forwarded-For", request.remote_addr)
        user_agent = request.headers.get("User-Agent", "")

    row = AuditLog(
        actor_id=actor.id if actor else None,
        actor_email=actor.email if actor else None,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        ip=ip,
        user_agent=user_agent[:255] if user_agent else None,
        metadata_json=json.dumps(metadata, default=str) if metadata else None
    )
    try:
        db.session.add(row)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Audit event %s for %s %s not recorded", action, entity, entity_id)
