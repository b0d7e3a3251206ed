from datetime import datetime
from models.db import db

class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    actor_id = db.Column(db.String(80), nullable=True)  # nullable for scheduler events
    actor_email = db.Column(db.String(255), nullable=True)
    action = db.Column(db.String(80), nullable=False)  # e.g. SLOT_CREATE, BOOKING_APPROVE
    entity = db.Column(db.String(80), nullable=True)   # e.g. slot, booking
    entity_id = db.Column(db.String(80), nullable=True)

    ip = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)
    metadata_json = db.Column(db.Text, nullable=True)

    timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
