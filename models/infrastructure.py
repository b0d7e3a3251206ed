from datetime import datetime
from models.db import db


class Infrastructure(db.Model):
    __tablename__ = "infrastructures"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    description = db.Column(db.Text, nullable=True)
    location = db.Column(db.String(100), nullable=True)

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    managers = db.relationship("InfrastructureManager", back_populates="infrastructure", cascade="all, delete-orphan")


class InfrastructureManager(db.Model):
    __tablename__ = "infrastructure_managers"

    id = db.Column(db.Integer, primary_key=True)
    infrastructure_id = db.Column(db.Integer, db.ForeignKey("infrastructures.id"), nullable=False, index=True)
    user_email = db.Column(db.String(255), nullable=False, index=True)

    infrastructure = db.relationship("Infrastructure", back_populates="managers")

    __table_args__ = (
        db.UniqueConstraint("infrastructure_id", "user_email", name="uq_infrastructure_manager"),
    )
