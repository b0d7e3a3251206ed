"""Retires expired active slots to completed."""
import logging
from datetime import datetime

from apscheduler.schedulers.background import BackgroundScheduler
from flask import current_app
from sqlalchemy import and_, or_, update

from models import db
from models.slot import Slot, SlotStatus
from utils.clock import local_now

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "slot_expiry_sweep"


def _expired_filter(now: datetime):
    today = now.date()
    return and_(
        Slot.status.in_(SlotStatus.ACTIVE),
        or_(
            Slot.booking_date < today,
            and_(Slot.booking_date == today, Slot.end_time < now.time()),
        ),
    )


def sweep(now: datetime = None, batch_size: int = None) -> int:
    """Returns the number of rows moved to completed."""
    now = now or local_now()
    batch_size = batch_size or current_app.config.get("SWEEP_BATCH_SIZE", 500)

    updated = 0
    while True:
        ids = [
            row.id for row in
            db.session.query(Slot.id)
            .filter(_expired_filter(now))
            .order_by(Slot.id.asc())
            .limit(batch_size)
            .all()
        ]
        if not ids:
            break

        try:
            result = db.session.execute(
                update(Slot)
                .where(Slot.id.in_(ids), Slot.status.in_(SlotStatus.ACTIVE))
                .values(status=SlotStatus.COMPLETED)
                .execution_options(synchronize_session=False)
            )
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        updated += result.rowcount

    db.session.expire_all()
    if updated:
        logger.info("Sweeper completed %s expired slots", updated)
    return updated


def _run_scheduled_sweep(app):
    with app.app_context():
        try:
            sweep()
        except Exception:
            logger.exception("Scheduled slot sweep failed")
        finally:
            db.session.remove()


def start_scheduler(app) -> BackgroundScheduler:
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        _run_scheduled_sweep,
        "interval",
        args=[app],
        minutes=app.config.get("SWEEP_INTERVAL_MINUTES", 5),
        id=SWEEP_JOB_ID,
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    scheduler.start()
    app.extensions["sweeper_scheduler"] = scheduler
    logger.info("Expiry sweeper scheduled every %s minutes", app.config.get("SWEEP_INTERVAL_MINUTES", 5))
    return scheduler
