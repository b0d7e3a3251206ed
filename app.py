import logging

import click
from flask import Flask, jsonify
from flask_migrate import Migrate
from sqlalchemy.exc import DBAPIError
from werkzeug.exceptions import HTTPException

from config import Config
from models import db
from routes import admin_bp, booking_bp, health_bp, slots_bp
from services.errors import BookingEngineError, TransientError
from services.notifications import init_notifications
from services.questions import init_question_provider
from services.sweeper import start_scheduler, sweep
from utils.auth_context import load_current_actor

logger = logging.getLogger(__name__)


def create_app(config_object=Config, notification_dispatcher=None, question_provider=None):
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Configure logging
    log_level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    app.logger.setLevel(log_level)

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(slots_bp)
    app.register_blueprint(booking_bp)
    app.register_blueprint(admin_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # External collaborators
    init_notifications(app, notification_dispatcher)
    init_question_provider(app, question_provider)

    @app.before_request
    def _load_actor():
        load_current_actor()

    register_error_handlers(app)
    register_cli(app)

    if app.config.get("SWEEPER_ENABLED"):
        start_scheduler(app)

    return app


def register_error_handlers(app):
    @app.errorhandler(BookingEngineError)
    def handle_engine_error(e):
        if e.status_code >= 500:
            logger.error("Engine failure: %s", e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(DBAPIError)
    def handle_store_unavailable(e):
        db.session.rollback()
        logger.error("Slot store unavailable: %s", e, exc_info=True)
        err = TransientError("Storage temporarily unavailable, please retry")
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(Exception)
    def handle_exception(e):
        if isinstance(e, HTTPException):
            return jsonify(error=e.description, code=e.name.lower().replace(" ", "_")), e.code
        db.session.rollback()
        logger.error("Unhandled exception: %s", e, exc_info=True)
        return jsonify(error="Internal server error. Please try again.", code="internal_error"), 500

#-------------------------

def register_cli(app):
    @app.cli.command("sweep-slots")
    def sweep_slots():
        """Mark every past available/pending/approved slot as completed."""
        updated = sweep()
        click.echo(f"{updated} slot(s) marked completed")

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
