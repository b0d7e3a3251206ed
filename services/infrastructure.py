from models import db
from models.infrastructure import Infrastructure, InfrastructureManager
from services.actor import Actor
from services.errors import NotFoundError, PermissionDeniedError


def get_active_infrastructure(infrastructure_id: int) -> Infrastructure:
    infra = db.session.get(Infrastructure, infrastructure_id)
    if not infra or not infra.is_active:
        raise NotFoundError("Infrastructure not found", infrastructure_id=infrastructure_id)
    return infra


def manages_infrastructure(actor: Actor, infrastructure_id: int) -> bool:
    if actor.is_admin:
        return True
    if not actor.is_staff:
        return False
    return (
        InfrastructureManager.query
        .filter_by(infrastructure_id=infrastructure_id, user_email=actor.email)
        .first()
        is not None
    )


def ensure_infrastructure_access(actor: Actor, infrastructure_id: int):
    """Admins act on every infrastructure, managers only on their assigned ones."""
    if not manages_infrastructure(actor, infrastructure_id):
        raise PermissionDeniedError(
            "You do not manage this infrastructure",
            infrastructure_id=infrastructure_id,
        )


def manager_emails(infrastructure_id: int):
    rows = InfrastructureManager.query.filter_by(infrastructure_id=infrastructure_id).all()
    return [r.user_email for r in rows]
