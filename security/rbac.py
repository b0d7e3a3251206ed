from functools import wraps
from flask import g, jsonify

from services.actor import Role

def has_role(*roles: Role) -> bool:
    actor = getattr(g, "actor", None)
    if not actor:
        return False
    return actor.role in roles

def require_roles(*roles: Role):
    """
    Usage: @require_roles(Role.MANAGER, Role.ADMIN)
    Admins pass every check.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            actor = getattr(g, "actor", None)
            if actor is None:
                return jsonify(error="Authentication required", code="authentication_required"), 401

            if actor.role is not Role.ADMIN and actor.role not in roles:
                return jsonify(error="Forbidden", code="forbidden"), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator
