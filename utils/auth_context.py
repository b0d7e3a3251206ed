from functools import wraps
from flask import current_app, g, jsonify, request

from services.actor import Actor, Role


def normalize_email(value: str) -> str:
    return (value or "").strip().lower()


def load_current_actor():
    """
    Identity is verified upstream; the session service forwards it in
    trusted headers. Missing or unknown values leave the request anonymous.
    """
    cfg = current_app.config
    actor_id = (request.headers.get(cfg["ACTOR_ID_HEADER"]) or "").strip()
    email = normalize_email(request.headers.get(cfg["ACTOR_EMAIL_HEADER"]))
    role = Role.parse(request.headers.get(cfg["ACTOR_ROLE_HEADER"]))

    if not actor_id or not email or role is None:
        g.actor = None
        return
    g.actor = Actor(id=actor_id, email=email, role=role)

def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "actor", None) is None:
            return jsonify(error="Authentication required", code="authentication_required"), 401
        return fn(*args, **kwargs)
    return wrapper
