from functools import wraps

from flask import request

from smart_health.extensions import get_services
from smart_health.services.auth_service import AuthServiceError
from smart_health.utils.response import error


def _bearer_token() -> str | None:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    token = header.split(" ", 1)[1].strip()
    return token or None


def firebase_token_required(roles=None):
    """Verify the Firebase ID token in ``Authorization: Bearer <token>``.

    Sets ``request.current_uid`` and ``request.current_claims``. With
    ``roles`` the user document is loaded too (``request.current_user``)
    and its role must be one of them.
    """
    roles = roles or []

    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            token = _bearer_token()
            if not token:
                return error("Authorization token required", 401)

            services = get_services()
            try:
                decoded = services.auth.verify_id_token(token)
            except AuthServiceError as exc:
                return error(exc.message, exc.status_code)

            uid = decoded.get("uid")
            if not uid:
                return error("Invalid or expired token", 401)

            request.current_uid = uid
            request.current_claims = decoded
            request.current_user = None

            if roles:
                user = services.store.get_user(uid)
                if not user or user.role not in roles:
                    return error("Access denied. Required role: " + " or ".join(roles), 403)
                request.current_user = user

            return f(*args, **kwargs)
        return wrapper
    return decorator
