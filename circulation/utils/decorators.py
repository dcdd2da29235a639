from functools import wraps

from flask import jsonify
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request

STAFF = "staff"
MEMBER = "member"


def role_required(*roles):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            claims = get_jwt()
            role = claims.get("role")
            if role not in roles:
                return jsonify({"success": False, "message": "Forbidden"}), 403
            return fn(*args, **kwargs)
        return wrapper
    return decorator


def current_role():
    return (get_jwt() or {}).get("role")


def acting_member_id():
    """Member id behind a member token, None for staff tokens."""
    if current_role() != MEMBER:
        return None
    return int(get_jwt_identity())
