from functools import wraps
from flask_jwt_extended import get_jwt_identity
from attendance.extensions import db
from attendance.errors import Unauthorized
from attendance.models import User
from attendance.utils.access_control import Caller, authorize


def current_caller():
    """Resolve the JWT identity into a Caller; the user must still exist."""
    user_id = get_jwt_identity()
    if not user_id:
        raise Unauthorized("Missing or invalid JWT token")

    user = db.session.get(User, int(user_id))
    if not user:
        raise Unauthorized("User not found")

    return Caller.from_user(user)


def role_required(*allowed_roles):
    """
    Restrict access to users with specific roles and hand the resolved
    caller to the view as the `caller` keyword.
    Usage: @jwt_required() then @role_required("admin")
    No roles means any authenticated user.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            caller = authorize(current_caller(), *allowed_roles)
            return fn(*args, caller=caller, **kwargs)
        return wrapper
    return decorator
