from functools import wraps
from flask import abort
from flask_login import current_user

def recruiter_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401, description="Unauthorized")
        if getattr(current_user, "role", None) != "recruiter":
            abort(403, description="Forbidden")
        return view(*args, **kwargs)
    return wrapped
