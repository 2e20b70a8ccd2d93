from functools import wraps

from flask_login import current_user

from tedlist.errors import Forbidden, Unauthenticated


def admin_required(f):
    """Allow only authenticated administrators through."""
    @wraps(f)
    def decorated(*args, **kwargs):
        if not current_user.is_authenticated:
            raise Unauthenticated()
        if not current_user.is_admin:
            raise Forbidden("Administrator access required")
        return f(*args, **kwargs)
    return decorated
