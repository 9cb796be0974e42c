"""
Cookie session on top of flask-jwt-extended.

The token is an HS256 JWT stored in the ``session_token`` cookie. Its subject
is the user id; username, email and role ride along as extra claims for
clients that decode it. Route gates re-read the user row on each request.
"""

from dataclasses import asdict, dataclass
from functools import wraps
from typing import Optional

from flask_jwt_extended import (
    create_access_token,
    get_jwt_identity,
    set_access_cookies,
    unset_jwt_cookies,
    verify_jwt_in_request,
)

from access_admin.errors import AuthorizationError
from access_admin.extensions import db
from access_admin.models import User, UserRole


@dataclass(frozen=True)
class SessionUser:
    id: int
    username: str
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def to_dict(self):
        return asdict(self)


def create_session_token(user) -> str:
    return create_access_token(
        identity=str(user.id),
        additional_claims={"username": user.username, "email": user.email, "role": user.role},
    )


def attach_session_cookie(response, token):
    set_access_cookies(response, token)
    return response


def clear_session_cookie(response):
    unset_jwt_cookies(response)
    return response


def get_current_session() -> Optional[SessionUser]:
    """Current session, or None when there is no valid, unexpired token.

    The role is read from the users table rather than the token claims, so a
    demoted or deleted account loses its rights on the next request.
    """
    verify_jwt_in_request(optional=True)
    identity = get_jwt_identity()
    if identity is None:
        return None
    user = db.session.get(User, int(identity))
    if user is None:
        return None
    return SessionUser(id=user.id, username=user.username, email=user.email, role=user.role)


def require_session() -> SessionUser:
    session = get_current_session()
    if session is None:
        raise AuthorizationError.unauthenticated()
    return session


def session_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        require_session()
        return fn(*args, **kwargs)
    return wrapper


def admin_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not require_session().is_admin:
            raise AuthorizationError.forbidden()
        return fn(*args, **kwargs)
    return wrapper
