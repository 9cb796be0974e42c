# access_admin/controllers/users_controller.py
from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from access_admin.errors import AuthorizationError, ConflictError, NotFoundError, PersistenceError, ValidationError
from access_admin.extensions import db
from access_admin.helpers import api_response, json_body, text_field
from access_admin.models import User, UserRole
from access_admin.utils.session import admin_required, require_session, session_required

MIN_PASSWORD_LENGTH = 6
ROLES = {r.value for r in UserRole}


def _validate_role(role):
    if not isinstance(role, str) or role not in ROLES:
        raise ValidationError(f"Role must be one of: {', '.join(sorted(ROLES))}")
    return role


def _commit(action):
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        raise ConflictError("Username or email already exists") from e
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Failed to %s", action)
        raise PersistenceError(f"Failed to {action}") from e


@admin_required
def list_users():
    users = User.query.order_by(User.username).all()
    return api_response(True, data=[u.to_dict() for u in users])


@admin_required
def create_user():
    data = json_body()
    username = text_field(data, "username")
    email = text_field(data, "email").lower()
    password = text_field(data, "password", strip=False)
    role = _validate_role(data.get("role") or UserRole.READONLY.value)

    if not username or not email or not password:
        raise ValidationError("Username, email, and password are required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError("Password too short")

    exists = User.query.filter(or_(User.username == username, User.email == email)).first()
    if exists:
        raise ConflictError("Username or email already exists")

    user = User(username=username, email=email, role=role)
    user.set_password(password)
    db.session.add(user)
    _commit("create user")

    current_app.logger.info("User %s (%s) created", user.id, role)
    return api_response(True, "User created", user.to_dict(), 201)


@session_required
def update_user(user_id):
    session = require_session()
    data = json_body()
    role = data.get("role")

    # readonly users may only edit themselves, and never their role
    if not session.is_admin and (session.id != user_id or role):
        raise AuthorizationError.forbidden()

    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")

    username = text_field(data, "username")
    email = text_field(data, "email").lower()
    password = text_field(data, "password", strip=False)
    if username:
        user.username = username
    if email:
        user.email = email
    if password:
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError("Password too short")
        user.set_password(password)
    if role:
        user.role = _validate_role(role)

    _commit("update user")
    return api_response(True, "User updated", user.to_dict())


@admin_required
def delete_user(user_id):
    session = require_session()
    if session.id == user_id:
        raise ValidationError("Cannot delete your own account")

    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    db.session.delete(user)
    _commit("delete user")

    current_app.logger.info("User %s deleted by %s", user_id, session.id)
    return api_response(True, "User deleted", {"id": user_id})
