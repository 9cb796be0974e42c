# access_admin/controllers/memberships_controller.py
import secrets

from flask import current_app
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from access_admin.errors import ConflictError, NotFoundError, PersistenceError, ValidationError
from access_admin.extensions import db
from access_admin.helpers import api_response, json_body, text_field
from access_admin.models import Application, ApplicationUser, User, UserRole
from access_admin.utils.session import admin_required


def _require_application(application_id):
    if db.session.get(Application, application_id) is None:
        raise NotFoundError("Application not found")


def _find_or_create_user(name, email):
    """Look a user up by email; unknown people get a readonly account with a random password."""
    user = User.query.filter_by(email=email).first()
    if user:
        return user

    username = name
    if User.query.filter_by(username=username).first():
        username = f"{name}-{secrets.token_hex(3)}"
    user = User(username=username, email=email, role=UserRole.READONLY.value)
    user.set_password(secrets.token_urlsafe(16))
    db.session.add(user)
    db.session.flush()
    return user


def _membership(application_id, user_id):
    return db.session.scalars(
        select(ApplicationUser).where(
            ApplicationUser.application_id == application_id,
            ApplicationUser.user_id == user_id,
        )
    ).first()


@admin_required
def add_user(application_id):
    _require_application(application_id)
    data = json_body()
    name = text_field(data, "name")
    email = text_field(data, "email").lower()
    if not name or not email:
        raise ValidationError("Name and email are required")

    try:
        user = _find_or_create_user(name, email)
        if _membership(application_id, user.id):
            db.session.rollback()
            raise ConflictError("User already has access to this application")
        membership = ApplicationUser(
            application_id=application_id, user_id=user.id, is_admin=bool(data.get("isAdmin"))
        )
        db.session.add(membership)
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        raise ConflictError("User already has access to this application") from e
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Failed to add %s to application %s", email, application_id)
        raise PersistenceError("Failed to add user to application") from e

    return api_response(True, "User added to application", membership.to_member_dict(), 201)


@admin_required
def import_users(application_id):
    _require_application(application_id)
    rows = json_body(expect=list)

    imported, skipped = [], []
    try:
        for row in rows:
            if not isinstance(row, dict):
                skipped.append({"row": row, "reason": "not an object"})
                continue
            try:
                name = text_field(row, "name")
                email = text_field(row, "email").lower()
            except ValidationError as e:
                skipped.append({"row": row, "reason": e.message})
                continue
            if not name or not email:
                current_app.logger.warning("Skipping import row without name/email: %r", row)
                skipped.append({"row": row, "reason": "missing name or email"})
                continue
            user = _find_or_create_user(name, email)
            if _membership(application_id, user.id):
                skipped.append({"row": row, "reason": "already a member"})
                continue
            membership = ApplicationUser(
                application_id=application_id, user_id=user.id, is_admin=bool(row.get("isAdmin"))
            )
            db.session.add(membership)
            db.session.flush()
            imported.append(membership.to_member_dict())
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("User import into application %s failed", application_id)
        raise PersistenceError("Failed to import users") from e

    current_app.logger.info(
        "Imported %d users into application %s (%d skipped)", len(imported), application_id, len(skipped)
    )
    return api_response(True, f"Imported {len(imported)} users", {"imported": imported, "skipped": skipped})


@admin_required
def update_user_role(application_id, user_id):
    data = json_body()
    if "isAdmin" not in data:
        raise ValidationError("isAdmin is required")
    membership = _membership(application_id, user_id)
    if membership is None:
        raise NotFoundError("User is not a member of this application")
    membership.is_admin = bool(data["isAdmin"])
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise PersistenceError("Failed to update user role") from e
    return api_response(True, "User role updated", membership.to_member_dict())


@admin_required
def remove_user(application_id, user_id):
    membership = _membership(application_id, user_id)
    if membership is None:
        raise NotFoundError("User is not a member of this application")
    try:
        db.session.delete(membership)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise PersistenceError("Failed to remove user from application") from e
    return api_response(True, "User removed from application", {"id": user_id})
