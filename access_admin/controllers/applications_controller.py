# access_admin/controllers/applications_controller.py
from flask import current_app
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from access_admin.errors import AuthorizationError, NotFoundError, PersistenceError, ValidationError
from access_admin.extensions import db
from access_admin.helpers import api_response, json_body, text_field
from access_admin.models import Application, ApplicationUser
from access_admin.services import get_reminder_service
from access_admin.utils.session import admin_required, require_session, session_required


def _serialize(application, reminder_service):
    members = [m.to_member_dict() for m in application.memberships]
    reminder = reminder_service.get_reminder(application.id)
    return {
        "id": application.id,
        "name": application.name,
        "description": application.description,
        "created_at": application.created_at.isoformat() if application.created_at else None,
        "user_count": len(members),
        "admin_count": sum(1 for m in members if m["isAdmin"]),
        "users": members,
        "reminder": reminder.to_dict() if reminder else None,
    }


def _load_application(application_id):
    application = db.session.get(Application, application_id)
    if application is None:
        raise NotFoundError("Application not found")
    return application


def _is_member(application_id, user_id):
    return db.session.scalars(
        select(ApplicationUser.id).where(
            ApplicationUser.application_id == application_id,
            ApplicationUser.user_id == user_id,
        )
    ).first() is not None


@session_required
def list_applications():
    session = require_session()
    stmt = select(Application).order_by(Application.name)
    if not session.is_admin:
        stmt = stmt.join(ApplicationUser).where(ApplicationUser.user_id == session.id)

    reminders = get_reminder_service()
    applications = [_serialize(a, reminders) for a in db.session.scalars(stmt)]
    return api_response(True, data=applications)


@admin_required
def create_application():
    session = require_session()
    data = json_body()
    name = text_field(data, "name")
    if not name:
        raise ValidationError("Application name is required")

    application = Application(name=name, description=text_field(data, "description"))
    # the creator administers what they create
    application.memberships.append(ApplicationUser(user_id=session.id, is_admin=True))
    try:
        db.session.add(application)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Failed to create application %r", name)
        raise PersistenceError("Failed to create application") from e

    current_app.logger.info("Application %s created by user %s", application.id, session.id)
    return api_response(True, "Application created", _serialize(application, get_reminder_service()), 201)


@session_required
def get_application(application_id):
    session = require_session()
    if not session.is_admin and not _is_member(application_id, session.id):
        raise AuthorizationError.forbidden()
    application = _load_application(application_id)
    return api_response(True, data=_serialize(application, get_reminder_service()))


@admin_required
def update_application(application_id):
    data = json_body()
    name = text_field(data, "name")
    if not name:
        raise ValidationError("Application name is required")

    application = _load_application(application_id)
    application.name = name
    application.description = text_field(data, "description")
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Failed to update application %s", application_id)
        raise PersistenceError("Failed to update application") from e
    return api_response(True, "Application updated", {"id": application.id})


@admin_required
def delete_application(application_id):
    application = _load_application(application_id)
    try:
        db.session.delete(application)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Failed to delete application %s", application_id)
        raise PersistenceError("Failed to delete application") from e
    current_app.logger.info("Application %s deleted", application_id)
    return api_response(True, "Application deleted", {"id": application_id})
