# access_admin/services/__init__.py
from flask import current_app

from access_admin.extensions import db


def get_reminder_service():
    from .reminder_service import ReminderService

    return ReminderService(
        session=db.session,
        dispatcher=current_app.extensions["reminder_dispatcher"],
        clock=current_app.extensions["clock"],
    )
