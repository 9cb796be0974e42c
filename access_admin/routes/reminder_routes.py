# access_admin/routes/reminder_routes.py
from flask import Blueprint

from access_admin.controllers import reminders_controller

reminders_bp = Blueprint("reminders", __name__, url_prefix="/api/v1/reminders")

reminders_bp.route("", methods=["POST"])(reminders_controller.set_reminder)
reminders_bp.route("", methods=["GET"])(reminders_controller.get_reminder)
reminders_bp.route("", methods=["PUT"])(reminders_controller.send_reminder_now)
reminders_bp.route("", methods=["DELETE"])(reminders_controller.delete_reminder)
