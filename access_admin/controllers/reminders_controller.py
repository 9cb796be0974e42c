# access_admin/controllers/reminders_controller.py
from flask import request

from access_admin.helpers import api_response, json_body
from access_admin.services import get_reminder_service
from access_admin.utils.session import admin_required, session_required


@admin_required
def set_reminder():
    data = json_body()
    record = get_reminder_service().upsert_reminder(
        application_id=data.get("applicationId"),
        application_name=data.get("applicationName"),
        frequency=data.get("reminderFrequency"),
        notification_emails=data.get("notificationEmails") or [],
        send_immediate_email=bool(data.get("sendImmediateEmail")),
    )
    return api_response(
        True, f"Reminder set successfully for {record.application_name}", record.to_dict()
    )


@session_required
def get_reminder():
    record = get_reminder_service().get_reminder(request.args.get("applicationId"))
    return api_response(True, data=record.to_dict() if record else None)


@admin_required
def send_reminder_now():
    data = json_body()
    result = get_reminder_service().send_now(
        reminder_id=data.get("reminderId"),
        application_name=data.get("applicationName"),
        notification_emails=data.get("notificationEmails") or [],
        frequency=data.get("reminderFrequency"),
    )
    return api_response(
        True, f"Reminder email sent for {data.get('applicationName')}", result.to_dict()
    )


@admin_required
def delete_reminder():
    removed = get_reminder_service().deactivate_reminder(request.args.get("applicationId"))
    return api_response(True, "Reminder deactivated" if removed else "No active reminder", {"deactivated": removed})
