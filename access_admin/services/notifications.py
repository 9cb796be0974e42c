"""
Access review reminder email content.

Pure rendering: no I/O, no clock lookups. Callers pass the date to print so
the output is fully determined by the arguments.
"""

from dataclasses import dataclass
from datetime import date

from markupsafe import escape

REVIEW_CHECKLIST = (
    "Current user list and permissions",
    "Remove any unnecessary access",
    "Update user roles as needed",
    "Verify admin permissions",
)


@dataclass(frozen=True)
class ReminderEmailContent:
    subject: str
    text_body: str
    html_body: str


def format_short_date(day: date) -> str:
    """US short date, e.g. 1/31/2024."""
    return f"{day.month}/{day.day}/{day.year}"


def render_reminder_email(application_name: str, frequency: str, today: date) -> ReminderEmailContent:
    subject = f"Access Review Reminder: {application_name}"
    date_label = format_short_date(today)

    checklist_text = "\n".join(f"- {item}" for item in REVIEW_CHECKLIST)
    text_body = (
        "Access Review Reminder\n"
        "\n"
        f"Application: {application_name}\n"
        f"Reminder Frequency: {frequency}\n"
        f"Date: {date_label}\n"
        "\n"
        f"This is a scheduled reminder to review user access for the {application_name} application.\n"
        "\n"
        "Please review:\n"
        f"{checklist_text}\n"
        "\n"
        "Best regards,\n"
        "Access Management System"
    )

    name_html = escape(application_name)
    freq_html = escape(frequency)
    checklist_html = "".join(f"<li>{escape(item)}</li>" for item in REVIEW_CHECKLIST)
    html_body = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #333; border-bottom: 2px solid #007bff; padding-bottom: 10px;">Access Review Reminder</h2>
        <div style="background-color: #f8f9fa; padding: 20px; border-radius: 8px; margin: 20px 0;">
            <h3 style="margin-top: 0; color: #007bff;">Application: {name_html}</h3>
            <p><strong>Reminder Frequency:</strong> {freq_html}</p>
            <p><strong>Date:</strong> {date_label}</p>
        </div>
        <p>This is a scheduled reminder to review user access for the <strong>{name_html}</strong> application.</p>
        <h4>Please review:</h4>
        <ul>{checklist_html}</ul>
        <div style="background-color: #e9ecef; padding: 15px; border-radius: 5px; margin-top: 20px;">
            <p style="margin: 0; font-size: 14px; color: #6c757d;">This is an automated reminder from the Access Management System.</p>
        </div>
    </div>
    """

    return ReminderEmailContent(subject=subject, text_body=text_body, html_body=html_body)
