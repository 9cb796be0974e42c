from datetime import datetime, timezone

from sqlalchemy import true

from access_admin.extensions import db
from access_admin.models.types import UTCDateTime


class Reminder(db.Model):
    __tablename__ = "reminders"

    id = db.Column(db.Integer, primary_key=True)
    # at most one active row per application is kept by ReminderService, not by a constraint
    application_id = db.Column(
        db.Integer, db.ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reminder_frequency = db.Column(db.String(20), nullable=False, default="monthly")
    next_reminder_date = db.Column(UTCDateTime(), nullable=False, index=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True, server_default=true())
    created_at = db.Column(UTCDateTime(), default=lambda: datetime.now(timezone.utc))
    last_sent = db.Column(UTCDateTime(), nullable=True)

    application = db.relationship("Application", back_populates="reminders")
    emails = db.relationship(
        "ReminderEmail",
        back_populates="reminder",
        cascade="all,delete-orphan",
        order_by="ReminderEmail.id",
    )

    @property
    def email_addresses(self):
        return [e.email for e in self.emails]


class ReminderEmail(db.Model):
    __tablename__ = "reminder_emails"

    id = db.Column(db.Integer, primary_key=True)
    reminder_id = db.Column(
        db.Integer, db.ForeignKey("reminders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    email = db.Column(db.String(255), nullable=False)

    reminder = db.relationship("Reminder", back_populates="emails")
