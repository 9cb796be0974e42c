from datetime import datetime, timezone

from access_admin.extensions import db
from access_admin.models.types import UTCDateTime


class Application(db.Model):
    __tablename__ = "applications"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False, default="", server_default="")
    created_at = db.Column(UTCDateTime(), default=lambda: datetime.now(timezone.utc))

    memberships = db.relationship(
        "ApplicationUser", back_populates="application", cascade="all,delete-orphan"
    )
    reminders = db.relationship(
        "Reminder", back_populates="application", cascade="all,delete-orphan"
    )
