"""
Access review reminders for applications.

An application has at most one active reminder. Setting a reminder again
updates that row in place and replaces its notification emails wholesale.
Due dates use calendar arithmetic: a monthly reminder set on Jan 31 is next
due on the last day of February (relativedelta clamps to month end).

Delivery is best-effort when confirming an upsert, and mandatory for an
explicit send. The due-reminder sweep advances each reminder it fires so a
repeated run does not resend for the same due date.
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, List, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from access_admin.errors import DispatchError, NotFoundError, PersistenceError, ValidationError
from access_admin.models import Application, Reminder, ReminderEmail
from access_admin.services.mailer import DeliveryResult
from access_admin.services.notifications import render_reminder_email

logger = logging.getLogger(__name__)

# reminderId the UI sends when testing delivery before anything is saved
AD_HOC_REMINDER_ID = "test"


class ReminderFrequency(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"


DEFAULT_FREQUENCY = ReminderFrequency.MONTHLY

_FREQUENCY_OFFSETS = {
    ReminderFrequency.WEEKLY: timedelta(days=7),
    ReminderFrequency.MONTHLY: relativedelta(months=1),
    ReminderFrequency.QUARTERLY: relativedelta(months=3),
}


def normalize_frequency(value) -> ReminderFrequency:
    if isinstance(value, ReminderFrequency):
        return value
    try:
        return ReminderFrequency((value or "").strip().lower())
    except (ValueError, AttributeError):
        return DEFAULT_FREQUENCY


def compute_next_reminder_date(frequency, now: datetime) -> datetime:
    return now + _FREQUENCY_OFFSETS[normalize_frequency(frequency)]


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _clean_emails(emails: Optional[Iterable[str]]) -> List[str]:
    if emails is None:
        return []
    if not isinstance(emails, (list, tuple)) or not all(isinstance(e, str) for e in emails):
        raise ValidationError("notificationEmails must be a list of strings")
    seen = []
    for raw in emails:
        email = raw.strip()
        if email and email not in seen:
            seen.append(email)
    return seen


def _coerce_id(value, label: str) -> int:
    if value is None or value == "":
        raise ValidationError(f"{label} is required")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be an integer")


@dataclass
class ReminderRecord:
    id: int
    application_id: int
    application_name: str
    reminder_frequency: str
    next_reminder_date: str
    notification_emails: List[str]
    is_active: bool
    created_at: Optional[str] = None
    last_sent: Optional[str] = None

    @classmethod
    def from_model(cls, reminder: Reminder, application_name: Optional[str] = None):
        return cls(
            id=reminder.id,
            application_id=reminder.application_id,
            application_name=application_name or reminder.application.name,
            reminder_frequency=reminder.reminder_frequency,
            next_reminder_date=_iso(reminder.next_reminder_date),
            notification_emails=reminder.email_addresses,
            is_active=bool(reminder.is_active),
            created_at=_iso(reminder.created_at),
            last_sent=_iso(reminder.last_sent),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "applicationId": self.application_id,
            "applicationName": self.application_name,
            "reminderFrequency": self.reminder_frequency,
            "nextReminderDate": self.next_reminder_date,
            "notificationEmails": list(self.notification_emails),
            "isActive": self.is_active,
            "createdAt": self.created_at,
            "lastSent": self.last_sent,
        }


@dataclass
class SendResult:
    reminder_id: object
    emails_sent: int
    sent_at: str
    delivery: DeliveryResult

    def to_dict(self):
        return {
            "reminderId": self.reminder_id,
            "emailsSent": self.emails_sent,
            "sentAt": self.sent_at,
            "emailResult": self.delivery.to_dict(),
        }


@dataclass
class SweepReport:
    checked: int = 0
    sent: List[int] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)

    def to_dict(self):
        return asdict(self)


class ReminderService:
    def __init__(self, session, dispatcher, clock):
        self.session = session
        self.dispatcher = dispatcher
        self.clock = clock

    # ------------------------------------------------------------------ queries

    def _active_reminder(self, application_id: int) -> Optional[Reminder]:
        stmt = (
            select(Reminder)
            .where(Reminder.application_id == application_id, Reminder.is_active.is_(True))
            .order_by(Reminder.id)
            .limit(1)
        )
        return self.session.scalars(stmt).first()

    def _reminder_for_update(self, application_id: int) -> Optional[Reminder]:
        """Active row first, otherwise the newest inactive one (it gets reactivated)."""
        stmt = (
            select(Reminder)
            .where(Reminder.application_id == application_id)
            .order_by(Reminder.is_active.desc(), Reminder.id.desc())
            .limit(1)
        )
        return self.session.scalars(stmt).first()

    def find_due(self, now: Optional[datetime] = None) -> List[Reminder]:
        now = now or self.clock.now()
        stmt = (
            select(Reminder)
            .where(Reminder.is_active.is_(True), Reminder.next_reminder_date <= now)
            .order_by(Reminder.next_reminder_date, Reminder.id)
        )
        return list(self.session.scalars(stmt))

    # --------------------------------------------------------------- operations

    def upsert_reminder(self, application_id, application_name, frequency=None,
                        notification_emails=None, send_immediate_email=False) -> ReminderRecord:
        if not application_id or not application_name:
            raise ValidationError("Application ID and name are required")
        app_id = _coerce_id(application_id, "Application ID")
        emails = _clean_emails(notification_emails)
        freq = normalize_frequency(frequency)

        if self.session.get(Application, app_id) is None:
            raise NotFoundError("Application not found")

        next_date = compute_next_reminder_date(freq, self.clock.now())

        try:
            reminder = self._reminder_for_update(app_id)
            if reminder is None:
                reminder = Reminder(
                    application_id=app_id,
                    reminder_frequency=freq.value,
                    next_reminder_date=next_date,
                    is_active=True,
                    created_at=self.clock.now(),
                )
                self.session.add(reminder)
            else:
                reminder.reminder_frequency = freq.value
                reminder.next_reminder_date = next_date
                reminder.is_active = True
                reminder.emails.clear()
            self.session.flush()

            for email in emails:
                reminder.emails.append(ReminderEmail(email=email))
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Failed to set reminder for application %s", app_id)
            raise PersistenceError("Failed to set reminder") from e

        record = ReminderRecord.from_model(reminder, application_name=application_name)
        logger.info(
            "Reminder %s set for application %s (%s, next %s, %d recipients)",
            record.id, app_id, freq.value, record.next_reminder_date, len(emails),
        )

        if send_immediate_email and emails:
            try:
                delivery = self._dispatch(emails, application_name, freq.value)
                logger.info("Reminder %s confirmation sent via %s", record.id, delivery.provider)
            except DispatchError as e:
                # the saved reminder stands even if the confirmation bounces
                logger.error("Reminder %s confirmation email failed: %s", record.id, e)

        return record

    def get_reminder(self, application_id) -> Optional[ReminderRecord]:
        app_id = _coerce_id(application_id, "Application ID")
        try:
            reminder = self._active_reminder(app_id)
            if reminder is None:
                return None
            return ReminderRecord.from_model(reminder)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Failed to fetch reminder for application %s", app_id)
            raise PersistenceError("Failed to fetch reminder") from e

    def send_now(self, reminder_id, application_name, notification_emails,
                 frequency=None) -> SendResult:
        if reminder_id in (None, "") or not application_name:
            raise ValidationError("Reminder ID and application name are required")
        recipients = _clean_emails(notification_emails)
        if not recipients:
            raise ValidationError("No notification emails provided")

        reminder = None
        if str(reminder_id) != AD_HOC_REMINDER_ID:
            reminder = self.session.get(Reminder, _coerce_id(reminder_id, "Reminder ID"))
            if reminder is None:
                raise NotFoundError("Reminder not found")

        if frequency:
            freq = normalize_frequency(frequency).value
        elif reminder is not None:
            freq = reminder.reminder_frequency
        else:
            freq = DEFAULT_FREQUENCY.value

        delivery = self._dispatch(recipients, application_name, freq)
        sent_at = self.clock.now()

        if reminder is not None:
            try:
                reminder.last_sent = sent_at
                self.session.commit()
            except SQLAlchemyError as e:
                self.session.rollback()
                logger.exception("Reminder %s sent but last_sent was not recorded", reminder.id)
                raise PersistenceError("Failed to record reminder send") from e

        logger.info(
            "Reminder %s sent to %d recipients via %s", reminder_id, len(recipients), delivery.provider
        )
        return SendResult(
            reminder_id=reminder.id if reminder is not None else AD_HOC_REMINDER_ID,
            emails_sent=len(recipients),
            sent_at=_iso(sent_at),
            delivery=delivery,
        )

    def deactivate_reminder(self, application_id) -> bool:
        app_id = _coerce_id(application_id, "Application ID")
        try:
            reminder = self._active_reminder(app_id)
            if reminder is None:
                return False
            reminder.is_active = False
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Failed to deactivate reminder for application %s", app_id)
            raise PersistenceError("Failed to deactivate reminder") from e
        logger.info("Reminder %s for application %s deactivated", reminder.id, app_id)
        return True

    def sweep_due(self, dry_run: bool = False) -> SweepReport:
        """Fire every active reminder whose due date has passed.

        Each reminder commits or rolls back on its own; a failure is logged,
        leaves that reminder due for the next run, and does not stop the
        rest of the batch.
        """
        now = self.clock.now()
        due_ids = [r.id for r in self.find_due(now)]
        report = SweepReport(checked=len(due_ids))

        for reminder_id in due_ids:
            try:
                reminder = self.session.get(Reminder, reminder_id)
                if dry_run:
                    logger.info(
                        "[dry-run] reminder %s for %s due %s -> %s",
                        reminder_id, reminder.application.name,
                        _iso(reminder.next_reminder_date), ", ".join(reminder.email_addresses) or "-",
                    )
                    continue
                if self._fire(reminder, now):
                    report.sent.append(reminder_id)
                else:
                    report.skipped.append(reminder_id)
            except Exception:
                self.session.rollback()
                logger.exception("Reminder %s: sweep failed, leaving it due", reminder_id)
                report.failed.append(reminder_id)

        logger.info(
            "Reminder sweep done: checked=%d sent=%d skipped=%d failed=%d",
            report.checked, len(report.sent), len(report.skipped), len(report.failed),
        )
        return report

    # ------------------------------------------------------------------ helpers

    def _fire(self, reminder: Reminder, now: datetime) -> bool:
        recipients = reminder.email_addresses
        sent = False
        if recipients:
            self._dispatch(recipients, reminder.application.name, reminder.reminder_frequency)
            reminder.last_sent = now
            sent = True
        else:
            logger.warning("Reminder %s has no notification emails, advancing without sending", reminder.id)
        reminder.next_reminder_date = compute_next_reminder_date(reminder.reminder_frequency, now)
        self.session.commit()
        return sent

    def _dispatch(self, recipients, application_name, frequency) -> DeliveryResult:
        content = render_reminder_email(application_name, frequency, self.clock.now().date())
        try:
            result = self.dispatcher.send(recipients, content.subject, content.html_body, content.text_body)
        except DispatchError:
            raise
        except Exception as e:
            raise DispatchError(f"Email delivery failed: {e}") from e
        if not result.delivered:
            raise DispatchError(f"Email delivery via {result.provider} was not accepted")
        return result
