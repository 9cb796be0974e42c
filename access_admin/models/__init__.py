# access_admin/models/__init__.py
from .user import User, UserRole
from .application import Application
from .application_user import ApplicationUser
from .reminder import Reminder, ReminderEmail
