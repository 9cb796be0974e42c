from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from access_admin.extensions import db
from access_admin.helpers import api_response, error_response


def health():
    return {"status": "healthy"}, 200


def health_db():
    try:
        db.session.execute(text("SELECT 1"))
        return api_response(True, "Database connection successful", {"status": "connected"})
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error("Database health check failed: %s", e)
        return error_response("Database connection failed", 500)
