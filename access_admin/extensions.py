# access_admin/extensions.py
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
cors = CORS()


def dispose_engine(app):
    """Drain the connection pool bound to ``app``."""
    with app.app_context():
        db.engine.dispose()
