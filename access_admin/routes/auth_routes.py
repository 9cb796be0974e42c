# access_admin/routes/auth_routes.py
from flask import Blueprint

from access_admin.controllers import auth_controller

auth_bp = Blueprint("auth", __name__, url_prefix="/api/v1/auth")

auth_bp.route("/login", methods=["POST"])(auth_controller.login)
auth_bp.route("/logout", methods=["POST"])(auth_controller.logout)
auth_bp.route("/session", methods=["GET"])(auth_controller.session_info)
