# access_admin/routes/user_routes.py
from flask import Blueprint

from access_admin.controllers import users_controller

users_bp = Blueprint("users", __name__, url_prefix="/api/v1/users")

users_bp.route("", methods=["GET"])(users_controller.list_users)
users_bp.route("", methods=["POST"])(users_controller.create_user)
users_bp.route("/<int:user_id>", methods=["PUT"])(users_controller.update_user)
users_bp.route("/<int:user_id>", methods=["DELETE"])(users_controller.delete_user)
