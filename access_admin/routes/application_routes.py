# access_admin/routes/application_routes.py
from flask import Blueprint

from access_admin.controllers import applications_controller, memberships_controller

applications_bp = Blueprint("applications", __name__, url_prefix="/api/v1/applications")

applications_bp.route("", methods=["GET"])(applications_controller.list_applications)
applications_bp.route("", methods=["POST"])(applications_controller.create_application)
applications_bp.route("/<int:application_id>", methods=["GET"])(applications_controller.get_application)
applications_bp.route("/<int:application_id>", methods=["PUT"])(applications_controller.update_application)
applications_bp.route("/<int:application_id>", methods=["DELETE"])(applications_controller.delete_application)

# membership
applications_bp.route("/<int:application_id>/users", methods=["POST"])(memberships_controller.add_user)
applications_bp.route("/<int:application_id>/users/import", methods=["POST"])(memberships_controller.import_users)
applications_bp.route("/<int:application_id>/users/<int:user_id>", methods=["PUT"])(memberships_controller.update_user_role)
applications_bp.route("/<int:application_id>/users/<int:user_id>", methods=["DELETE"])(memberships_controller.remove_user)
