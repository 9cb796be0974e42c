from flask import current_app, jsonify
from sqlalchemy import or_

from access_admin.helpers import json_body, text_field
from access_admin.models import User
from access_admin.utils.session import (
    attach_session_cookie,
    clear_session_cookie,
    create_session_token,
    get_current_session,
)


def login():
    data = json_body()
    login_name = text_field(data, "username") or text_field(data, "email")
    password = text_field(data, "password", strip=False)

    if not login_name or not password:
        return jsonify({"success": False, "error": "Username and password required"}), 400

    user = User.query.filter(
        or_(User.username == login_name, User.email == login_name.lower())
    ).first()
    if not user or not user.check_password(password):
        current_app.logger.info("Failed login attempt for %s", login_name)
        return jsonify({"success": False, "error": "Invalid credentials"}), 401

    response = jsonify({"success": True, "message": "Login successful", "data": {"user": user.to_dict()}})
    attach_session_cookie(response, create_session_token(user))
    current_app.logger.info("User %s logged in", user.id)
    return response, 200


def logout():
    response = jsonify({"success": True, "message": "Logged out", "data": None})
    return clear_session_cookie(response), 200


def session_info():
    session = get_current_session()
    if session is None:
        return jsonify({"authenticated": False}), 401
    return jsonify({"authenticated": True, "user": session.to_dict()}), 200
