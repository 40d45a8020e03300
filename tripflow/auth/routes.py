"""Authentication routes."""
from __future__ import annotations

import logging
from typing import Any

from flask_login import current_user, login_required, login_user, logout_user
from flask_wtf.csrf import generate_csrf

from tripflow.models import User
from tripflow.utils.helpers import current_principal, form_error_response, json_response

from . import auth_bp
from .forms import LoginForm

logger = logging.getLogger(__name__)


@auth_bp.route("/login", methods=["POST"])
def login() -> Any:
    """Authenticate a user using email/password."""
    form = LoginForm()
    if not form.validate_on_submit():
        return form_error_response(form)

    user = User.query.filter_by(email=form.email.data.strip().lower()).first()
    if not user or not user.check_password(form.password.data):
        logger.warning("Failed login for %s", form.email.data)
        return json_response({"error": "Invalid credentials."}, status=401)
    if not user.is_active:
        return json_response({"error": "Account is inactive."}, status=403)

    login_user(user)
    logger.info("User %s logged in", user.id)
    return json_response({"user": user.to_dict(), "principal": current_principal().to_dict()})


@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout() -> Any:
    user_id = current_user.id
    logout_user()
    logger.info("User %s logged out", user_id)
    return json_response({"message": "Logged out."})


@auth_bp.route("/me", methods=["GET"])
@login_required
def me() -> Any:
    return json_response({"user": current_user.to_dict(), "principal": current_principal().to_dict()})


@auth_bp.route("/csrf-token", methods=["GET"])
def csrf_token() -> Any:
    """Token for the ``X-CSRFToken`` header of state-changing requests."""
    return json_response({"csrf_token": generate_csrf()})
