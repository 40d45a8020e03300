"""Company administration blueprints."""
from flask import Blueprint

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")
invitations_bp = Blueprint("invitations", __name__, url_prefix="/invitations")

from . import routes  # noqa: E402,F401
