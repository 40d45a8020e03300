"""General helper utilities."""
from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Dict, Optional

from flask import jsonify, request
from flask_login import current_user

from tripflow.errors import ValidationError
from tripflow.models import PlanTier, UserRole
from tripflow.services.authorization import Principal, is_authorized
from tripflow.services.results import ServiceResult

JsonView = Callable[..., Any]


def json_response(payload: Any, status: int = 200):
    """Return a JSON response with status code."""
    return jsonify(payload), status


def request_payload() -> Dict[str, Any]:
    """JSON body of the request, or its form fields."""
    if request.is_json:
        payload = request.get_json(silent=True)
        return payload if isinstance(payload, dict) else {}
    return request.form.to_dict()


def current_principal() -> Principal:
    return Principal.from_user(current_user)


def role_required(minimum: UserRole):
    """Restrict a route to ``minimum`` and every role ranked above it."""
    def decorator(view_func: JsonView) -> JsonView:
        @wraps(view_func)
        def wrapped(*args, **kwargs):
            if not current_user.is_authenticated:
                return json_response({"error": "Authentication required."}, status=401)
            if not is_authorized(current_user.role, minimum):
                return json_response({"error": "Insufficient permissions."}, status=403)
            return view_func(*args, **kwargs)

        return wrapped

    return decorator


def plan_required(plan: PlanTier):
    """Restrict a route to companies on ``plan``."""
    def decorator(view_func: JsonView) -> JsonView:
        @wraps(view_func)
        def wrapped(*args, **kwargs):
            if not current_user.is_authenticated:
                return json_response({"error": "Authentication required."}, status=401)
            if current_user.company.plan != plan:
                return json_response(
                    {"error": f"This feature requires the {plan.value} plan."}, status=403
                )
            return view_func(*args, **kwargs)

        return wrapped

    return decorator


def _to_json(data: Any) -> Any:
    if isinstance(data, (list, tuple)):
        return [_to_json(item) for item in data]
    if isinstance(data, dict):
        return {key: _to_json(value) for key, value in data.items()}
    if hasattr(data, "to_dict"):
        return data.to_dict()
    return data


def result_response(result: ServiceResult, key: Optional[str] = None, status: int = 200):
    """Turn a ``ServiceResult`` into a JSON response.

    Failures map to the error's status code; successes put the serialized
    data under ``key`` (or return it bare when no key is given).
    """
    if not result.ok:
        return json_response(result.error.to_dict(), status=result.error.status_code)
    data = _to_json(result.data)
    if key is None:
        return json_response(data if data is not None else {"ok": True}, status=status)
    return json_response({key: data}, status=status)


def form_error_response(form):
    """Report every failing field of a Flask-WTF form as a validation error."""
    messages = [
        f"{getattr(form, name).label.text}: {errors[0]}"
        for name, errors in form.errors.items()
        if errors
    ]
    error = ValidationError("; ".join(messages) or None)
    return json_response(error.to_dict(), status=error.status_code)
