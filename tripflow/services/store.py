"""Boundary between services and the relational store."""
from __future__ import annotations

import enum
import logging
from functools import wraps
from typing import Any, Callable, Optional, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from tripflow import db
from tripflow.errors import DataAccessError, ValidationError

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=enum.Enum)


def translate_store_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Convert raw SQLAlchemy failures into ``DataAccessError``."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.exception("Store error in %s", func.__name__)
            raise DataAccessError() from exc

    return wrapper


@translate_store_errors
def commit() -> None:
    db.session.commit()


def parse_enum(enum_cls: Type[E], value: Any, field: str) -> E:
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip()
    for member in enum_cls:
        if member.value.lower() == text.lower():
            return member
    allowed = ", ".join(member.value for member in enum_cls)
    raise ValidationError(f"Invalid {field} '{value}'. Expected one of: {allowed}.")


def parse_optional_enum(enum_cls: Type[E], value: Any, field: str) -> Optional[E]:
    if value is None or value == "":
        return None
    return parse_enum(enum_cls, value, field)


def require_text(value: Any, field: str) -> str:
    text = (value or "").strip() if isinstance(value, str) or value is None else str(value).strip()
    if not text:
        raise ValidationError(f"{field} is required.")
    return text


def parse_id(value: Any, field: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer.") from None
