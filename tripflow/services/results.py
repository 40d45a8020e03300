"""Structured success/failure results returned by the service layer."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from tripflow import db
from tripflow.errors import DataAccessError, TripFlowError

logger = logging.getLogger(__name__)


@dataclass
class ServiceResult:
    ok: bool
    data: Any = None
    error: Optional[TripFlowError] = None

    @classmethod
    def success(cls, data: Any = None) -> "ServiceResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: TripFlowError) -> "ServiceResult":
        return cls(ok=False, error=error)

    @property
    def message(self) -> Optional[str]:
        return self.error.message if self.error else None


def service_call(func: Callable[..., Any]) -> Callable[..., ServiceResult]:
    """Run ``func`` and wrap its outcome in a ``ServiceResult``.

    A ``TripFlowError`` rolls the session back so a failed operation never
    leaves a partial write behind. Store errors that were not translated
    further down become ``DataAccessError``.
    """

    @wraps(func)
    def wrapper(*args, **kwargs) -> ServiceResult:
        try:
            return ServiceResult.success(func(*args, **kwargs))
        except TripFlowError as exc:
            db.session.rollback()
            logger.warning("%s failed: %s", func.__name__, exc.message)
            return ServiceResult.failure(exc)
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Store error in %s", func.__name__)
            return ServiceResult.failure(DataAccessError())

    return wrapper
