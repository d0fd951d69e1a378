"""Domain level exceptions and helpers for layout store layers."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from sqlalchemy import exc as sa_exc

__all__ = [
    "AppError",
    "LayoutStoreError",
    "NotFoundError",
    "IntegrityConstraintViolation",
    "DatabaseOperationError",
    "RemoteCallError",
    "SlotResolutionError",
    "InvalidSlotFieldError",
    "ensure_found",
    "handle_sqlalchemy_errors",
]


class AppError(Exception):
    """Base class for application specific errors."""


class LayoutStoreError(AppError):
    """Base class for layout store failures (local database or remote service)."""


class NotFoundError(LayoutStoreError):
    """Raised when a record could not be located."""


class IntegrityConstraintViolation(LayoutStoreError):
    """Raised when a database constraint is violated."""


class DatabaseOperationError(LayoutStoreError):
    """Raised for unexpected database errors."""


class RemoteCallError(LayoutStoreError):
    """Raised when the managed data service rejects or fails a call."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SlotResolutionError(AppError):
    """Raised when a slot has no persisted id even after save and reload."""


class InvalidSlotFieldError(AppError, ValueError):
    """Raised when a slot edit names an unknown field or an invalid value."""


@dataclass(slots=True)
class _EntityContext:
    """Internal helper describing the entity for error messages."""

    entity: str | None = None

    def format(self, message: str) -> str:
        if self.entity:
            return f"{self.entity}: {message}"
        return message


def ensure_found(record: object | None, *, entity: str, identifier: str) -> object:
    """Ensure a record exists, otherwise raise :class:`NotFoundError`."""

    if record is None:
        raise NotFoundError(f"{entity} '{identifier}' not found")
    return record


def _translate_sqlalchemy_error(exc: Exception, *, context: _EntityContext) -> LayoutStoreError:
    if isinstance(exc, sa_exc.IntegrityError):
        return IntegrityConstraintViolation(context.format("integrity constraint violated"))
    if isinstance(exc, sa_exc.DBAPIError):
        return DatabaseOperationError(context.format("database operation failed"))
    return LayoutStoreError(context.format(str(exc)))


@contextmanager
def handle_sqlalchemy_errors(*, entity: str | None = None) -> Iterator[None]:
    """Translate SQLAlchemy errors into domain specific ones."""

    context = _EntityContext(entity)
    try:
        yield
    except (sa_exc.IntegrityError, sa_exc.DBAPIError) as exc:
        raise _translate_sqlalchemy_error(exc, context=context) from exc
