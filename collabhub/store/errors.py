"""Typed failures raised by the entity store.

Everything that talks to the database classifies its failures into one of
these before returning control to a service or router.
"""

from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError


class StoreError(Exception):
    """Base class for store failures."""

    def __init__(self, message: str, table: str | None = None):
        super().__init__(message)
        self.message = message
        self.table = table


class NotFound(StoreError):
    pass


class PermissionDenied(StoreError):
    pass


class ConstraintViolation(StoreError):
    pass


class TransportError(StoreError):
    pass


def classify(exc: Exception, table: str | None = None) -> StoreError:
    """Map a raw database exception onto the store error taxonomy."""
    if isinstance(exc, StoreError):
        return exc
    if isinstance(exc, NoResultFound):
        return NotFound(f"No matching row in {table}", table)
    if isinstance(exc, IntegrityError):
        detail = str(exc.orig) if exc.orig is not None else str(exc)
        return ConstraintViolation(f"Constraint violated on {table}: {detail}", table)
    if isinstance(exc, (SQLAlchemyError, OSError)):
        return TransportError(f"Store unavailable: {exc}", table)
    return TransportError(f"Unexpected store failure: {exc!r}", table)
