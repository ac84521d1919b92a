from collabhub.store.client import TABLES, EntityStore, UserContext
from collabhub.store.errors import (
    ConstraintViolation,
    NotFound,
    PermissionDenied,
    StoreError,
    TransportError,
)
from collabhub.store.filters import And, Contains, Eq, Filter, Gte, ILike, In, Lte, Neq, Or, Order

__all__ = [
    "TABLES",
    "And",
    "ConstraintViolation",
    "Contains",
    "EntityStore",
    "Eq",
    "Filter",
    "Gte",
    "ILike",
    "In",
    "Lte",
    "Neq",
    "NotFound",
    "Or",
    "Order",
    "PermissionDenied",
    "StoreError",
    "TransportError",
    "UserContext",
]
