import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from collabhub.models import CalendarEvent, Friendship, Message, Notification, Profile, Project, Task
from collabhub.store.errors import (
    ConstraintViolation,
    NotFound,
    PermissionDenied,
    StoreError,
    classify,
)
from collabhub.store.filters import Filter, Order
from collabhub.store.policies import POLICIES

logger = logging.getLogger(__name__)

TABLES = {
    "profiles": Profile,
    "projects": Project,
    "tasks": Task,
    "friendships": Friendship,
    "messages": Message,
    "notifications": Notification,
    "calendar_events": CalendarEvent,
}


@dataclass(frozen=True)
class UserContext:
    """The authenticated identity a store acts for.

    Created when a session signs in and dropped when it signs out; nothing
    keeps a module-level "current user".
    """

    user_id: uuid.UUID
    email: str | None = None
    username: str | None = None  # provider metadata, used as the default profile name


class EntityStore:
    """Filtered reads and writes over the application tables.

    Every operation runs under the row-level rules in ``policies`` for the
    bound user unless the store was opened with ``as_service()``. Each
    mutation commits on its own; failures roll back and surface as
    ``StoreError`` subclasses.

    Rows handed back are detached with every column loaded; a rollback on
    the shared session never expires them.
    """

    def __init__(self, db: AsyncSession, context: UserContext | None, *, service: bool = False):
        if context is None and not service:
            raise ValueError("A user context is required for a non-service store")
        self.db = db
        self.context = context
        self.service = service

    @property
    def user_id(self) -> uuid.UUID:
        if self.context is None:
            raise PermissionDenied("No authenticated identity bound to this store")
        return self.context.user_id

    def as_service(self) -> "EntityStore":
        """Same session, row-level rules bypassed. Reserved for authoritative recounts."""
        return EntityStore(self.db, self.context, service=True)

    # ── helpers ───────────────────────────────────────────────────────

    @staticmethod
    def _model(table: str):
        try:
            return TABLES[table]
        except KeyError:
            raise ValueError(f"Unknown table: {table}") from None

    def _where(self, table: str, model, filters: Sequence[Filter]) -> list:
        clauses = [f.clause(model) for f in filters]
        if not self.service:
            clauses.append(POLICIES[table].read(self.user_id).clause(model))
        return clauses

    @staticmethod
    def _check_columns(table: str, model, values: dict[str, Any]) -> None:
        unknown = set(values) - set(model.__table__.columns.keys())
        if unknown:
            raise ValueError(f"Unknown column(s) for {table}: {', '.join(sorted(unknown))}")

    def _detach(self, rows: list) -> list:
        for row in rows:
            if row in self.db:
                self.db.expunge(row)
        return rows

    async def reset(self) -> None:
        """Roll back whatever an interrupted operation left open on the session."""
        try:
            await self.db.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback failed while resetting the session")

    async def _fail(self, exc: Exception, table: str) -> StoreError:
        try:
            await self.db.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback failed after error on %s", table)
        error = classify(exc, table)
        logger.warning("%s on %s: %s", type(error).__name__, table, error.message)
        return error

    async def _select(self, table: str, filters: Sequence[Filter], order=(), limit=None) -> list:
        model = self._model(table)
        stmt = (
            select(model)
            .where(*self._where(table, model, filters))
            .execution_options(populate_existing=True)
        )
        for o in order:
            stmt = stmt.order_by(o.clause(model))
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            result = await self.db.execute(stmt)
        except (SQLAlchemyError, OSError) as exc:
            raise await self._fail(exc, table) from exc
        return list(result.scalars().all())

    # ── reads ─────────────────────────────────────────────────────────

    async def query(
        self,
        table: str,
        *filters: Filter,
        order: Sequence[Order] = (),
        limit: int | None = None,
    ) -> list:
        return self._detach(await self._select(table, filters, order, limit))

    async def maybe_single(self, table: str, *filters: Filter):
        rows = await self._select(table, filters, limit=2)
        if len(rows) > 1:
            raise ConstraintViolation(f"Expected at most one row in {table}", table)
        self._detach(rows)
        return rows[0] if rows else None

    async def single(self, table: str, *filters: Filter):
        row = await self.maybe_single(table, *filters)
        if row is None:
            raise NotFound(f"No matching row in {table}", table)
        return row

    async def count(self, table: str, *filters: Filter) -> int:
        model = self._model(table)
        stmt = select(func.count()).select_from(model).where(*self._where(table, model, filters))
        try:
            result = await self.db.execute(stmt)
        except (SQLAlchemyError, OSError) as exc:
            raise await self._fail(exc, table) from exc
        return int(result.scalar_one())

    # ── writes ────────────────────────────────────────────────────────

    async def insert(self, table: str, values: dict[str, Any]):
        model = self._model(table)
        self._check_columns(table, model, values)
        if not self.service:
            rule = POLICIES[table].insert
            if rule is None or not rule(self.user_id).matches(values):
                raise PermissionDenied(f"Not allowed to insert into {table}", table)

        row = model(**values)
        try:
            self.db.add(row)
            await self.db.flush()
            await self.db.refresh(row)
            await self.db.commit()
        except (SQLAlchemyError, OSError) as exc:
            raise await self._fail(exc, table) from exc
        self._detach([row])
        return row

    async def update(self, table: str, *filters: Filter, patch: dict[str, Any]) -> list:
        if not filters:
            raise ValueError("Refusing an unfiltered update")
        model = self._model(table)
        self._check_columns(table, model, patch)
        policy = POLICIES[table]
        if not self.service:
            frozen = set(patch) - policy.mutable_columns
            if frozen:
                raise PermissionDenied(
                    f"Column(s) {', '.join(sorted(frozen))} of {table} are read-only", table
                )

        rows = await self._select(table, filters)
        if not self.service:
            if policy.update is None:
                raise PermissionDenied(f"Not allowed to update {table}", table)
            rule = policy.update(self.user_id)
            columns = model.__table__.columns.keys()
            for row in rows:
                patched = {c: getattr(row, c) for c in columns} | patch
                if not (rule.matches(row) and rule.matches(patched)):
                    raise PermissionDenied(f"Not allowed to update this {table} row", table)

        try:
            for row in rows:
                for key, value in patch.items():
                    setattr(row, key, value)
            await self.db.flush()
            await self.db.commit()
        except (SQLAlchemyError, OSError) as exc:
            raise await self._fail(exc, table) from exc
        return self._detach(rows)

    async def delete(self, table: str, *filters: Filter) -> int:
        if not filters:
            raise ValueError("Refusing an unfiltered delete")
        rows = await self._select(table, filters)
        if not self.service:
            rule = POLICIES[table].delete
            if rule is None:
                raise PermissionDenied(f"Not allowed to delete from {table}", table)
            if not all(rule(self.user_id).matches(row) for row in rows):
                raise PermissionDenied(f"Not allowed to delete this {table} row", table)

        try:
            for row in rows:
                await self.db.delete(row)
            await self.db.flush()
            await self.db.commit()
        except (SQLAlchemyError, OSError) as exc:
            raise await self._fail(exc, table) from exc
        return len(rows)
