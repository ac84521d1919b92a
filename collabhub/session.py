"""Session/profile binding driven by auth events.

Auth provider callbacks arrive as ``AuthEvent`` values on a queue. ``reduce``
is the pure state transition; ``SessionBinder`` applies it and runs the one
effect the machine has, loading (or creating) the profile of a newly signed
in identity. Load results come back through the same queue tagged with the
identity they were started for, so a result for an identity that has since
signed out or been replaced is ignored by the reducer.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Literal

from collabhub.models.profile import Profile
from collabhub.services.profile_service import ensure_profile
from collabhub.store import EntityStore, StoreError, UserContext
from collabhub.sync import StaleResult, ViewScope

logger = logging.getLogger(__name__)

Status = Literal["signed_out", "signed_in", "profile_loading", "profile_ready"]
EventKind = Literal["signed_in", "initial_session", "signed_out", "profile_loaded", "profile_failed"]


@dataclass(frozen=True)
class SessionState:
    status: Status = "signed_out"
    identity: UserContext | None = None
    profile: Profile | None = None


@dataclass(frozen=True)
class AuthEvent:
    kind: EventKind
    identity: UserContext | None = None
    profile: Profile | None = None


SIGNED_OUT = SessionState()


def _same_identity(state: SessionState, event: AuthEvent) -> bool:
    return (
        state.identity is not None
        and event.identity is not None
        and state.identity.user_id == event.identity.user_id
    )


def reduce(state: SessionState, event: AuthEvent) -> SessionState:
    if event.kind in ("signed_in", "initial_session"):
        if event.identity is None:
            # initial_session with no stored session
            return SIGNED_OUT
        if state.status in ("profile_loading", "profile_ready") and _same_identity(state, event):
            # repeated sign-in for the identity already bound
            return state
        return SessionState(status="profile_loading", identity=event.identity)

    if event.kind == "signed_out":
        # context, identity and profile go together
        return SIGNED_OUT

    if event.kind == "profile_loaded":
        if state.status != "profile_loading" or not _same_identity(state, event):
            return state
        return replace(state, status="profile_ready", profile=event.profile)

    if event.kind == "profile_failed":
        if state.status != "profile_loading" or not _same_identity(state, event):
            return state
        return replace(state, status="signed_in", profile=None)

    raise ValueError(f"Unknown auth event: {event.kind}")


class SessionBinder:
    """Consumes auth events and keeps exactly one profile per identity.

    ``store_factory`` builds a store bound to a given identity; the binder
    never holds one beyond a single profile load. Loads run one at a time
    inside a ``ViewScope`` owned by the current identity, and the scope is
    closed as soon as that identity signs out or is replaced.
    """

    def __init__(self, store_factory: Callable[[UserContext], EntityStore]):
        self.store_factory = store_factory
        self.events: asyncio.Queue[AuthEvent] = asyncio.Queue()
        self.state = SIGNED_OUT
        self._scope = ViewScope("profile")
        self._loads: set[asyncio.Task] = set()

    @property
    def context(self) -> UserContext | None:
        return self.state.identity

    async def publish(self, event: AuthEvent) -> None:
        await self.events.put(event)

    async def step(self, event: AuthEvent) -> SessionState:
        previous = self.state
        self.state = reduce(previous, event)
        if previous.status != self.state.status:
            logger.debug("Session %s -> %s on %s", previous.status, self.state.status, event.kind)
        if previous.identity is not None and (
            self.state.identity is None or self.state.identity.user_id != previous.identity.user_id
        ):
            self._scope.close()
        if self.state.status == "profile_loading" and self.state != previous:
            await self._start_load(self.state.identity)
        return self.state

    async def _start_load(self, identity: UserContext) -> None:
        # identity stores share one session; never run two loads on it
        if self._loads:
            await asyncio.wait(self._loads)
        if self._scope.closed:
            self._scope = ViewScope(f"profile:{identity.user_id}")
        task = asyncio.create_task(self._load(identity, self._scope))
        self._loads.add(task)
        task.add_done_callback(self._loads.discard)

    async def _load(self, identity: UserContext, scope: ViewScope) -> None:
        store = self.store_factory(identity)
        try:
            profile = await scope.run(ensure_profile(store))
        except StaleResult:
            logger.debug("Profile load for %s abandoned", identity.user_id)
            await store.reset()
            return
        except StoreError as e:
            logger.warning("Profile load failed for %s: %s", identity.user_id, e.message)
            await self.events.put(AuthEvent("profile_failed", identity))
            return
        await self.events.put(AuthEvent("profile_loaded", identity, profile))

    async def drain(self) -> SessionState:
        """Apply queued events until the queue is empty and no load is pending."""
        while True:
            while not self.events.empty():
                await self.step(self.events.get_nowait())
            pending = [t for t in self._loads if not t.done()]
            if not pending:
                if self.events.empty():
                    return self.state
                continue
            await asyncio.wait(pending)

    async def run(self) -> None:
        """Consume events forever; cancel the task running this to stop."""
        try:
            while True:
                await self.step(await self.events.get())
        finally:
            self.close()

    def close(self) -> None:
        """Abandon any load in flight; its result is never applied."""
        self._scope.close()
