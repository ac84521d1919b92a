import asyncio
import uuid

import pytest

from collabhub.models import Profile
from collabhub.services import profile_service
from collabhub.session import SIGNED_OUT, AuthEvent, SessionBinder, SessionState, reduce
from collabhub.store import ConstraintViolation, EntityStore, Eq, TransportError, UserContext


def _identity(username=None) -> UserContext:
    return UserContext(user_id=uuid.uuid4(), email="new@example.com", username=username)


# ── reducer ───────────────────────────────────────────────────────────


def test_sign_in_starts_profile_loading():
    who = _identity()
    state = reduce(SIGNED_OUT, AuthEvent("signed_in", who))
    assert state == SessionState(status="profile_loading", identity=who)


def test_initial_session_without_identity_stays_signed_out():
    assert reduce(SIGNED_OUT, AuthEvent("initial_session")) == SIGNED_OUT


def test_profile_loaded_for_current_identity():
    who = _identity()
    profile = Profile(id=who.user_id, username="x")
    state = reduce(SessionState("profile_loading", who), AuthEvent("profile_loaded", who, profile))
    assert state.status == "profile_ready"
    assert state.profile is profile


def test_result_for_other_identity_is_discarded():
    current, stale = _identity(), _identity()
    loading = SessionState("profile_loading", current)
    profile = Profile(id=stale.user_id, username="stale")
    assert reduce(loading, AuthEvent("profile_loaded", stale, profile)) == loading
    assert reduce(SIGNED_OUT, AuthEvent("profile_loaded", stale, profile)) == SIGNED_OUT


def test_profile_failure_clears_profile():
    who = _identity()
    state = reduce(SessionState("profile_loading", who), AuthEvent("profile_failed", who))
    assert state == SessionState("signed_in", who, None)


def test_sign_out_drops_everything():
    who = _identity()
    ready = SessionState("profile_ready", who, Profile(id=who.user_id, username="x"))
    assert reduce(ready, AuthEvent("signed_out")) == SIGNED_OUT


def test_repeated_sign_in_keeps_state():
    who = _identity()
    loading = SessionState("profile_loading", who)
    ready = SessionState("profile_ready", who, Profile(id=who.user_id, username="x"))
    assert reduce(loading, AuthEvent("signed_in", who)) is loading
    assert reduce(ready, AuthEvent("initial_session", who)) is ready

    other = _identity()
    assert reduce(ready, AuthEvent("signed_in", other)) == SessionState("profile_loading", other)


def test_unknown_event_rejected():
    with pytest.raises(ValueError):
        reduce(SIGNED_OUT, AuthEvent("token_refreshed"))


# ── binder ────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_first_sign_in_creates_default_profile(db_session):
    who = _identity()
    binder = SessionBinder(lambda context: EntityStore(db_session, context))

    await binder.publish(AuthEvent("signed_in", who))
    state = await binder.drain()

    assert state.status == "profile_ready"
    assert state.profile.username == f"user-{str(who.user_id)[:8]}"
    assert binder.context == who


@pytest.mark.asyncio
async def test_repeated_sign_in_creates_no_duplicate(db_session):
    who = _identity(username="newbie")
    binder = SessionBinder(lambda context: EntityStore(db_session, context))

    for kind in ("initial_session", "signed_in", "signed_in"):
        await binder.publish(AuthEvent(kind, who))
        await binder.drain()

    store = EntityStore(db_session, who)
    assert await store.count("profiles", Eq("id", who.user_id)) == 1
    assert binder.state.profile.username == "newbie"


@pytest.mark.asyncio
async def test_initial_session_then_sign_in_before_drain(db_session):
    who = _identity()
    binder = SessionBinder(lambda context: EntityStore(db_session, context))

    await binder.publish(AuthEvent("initial_session", who))
    await binder.publish(AuthEvent("signed_in", who))
    state = await binder.drain()

    assert state.status == "profile_ready"
    assert await EntityStore(db_session, who).count("profiles", Eq("id", who.user_id)) == 1


@pytest.mark.asyncio
async def test_switching_identity_mid_load_binds_the_new_one(db_session):
    first, second = _identity(), _identity()
    binder = SessionBinder(lambda context: EntityStore(db_session, context))

    await binder.publish(AuthEvent("signed_in", first))
    await binder.publish(AuthEvent("signed_in", second))
    state = await binder.drain()

    assert state.identity == second
    assert state.profile.id == second.user_id
    store = EntityStore(db_session, second)
    assert await store.count("profiles", Eq("id", second.user_id)) == 1
    assert await store.count("profiles", Eq("id", first.user_id)) == 0


@pytest.mark.asyncio
async def test_sign_out_abandons_running_load(db_session, monkeypatch):
    started = asyncio.Event()

    async def slow(store):
        started.set()
        await asyncio.sleep(10)

    monkeypatch.setattr("collabhub.session.ensure_profile", slow)
    who = _identity()
    binder = SessionBinder(lambda context: EntityStore(db_session, context))

    await binder.step(AuthEvent("signed_in", who))
    await started.wait()
    await binder.step(AuthEvent("signed_out"))
    state = await binder.drain()

    assert state == SIGNED_OUT
    assert binder.events.empty()


@pytest.mark.asyncio
async def test_sign_out_before_load_finishes_discards_result(db_session):
    who = _identity()
    binder = SessionBinder(lambda context: EntityStore(db_session, context))

    await binder.publish(AuthEvent("signed_in", who))
    await binder.publish(AuthEvent("signed_out"))
    state = await binder.drain()

    assert state == SIGNED_OUT
    assert binder.context is None


@pytest.mark.asyncio
async def test_failed_load_lands_signed_in_without_profile(db_session, monkeypatch):
    async def broken(store):
        raise TransportError("store down", "profiles")

    monkeypatch.setattr("collabhub.session.ensure_profile", broken)
    who = _identity()
    binder = SessionBinder(lambda context: EntityStore(db_session, context))

    await binder.publish(AuthEvent("signed_in", who))
    state = await binder.drain()
    assert state == SessionState("signed_in", who, None)


@pytest.mark.asyncio
async def test_run_loop_consumes_queue(db_session):
    who = _identity()
    binder = SessionBinder(lambda context: EntityStore(db_session, context))
    runner = asyncio.create_task(binder.run())

    await binder.publish(AuthEvent("signed_in", who))
    for _ in range(100):
        if binder.state.status == "profile_ready":
            break
        await asyncio.sleep(0.01)

    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner
    assert binder.state.status == "profile_ready"


# ── ensure_profile ────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_ensure_profile_refetches_after_concurrent_insert(db_session):
    who = _identity()
    store = EntityStore(db_session, who)
    real_insert = store.insert

    async def racing_insert(table, values):
        # another session wins the race, then ours hits the primary key
        await real_insert(table, {**values, "username": "winner"})
        raise ConstraintViolation("duplicate key", table)

    store.insert = racing_insert
    profile = await profile_service.ensure_profile(store)
    assert profile.username == "winner"
