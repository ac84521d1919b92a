import uuid

import pytest

from collabhub.feedback import ListSink
from collabhub.models import Profile
from collabhub.services import friend_service
from collabhub.store import ConstraintViolation, Eq, NotFound, PermissionDenied


async def _befriend(requester_store, addressee_store, addressee):
    request = await friend_service.send_request(requester_store, addressee.user_id)
    await friend_service.respond(addressee_store, request.id, "accepted")
    return request


@pytest.mark.asyncio
async def test_send_request_creates_pending_row_and_notifies(alice_store, bob_store, alice, bob):
    sink = ListSink()
    request = await friend_service.send_request(alice_store, bob.user_id, sink=sink)

    assert request.status == "pending"
    assert request.requester_id == alice.user_id
    notes = await bob_store.query("notifications")
    assert [(n.type, n.title) for n in notes] == [("friend_request", "Friend Request")]
    assert sink.messages == [("success", "Friend request sent")]


@pytest.mark.asyncio
async def test_cannot_request_self(alice_store, alice):
    with pytest.raises(ConstraintViolation):
        await friend_service.send_request(alice_store, alice.user_id)
    assert await alice_store.count("friendships") == 0


@pytest.mark.asyncio
async def test_no_duplicate_in_either_orientation(alice_store, bob_store, alice, bob):
    await friend_service.send_request(alice_store, bob.user_id)
    with pytest.raises(ConstraintViolation):
        await friend_service.send_request(alice_store, bob.user_id)
    with pytest.raises(ConstraintViolation):
        await friend_service.send_request(bob_store, alice.user_id)
    assert await alice_store.count("friendships") == 1


@pytest.mark.asyncio
async def test_accepted_request_lists_both_ways(alice_store, bob_store, alice, bob):
    request = await friend_service.send_request(alice_store, bob.user_id)
    incoming = await friend_service.list_incoming_requests(bob_store)
    assert [r["id"] for r in incoming] == [request.id]
    assert incoming[0]["counterpart"].username == "alice"

    outgoing = await friend_service.list_outgoing_requests(alice_store)
    assert outgoing[0]["counterpart"].username == "bob"

    await friend_service.respond(bob_store, request.id, "accepted")

    assert [p.username for p in await friend_service.list_friends(alice_store)] == ["bob"]
    assert [p.username for p in await friend_service.list_friends(bob_store)] == ["alice"]
    assert await friend_service.list_incoming_requests(bob_store) == []
    assert await friend_service.are_friends(alice_store, alice.user_id, bob.user_id)
    assert await friend_service.are_friends(bob_store, bob.user_id, alice.user_id)


@pytest.mark.asyncio
async def test_only_addressee_can_respond(alice_store, bob):
    request = await friend_service.send_request(alice_store, bob.user_id)
    with pytest.raises(PermissionDenied):
        await friend_service.respond(alice_store, request.id, "accepted")


@pytest.mark.asyncio
async def test_outsider_cannot_see_request(alice_store, carol_store, bob):
    request = await friend_service.send_request(alice_store, bob.user_id)
    with pytest.raises(NotFound):
        await friend_service.respond(carol_store, request.id, "accepted")


@pytest.mark.asyncio
async def test_declined_request_is_not_a_friendship(alice_store, bob_store, bob):
    request = await friend_service.send_request(alice_store, bob.user_id)
    await friend_service.respond(bob_store, request.id, "declined")
    assert await friend_service.list_friends(alice_store) == []
    with pytest.raises(ConstraintViolation):
        await friend_service.respond(bob_store, request.id, "accepted")


@pytest.mark.asyncio
async def test_cancel_request(alice_store, bob_store, bob):
    request = await friend_service.send_request(alice_store, bob.user_id)
    with pytest.raises(PermissionDenied):
        await friend_service.cancel_request(bob_store, request.id)
    await friend_service.cancel_request(alice_store, request.id)
    assert await alice_store.count("friendships") == 0


@pytest.mark.asyncio
async def test_remove_friend_from_either_side(alice_store, bob_store, alice, bob):
    await _befriend(alice_store, bob_store, bob)
    await friend_service.remove_friend(bob_store, alice.user_id)
    assert await friend_service.list_friends(alice_store) == []
    with pytest.raises(NotFound):
        await friend_service.remove_friend(alice_store, bob.user_id)


@pytest.mark.asyncio
async def test_search_excludes_self_friends_and_pending(alice_store, bob_store, carol_store, bob, carol):
    # "alice" has no "o"; bob and carolyn do
    await carol_store.update("profiles", Eq("id", carol.user_id), patch={"username": "carolyn"})

    results = await friend_service.search_candidates(alice_store, "")
    assert results == []

    results = await friend_service.search_candidates(alice_store, "O")
    assert {p.username for p in results} == {"bob", "carolyn"}

    await friend_service.send_request(alice_store, bob.user_id)
    results = await friend_service.search_candidates(alice_store, "o")
    assert [p.username for p in results] == ["carolyn"]

    # pending in the other direction is excluded as well
    await friend_service.send_request(carol_store, alice_store.user_id)
    assert await friend_service.search_candidates(alice_store, "o") == []

    # an explicit exclusion set replaces the computed one
    results = await friend_service.search_candidates(alice_store, "o", exclude=set())
    assert {p.username for p in results} == {"bob", "carolyn"}


@pytest.mark.asyncio
async def test_search_is_limited(alice_store, db_session):
    for i in range(12):
        db_session.add(Profile(id=uuid.uuid4(), username=f"member{i:02d}", skills=[]))
    await db_session.commit()

    results = await friend_service.search_candidates(alice_store, "member")
    assert len(results) == 10
