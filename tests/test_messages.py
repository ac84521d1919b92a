import pytest

from collabhub.services import message_service
from collabhub.store import ConstraintViolation, Eq, PermissionDenied


@pytest.mark.asyncio
async def test_send_message_to_self_writes_nothing(alice_store, alice):
    with pytest.raises(ConstraintViolation):
        await message_service.send_message(alice_store, alice.user_id, "note to self")
    assert await alice_store.count("messages") == 0
    assert await alice_store.as_service().count("notifications") == 0


@pytest.mark.asyncio
async def test_blank_message_rejected(alice_store, bob):
    with pytest.raises(ConstraintViolation):
        await message_service.send_message(alice_store, bob.user_id, "   ")
    assert await alice_store.count("messages") == 0


@pytest.mark.asyncio
async def test_send_message_notifies_receiver(alice_store, bob_store, bob):
    message = await message_service.send_message(alice_store, bob.user_id, "  hi bob  ")
    assert message.content == "hi bob"
    assert message.read is False

    notes = await bob_store.query("notifications")
    assert [(n.type, n.message) for n in notes] == [
        ("chat", "You have a new message from alice@example.com")
    ]


@pytest.mark.asyncio
async def test_conversation_is_both_directions_oldest_first(alice_store, bob_store, carol_store, alice, bob, carol):
    await message_service.send_message(alice_store, bob.user_id, "one")
    await message_service.send_message(bob_store, alice.user_id, "two")
    await message_service.send_message(carol_store, alice.user_id, "elsewhere")
    await message_service.send_message(alice_store, bob.user_id, "three")

    convo = await message_service.list_conversation(alice_store, bob.user_id)
    assert [m.content for m in convo] == ["one", "two", "three"]
    assert [m.content for m in await message_service.list_conversation(bob_store, alice.user_id)] == [
        "one",
        "two",
        "three",
    ]
    # carol cannot read the alice/bob thread
    assert await message_service.list_conversation(carol_store, bob.user_id) == []


@pytest.mark.asyncio
async def test_mark_conversation_read(alice_store, bob_store, alice, bob):
    await message_service.send_message(alice_store, bob.user_id, "one")
    await message_service.send_message(alice_store, bob.user_id, "two")
    await message_service.send_message(bob_store, alice.user_id, "reply")

    assert await message_service.unread_count(bob_store) == 2
    assert await message_service.unread_count(bob_store, alice.user_id) == 2
    assert await message_service.mark_conversation_read(bob_store, alice.user_id) == 2
    assert await message_service.unread_count(bob_store) == 0
    # bob's own reply is still unread for alice
    assert await message_service.unread_count(alice_store) == 1


@pytest.mark.asyncio
async def test_sender_cannot_mark_read(alice_store, bob):
    message = await message_service.send_message(alice_store, bob.user_id, "one")
    with pytest.raises(PermissionDenied):
        await alice_store.update("messages", Eq("id", message.id), patch={"read": True})


@pytest.mark.asyncio
async def test_messages_api(client, bob, store_for, alice):
    response = await client.post("/messages", json={"receiver_id": str(bob.user_id), "content": "hello"})
    assert response.status_code == 201
    assert response.json()["sender_id"] == str(alice.user_id)

    response = await client.post("/messages", json={"receiver_id": str(alice.user_id), "content": "me"})
    assert response.status_code == 400

    response = await client.get(f"/messages/{bob.user_id}")
    assert [m["content"] for m in response.json()] == ["hello"]

    await message_service.send_message(store_for(bob), alice.user_id, "back")
    assert (await client.get("/messages/unread-count")).json() == {"count": 1}
    response = await client.post(f"/messages/{bob.user_id}/read")
    assert response.json() == {"count": 1}
