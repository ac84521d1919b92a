import time
import uuid

import pytest
from fastapi import HTTPException

from collabhub.dependencies import decode_identity


def test_decode_identity_reads_claims(token_for):
    user_id = uuid.uuid4()
    identity = decode_identity(token_for(user_id, email="a@example.com", username="ada"))
    assert identity.user_id == user_id
    assert identity.email == "a@example.com"
    assert identity.username == "ada"


def test_decode_identity_rejects_bad_tokens(token_for):
    with pytest.raises(HTTPException) as exc:
        decode_identity("not-a-jwt")
    assert exc.value.status_code == 401

    expired = token_for(uuid.uuid4(), exp=int(time.time()) - 10)
    with pytest.raises(HTTPException):
        decode_identity(expired)

    wrong_audience = token_for(uuid.uuid4(), aud="someone-else")
    with pytest.raises(HTTPException):
        decode_identity(wrong_audience)

    not_a_uuid = token_for(uuid.uuid4(), sub="abc")
    with pytest.raises(HTTPException):
        decode_identity(not_a_uuid)


@pytest.mark.asyncio
async def test_requests_without_token_are_rejected(token_client):
    response = await token_client.get("/tasks")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_sign_in_event_creates_profile_once(token_client, token_for):
    user_id = uuid.uuid4()
    headers = {"Authorization": f"Bearer {token_for(user_id, email='new@example.com')}"}

    response = await token_client.post("/auth/events", json={"event": "signed_in"}, headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "profile_ready"
    assert body["user_id"] == str(user_id)
    assert body["profile"]["username"] == f"user-{str(user_id)[:8]}"

    response = await token_client.post("/auth/events", json={"event": "signed_in"}, headers=headers)
    assert response.json()["profile"]["id"] == str(user_id)

    response = await token_client.get("/profiles/me", headers=headers)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_sign_in_uses_provider_username(token_client, token_for):
    headers = {"Authorization": f"Bearer {token_for(uuid.uuid4(), username='grace')}"}
    response = await token_client.post("/auth/events", json={"event": "initial_session"}, headers=headers)
    assert response.json()["profile"]["username"] == "grace"


@pytest.mark.asyncio
async def test_sign_out_event(token_client, token_for):
    headers = {"Authorization": f"Bearer {token_for(uuid.uuid4())}"}
    response = await token_client.post("/auth/events", json={"event": "signed_out"}, headers=headers)
    assert response.json() == {"status": "signed_out", "user_id": None, "profile": None}


@pytest.mark.asyncio
async def test_rate_limit(token_client, monkeypatch):
    monkeypatch.setattr("collabhub.middleware.rate_limit.settings.RATE_LIMIT_PER_MINUTE", 2)
    for _ in range(2):
        assert (await token_client.get("/tasks")).status_code == 401
    response = await token_client.get("/tasks")
    assert response.status_code == 429
    # health checks are never limited
    assert (await token_client.get("/health")).status_code == 200
