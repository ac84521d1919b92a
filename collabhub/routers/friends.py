import uuid

from fastapi import APIRouter, Depends, Query, status

from collabhub.dependencies import get_sink, get_store
from collabhub.feedback import ToastSink
from collabhub.schemas.profile import ProfileSummary
from collabhub.schemas.friendship import (
    FriendRequestCreate,
    FriendRequestRespond,
    FriendRequestResponse,
)
from collabhub.services import friend_service
from collabhub.store import EntityStore

router = APIRouter(prefix="/friends", tags=["friends"])


def _request_response(entry: dict) -> FriendRequestResponse:
    counterpart = entry["counterpart"]
    return FriendRequestResponse(
        **{k: v for k, v in entry.items() if k != "counterpart"},
        counterpart=ProfileSummary.model_validate(counterpart) if counterpart else None,
    )


@router.get("", response_model=list[ProfileSummary])
async def list_friends(store: EntityStore = Depends(get_store)):
    return await friend_service.list_friends(store)


@router.delete("/{friend_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_friend(friend_id: uuid.UUID, store: EntityStore = Depends(get_store)):
    await friend_service.remove_friend(store, friend_id)


@router.get("/search", response_model=list[ProfileSummary])
async def search_candidates(
    q: str = Query(default="", max_length=255),
    store: EntityStore = Depends(get_store),
):
    return await friend_service.search_candidates(store, q)


@router.get("/requests/incoming", response_model=list[FriendRequestResponse])
async def incoming_requests(store: EntityStore = Depends(get_store)):
    return [_request_response(r) for r in await friend_service.list_incoming_requests(store)]


@router.get("/requests/outgoing", response_model=list[FriendRequestResponse])
async def outgoing_requests(store: EntityStore = Depends(get_store)):
    return [_request_response(r) for r in await friend_service.list_outgoing_requests(store)]


@router.post("/requests", response_model=FriendRequestResponse, status_code=201)
async def send_request(
    data: FriendRequestCreate,
    store: EntityStore = Depends(get_store),
    sink: ToastSink = Depends(get_sink),
):
    return await friend_service.send_request(store, data.addressee_id, sink=sink)


@router.post("/requests/{request_id}/respond", response_model=FriendRequestResponse)
async def respond_to_request(
    request_id: uuid.UUID,
    data: FriendRequestRespond,
    store: EntityStore = Depends(get_store),
):
    return await friend_service.respond(store, request_id, data.status)


@router.delete("/requests/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_request(request_id: uuid.UUID, store: EntityStore = Depends(get_store)):
    await friend_service.cancel_request(store, request_id)
