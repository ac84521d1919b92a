import uuid

from fastapi import APIRouter, Depends, Query

from collabhub.dependencies import get_sink, get_store
from collabhub.feedback import ToastSink
from collabhub.schemas.message import CountResponse, MessageCreate, MessageResponse
from collabhub.services import message_service
from collabhub.store import EntityStore

router = APIRouter(prefix="/messages", tags=["messages"])


@router.post("", response_model=MessageResponse, status_code=201)
async def send_message(
    data: MessageCreate,
    store: EntityStore = Depends(get_store),
    sink: ToastSink = Depends(get_sink),
):
    return await message_service.send_message(store, data.receiver_id, data.content, sink=sink)


@router.get("/unread-count", response_model=CountResponse)
async def unread_count(
    friend_id: uuid.UUID | None = Query(default=None),
    store: EntityStore = Depends(get_store),
):
    return CountResponse(count=await message_service.unread_count(store, friend_id))


@router.get("/{friend_id}", response_model=list[MessageResponse])
async def list_conversation(friend_id: uuid.UUID, store: EntityStore = Depends(get_store)):
    return await message_service.list_conversation(store, friend_id)


@router.post("/{friend_id}/read", response_model=CountResponse)
async def mark_conversation_read(friend_id: uuid.UUID, store: EntityStore = Depends(get_store)):
    return CountResponse(count=await message_service.mark_conversation_read(store, friend_id))
