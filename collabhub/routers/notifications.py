import uuid

from fastapi import APIRouter, Depends, Query, status

from collabhub.dependencies import get_store
from collabhub.schemas.message import CountResponse
from collabhub.schemas.notification import NotificationResponse
from collabhub.services import notification_service
from collabhub.store import EntityStore

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    unread_only: bool = Query(default=False),
    store: EntityStore = Depends(get_store),
):
    return await notification_service.list_notifications(store, unread_only=unread_only)


@router.get("/unread-count", response_model=CountResponse)
async def unread_count(store: EntityStore = Depends(get_store)):
    return CountResponse(count=await notification_service.unread_count(store))


@router.post("/read-all", response_model=CountResponse)
async def mark_all_read(store: EntityStore = Depends(get_store)):
    return CountResponse(count=await notification_service.mark_all_read(store))


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(notification_id: uuid.UUID, store: EntityStore = Depends(get_store)):
    return await notification_service.mark_read(store, notification_id)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(notification_id: uuid.UUID, store: EntityStore = Depends(get_store)):
    await notification_service.delete_notification(store, notification_id)
