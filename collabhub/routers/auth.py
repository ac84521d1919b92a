from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from collabhub.database import get_db
from collabhub.dependencies import get_current_user
from collabhub.schemas.auth import AuthEventRequest, SessionResponse
from collabhub.schemas.profile import ProfileResponse
from collabhub.session import AuthEvent, SessionBinder
from collabhub.store import EntityStore, UserContext

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/events", response_model=SessionResponse)
async def auth_event(
    data: AuthEventRequest,
    user: UserContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Feed a provider auth event through the session binder.

    Sign-in events make sure the identity has a profile row and return it.
    """
    binder = SessionBinder(lambda context: EntityStore(db, context))
    identity = None if data.event == "signed_out" else user
    await binder.publish(AuthEvent(data.event, identity))
    state = await binder.drain()
    return SessionResponse(
        status=state.status,
        user_id=state.identity.user_id if state.identity else None,
        profile=ProfileResponse.model_validate(state.profile) if state.profile else None,
    )
