import logging
import uuid

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from collabhub.config import settings
from collabhub.database import get_db
from collabhub.feedback import LogSink, ToastSink
from collabhub.storage import MemoryStorage, ObjectStorage, S3Storage
from collabhub.store import EntityStore, UserContext

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def decode_identity(token: str) -> UserContext:
    """Verify a provider-issued access token and extract the identity."""
    try:
        claims = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
        user_id = uuid.UUID(claims["sub"])
    except (JWTError, KeyError, ValueError) as e:
        logger.info("Rejected access token: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    metadata = claims.get("user_metadata") or {}
    return UserContext(
        user_id=user_id,
        email=claims.get("email"),
        username=metadata.get("username"),
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(security),
) -> UserContext:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return decode_identity(credentials.credentials)


async def get_store(
    user: UserContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> EntityStore:
    return EntityStore(db, user)


def get_storage(request: Request) -> ObjectStorage:
    storage = getattr(request.app.state, "storage", None)
    if storage is None:
        storage = S3Storage() if settings.S3_BUCKET_NAME else MemoryStorage()
        request.app.state.storage = storage
    return storage


def get_sink() -> ToastSink:
    return LogSink()
