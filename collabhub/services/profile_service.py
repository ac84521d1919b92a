import logging
import secrets
import uuid

from collabhub.models.profile import Profile
from collabhub.storage import ObjectStorage
from collabhub.store import ConstraintViolation, EntityStore, Eq, NotFound, UserContext

logger = logging.getLogger(__name__)

IMAGE_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}
PDF_TYPE = "application/pdf"


def _media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


def default_username(context: UserContext) -> str:
    """Provider username when present, otherwise ``user-`` and the first 8 id chars."""
    if context.username and context.username.strip():
        return context.username.strip()
    return f"user-{str(context.user_id)[:8]}"


def clean_skills(skills: list[str]) -> list[str]:
    """Trim, drop blanks and de-duplicate while keeping first-seen order."""
    seen: dict[str, None] = {}
    for skill in skills:
        s = skill.strip()
        if s and s.lower() not in {k.lower() for k in seen}:
            seen[s] = None
    return list(seen)


async def get_profile(store: EntityStore, user_id: uuid.UUID | None = None) -> Profile:
    return await store.single("profiles", Eq("id", user_id or store.user_id))


async def ensure_profile(store: EntityStore) -> Profile:
    """Return the caller's profile, creating it on first sign-in.

    A concurrent insert for the same identity loses on the primary key and
    falls back to reading the winner's row.
    """
    context = store.context
    try:
        return await get_profile(store)
    except NotFound:
        pass

    try:
        profile = await store.insert(
            "profiles",
            {"id": context.user_id, "username": default_username(context), "skills": []},
        )
    except ConstraintViolation:
        logger.info("Profile for %s created concurrently; refetching", context.user_id)
        return await get_profile(store)
    logger.info("Created profile %s for %s", profile.username, profile.id)
    return profile


async def update_profile(store: EntityStore, data: dict) -> Profile:
    patch = {k: v for k, v in data.items() if v is not None}
    if "username" in patch:
        patch["username"] = patch["username"].strip()
        if not patch["username"]:
            raise ConstraintViolation("Username cannot be blank", "profiles")
    if "skills" in patch:
        patch["skills"] = clean_skills(patch["skills"])
    if not patch:
        return await get_profile(store)

    await get_profile(store)
    rows = await store.update("profiles", Eq("id", store.user_id), patch=patch)
    return rows[0]


async def set_avatar(
    store: EntityStore, storage: ObjectStorage, blob: bytes, content_type: str
) -> Profile:
    content_type = _media_type(content_type)
    ext = IMAGE_TYPES.get(content_type)
    if ext is None:
        raise ValueError(f"Unsupported image type: {content_type}")
    path = f"avatars/{store.user_id}-{secrets.token_hex(8)}.{ext}"
    url = await storage.upload(path, blob, content_type)
    rows = await store.update("profiles", Eq("id", store.user_id), patch={"avatar_url": url})
    if not rows:
        raise NotFound("Profile not found", "profiles")
    return rows[0]


async def set_resume(
    store: EntityStore, storage: ObjectStorage, blob: bytes, content_type: str
) -> Profile:
    content_type = _media_type(content_type)
    if content_type != PDF_TYPE:
        raise ValueError("Resume must be a PDF")
    path = f"resumes/{store.user_id}-{secrets.token_hex(8)}.pdf"
    url = await storage.upload(path, blob, content_type)
    rows = await store.update("profiles", Eq("id", store.user_id), patch={"resume_url": url})
    if not rows:
        raise NotFound("Profile not found", "profiles")
    return rows[0]
