"""
Heart: Users API

Registration, profile reads and updates, photo uploads and the discovery
feed.  These are plain single-table reads and writes.
"""

from __future__ import annotations

import asyncio
from datetime import date

import structlog
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from heart.api.dependencies import get_user_or_404
from heart.config import get_settings
from heart.database import get_db
from heart.errors import ConflictError, TransientStorageError, ValidationError, storage_errors
from heart.models.user import User
from heart.schemas.user import (
    PhotoUploaded,
    ProfileCard,
    ProfileUpdate,
    UserCreate,
    UserCreated,
    UserResponse,
)
from heart.services.swipe_ledger import SwipeLedger
from heart.utils.storage import public_url, store_blob

logger = structlog.get_logger("heart.api.users")

router = APIRouter()


def _years_before(today: date, years: int) -> date:
    """The same calendar day ``years`` earlier (Feb 29 falls back to Feb 28)."""
    try:
        return today.replace(year=today.year - years)
    except ValueError:
        return today.replace(year=today.year - years, day=28)


# ──────────────────────────────────────────────────────────────────────────────
# POST /register: Create a user
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/register",
    response_model=UserCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def register(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db),
) -> UserCreated:
    """Create a user record.  Email and username must both be unused."""
    email = payload.email.strip().lower()
    username = payload.username.strip()
    log = logger.bind(email=email, username=username)
    log.info("register_start")

    stmt = select(User.id).where(or_(User.email == email, User.username == username))
    with storage_errors("registration"):
        existing = (await db.execute(stmt)).first()
    if existing is not None:
        log.warning("register_duplicate")
        raise ConflictError("Email or username is already in use.")

    user = User(
        email=email,
        username=username,
        bio=payload.bio,
        gender=payload.gender,
        birthdate=payload.birthdate,
        location=payload.location,
    )
    db.add(user)
    try:
        with storage_errors("registration"):
            await db.flush()
    except IntegrityError:
        await db.rollback()
        log.warning("register_duplicate_race")
        raise ConflictError("Email or username is already in use.") from None

    log.info("register_complete", user_id=user.id)
    return UserCreated(user_id=user.id)


# ──────────────────────────────────────────────────────────────────────────────
# GET /me: Current profile
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get a user's own profile",
)
async def get_me(
    user_id: int = Query(..., alias="userId", gt=0),
    db: AsyncSession = Depends(get_db),
) -> User:
    logger.info("get_me", user_id=user_id)
    return await get_user_or_404(user_id, db)


# ──────────────────────────────────────────────────────────────────────────────
# GET /profiles: Discovery feed
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/profiles",
    response_model=list[ProfileCard],
    summary="Browse candidate profiles",
)
async def browse_profiles(
    user_id: int = Query(..., alias="userId", gt=0),
    gender: str | None = Query(None),
    min_age: int | None = Query(None, ge=0, le=150),
    max_age: int | None = Query(None, ge=0, le=150),
    location: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
) -> list[User]:
    """Return candidates for the swipe deck.

    Excludes the requesting user and everyone they already swiped on,
    newest accounts first.  Age bounds are inclusive and computed from
    ``birthdate``; ``location`` is a substring match.
    """
    log = logger.bind(user_id=user_id)
    log.info("browse_profiles", gender=gender, min_age=min_age, max_age=max_age, location=location)

    await get_user_or_404(user_id, db)

    stmt = select(User).where(
        User.id != user_id,
        User.id.not_in(SwipeLedger.swiped_target_ids(user_id)),
    )

    today = date.today()
    if gender:
        stmt = stmt.where(User.gender == gender)
    if min_age is not None:
        stmt = stmt.where(User.birthdate <= _years_before(today, min_age))
    if max_age is not None:
        stmt = stmt.where(User.birthdate > _years_before(today, max_age + 1))
    if location:
        stmt = stmt.where(User.location.contains(location, autoescape=True))

    stmt = stmt.order_by(User.created_at.desc(), User.id.desc()).limit(
        get_settings().PROFILE_PAGE_SIZE
    )
    with storage_errors("profile browsing"):
        result = await db.execute(stmt)
    candidates = list(result.scalars().all())

    log.info("browse_profiles_complete", candidate_count=len(candidates))
    return candidates


# ──────────────────────────────────────────────────────────────────────────────
# PUT /update-profile: Partial profile update
# ──────────────────────────────────────────────────────────────────────────────

@router.put(
    "/update-profile",
    response_model=UserResponse,
    summary="Update profile fields",
)
async def update_profile(
    payload: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Apply the fields present in the request body.

    Only fields present in the request body are applied; an empty update is
    rejected.
    """
    log = logger.bind(user_id=payload.user_id)
    update_data = payload.model_dump(exclude_unset=True, exclude={"user_id"})
    if not update_data:
        raise ValidationError("No fields to update.")

    user = await get_user_or_404(payload.user_id, db)

    new_username = update_data.get("username")
    if new_username is not None and new_username != user.username:
        stmt = select(User.id).where(User.username == new_username, User.id != user.id)
        with storage_errors("profile update"):
            taken = (await db.execute(stmt)).first()
        if taken is not None:
            raise ConflictError("Username is already in use.")

    for field, value in update_data.items():
        setattr(user, field, value)

    try:
        with storage_errors("profile update"):
            await db.flush()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Username is already in use.") from None

    log.info("update_profile_complete", updated_fields=list(update_data.keys()))
    return user


# ──────────────────────────────────────────────────────────────────────────────
# POST /upload-photo: Store a photo and attach its reference
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/upload-photo",
    response_model=PhotoUploaded,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a profile photo",
)
async def upload_photo(
    user_id: int = Form(..., alias="userId", gt=0),
    file: UploadFile = File(..., description="JPEG, PNG, WebP or GIF image"),
    db: AsyncSession = Depends(get_db),
) -> PhotoUploaded:
    """Hand the image to the blob store and save the returned reference on
    the user record."""
    settings = get_settings()
    log = logger.bind(user_id=user_id, content_type=file.content_type)
    log.info("upload_photo_start")

    if file.content_type not in settings.photo_content_types_list:
        raise ValidationError(
            f"Unsupported image type; allowed: {', '.join(settings.photo_content_types_list)}."
        )

    user = await get_user_or_404(user_id, db)

    data = await file.read()
    if not data:
        raise ValidationError("Uploaded file is empty.")
    if len(data) > settings.PHOTO_MAX_BYTES:
        raise ValidationError(f"Image exceeds {settings.PHOTO_MAX_BYTES} bytes.")

    try:
        reference = await asyncio.to_thread(store_blob, data, file.content_type)
    except (GoogleAPIError, GoogleAuthError, OSError) as exc:
        log.error("upload_photo_store_failed", error=repr(exc))
        raise TransientStorageError("Photo storage temporarily unavailable, please retry.") from exc

    user.photo = reference
    with storage_errors("photo upload"):
        await db.flush()

    log.info("upload_photo_complete", photo=reference)
    return PhotoUploaded(photo=reference, url=public_url(reference))
