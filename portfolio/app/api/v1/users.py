"""
User profile endpoints - CRUD over multipart forms plus the profile picture proxy
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import Response

from portfolio.app.core.dependencies import get_picture_store, get_profile_store
from portfolio.app.core.exceptions import APIError, NotFoundError, PortfolioError
from portfolio.app.core.logging_config import get_logger
from portfolio.app.schemas.profile import (
    ProfileFields,
    ProfileRecord,
    Project,
    Social,
    decode_json_list,
)
from portfolio.app.services.picture_store import PictureStore, content_type_for
from portfolio.app.services.profile_store import (
    ProfileStore,
    remove_picture_quietly,
    require_full_name,
)

logger = get_logger("api.users")
router = APIRouter()


def _detail(exc: Exception) -> str:
    if isinstance(exc, PortfolioError) and exc.detail:
        return f"{exc.message}: {exc.detail}"
    return str(exc)


def _store_upload(pictures: PictureStore, upload: UploadFile | None) -> str | None:
    """Write an uploaded picture, if any. Reads at most one byte past the size cap."""
    if upload is None or not upload.filename:
        return None
    data = upload.file.read(pictures.max_bytes + 1)
    size = upload.size if upload.size is not None else len(data)
    return pictures.put(data, upload.content_type or "", size, original_name=upload.filename)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ProfileRecord)
def create_user(
    fullName: Optional[str] = Form(None),
    profession: Optional[str] = Form(None),
    skills: Optional[str] = Form(None),
    projects: Optional[str] = Form(None),
    socials: Optional[str] = Form(None),
    profilePicture: Optional[UploadFile] = File(None),
    store: ProfileStore = Depends(get_profile_store),
    pictures: PictureStore = Depends(get_picture_store),
):
    """Create a profile. Sub-lists arrive as JSON-encoded arrays."""
    picture = None
    try:
        fields = ProfileFields(
            fullName=require_full_name(fullName),
            profession=profession or None,
            skills=decode_json_list(skills, "skills", str),
            projects=decode_json_list(projects, "projects", Project),
            socials=decode_json_list(socials, "socials", Social),
        )
        picture = _store_upload(pictures, profilePicture)
        if picture:
            fields.profilePicture = picture
        return store.create(fields)
    except Exception as e:
        remove_picture_quietly(pictures, picture)
        logger.exception("Error creating user")
        raise APIError("Error creating user", error=_detail(e)) from e


@router.get("", response_model=List[ProfileRecord])
def get_all_users(store: ProfileStore = Depends(get_profile_store)):
    try:
        return store.list_all()
    except Exception as e:
        logger.exception("Error fetching users")
        raise APIError("Error fetching users", error=_detail(e)) from e


@router.get("/{user_id}", response_model=ProfileRecord)
def get_user_by_id(user_id: str, store: ProfileStore = Depends(get_profile_store)):
    try:
        record = store.get_by_id(user_id)
    except Exception as e:
        logger.exception("Error fetching user id=%s", user_id)
        raise APIError("Error fetching user", error=_detail(e)) from e
    if not record:
        raise APIError("User not found", status_code=status.HTTP_404_NOT_FOUND)
    return record


@router.put("/{user_id}", response_model=ProfileRecord)
def update_user(
    user_id: str,
    fullName: Optional[str] = Form(None),
    profession: Optional[str] = Form(None),
    skills: Optional[str] = Form(None),
    projects: Optional[str] = Form(None),
    socials: Optional[str] = Form(None),
    profilePicture: Optional[UploadFile] = File(None),
    store: ProfileStore = Depends(get_profile_store),
    pictures: PictureStore = Depends(get_picture_store),
):
    """
    Update a profile. Only non-empty fields are applied; everything else keeps
    its stored value. A new picture replaces the old one, which is then removed.
    """
    try:
        existing = store.get_by_id(user_id)
    except Exception as e:
        logger.exception("Error updating user id=%s", user_id)
        raise APIError("Error updating user", error=_detail(e)) from e
    if not existing:
        raise APIError("User not found", status_code=status.HTTP_404_NOT_FOUND)

    picture = None
    try:
        changes = {}
        if fullName:
            changes["fullName"] = fullName
        if profession:
            changes["profession"] = profession
        if skills:
            changes["skills"] = decode_json_list(skills, "skills", str)
        if projects:
            changes["projects"] = decode_json_list(projects, "projects", Project)
        if socials:
            changes["socials"] = decode_json_list(socials, "socials", Social)
        picture = _store_upload(pictures, profilePicture)
        if picture:
            changes["profilePicture"] = picture
        record = store.update(user_id, ProfileFields(**changes))
    except NotFoundError as e:
        remove_picture_quietly(pictures, picture)
        raise APIError("User not found", status_code=status.HTTP_404_NOT_FOUND) from e
    except Exception as e:
        remove_picture_quietly(pictures, picture)
        logger.exception("Error updating user id=%s", user_id)
        raise APIError("Error updating user", error=_detail(e)) from e

    if picture and existing.profilePicture and existing.profilePicture != picture:
        remove_picture_quietly(pictures, existing.profilePicture, user_id)
    return record


@router.delete("/{user_id}")
def delete_user(user_id: str, store: ProfileStore = Depends(get_profile_store)):
    try:
        store.delete(user_id)
    except NotFoundError as e:
        raise APIError("User not found", status_code=status.HTTP_404_NOT_FOUND) from e
    except Exception as e:
        logger.exception("Error deleting user id=%s", user_id)
        raise APIError("Error deleting user", error=_detail(e)) from e
    return {"message": "User deleted successfully"}


@router.get("/{user_id}/profile-picture")
def get_profile_picture(
    user_id: str,
    store: ProfileStore = Depends(get_profile_store),
    pictures: PictureStore = Depends(get_picture_store),
):
    """Stream the stored picture with a content type derived from its extension."""
    try:
        record = store.get_by_id(user_id)
        data = pictures.get(record.profilePicture) if record and record.profilePicture else None
    except Exception as e:
        logger.exception("Error retrieving profile picture id=%s", user_id)
        raise APIError("Error retrieving profile picture", error=_detail(e)) from e
    if data is None:
        raise APIError("Profile picture not found", status_code=status.HTTP_404_NOT_FOUND)
    return Response(content=data, media_type=content_type_for(record.profilePicture))
