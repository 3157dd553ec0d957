"""
Profile Pydantic schemas - camelCase field names, same shape on the wire and in users.json
"""
from datetime import datetime, timezone
from typing import List, Optional, Type

from pydantic import BaseModel, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from portfolio.app.core.exceptions import ValidationError


# --- Nested schemas ---
class Project(BaseModel):
    name: str
    link: str = ""


class Social(BaseModel):
    platform: str
    link: str = ""


class ProfileRecord(BaseModel):
    """A stored profile as returned by both storage backends."""
    id: str
    fullName: str
    profession: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    projects: List[Project] = Field(default_factory=list)
    socials: List[Social] = Field(default_factory=list)
    profilePicture: Optional[str] = None
    createdAt: str
    updatedAt: str

    model_config = {"extra": "ignore"}


class ProfileFields(BaseModel):
    """Input to create/update. update() only applies the keys that were explicitly set."""
    fullName: Optional[str] = None
    profession: Optional[str] = None
    skills: Optional[List[str]] = None
    projects: Optional[List[Project]] = None
    socials: Optional[List[Social]] = None
    profilePicture: Optional[str] = None

    model_config = {"extra": "ignore"}


def utc_now() -> datetime:
    """Naive UTC now, the form stored in DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_timestamp(value: datetime | None) -> str:
    """ISO 8601 with millisecond precision and a trailing Z."""
    return (value or utc_now()).isoformat(timespec="milliseconds") + "Z"


def decode_json_list(raw: str | None, field: str, item_type: Type) -> list:
    """
    Decode a JSON-encoded array sent as a multipart form field.

    None or blank -> []. Anything that is not a JSON array of item_type raises
    ValidationError naming the field.
    """
    if raw is None or not raw.strip():
        return []
    try:
        items = TypeAdapter(List[item_type]).validate_json(raw)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid {field}: expected a JSON array", detail=str(e)) from e
    return items


def profile_model_to_record(profile) -> ProfileRecord:
    """Convert Profile DB model to ProfileRecord schema"""
    return ProfileRecord(
        id=profile.id,
        fullName=profile.full_name,
        profession=profile.profession,
        skills=profile.skills or [],
        projects=[Project.model_validate(p) for p in (profile.projects or [])],
        socials=[Social.model_validate(s) for s in (profile.socials or [])],
        profilePicture=profile.profile_picture,
        createdAt=to_timestamp(profile.created_at),
        updatedAt=to_timestamp(profile.updated_at),
    )


def fields_to_profile_dict(fields: dict) -> dict:
    """Convert camelCase ProfileFields keys (as dumped) to DB model kwargs"""
    column_for = {
        "fullName": "full_name",
        "profession": "profession",
        "skills": "skills",
        "projects": "projects",
        "socials": "socials",
        "profilePicture": "profile_picture",
    }
    return {column_for[key]: value for key, value in fields.items() if key in column_for}
