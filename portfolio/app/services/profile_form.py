"""
Edit-dialog form mapping.

The dialog collects skills as "a, b, c" and projects/socials as
"name|link, name|link"; these helpers turn that text into the structured
sub-lists the API expects, and back again for pre-filling the dialog.
"""
import json
from typing import List

from pydantic import BaseModel

from portfolio.app.core.config import FORM_PICTURE_TYPES
from portfolio.app.core.exceptions import ValidationError
from portfolio.app.schemas.profile import ProfileRecord
from portfolio.app.services.picture_store import MAX_PICTURE_BYTES


def parse_skills(text: str | None) -> List[str]:
    """Comma-separated skills -> trimmed list, blank entries dropped."""
    if not text:
        return []
    return [s.strip() for s in text.split(",") if s.strip()]


def parse_pairs(text: str | None, key: str) -> List[dict]:
    """Comma-separated "label|link" entries -> [{key: label, "link": link}]."""
    if not text:
        return []
    pairs = []
    for entry in text.split(","):
        if not entry.strip():
            continue
        label, _, link = entry.partition("|")
        pairs.append({key: label.strip(), "link": link.strip()})
    return pairs


def format_pairs(items: list, key: str) -> str:
    parts = []
    for item in items:
        data = item if isinstance(item, dict) else item.model_dump()
        link = data.get("link") or ""
        parts.append(f"{data.get(key, '')}|{link}" if link else data.get(key, ""))
    return ", ".join(parts)


def check_picture(content_type: str | None, size: int, max_bytes: int = MAX_PICTURE_BYTES) -> None:
    """Client-side picture check: PNG, JPG or GIF under the size cap."""
    if content_type not in FORM_PICTURE_TYPES:
        raise ValidationError("Please upload a PNG, JPG, or GIF image", detail=f"content_type={content_type}")
    if size > max_bytes:
        raise ValidationError(f"Image must be under {max_bytes // (1024 * 1024)}MB", detail=f"size={size}")


class ProfileForm(BaseModel):
    """Raw values as typed into the edit dialog."""
    fullName: str = ""
    profession: str = ""
    skills: str = ""
    projects: str = ""
    socials: str = ""

    def validate_required(self) -> None:
        if not self.fullName.strip():
            raise ValidationError("Full Name is required")

    def to_multipart(self) -> dict[str, str]:
        """Form fields for POST/PUT /api/users, sub-lists JSON-encoded."""
        self.validate_required()
        return {
            "fullName": self.fullName,
            "profession": self.profession,
            "skills": json.dumps(parse_skills(self.skills)),
            "projects": json.dumps(parse_pairs(self.projects, "name")),
            "socials": json.dumps(parse_pairs(self.socials, "platform")),
        }

    @classmethod
    def from_record(cls, record: ProfileRecord) -> "ProfileForm":
        """Pre-fill the dialog from a stored profile."""
        return cls(
            fullName=record.fullName,
            profession=record.profession or "",
            skills=", ".join(record.skills),
            projects=format_pairs(record.projects, "name"),
            socials=format_pairs(record.socials, "platform"),
        )
