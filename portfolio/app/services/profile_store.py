"""
Profile store - file-backed variant.

The whole users.json array is the unit of durability: every mutation loads the
full document, changes it in memory and rewrites it. Without serialize_writes
two overlapping mutations race on that cycle and the later rewrite wins,
discarding whatever the earlier one changed.
"""
import json
import os
import tempfile
import threading
import uuid
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import Iterator, Protocol

from pydantic import ValidationError as PydanticValidationError

from portfolio.app.core.exceptions import NotFoundError, StorageError, ValidationError
from portfolio.app.core.logging_config import get_logger
from portfolio.app.schemas.profile import ProfileFields, ProfileRecord, to_timestamp
from portfolio.app.services.picture_store import PictureStore

logger = get_logger("services.profile_store")

LIST_FIELDS = ("skills", "projects", "socials")


class ProfileStore(Protocol):
    """Operations shared by the JSON and SQL backends."""

    def list_all(self) -> list[ProfileRecord]: ...

    def get_by_id(self, profile_id: str) -> ProfileRecord | None: ...

    def create(self, fields: ProfileFields) -> ProfileRecord: ...

    def update(self, profile_id: str, fields: ProfileFields) -> ProfileRecord: ...

    def delete(self, profile_id: str) -> None: ...


def require_full_name(value: str | None) -> str:
    if value is None or not value.strip():
        raise ValidationError("fullName is required")
    return value


def changes_from_fields(fields: ProfileFields) -> dict:
    """Keys explicitly set on fields, JSON-ready; explicit nulls on list fields become []."""
    changes = fields.model_dump(mode="json", exclude_unset=True)
    if "fullName" in changes:
        require_full_name(changes["fullName"])
    for key in LIST_FIELDS:
        if key in changes and changes[key] is None:
            changes[key] = []
    return changes


def remove_picture_quietly(pictures: PictureStore, filename: str | None, profile_id: str | None = None) -> None:
    """Best-effort picture cleanup; failures are logged, not raised."""
    if not filename:
        return
    try:
        pictures.delete(filename)
    except StorageError as e:
        logger.warning("Picture cleanup failed profile_id=%s picture=%s error=%s", profile_id, filename, e.detail)


class JsonProfileStore:
    def __init__(self, path: str | Path, pictures: PictureStore, serialize_writes: bool = False):
        self.path = Path(path)
        self.pictures = pictures
        self._write_lock = threading.Lock() if serialize_writes else None
        self.path.parent.mkdir(parents=True, exist_ok=True)

    # --- document I/O ---

    def _load(self) -> list[dict]:
        """Read the full document. A missing or empty file is an empty store."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageError("Failed to read profiles", detail=str(e)) from e
        if not raw.strip():
            return []
        try:
            records = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError("Profiles document is not valid JSON", detail=str(e)) from e
        if not isinstance(records, list):
            raise StorageError("Profiles document must be a JSON array")
        return records

    def _save(self, records: list[dict]) -> None:
        """Rewrite the full document (temp file + rename, so readers never see half a file)."""
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".users-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(records, f, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                Path(tmp_path).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise StorageError("Failed to write profiles", detail=str(e)) from e

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        """Holds the write lock for a whole read-modify-write cycle when serialize_writes is on."""
        with self._write_lock if self._write_lock is not None else nullcontext():
            yield

    @staticmethod
    def _to_record(raw: dict) -> ProfileRecord:
        try:
            return ProfileRecord.model_validate(raw)
        except PydanticValidationError as e:
            raise StorageError("Stored profile is malformed", detail=str(e)) from e

    @staticmethod
    def _index_of(records: list[dict], profile_id: str) -> int:
        for i, raw in enumerate(records):
            if isinstance(raw, dict) and raw.get("id") == profile_id:
                return i
        return -1

    # --- operations ---

    def list_all(self) -> list[ProfileRecord]:
        return [self._to_record(raw) for raw in self._load()]

    def get_by_id(self, profile_id: str) -> ProfileRecord | None:
        records = self._load()
        i = self._index_of(records, profile_id)
        return self._to_record(records[i]) if i >= 0 else None

    def create(self, fields: ProfileFields) -> ProfileRecord:
        changes = changes_from_fields(fields)
        require_full_name(changes.get("fullName"))
        now = to_timestamp(None)
        record = ProfileRecord(
            **{**changes, "id": str(uuid.uuid4()), "createdAt": now, "updatedAt": now}
        )
        with self._mutation():
            records = self._load()
            records.append(record.model_dump(mode="json"))
            self._save(records)
        logger.info("Profile created profile_id=%s picture=%s", record.id, record.profilePicture)
        return record

    def update(self, profile_id: str, fields: ProfileFields) -> ProfileRecord:
        changes = changes_from_fields(fields)
        with self._mutation():
            records = self._load()
            i = self._index_of(records, profile_id)
            if i < 0:
                raise NotFoundError("User not found", detail=f"id={profile_id}")
            merged = {**records[i], **changes, "id": profile_id, "updatedAt": to_timestamp(None)}
            record = self._to_record(merged)
            records[i] = record.model_dump(mode="json")
            self._save(records)
        logger.info("Profile updated profile_id=%s fields=%s", profile_id, ",".join(sorted(changes)))
        return record

    def delete(self, profile_id: str) -> None:
        with self._mutation():
            records = self._load()
            i = self._index_of(records, profile_id)
            if i < 0:
                raise NotFoundError("User not found", detail=f"id={profile_id}")
            remove_picture_quietly(self.pictures, records[i].get("profilePicture"), profile_id)
            del records[i]
            self._save(records)
        logger.info("Profile deleted profile_id=%s", profile_id)
