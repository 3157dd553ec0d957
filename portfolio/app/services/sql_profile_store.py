"""
Profile store - relational variant. Same operations and error contract as
JsonProfileStore, one row per profile in the profiles table.
"""
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portfolio.app.core.exceptions import NotFoundError, StorageError
from portfolio.app.core.logging_config import get_logger
from portfolio.app.models.profile import Profile
from portfolio.app.schemas.profile import (
    ProfileFields,
    ProfileRecord,
    fields_to_profile_dict,
    profile_model_to_record,
    utc_now,
)
from portfolio.app.services.picture_store import PictureStore
from portfolio.app.services.profile_store import (
    changes_from_fields,
    remove_picture_quietly,
    require_full_name,
)

logger = get_logger("services.sql_profile_store")


class SqlProfileStore:
    def __init__(self, db: Session, pictures: PictureStore):
        self.db = db
        self.pictures = pictures

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Profile %s failed error=%s", action, e)
            raise StorageError(f"Failed to {action} profile", detail=str(e)) from e

    def _get_row(self, profile_id: str) -> Profile | None:
        try:
            return self.db.query(Profile).filter(Profile.id == profile_id).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError("Failed to read profile", detail=str(e)) from e

    def list_all(self) -> list[ProfileRecord]:
        try:
            rows = self.db.query(Profile).order_by(Profile.created_at).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError("Failed to read profiles", detail=str(e)) from e
        return [profile_model_to_record(row) for row in rows]

    def get_by_id(self, profile_id: str) -> ProfileRecord | None:
        row = self._get_row(profile_id)
        return profile_model_to_record(row) if row else None

    def create(self, fields: ProfileFields) -> ProfileRecord:
        changes = changes_from_fields(fields)
        require_full_name(changes.get("fullName"))
        now = utc_now()
        values = {"skills": [], "projects": [], "socials": [], **fields_to_profile_dict(changes)}
        row = Profile(id=str(uuid.uuid4()), created_at=now, updated_at=now, **values)
        self.db.add(row)
        self._commit("create")
        self.db.refresh(row)
        logger.info("Profile created profile_id=%s picture=%s", row.id, row.profile_picture)
        return profile_model_to_record(row)

    def update(self, profile_id: str, fields: ProfileFields) -> ProfileRecord:
        changes = changes_from_fields(fields)
        row = self._get_row(profile_id)
        if not row:
            raise NotFoundError("User not found", detail=f"id={profile_id}")
        for key, value in fields_to_profile_dict(changes).items():
            setattr(row, key, value)
        row.updated_at = utc_now()
        self._commit("update")
        self.db.refresh(row)
        logger.info("Profile updated profile_id=%s fields=%s", profile_id, ",".join(sorted(changes)))
        return profile_model_to_record(row)

    def delete(self, profile_id: str) -> None:
        row = self._get_row(profile_id)
        if not row:
            raise NotFoundError("User not found", detail=f"id={profile_id}")
        remove_picture_quietly(self.pictures, row.profile_picture, profile_id)
        self.db.delete(row)
        self._commit("delete")
        logger.info("Profile deleted profile_id=%s", profile_id)
