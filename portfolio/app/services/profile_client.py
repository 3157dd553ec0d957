"""
HTTP client for the profile API, as used by the profile view and edit dialog.
Works with any httpx.Client (a real one, or FastAPI's TestClient).
"""
import httpx

from portfolio.app.core.exceptions import NotFoundError, StorageError
from portfolio.app.core.logging_config import get_logger
from portfolio.app.schemas.profile import ProfileRecord
from portfolio.app.services.profile_form import ProfileForm, check_picture

logger = get_logger("services.profile_client")


class ProfileClient:
    def __init__(self, http: httpx.Client, base_path: str = "/api/users"):
        self.http = http
        self.base_path = base_path.rstrip("/")

    @classmethod
    def connect(cls, base_url: str, timeout: float = 30.0) -> "ProfileClient":
        return cls(httpx.Client(base_url=base_url, timeout=timeout))

    def _check(self, response: httpx.Response) -> httpx.Response:
        if response.is_success:
            return response
        try:
            body = response.json()
            message = body.get("message") or response.reason_phrase
        except ValueError:
            body, message = None, response.text or response.reason_phrase
        if response.status_code == 404:
            raise NotFoundError(message)
        logger.error("Profile API error status=%s message=%s", response.status_code, message)
        raise StorageError(message, detail=(body or {}).get("error"))

    def list_profiles(self) -> list[ProfileRecord]:
        response = self._check(self.http.get(self.base_path))
        return [ProfileRecord.model_validate(item) for item in response.json()]

    def current_profile(self) -> ProfileRecord | None:
        """The single implicit profile the view renders: the first stored record."""
        profiles = self.list_profiles()
        return profiles[0] if profiles else None

    def get_profile(self, profile_id: str) -> ProfileRecord:
        response = self._check(self.http.get(f"{self.base_path}/{profile_id}"))
        return ProfileRecord.model_validate(response.json())

    def save_profile(
        self,
        form: ProfileForm,
        picture: tuple[str, bytes, str] | None = None,
        profile_id: str | None = None,
    ) -> ProfileRecord:
        """
        POST a new profile, or PUT over profile_id when given.

        picture is (filename, content, content_type) and is checked before upload.
        """
        data = form.to_multipart()
        files = None
        if picture is not None:
            filename, content, content_type = picture
            check_picture(content_type, len(content))
            files = {"profilePicture": (filename, content, content_type)}
        if profile_id:
            response = self.http.put(f"{self.base_path}/{profile_id}", data=data, files=files)
        else:
            response = self.http.post(self.base_path, data=data, files=files)
        return ProfileRecord.model_validate(self._check(response).json())

    def delete_profile(self, profile_id: str) -> str:
        response = self._check(self.http.delete(f"{self.base_path}/{profile_id}"))
        return response.json()["message"]

    def get_picture(self, profile_id: str) -> tuple[bytes, str]:
        """Picture bytes and content type."""
        response = self._check(self.http.get(f"{self.base_path}/{profile_id}/profile-picture"))
        return response.content, response.headers.get("content-type", "")
