"""
Photo sub-resource manager for an open Regula edit session.

State here belongs to one session generation. ``reset`` is called every time
the session opens; results of requests started under an older generation
are logged and dropped instead of being applied.
"""

from __future__ import annotations

import logging
import mimetypes
import uuid
from pathlib import PurePath
from typing import TYPE_CHECKING, List, Optional, Set

from ..core.errors import ApiError, LocalValidationError, log_exception
from ..schemas.regula import Photo
from ..state.notifications import NotificationChannel
from ..state.observable import Observable
from .remote import RegulaApi

if TYPE_CHECKING:
    from .session import RegulaEditSession


DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024


def generate_file_name(original: str, content_type: str) -> str:
    """Unique upload name keeping the original extension when it has one."""
    suffix = PurePath(original or "").suffix.lower()
    if not suffix:
        suffix = mimetypes.guess_extension(content_type) or ""
    return f"photo_{uuid.uuid4().hex}{suffix}"


def resolve_content_type(file_name: str, content_type: Optional[str]) -> str:
    if content_type:
        return content_type.strip().lower()
    guessed, _ = mimetypes.guess_type(file_name or "")
    return (guessed or "").lower()


class PhotoManager(Observable):
    def __init__(
        self,
        api: RegulaApi,
        session: "RegulaEditSession",
        notifications: NotificationChannel,
        *,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ) -> None:
        super().__init__()
        self.logger = logging.getLogger("regula.photos")
        self.api = api
        self.session = session
        self.notifications = notifications
        self.max_upload_bytes = max_upload_bytes
        self.photos: List[Photo] = []
        self.loading = False
        self.loaded = False
        self.uploading = False
        self.deleting: Set[int] = set()

    @property
    def busy(self) -> bool:
        return self.loading or self.uploading or bool(self.deleting)

    def reset(self) -> None:
        self.photos = []
        self.loading = False
        self.loaded = False
        self.uploading = False
        self.deleting = set()
        self._emit("reset")

    def get(self, photo_id: int) -> Optional[Photo]:
        for photo in self.photos:
            if photo.id == photo_id:
                return photo
        return None

    async def load_photos(self) -> bool:
        """Fetch the photo grid once per session; failures only reach the log."""
        token = self.session.generation
        if not self.session.is_current(token):
            self.logger.warning("load_photos ignored: no open session")
            return False
        if self.loading or self.loaded:
            return self.loaded
        self.loading = True
        self._emit("load_started")
        try:
            photos = await self.api.list_photos()
        except ApiError as exc:
            log_exception(self.logger, "Fetching photos failed", extra={"generation": token}, exc=exc)
            return False
        finally:
            if self.session.is_current(token):
                self.loading = False
                self._emit("load_finished")
        if not self.session.is_current(token):
            self.logger.info("Dropping photo list for closed session generation=%s", token)
            return False
        self.photos = list(photos)
        self.loaded = True
        self._emit("loaded")
        return True

    def select_photo(self, photo_id: Optional[int]) -> None:
        self.session.update_field("photo_id", photo_id)
        self._emit("selected")

    def validate_upload(self, file_name: str, content: bytes, content_type: Optional[str]) -> str:
        resolved = resolve_content_type(file_name, content_type)
        if not resolved.startswith("image/"):
            raise LocalValidationError("Please select an image file")
        if not content:
            raise LocalValidationError("The selected file is empty")
        if len(content) > self.max_upload_bytes:
            raise LocalValidationError(
                f"Photo is too large ({len(content)} bytes, limit {self.max_upload_bytes})"
            )
        return resolved

    async def upload_photo(self, file_name: str, content: bytes, content_type: Optional[str] = None) -> Optional[Photo]:
        """
        Upload one image and select it in the draft.

        Raises LocalValidationError for non-image or oversize input before
        any request is made. Returns None when the upload was ignored or
        failed.
        """
        if not self.session.is_open:
            self.logger.warning("upload_photo ignored: no open session")
            return None
        if self.uploading:
            self.logger.info("upload_photo ignored: an upload is already in flight")
            return None
        resolved = self.validate_upload(file_name, content, content_type)
        token = self.session.generation
        stored_name = generate_file_name(file_name, resolved)
        self.uploading = True
        self._emit("upload_started")
        try:
            photo = await self.api.upload_photo(file_name=stored_name, content=content, content_type=resolved)
        except ApiError as exc:
            log_exception(self.logger, "Uploading photo failed", extra={"file_name": stored_name}, exc=exc)
            self.notifications.error(exc.user_message("Failed to upload photo"))
            return None
        finally:
            if self.session.is_current(token):
                self.uploading = False
                self._emit("upload_finished")
        self.notifications.success("Photo uploaded successfully")
        if not self.session.is_current(token):
            self.logger.info("Uploaded photo id=%s arrived after its session closed", photo.id)
            return photo
        self.photos = [photo, *[p for p in self.photos if p.id != photo.id]]
        self.select_photo(photo.id)
        self._emit("uploaded")
        return photo

    async def delete_photo(self, photo_id: int) -> bool:
        if not self.session.is_open:
            self.logger.warning("delete_photo ignored: no open session")
            return False
        if photo_id in self.deleting:
            self.logger.info("delete_photo ignored: photo id=%s already being deleted", photo_id)
            return False
        token = self.session.generation
        self.deleting.add(photo_id)
        self._emit("delete_started")
        try:
            await self.api.delete_photo(photo_id)
        except ApiError as exc:
            log_exception(self.logger, "Deleting photo failed", extra={"photo_id": photo_id, "status": exc.status_code}, exc=exc)
            self.notifications.error(exc.user_message("Failed to delete photo"))
            return False
        finally:
            if self.session.is_current(token):
                self.deleting.discard(photo_id)
                self._emit("delete_finished")
        self.notifications.success("Photo deleted successfully")
        if not self.session.is_current(token):
            return True
        self.photos = [p for p in self.photos if p.id != photo_id]
        if self.session.draft.photo_id == photo_id:
            self.select_photo(None)
        self._emit("deleted")
        return True

    async def fetch_photo_bytes(self, photo_id: int) -> bytes:
        return await self.api.fetch_photo_bytes(photo_id)
