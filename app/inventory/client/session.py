"""
Client session for the cover-to-inventory flow.

Mirrors what the single-page app does: pick a cover, ask the server to
extract its metadata, let the user edit the draft, save it, and keep the
inventory list fresh. Actions that start a request are refused while
another request is in flight.
"""

import logging
import mimetypes
from enum import Enum
from pathlib import Path
from typing import Any

import httpx

from ..models import BOOK_FIELDS
from .search import filter_books

logger = logging.getLogger(__name__)

ACCEPTED_MIME_TYPES = frozenset({"image/jpeg", "image/png"})


class ClientState(str, Enum):
    """Where the session is in the upload/review/save flow."""

    IDLE = "idle"
    IMAGE_SELECTED = "image-selected"
    EXTRACTING = "extracting"
    REVIEWING = "reviewing"
    SAVING = "saving"
    IDLE_WITH_ERROR = "idle-with-error"


IN_FLIGHT_STATES = frozenset({ClientState.EXTRACTING, ClientState.SAVING})


class ClientStateError(Exception):
    """Raised when an action is not allowed in the current state."""

    pass


class InventorySession:
    """
    Stateful client for the book inventory API.

    Failures never raise out of ``extract``, ``save`` or ``refresh``; they
    are recorded in ``notification`` and the session moves to
    ``idle-with-error``. Calling an action from the wrong state raises
    ClientStateError.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        http_client: httpx.Client | None = None,
    ):
        """
        Args:
            base_url: Root URL of the API.
            http_client: Pre-built client (e.g. a FastAPI TestClient). When
                given, ``base_url`` is ignored and the caller owns closing it.
        """
        self._owns_client = http_client is None
        self.http = http_client or httpx.Client(base_url=base_url)

        self.state = ClientState.IDLE
        self.image: bytes | None = None
        self.image_name: str | None = None
        self.image_mime_type: str | None = None
        self.draft: dict[str, str] | None = None
        self.books: list[dict[str, Any]] = []
        self.query = ""
        self.notification: str | None = None
        self.last_saved_id: str | None = None

    # -------------------------------------------------------------------------
    # Image selection
    # -------------------------------------------------------------------------

    def select_image(self, data: bytes, filename: str, mime_type: str | None = None) -> None:
        """Pick a cover to extract from. Replaces any previous image and draft."""
        self._require_not_in_flight()

        mime_type = mime_type or mimetypes.guess_type(filename)[0]
        if mime_type not in ACCEPTED_MIME_TYPES:
            raise ValueError(f"Unsupported file type for {filename}: only JPEG and PNG are accepted")
        if not data:
            raise ValueError(f"{filename} is empty")

        self.image = data
        self.image_name = filename
        self.image_mime_type = mime_type
        self.draft = None
        self.notification = None
        self.state = ClientState.IMAGE_SELECTED

    def select_image_file(self, path: str | Path) -> None:
        """Read a cover from disk and select it."""
        path = Path(path)
        self.select_image(path.read_bytes(), path.name)

    # -------------------------------------------------------------------------
    # Extraction and review
    # -------------------------------------------------------------------------

    def extract(self) -> dict[str, str] | None:
        """
        Send the selected cover to ``/api/extract`` and start reviewing.

        Returns:
            The draft seeded from the extraction, or None on failure.
        """
        self._require_not_in_flight()
        if self.image is None:
            raise ClientStateError("No image selected")

        self.state = ClientState.EXTRACTING
        self.notification = None
        try:
            response = self.http.post(
                "/api/extract",
                files={"image": (self.image_name, self.image, self.image_mime_type)},
            )
        except httpx.HTTPError as e:
            return self._fail(f"Failed to extract book details: {e}")

        if response.status_code != 200:
            return self._fail(self._error_message(response, "Failed to extract book details"))

        payload = response.json()
        self.draft = {field: str(payload.get(field) or "") for field in BOOK_FIELDS}
        self.state = ClientState.REVIEWING
        return dict(self.draft)

    def update_field(self, name: str, value: str) -> None:
        """Edit one field of the draft. Only the five metadata fields exist."""
        if self.draft is None or self.state in IN_FLIGHT_STATES:
            raise ClientStateError("Nothing to edit")
        if name not in BOOK_FIELDS:
            raise KeyError(name)
        self.draft[name] = value

    @property
    def can_save(self) -> bool:
        """Saving needs a draft with a non-empty title and author."""
        if self.draft is None or self.state in IN_FLIGHT_STATES:
            return False
        return bool(self.draft["title"] and self.draft["author"])

    # -------------------------------------------------------------------------
    # Saving and listing
    # -------------------------------------------------------------------------

    def save(self) -> str | None:
        """
        Post the draft to ``/api/books``.

        On success the image and draft are cleared and the list refreshed.
        On failure the draft is kept so the user can fix it and retry.

        Returns:
            The new record's ID, or None on failure.
        """
        self._require_not_in_flight()
        if not self.can_save:
            raise ClientStateError("Title and Author are required before saving")

        self.state = ClientState.SAVING
        self.notification = None
        try:
            response = self.http.post("/api/books", json=self.draft)
        except httpx.HTTPError as e:
            return self._fail(f"Failed to save book: {e}")

        if response.status_code != 201:
            return self._fail(self._error_message(response, "Failed to save book"))

        self.last_saved_id = response.json()["bookId"]
        self.image = None
        self.image_name = None
        self.image_mime_type = None
        self.draft = None
        self.state = ClientState.IDLE
        self.refresh()
        if self.state == ClientState.IDLE:
            self.notification = "Book saved successfully"
        return self.last_saved_id

    def refresh(self) -> list[dict[str, Any]]:
        """Re-fetch the inventory from ``/api/books``."""
        try:
            response = self.http.get("/api/books")
        except httpx.HTTPError as e:
            self._notify_refresh_failure(f"Failed to fetch books: {e}")
            return self.books

        if response.status_code != 200:
            self._notify_refresh_failure(self._error_message(response, "Failed to fetch books"))
            return self.books

        self.books = response.json()
        return self.books

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def search(self, query: str) -> list[dict[str, Any]]:
        """Set the search query and return the matching books."""
        self.query = query
        return self.visible_books

    @property
    def visible_books(self) -> list[dict[str, Any]]:
        """Books matching the current query, recomputed from the full list."""
        return filter_books(self.books, self.query)

    # -------------------------------------------------------------------------
    # Housekeeping
    # -------------------------------------------------------------------------

    def dismiss_notification(self) -> None:
        self.notification = None
        if self.state != ClientState.IDLE_WITH_ERROR:
            return
        if self.draft is not None:
            self.state = ClientState.REVIEWING
        elif self.image is not None:
            self.state = ClientState.IMAGE_SELECTED
        else:
            self.state = ClientState.IDLE

    def close(self) -> None:
        if self._owns_client:
            self.http.close()

    def __enter__(self) -> "InventorySession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _require_not_in_flight(self) -> None:
        if self.state in IN_FLIGHT_STATES:
            raise ClientStateError(f"A request is already in flight ({self.state.value})")

    def _fail(self, message: str) -> None:
        logger.error(message)
        self.notification = message
        self.state = ClientState.IDLE_WITH_ERROR
        return None

    def _notify_refresh_failure(self, message: str) -> None:
        logger.error(message)
        self.notification = message
        if self.state == ClientState.IDLE:
            self.state = ClientState.IDLE_WITH_ERROR

    @staticmethod
    def _error_message(response: httpx.Response, fallback: str) -> str:
        try:
            body = response.json()
        except ValueError:
            return f"{fallback} (HTTP {response.status_code})"
        error = body.get("error") if isinstance(body, dict) else None
        if not error:
            return f"{fallback} (HTTP {response.status_code})"
        details = body.get("details")
        return f"{error}: {details}" if details else error
