"""Tests for the client session and search helpers."""

import httpx
import pytest
from fastapi.testclient import TestClient

from app.inventory.client import (
    ClientState,
    ClientStateError,
    InventorySession,
    filter_books,
    highlight,
    mark_matches,
    matches,
)
from app.inventory.main import app
from app.inventory.services.book_store import get_book_store

from .fakes import FailingBookStore, FakeVisionModel

BOOKS = [
    {"title": "Dune", "author": "Frank Herbert"},
    {"title": "Foundation", "author": "Isaac Asimov"},
]


class TestSearch:
    """Tests for client-side search."""

    def test_search_dun_matches_only_dune(self):
        assert filter_books(BOOKS, "dun") == [BOOKS[0]]

    def test_search_is_case_insensitive(self):
        assert filter_books(BOOKS, "FOUND") == [BOOKS[1]]

    def test_search_matches_author(self):
        assert filter_books(BOOKS, "asimov") == [BOOKS[1]]

    def test_search_ignores_other_fields(self):
        books = [{"title": "Dune", "author": "Herbert", "subject": "Fantasy"}]
        assert filter_books(books, "fantasy") == []

    def test_empty_query_matches_all(self):
        assert filter_books(BOOKS, "") == BOOKS
        assert matches(BOOKS[0], None)

    def test_whitespace_query_is_literal(self):
        assert filter_books(BOOKS, "   ") == []
        assert filter_books(BOOKS, "c A") == [BOOKS[1]]

    def test_trailing_space_not_trimmed(self):
        assert not matches(BOOKS[0], "dune ")
        assert filter_books(BOOKS, "dune ") == []

    def test_missing_fields_do_not_match(self):
        assert not matches({"title": None}, "dune")


class TestHighlight:
    """Tests for match highlighting."""

    def test_single_match(self):
        assert highlight("Dune", "dun") == [("Dun", True), ("e", False)]

    def test_every_occurrence_marked(self):
        assert highlight("Banana", "an") == [
            ("B", False),
            ("an", True),
            ("an", True),
            ("a", False),
        ]

    def test_no_query_no_highlight(self):
        assert highlight("Dune", "") == [("Dune", False)]

    def test_space_in_query_highlighted(self):
        assert highlight("Dune Messiah", "dune ") == [("Dune ", True), ("Messiah", False)]

    def test_regex_characters_literal(self):
        assert highlight("C++ Primer", "c++") == [("C++", True), (" Primer", False)]

    def test_mark_matches_escapes_html(self):
        assert mark_matches("<Dune>", "dun") == "&lt;<mark>Dun</mark>e&gt;"


class TestInventorySession:
    """Tests for the upload/review/save flow against the real app."""

    @pytest.fixture
    def session(self, client: TestClient) -> InventorySession:
        return InventorySession(http_client=client)

    def test_full_flow(self, session: InventorySession, png_bytes: bytes):
        assert session.state == ClientState.IDLE

        session.select_image(png_bytes, "cover.png")
        assert session.state == ClientState.IMAGE_SELECTED

        draft = session.extract()
        assert session.state == ClientState.REVIEWING
        assert draft["title"] == "Dune"
        assert session.can_save

        session.update_field("subject", "Classic Science Fiction")
        book_id = session.save()

        assert book_id
        assert session.state == ClientState.IDLE
        assert session.draft is None
        assert session.image is None
        assert session.notification == "Book saved successfully"
        assert session.books[0]["id"] == book_id
        assert session.books[0]["subject"] == "Classic Science Fiction"

    def test_cannot_save_without_author(self, session: InventorySession, png_bytes: bytes):
        session.select_image(png_bytes, "cover.png")
        session.extract()
        session.update_field("author", "")

        assert not session.can_save
        with pytest.raises(ClientStateError):
            session.save()

    def test_whitespace_title_can_be_saved(self, session: InventorySession, png_bytes: bytes):
        session.select_image(png_bytes, "cover.png")
        session.extract()
        session.update_field("title", "  ")

        assert session.can_save
        assert session.save() is not None
        assert session.books[0]["title"] == "  "

    def test_unknown_field_rejected(self, session: InventorySession, png_bytes: bytes):
        session.select_image(png_bytes, "cover.png")
        session.extract()
        with pytest.raises(KeyError):
            session.update_field("isbn", "123")

    def test_extract_needs_image(self, session: InventorySession):
        with pytest.raises(ClientStateError):
            session.extract()

    def test_in_flight_blocks_second_request(self, session: InventorySession, png_bytes: bytes):
        session.select_image(png_bytes, "cover.png")
        session.state = ClientState.EXTRACTING
        with pytest.raises(ClientStateError):
            session.extract()
        with pytest.raises(ClientStateError):
            session.select_image(png_bytes, "other.png")

    def test_rejects_unsupported_file_type(self, session: InventorySession):
        with pytest.raises(ValueError):
            session.select_image(b"GIF89a", "cover.gif")

    def test_extract_failure_sets_notification(
        self, session: InventorySession, png_bytes: bytes, vision_model: FakeVisionModel
    ):
        vision_model.reply = "not json"
        session.select_image(png_bytes, "cover.png")

        assert session.extract() is None
        assert session.state == ClientState.IDLE_WITH_ERROR
        assert "Internal Server Error" in session.notification

        vision_model.reply = '{"title": "Dune", "author": "Herbert"}'
        assert session.extract()["author"] == "Herbert"
        assert session.state == ClientState.REVIEWING

    def test_save_failure_keeps_draft(self, session: InventorySession, png_bytes: bytes):
        session.select_image(png_bytes, "cover.png")
        session.extract()
        app.dependency_overrides[get_book_store] = lambda: FailingBookStore()

        assert session.save() is None
        assert session.state == ClientState.IDLE_WITH_ERROR
        assert session.notification == "Internal Server Error"
        assert session.draft["title"] == "Dune"

        session.dismiss_notification()
        assert session.state == ClientState.REVIEWING
        assert session.notification is None

    def test_refresh_and_search(self, session: InventorySession, client: TestClient):
        client.post("/api/books", json={"title": "Dune", "author": "Frank Herbert"})
        client.post("/api/books", json={"title": "Foundation", "author": "Isaac Asimov"})

        session.refresh()
        assert [b["title"] for b in session.books] == ["Foundation", "Dune"]
        assert [b["title"] for b in session.search("dun")] == ["Dune"]
        assert len(session.search("")) == 2

    def test_network_failure_is_notification(self, png_bytes: bytes):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        http_client = httpx.Client(base_url="http://testserver", transport=httpx.MockTransport(refuse))
        with InventorySession(http_client=http_client) as session:
            session.select_image(png_bytes, "cover.png")
            assert session.extract() is None
            assert session.state == ClientState.IDLE_WITH_ERROR
            assert "connection refused" in session.notification
        http_client.close()
