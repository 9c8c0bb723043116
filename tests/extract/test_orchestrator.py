"""
End-to-end extraction against an in-memory reader.

No browser - the fake surface renders "Page N of M" footers, turns pages on
request, and replays the two metadata responses when the book opens.
"""

import json

import pytest

from pipeline.extract import (
    BookExtractor,
    MetadataTimeoutError,
    NoContentPagesError,
    SessionExpiredError,
    TocHarvestError,
)


def run_extractor(surface, storage, settings, **kwargs):
    extractor = BookExtractor(surface, storage, settings=settings, **kwargs)
    return extractor.extract()


class TestFivePageBook:

    def test_captures_every_page_in_order(self, make_surface, book_storage, fast_settings):
        surface = make_surface(total=5)

        manifest = run_extractor(surface, book_storage, fast_settings)

        assert [p.index for p in manifest.pages] == [0, 1, 2, 3, 4]
        assert [p.page for p in manifest.pages] == [1, 2, 3, 4, 5]
        assert all(p.total == 5 for p in manifest.pages)
        assert surface.captures == [1, 2, 3, 4, 5]

    def test_screenshots_written_with_sortable_names(self, make_surface, book_storage, fast_settings):
        surface = make_surface(total=5)

        manifest = run_extractor(surface, book_storage, fast_settings)

        names = [p.name for p in book_storage.list_page_images()]
        assert names == ["00-01.png", "01-02.png", "02-03.png", "03-04.png", "04-05.png"]
        assert manifest.pages[0].image_path == "pages/00-01.png"
        assert (book_storage.book_dir / manifest.pages[4].image_path).exists()

    def test_manifest_written(self, make_surface, book_storage, fast_settings):
        surface = make_surface(total=5)

        run_extractor(surface, book_storage, fast_settings)

        data = json.loads(book_storage.metadata_file.read_text())
        assert data["document_id"] == "B0TESTBOOK"
        assert data["document_meta"]["title"] == "A Test Book"
        assert "karamelToken" not in data["document_info"]
        assert [entry["title"] for entry in data["toc"]] == ["Chapter 1"]
        assert len(data["pages"]) == 5
        assert "captured_at" in data

    def test_reader_url_opened(self, make_surface, book_storage, fast_settings):
        surface = make_surface(total=5)

        run_extractor(surface, book_storage, fast_settings)

        assert surface.url == "https://read.amazon.com/?asin=B0TESTBOOK"

    def test_collector_detached_afterwards(self, make_surface, book_storage, fast_settings):
        surface = make_surface(total=5)

        run_extractor(surface, book_storage, fast_settings)

        assert surface.handlers == []

    def test_stage_log_written(self, make_surface, book_storage, fast_settings):
        surface = make_surface(total=5)

        run_extractor(surface, book_storage, fast_settings)

        log_file = book_storage.book_dir / "logs" / "extract.jsonl"
        lines = [json.loads(line) for line in log_file.read_text().splitlines()]
        captured = [line for line in lines if line["message"] == "Page captured"]
        assert [line["page"] for line in captured] == [1, 2, 3, 4, 5]
        assert all(line["document_id"] == "B0TESTBOOK" for line in lines)


class TestContentBounds:

    def test_stops_before_back_matter(self, make_surface, book_storage, fast_settings):
        surface = make_surface(total=10, toc=[("Chapter 1", 1), ("About the Author", 9)])

        manifest = run_extractor(surface, book_storage, fast_settings)

        assert [p.page for p in manifest.pages] == list(range(1, 10))

    def test_include_back_matter(self, make_surface, book_storage, fast_settings):
        surface = make_surface(total=10, toc=[("Chapter 1", 1), ("About the Author", 9)])

        manifest = run_extractor(surface, book_storage, fast_settings, include_back_matter=True)

        assert [p.page for p in manifest.pages] == list(range(1, 11))

    def test_starts_at_first_content_entry(self, make_surface, book_storage, fast_settings):
        surface = make_surface(total=6, toc=[("Chapter 1", 3), ("Chapter 2", 5)], start_page=6)

        manifest = run_extractor(surface, book_storage, fast_settings)

        assert manifest.pages[0].page == 3
        assert manifest.pages[0].index == 0

    def test_page_limit(self, make_surface, book_storage, fast_settings):
        surface = make_surface(total=5)

        manifest = run_extractor(surface, book_storage, fast_settings, max_pages=2)

        assert [p.page for p in manifest.pages] == [1, 2]

    def test_flaky_page_turns_still_capture_everything(self, make_surface, book_storage, fast_settings):
        surface = make_surface(total=5, ignored_advances=3)

        manifest = run_extractor(surface, book_storage, fast_settings)

        assert [p.page for p in manifest.pages] == [1, 2, 3, 4, 5]


class TestPositionRestore:

    def test_returns_to_starting_page(self, make_surface, book_storage, fast_settings):
        surface = make_surface(total=5, start_page=3)

        run_extractor(surface, book_storage, fast_settings)

        assert surface.restored_to == 3
        assert surface.current_page == 3

    def test_restore_disabled(self, make_surface, book_storage, fast_settings):
        surface = make_surface(total=5, start_page=3)

        run_extractor(surface, book_storage, fast_settings, restore_position=False)

        assert surface.restored_to is None

    def test_restores_even_on_failure(self, make_surface, book_storage, fast_settings):
        surface = make_surface(total=5, start_page=4, responses=[])

        with pytest.raises(MetadataTimeoutError):
            run_extractor(surface, book_storage, fast_settings)

        assert surface.restored_to == 4


class TestExtractionErrors:

    def test_auth_redirect_is_session_expired(self, make_surface, book_storage, fast_settings):
        surface = make_surface(auth_redirect=True)

        with pytest.raises(SessionExpiredError):
            run_extractor(surface, book_storage, fast_settings)

        assert surface.captures == []
        assert not book_storage.has_metadata

    def test_missing_metadata_times_out(self, make_surface, book_storage, fast_settings):
        surface = make_surface(total=5, responses=[])

        with pytest.raises(MetadataTimeoutError) as exc_info:
            run_extractor(surface, book_storage, fast_settings)

        assert "document_info" in str(exc_info.value)
        assert not book_storage.has_metadata

    def test_untitled_toc_row(self, make_surface, book_storage, fast_settings):
        surface = make_surface(total=5, toc=[(None, 1)])

        with pytest.raises(TocHarvestError):
            run_extractor(surface, book_storage, fast_settings)

    def test_unclickable_toc_row(self, make_surface, book_storage, fast_settings):
        surface = make_surface(total=5, toc=[("Chapter 1", None)])

        with pytest.raises(TocHarvestError):
            run_extractor(surface, book_storage, fast_settings)

    def test_empty_toc(self, make_surface, book_storage, fast_settings):
        surface = make_surface(total=5, toc=[])

        with pytest.raises(NoContentPagesError):
            run_extractor(surface, book_storage, fast_settings)
