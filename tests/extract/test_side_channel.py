"""
Tests for pipeline/extract/side_channel.py

The collector keeps the first valid payload per rule, ignores traffic for
other documents and malformed bodies, and waits a bounded time.
"""

import pytest

from pipeline.extract.side_channel import (
    SideChannelCollector,
    default_rules,
    normalize_authors,
    parse_jsonp,
)

DOCUMENT_ID = "B0TESTBOOK"


@pytest.fixture
def collector(quiet_logger):
    return SideChannelCollector(default_rules(DOCUMENT_ID), logger=quiet_logger)


class TestParsing:

    def test_parse_jsonp(self):
        assert parse_jsonp('cb({"a": 1});') == {"a": 1}

    def test_parse_jsonp_rejects_plain_text(self):
        with pytest.raises(ValueError):
            parse_jsonp("not jsonp")

    def test_normalize_authors(self):
        raw = [" Jane Doe ", {"name": "John Roe"}, {"authorName": "Ann Poe"}, {"other": 1}, 42, ""]

        assert normalize_authors(raw) == ["Jane Doe", "John Roe", "Ann Poe"]

    def test_normalize_authors_non_list(self):
        assert normalize_authors("Jane Doe") == []


class TestCollector:

    def test_collects_both_payloads(self, collector, responses):
        collector.on_response(responses["start_reading"]())
        collector.on_response(responses["metadata"]())

        assert collector.complete
        assert collector.missing == []

    def test_document_info_is_scrubbed(self, collector, responses):
        collector.on_response(responses["start_reading"]())

        info = collector.get("document_info")
        assert info["srl"] == 123
        assert "karamelToken" not in info
        assert "metadataUrl" not in info
        assert "YJFormatVersion" not in info

    def test_document_meta_is_scrubbed_and_normalized(self, collector, responses):
        collector.on_response(responses["metadata"]())

        meta = collector.get("document_meta")
        assert meta["title"] == "A Test Book"
        assert meta["authorsList"] == ["Jane Doe", "John Roe"]
        assert "cpr" not in meta

    def test_other_document_is_ignored(self, collector, responses):
        collector.on_response(responses["start_reading"]("B0OTHER"))
        collector.on_response(responses["metadata"]("B0OTHER"))

        assert collector.missing == ["document_info", "document_meta"]

    def test_document_id_match_is_case_insensitive(self, collector, responses):
        collector.on_response(responses["start_reading"](DOCUMENT_ID.lower()))

        assert collector.received("document_info")

    def test_first_payload_wins(self, collector, responses):
        collector.on_response(responses["metadata"](title="First"))
        collector.on_response(responses["metadata"](title="Second"))

        assert collector.get("document_meta")["title"] == "First"

    def test_malformed_body_is_ignored(self, collector, responses):
        broken = responses["raw"](
            f"https://k4wyjmetadata.s3.amazonaws.com/books/{DOCUMENT_ID}/YJmetadata.jsonp",
            "loadMetadata({not json",
        )

        collector.on_response(broken)
        collector.on_response(responses["metadata"]())

        assert collector.received("document_meta")

    def test_non_200_is_ignored(self, collector, responses):
        response = responses["start_reading"]()
        response.status = 500

        collector.on_response(response)

        assert not collector.received("document_info")

    def test_unrelated_url_is_ignored(self, collector, responses):
        collector.on_response(responses["raw"]("https://read.amazon.com/service/web/register", {"asin": DOCUMENT_ID}))

        assert collector.missing == ["document_info", "document_meta"]


class TestCollectorSubscription:

    def test_subscribe_receives_surface_traffic(self, collector, make_surface):
        surface = make_surface()
        collector.subscribe(surface)

        surface.open("https://read.amazon.com/?asin=" + DOCUMENT_ID)

        assert collector.complete

    def test_unsubscribe_detaches(self, collector, make_surface):
        surface = make_surface()
        collector.subscribe(surface)
        collector.unsubscribe()

        surface.open("https://read.amazon.com/?asin=" + DOCUMENT_ID)

        assert surface.handlers == []
        assert not collector.complete

    def test_wait_until_complete_times_out(self, collector, make_surface):
        surface = make_surface(responses=[])

        assert not collector.wait_until_complete(surface, timeout_seconds=2.0, poll_seconds=0.5)
        assert surface.waited == 2.0

    def test_wait_until_complete_returns_immediately(self, collector, make_surface, responses):
        surface = make_surface()
        collector.on_response(responses["start_reading"]())
        collector.on_response(responses["metadata"]())

        assert collector.wait_until_complete(surface, timeout_seconds=2.0, poll_seconds=0.5)
        assert surface.waited == 0
