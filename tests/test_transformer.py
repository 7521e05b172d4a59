"""
Tests for page record extraction and shaping.
"""

import json

import pytest

from price_content.models import TransformRequest
from price_content.transformer import (
    ExtractionOptions,
    compact_record,
    filter_record,
    is_extraction_error,
    parse_payload,
    resolve_path,
    transform,
    transform_request,
)


class TestPassthrough:
    """Payloads without a script block are wrapped, not extracted."""

    def test_html_without_marker(self):
        """Test HTML lacking the marker comes back untouched."""
        html = "<html><body><h1>No data here</h1></body></html>"

        result = transform(html, "detailed")

        assert result == {"processed": True, "data": html, "format": "detailed"}

    def test_parsed_json_is_never_extracted(self):
        """Test already-parsed JSON skips extraction even if it mentions the marker."""
        data = {"note": "__NEXT_DATA__", "items": [1, 2]}

        result = transform(data, "compact", ["items"])

        assert result == {
            "processed": True,
            "data": data,
            "format": "compact",
            "filterFields": ["items"],
        }

    def test_filter_fields_omitted_when_not_given(self):
        """Test the wrapper only carries filterFields when they were passed."""
        result = transform([1, 2, 3])

        assert "filterFields" not in result
        assert result["data"] == [1, 2, 3]

    def test_empty_filter_list_is_kept(self):
        """Test an explicit empty filter list is echoed back."""
        result = transform("plain text", "detailed", [])

        assert result["filterFields"] == []

    def test_passthrough_is_not_an_error(self):
        """Test the wrapper is not mistaken for an extraction error."""
        assert not is_extraction_error(transform("plain text"))


class TestExtraction:
    """Test record extraction from the script block."""

    def test_detailed_returns_full_record(self, mass_page, mass_record):
        """Test detailed format returns the whole record."""
        assert transform(mass_page, "detailed") == mass_record

    def test_compact_projection(self, mass_page):
        """Test compact format keeps four fields and fifteen ranks."""
        result = transform(mass_page, "compact")

        assert result == {
            "title": "T",
            "subTitle": "S",
            "regionName": "R",
            "regionPriceRankContent": list(range(1, 16)),
        }
        assert len(result["regionPriceRankContent"]) == 15

    def test_filter_keeps_requested_fields_only(self, mass_page):
        """Test filtering drops every unrequested key."""
        result = transform(mass_page, "detailed", ["title", "regionName"])

        assert result == {"title": "T", "regionName": "R"}
        assert list(result) == ["title", "regionName"]

    def test_filter_order_follows_request(self, mass_page):
        """Test output order follows the filter list, not the record."""
        result = transform(mass_page, "detailed", ["regionName", "updatedAt", "title"])

        assert list(result) == ["regionName", "updatedAt", "title"]

    def test_filter_skips_unknown_fields(self, mass_page):
        """Test names absent from the record are silently ignored."""
        result = transform(mass_page, "detailed", ["title", "doesNotExist"])

        assert result == {"title": "T"}

    def test_filter_without_matches_gives_empty_record(self, mass_page):
        """Test a filter matching nothing yields an empty mapping."""
        result = transform(mass_page, "detailed", ["nope", "nothing"])

        assert result == {}
        assert not is_extraction_error(result)

    def test_compact_applies_after_filter(self, mass_page):
        """Test compact output reflects fields removed by the filter."""
        result = transform(mass_page, "compact", ["title", "updatedAt"])

        assert result == {"title": "T", "regionPriceRankContent": []}

    def test_empty_filter_list_means_no_filter(self, mass_page, mass_record):
        """Test an empty filter list returns the full record."""
        assert transform(mass_page, "detailed", []) == mass_record

    def test_empty_record_is_still_a_record(self, make_page):
        """Test an empty mass object is returned rather than reported missing."""
        page = make_page({"props": {"pageProps": {"mass": {}}}})

        assert transform(page, "detailed") == {}

    def test_first_script_block_wins(self, make_page):
        """Test the shortest match ends at the first closing tag."""
        first = make_page({"props": {"pageProps": {"mass": {"title": "first"}}}})
        second = make_page({"props": {"pageProps": {"mass": {"title": "second"}}}})

        assert transform(first + second, "detailed") == {"title": "first"}

    def test_non_ascii_record(self, make_page):
        """Test non-ASCII record values survive extraction."""
        page = make_page({"props": {"pageProps": {"mass": {"title": "서울 시세", "regionName": "강남구"}}}})

        result = transform(page, "compact")

        assert result["title"] == "서울 시세"
        assert result["regionName"] == "강남구"


class TestExtractionErrors:
    """Extraction failures are returned as values."""

    def test_marker_without_matching_script(self):
        """Test the marker alone is not enough without the script element."""
        html = '<html><script id="__NEXT_DATA__">{"props": {}}</script></html>'

        result = transform(html, "detailed")

        assert result == {"error": "__NEXT_DATA__ script content not found"}
        assert is_extraction_error(result)

    def test_empty_script_block(self, make_page):
        """Test an empty script body counts as not found."""
        result = transform(make_page(""), "detailed")

        assert result == {"error": "__NEXT_DATA__ script content not found"}

    def test_malformed_json(self, make_page):
        """Test a broken script body reports the parser error."""
        result = transform(make_page('{"props": {"pageProps": '), "detailed")

        assert result["error"] == "Failed to parse script data"
        assert result["message"]
        assert is_extraction_error(result)

    def test_missing_record(self, make_page):
        """Test JSON without props.pageProps.mass."""
        result = transform(make_page({"props": {"pageProps": {"other": {}}}}), "compact")

        assert result == {"error": "mass data not found in the provided HTML"}

    @pytest.mark.parametrize("record", [None, False, 0, 0.0, "", float("nan")])
    def test_empty_scalar_record_is_missing(self, make_page, record):
        """Test null, false, zero, NaN and empty text count as no record."""
        page = make_page({"props": {"pageProps": {"mass": record}}})

        result = transform(page, "detailed", ["title"])

        assert result == {"error": "mass data not found in the provided HTML"}

    @pytest.mark.parametrize("record", ["text", [1, 2], [], 3, True])
    def test_non_object_record_is_returned(self, make_page, record):
        """Test a present record that is not an object comes back as is."""
        page = make_page({"props": {"pageProps": {"mass": record}}})

        assert transform(page, "detailed") == record

    def test_non_object_record_filter_and_compact(self, make_page):
        """Test filtering and compacting a non-object record yield empty shapes."""
        page = make_page({"props": {"pageProps": {"mass": ["title", "regionName"]}}})

        assert transform(page, "detailed", ["title"]) == {}
        assert transform(page, "compact") == {"regionPriceRankContent": []}

    def test_missing_record_short_circuits_filter(self, make_page):
        """Test filtering and formatting never run without a record."""
        page = make_page({"props": None})

        result = transform(page, "compact", ["title"])

        assert result == {"error": "mass data not found in the provided HTML"}


class TestExtractionOptions:
    """Marker and record path are configurable."""

    def test_custom_marker_and_path(self, make_page):
        """Test extraction with a different page template."""
        options = ExtractionOptions(script_marker="__APP_STATE__", record_path=("state", "listing"))
        page = make_page({"state": {"listing": {"title": "L", "price": 10}}}, marker="__APP_STATE__")

        assert transform(page, "detailed", options=options) == {"title": "L", "price": 10}

    def test_error_messages_follow_options(self, make_page):
        """Test error texts name the configured marker and record."""
        options = ExtractionOptions(script_marker="__APP_STATE__", record_path=("state", "listing"))

        missing_script = transform('<div data-x="__APP_STATE__"></div>', options=options)
        missing_record = transform(make_page({"state": {}}, marker="__APP_STATE__"), options=options)

        assert missing_script == {"error": "__APP_STATE__ script content not found"}
        assert missing_record == {"error": "listing data not found in the provided HTML"}

    def test_options_from_settings(self, monkeypatch):
        """Test options are read from the environment-backed settings."""
        monkeypatch.setenv("PRICE_CONTENT_SCRIPT_MARKER", "__STATE__")
        monkeypatch.setenv("PRICE_CONTENT_RECORD_PATH", "data.item")
        monkeypatch.setenv("PRICE_CONTENT_COMPACT_RANK_LIMIT", "3")

        options = ExtractionOptions.from_settings()

        assert options.script_marker == "__STATE__"
        assert options.record_path == ("data", "item")
        assert options.compact_rank_limit == 3

    def test_rank_limit_option(self, mass_page):
        """Test the compact rank cut honours the configured limit."""
        result = transform(mass_page, "compact", options=ExtractionOptions(compact_rank_limit=5))

        assert result["regionPriceRankContent"] == [1, 2, 3, 4, 5]


class TestHelpers:
    """Test the small building blocks."""

    def test_parse_payload_json(self):
        """Test valid JSON is parsed."""
        payload = parse_payload('{"a": [1, 2]}')

        assert payload.is_json
        assert payload.value == {"a": [1, 2]}

    def test_parse_payload_raw_text(self):
        """Test invalid JSON stays an opaque string."""
        payload = parse_payload("not json")

        assert not payload.is_json
        assert payload.value == "not json"

    def test_parse_payload_json_string(self):
        """Test a JSON string literal parses to its text."""
        payload = parse_payload(json.dumps("<html></html>"))

        assert payload.is_json
        assert payload.value == "<html></html>"

    def test_resolve_path(self):
        """Test nested lookup through mappings only."""
        document = {"a": {"b": {"c": 1}}, "x": [{"y": 2}]}

        assert resolve_path(document, ["a", "b", "c"]) == 1
        assert resolve_path(document, ["a", "b"]) == {"c": 1}
        # Lists are not walked into; both lookups hit the same "missing" sentinel
        assert resolve_path(document, ["x", "y"]) is resolve_path(document, ["missing"])
        assert resolve_path(document, ["a", "z"]) is resolve_path(document, ["missing"])

    def test_filter_record_duplicates(self):
        """Test a field named twice appears once."""
        assert filter_record({"a": 1, "b": 2}, ["b", "a", "b"]) == {"b": 2, "a": 1}

    def test_compact_record_keeps_explicit_nulls(self):
        """Test fields present with null values are copied."""
        result = compact_record({"title": None, "regionPriceRankContent": None})

        assert result == {"title": None, "regionPriceRankContent": []}

    def test_compact_record_short_rank_list(self):
        """Test fewer than fifteen ranks are returned as-is."""
        result = compact_record({"regionPriceRankContent": [{"rank": 1}, {"rank": 2}]})

        assert result["regionPriceRankContent"] == [{"rank": 1}, {"rank": 2}]

    def test_transform_request(self, mass_page):
        """Test the request wrapper accepts the camelCase alias."""
        request = TransformRequest(data=mass_page, format="detailed", filterFields=["subTitle"])

        assert transform_request(request) == {"subTitle": "S"}

    def test_is_extraction_error(self):
        """Test the error variant is recognised by shape."""
        assert is_extraction_error({"error": "x"})
        assert is_extraction_error({"error": "x", "message": "y"})
        assert not is_extraction_error({"error": "x", "title": "T"})
        assert not is_extraction_error({"title": "T"})
        assert not is_extraction_error("error")
