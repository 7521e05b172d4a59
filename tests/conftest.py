"""
Shared fixtures for the price content tests.
"""

import json
from typing import Any, Callable

import pytest

from price_content.config import reset_settings

SETTINGS_ENV_VARS = [
    "LOG_LEVEL",
    "DEV_MODE",
    "LOG_FILE_PATH",
    "PRICE_CONTENT_SERVER_NAME",
    "PRICE_CONTENT_SCRIPT_MARKER",
    "PRICE_CONTENT_RECORD_PATH",
    "PRICE_CONTENT_COMPACT_RANK_LIMIT",
    "PRICE_CONTENT_REQUEST_TIMEOUT",
    "PRICE_CONTENT_FORCE_JSON_CONTENT_TYPE",
]


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Every test starts from default settings."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def mass_record() -> dict:
    """Record as it appears under props.pageProps.mass."""
    return {
        "title": "T",
        "subTitle": "S",
        "regionName": "R",
        "regionPriceRankContent": list(range(1, 21)),
        "updatedAt": "2024-05-01",
    }


@pytest.fixture
def make_page() -> Callable[..., str]:
    """Build an HTML page carrying a structured-data script block."""

    def _make_page(payload: Any, marker: str = "__NEXT_DATA__") -> str:
        script_body = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False)
        return (
            "<!DOCTYPE html><html><head><title>Prices</title></head><body>"
            '<div id="__next"></div>'
            f'<script id="{marker}" type="application/json">{script_body}</script>'
            '<script src="/_next/static/chunks/main.js"></script>'
            "</body></html>"
        )

    return _make_page


@pytest.fixture
def mass_page(make_page, mass_record) -> str:
    """Page whose script block holds the standard mass record."""
    return make_page({"props": {"pageProps": {"mass": mass_record}}, "page": "/mass/[id]"})
