"""
Extraction and shaping of page payloads.

Pulls the record embedded in a page's structured-data script block
(``<script id="__NEXT_DATA__" type="application/json">``), optionally
filters its fields, and optionally projects it to the compact summary.

Extraction failures are returned as ``{"error": ..., "message": ...}``
values, never raised: a page that does not match the expected shape is an
ordinary outcome the caller branches on.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from price_content.config import get_settings
from price_content.models import JsonValue, OutputFormat, ParsedPayload, TransformRequest, TransformResult
from price_content.utils.logging import get_logger

logger = get_logger(__name__)

COMPACT_FIELDS = ("title", "subTitle", "regionName")
RANK_FIELD = "regionPriceRankContent"

_MISSING = object()


@dataclass(frozen=True)
class ExtractionOptions:
    """Where the record lives and how compact output is cut."""
    script_marker: str = "__NEXT_DATA__"
    record_path: Tuple[str, ...] = ("props", "pageProps", "mass")
    compact_rank_limit: int = 15

    @classmethod
    def from_settings(cls) -> "ExtractionOptions":
        settings = get_settings()
        return cls(
            script_marker=settings.script_marker,
            record_path=tuple(settings.record_path.split(".")),
            compact_rank_limit=settings.compact_rank_limit,
        )

    @property
    def record_name(self) -> str:
        return self.record_path[-1]

    def script_pattern(self) -> "re.Pattern[str]":
        return re.compile(
            r'<script id="' + re.escape(self.script_marker) + r'" type="application/json">([\s\S]*?)</script>'
        )


def extraction_error(error: str, message: Optional[str] = None) -> TransformResult:
    result: TransformResult = {"error": error}
    if message is not None:
        result["message"] = message
    return result


def is_extraction_error(result: Any) -> bool:
    """True for the ``{error, message?}`` variant of a transform result."""
    return (
        isinstance(result, dict)
        and isinstance(result.get("error"), str)
        and set(result) <= {"error", "message"}
    )


def parse_payload(raw: str) -> ParsedPayload:
    """
    Optimistically read caller data as JSON.

    Text that is not valid JSON is kept as an opaque string; it is not an
    error, the transformer decides what to do with it.
    """
    try:
        return ParsedPayload(json.loads(raw), is_json=True)
    except json.JSONDecodeError:
        return ParsedPayload(raw, is_json=False)


def resolve_path(document: JsonValue, path: Sequence[str]) -> Any:
    """Walk nested mappings; returns ``_MISSING`` if any step is absent."""
    node = document
    for key in path:
        if not isinstance(node, dict) or key not in node:
            return _MISSING
        node = node[key]
    return node


def is_present(value: Any) -> bool:
    """
    Whether a record value counts as found.

    Missing keys, null, false, zero, NaN and the empty string do not; any
    container, empty or not, does.
    """
    if value is _MISSING or value is None or value is False:
        return False
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == value and value != 0
    if isinstance(value, str):
        return value != ""
    return True


def filter_record(record: Any, filter_fields: Sequence[str]) -> Dict[str, Any]:
    """Keep only the named fields, in the order they were asked for.

    A record that is not a mapping has no named fields to keep.
    """
    filtered: Dict[str, Any] = {}
    if not isinstance(record, dict):
        return filtered
    for field in filter_fields:
        if field in record:
            filtered[field] = record[field]
    return filtered


def compact_record(record: Any, rank_limit: int = 15) -> Dict[str, Any]:
    """
    Project a record to the compact summary.

    Absent summary fields are left out of the result rather than set to
    null. The rank list is cut to ``rank_limit`` items.
    """
    if not isinstance(record, dict):
        record = {}

    compact = {field: record[field] for field in COMPACT_FIELDS if field in record}

    ranks = record.get(RANK_FIELD)
    if isinstance(ranks, (list, str)) and ranks:
        compact[RANK_FIELD] = ranks[:rank_limit]
    else:
        compact[RANK_FIELD] = []

    return compact


def passthrough(raw: Any, format: OutputFormat, filter_fields: Optional[List[str]]) -> TransformResult:
    result: TransformResult = {"processed": True, "data": raw, "format": format}
    if filter_fields is not None:
        result["filterFields"] = filter_fields
    return result


def extract_record(html: str, options: ExtractionOptions) -> Tuple[Any, Optional[TransformResult]]:
    """
    Pull the record out of a page.

    Returns ``(record, None)`` on success or ``(None, error)`` with an
    extraction error value.
    """
    match = options.script_pattern().search(html)
    if not match or not match.group(1):
        logger.debug(f"No {options.script_marker} script block in payload")
        return None, extraction_error(f"{options.script_marker} script content not found")

    try:
        document = json.loads(match.group(1))
    except json.JSONDecodeError as e:
        logger.debug(f"Script block is not valid JSON: {e}")
        return None, extraction_error("Failed to parse script data", str(e))

    record = resolve_path(document, options.record_path)
    if not is_present(record):
        return None, extraction_error(f"{options.record_name} data not found in the provided HTML")

    return record, None


def transform(
    raw: Any,
    format: OutputFormat = "detailed",
    filter_fields: Optional[List[str]] = None,
    *,
    options: Optional[ExtractionOptions] = None,
) -> TransformResult:
    """
    Shape a raw payload.

    Args:
        raw: Page text or already-parsed JSON
        format: "compact" for the summary projection, "detailed" for the record
        filter_fields: Optional allowlist of record fields, in output order
        options: Marker, record path and rank limit (defaults to settings)

    Returns:
        The (filtered) record, its compact projection, an extraction error,
        or the passthrough wrapper when the payload carries no script block
    """
    options = options or ExtractionOptions.from_settings()

    if not isinstance(raw, str) or options.script_marker not in raw:
        return passthrough(raw, format, filter_fields)

    record, error = extract_record(raw, options)
    if error is not None:
        return error

    if filter_fields:
        record = filter_record(record, filter_fields)

    if format == "compact":
        return compact_record(record, options.compact_rank_limit)

    return record


def transform_request(request: TransformRequest, options: Optional[ExtractionOptions] = None) -> TransformResult:
    return transform(request.data, request.format, request.filter_fields, options=options)
