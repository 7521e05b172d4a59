"""
Single-shot HTTP fetcher.

One request per call, no retries or redirect policy beyond aiohttp's
defaults. Responses announced as JSON are decoded; everything else comes
back as text.
"""

import asyncio
import json
from typing import Dict, Optional

import aiohttp

from price_content.config import get_settings
from price_content.models import FetchResult, RequestSpec
from price_content.utils.errors import FetchError, HttpStatusError, NetworkError, ResponseDecodeError
from price_content.utils.logging import get_logger, log_performance

logger = get_logger(__name__)

JSON_CONTENT_TYPE = "application/json"


def build_headers(headers: Optional[Dict[str, str]], force_json_content_type: bool = True) -> Dict[str, str]:
    """
    Merge caller headers with the fixed JSON content type.

    The fixed ``Content-Type`` replaces any the caller sent unless
    ``force_json_content_type`` is off.
    """
    merged = dict(headers or {})
    has_content_type = any(name.lower() == "content-type" for name in merged)

    if force_json_content_type:
        merged = {name: value for name, value in merged.items() if name.lower() != "content-type"}
        merged["Content-Type"] = JSON_CONTENT_TYPE
    elif not has_content_type:
        merged["Content-Type"] = JSON_CONTENT_TYPE

    return merged


def _client_timeout(timeout: Optional[float]) -> Optional[aiohttp.ClientTimeout]:
    if timeout is None:
        return None
    return aiohttp.ClientTimeout(total=timeout)


@log_performance
async def fetch(spec: RequestSpec, session: Optional[aiohttp.ClientSession] = None) -> FetchResult:
    """
    Perform one HTTP request.

    Args:
        spec: URL, method, headers and body
        session: Optional session to reuse; one is opened per call otherwise

    Returns:
        Parsed JSON or raw text

    Raises:
        NetworkError: transport failure
        HttpStatusError: non-2xx status
        ResponseDecodeError: JSON response body could not be decoded
    """
    settings = get_settings()
    headers = build_headers(spec.headers, settings.force_json_content_type)

    logger.info(f"{spec.method} {spec.url}")

    if session is not None:
        return await _request(session, spec, headers)

    kwargs = {}
    timeout = _client_timeout(settings.request_timeout)
    if timeout is not None:
        kwargs["timeout"] = timeout

    async with aiohttp.ClientSession(**kwargs) as own_session:
        return await _request(own_session, spec, headers)


async def _request(session: aiohttp.ClientSession, spec: RequestSpec, headers: Dict[str, str]) -> FetchResult:
    try:
        async with session.request(
            spec.method,
            spec.url,
            headers=headers,
            # Empty bodies are not sent at all
            data=spec.body or None,
        ) as response:
            if not 200 <= response.status < 300:
                raise HttpStatusError(response.status, spec.url)

            content_type = response.headers.get("Content-Type", "")
            text = await response.text()
            if JSON_CONTENT_TYPE in content_type:
                # An empty body is not valid JSON either
                try:
                    return FetchResult.from_json(json.loads(text))
                except ValueError as e:
                    raise ResponseDecodeError(str(e), {"url": spec.url}) from e

            return FetchResult.from_text(text)

    except FetchError:
        raise
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise NetworkError(str(e) or type(e).__name__, {"url": spec.url}) from e
