"""
Data models for the price content server.

Tool argument models double as the JSON schemas advertised through
``tools/list``; wire names follow the camelCase the clients send.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import AnyUrl, BaseModel, ConfigDict, Field, TypeAdapter, field_validator

JsonValue = Any
TransformResult = Dict[str, Any]

HttpMethod = Literal["GET", "POST", "PUT", "DELETE"]
OutputFormat = Literal["compact", "detailed"]

_URL_ADAPTER = TypeAdapter(AnyUrl)


def _check_absolute_url(v: str) -> str:
    # Validate only; the caller's spelling of the URL is sent unchanged
    _URL_ADAPTER.validate_python(v)
    return v


class RequestSpec(BaseModel):
    """One outbound HTTP request."""
    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Absolute URL to request")
    method: HttpMethod = "GET"
    headers: Optional[Dict[str, str]] = None
    body: Optional[str] = None

    @field_validator("url")
    @classmethod
    def url_must_be_absolute(cls, v: str) -> str:
        return _check_absolute_url(v)


class FetchApiArgs(BaseModel):
    """Arguments of the ``fetch_api`` tool."""
    model_config = ConfigDict(strict=True, populate_by_name=True)

    url: str = Field(..., description="The URL to fetch data from")
    method: HttpMethod = Field("GET", description="HTTP method to use")
    headers: Optional[Dict[str, str]] = Field(None, description="HTTP headers to include in the request")
    body: Optional[str] = Field(None, description="Request body (for POST/PUT requests)")
    extract_mass_data: bool = Field(
        False,
        alias="extractMassData",
        description="Extract mass data from HTML response",
    )

    @field_validator("url")
    @classmethod
    def url_must_be_absolute(cls, v: str) -> str:
        return _check_absolute_url(v)

    def to_request_spec(self) -> RequestSpec:
        return RequestSpec(url=self.url, method=self.method, headers=self.headers, body=self.body)


class ProcessDataArgs(BaseModel):
    """Arguments of the ``process_data`` tool."""
    model_config = ConfigDict(strict=True, populate_by_name=True)

    data: str = Field(..., description="Raw JSON data string to process")
    format: OutputFormat = Field("detailed", description="Output format preference")
    filter_fields: Optional[List[str]] = Field(
        None,
        alias="filterFields",
        description="Fields to include in the output",
    )


class TransformRequest(BaseModel):
    """Input of one transform call: raw text or already-parsed JSON."""
    model_config = ConfigDict(populate_by_name=True)

    data: Any = None
    format: OutputFormat = "detailed"
    filter_fields: Optional[List[str]] = Field(None, alias="filterFields")


@dataclass(frozen=True)
class FetchResult:
    """
    Tagged fetch outcome: parsed JSON or raw text.

    ``kind`` is ``"json"`` when the response announced
    ``application/json``, ``"text"`` otherwise.
    """
    kind: Literal["json", "text"]
    value: JsonValue

    @classmethod
    def from_json(cls, value: JsonValue) -> "FetchResult":
        return cls("json", value)

    @classmethod
    def from_text(cls, value: str) -> "FetchResult":
        return cls("text", value)

    @property
    def is_text(self) -> bool:
        return self.kind == "text"

    def render(self) -> str:
        """Text as-is, JSON pretty-printed."""
        if self.is_text:
            return self.value
        return json.dumps(self.value, indent=2, ensure_ascii=False)


@dataclass(frozen=True)
class ParsedPayload:
    """Caller data after the optimistic JSON parse."""
    value: Union[JsonValue, str]
    is_json: bool
