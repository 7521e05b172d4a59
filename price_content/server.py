"""
MCP (Model Context Protocol) server for fetching and shaping page data.

Serves two tools over stdio:
- fetch_api: one HTTP request, optionally extracting the embedded page record
- process_data: extract, filter and shape a caller-supplied payload

Every tool failure comes back as a text block starting with ``Error: ``
and the error flag set; nothing a caller sends can stop the process.
"""

import asyncio
import json
import sys
from typing import Any, Awaitable, Callable, Dict, Optional, Type, TypeVar

import mcp.types as types
from mcp.server import Server
from mcp.server.stdio import stdio_server
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from price_content.config import get_settings
from price_content.fetcher import fetch
from price_content.models import FetchApiArgs, FetchResult, ProcessDataArgs, RequestSpec, TransformRequest
from price_content.transformer import is_extraction_error, parse_payload, transform, transform_request
from price_content.utils.errors import PriceContentException, UnknownOperationError, ValidationError
from price_content.utils.logging import LogContext, get_logger

logger = get_logger(__name__)

Fetcher = Callable[[RequestSpec], Awaitable[FetchResult]]
ArgsModel = TypeVar("ArgsModel", bound=BaseModel)

TOOL_DESCRIPTIONS = {
    "fetch_api": (
        "Fetch data from a specified API endpoint. "
        "Makes an HTTP request to the provided URL and returns the response. "
        "Supports various HTTP methods and custom headers. "
        "Set extractMassData to pull the embedded mass record out of an HTML page."
    ),
    "process_data": (
        "Process API response data into a structured format. "
        "Takes raw API data (usually JSON or HTML) and processes it according to specified format. "
        "Can filter data to include only specific fields. "
        "Returns processed data ready for client consumption."
    ),
}

TOOL_ARGUMENTS: Dict[str, Type[BaseModel]] = {
    "fetch_api": FetchApiArgs,
    "process_data": ProcessDataArgs,
}


def list_tool_definitions() -> list[types.Tool]:
    """Tool declarations with the JSON schema of each argument model."""
    return [
        types.Tool(
            name=name,
            description=TOOL_DESCRIPTIONS[name],
            inputSchema=model.model_json_schema(by_alias=True),
        )
        for name, model in TOOL_ARGUMENTS.items()
    ]


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def _validate(model: Type[ArgsModel], tool_name: str, arguments: Dict[str, Any]) -> ArgsModel:
    try:
        return model.model_validate(arguments)
    except PydanticValidationError as e:
        raise ValidationError(tool_name, str(e)) from e


async def fetch_api(arguments: Dict[str, Any], fetcher: Fetcher = fetch) -> str:
    """
    Run the fetch_api tool.

    Text responses are piped through the transformer (detailed, unfiltered)
    when ``extractMassData`` is set; JSON responses are never transformed.
    """
    args = _validate(FetchApiArgs, "fetch_api", arguments)
    result = await fetcher(args.to_request_spec())

    if args.extract_mass_data and result.is_text:
        processed = transform(result.value, "detailed")
        if is_extraction_error(processed):
            logger.warning(f"Extraction from {args.url} failed: {processed['error']}")
        return _dump(processed)

    return result.render()


async def process_data(arguments: Dict[str, Any]) -> str:
    """Run the process_data tool."""
    args = _validate(ProcessDataArgs, "process_data", arguments)

    payload = parse_payload(args.data)
    if not payload.is_json:
        logger.debug("process_data input is not JSON, treating it as raw text")

    request = TransformRequest(data=payload.value, format=args.format, filter_fields=args.filter_fields)
    processed = transform_request(request)
    if is_extraction_error(processed):
        logger.warning(f"Extraction failed: {processed['error']}")

    return _dump(processed)


def error_result(message: str) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=f"Error: {message}")],
        isError=True,
    )


async def dispatch_tool(
    name: str,
    arguments: Optional[Dict[str, Any]],
    fetcher: Fetcher = fetch,
) -> types.CallToolResult:
    """
    Route a tool call and turn any failure into an error result.

    Args:
        name: Tool name
        arguments: Raw tool arguments as sent by the client
        fetcher: HTTP fetcher used by fetch_api

    Returns:
        A single text block; ``isError`` is set on failure
    """
    arguments = arguments or {}

    with LogContext(tool=name):
        try:
            if name == "fetch_api":
                text = await fetch_api(arguments, fetcher)
            elif name == "process_data":
                text = await process_data(arguments)
            else:
                raise UnknownOperationError(name)
        except PriceContentException as e:
            logger.error(f"Tool {name} failed: {e}")
            return error_result(str(e))
        except Exception as e:
            logger.exception(f"Unexpected error in tool {name}")
            return error_result(str(e))

    return types.CallToolResult(content=[types.TextContent(type="text", text=text)], isError=False)


def create_server(fetcher: Fetcher = fetch) -> Server:
    """Build the MCP server with both tools registered."""
    settings = get_settings()
    server = Server(settings.server_name, version=settings.server_version)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return list_tool_definitions()

    async def call_tool(request: types.CallToolRequest) -> types.ServerResult:
        result = await dispatch_tool(request.params.name, request.params.arguments, fetcher)
        return types.ServerResult(result)

    # Registered directly so failures keep the "Error: " text convention
    server.request_handlers[types.CallToolRequest] = call_tool

    return server


async def run_server() -> None:
    server = create_server()
    async with stdio_server() as (read_stream, write_stream):
        logger.info("API MCP Server running on stdio")
        logger.info("Server is ready to process API requests")
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    try:
        asyncio.run(run_server())
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Fatal error running server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
