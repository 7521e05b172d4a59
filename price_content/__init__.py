"""
Price content server

Fetches pages and APIs for an agent over MCP and shapes the price record
embedded in a page's structured-data script block.
"""

__version__ = "0.1.0"

from .models import (
    FetchApiArgs,
    FetchResult,
    ProcessDataArgs,
    RequestSpec,
    TransformRequest,
)
from .transformer import ExtractionOptions, transform

__all__ = [
    "FetchApiArgs",
    "FetchResult",
    "ProcessDataArgs",
    "RequestSpec",
    "TransformRequest",
    "ExtractionOptions",
    "transform",
]
