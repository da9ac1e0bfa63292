"""
OpenAPI Mocker URL Utilities

Shared path parsing and normalization used by the route table and the
request matcher.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from urllib.parse import parse_qs


DEFAULT_STATUS = 200

# Reported for status segments too long to be an HTTP status
OVERSIZED_STATUS = -1


@dataclass(frozen=True)
class NormalizedRequest:
    """
    Request path split into its status override and routable path.

    Attributes:
        original_path: Path as received (already URL-decoded)
        path: Path with any leading status segment removed
        status: Desired status code (DEFAULT_STATUS when not given)
        status_from_path: True if the status came from the URL
        query: Query parameters, name -> values in order of appearance
    """

    original_path: str
    path: str
    status: int = DEFAULT_STATUS
    status_from_path: bool = False
    query: Dict[str, List[str]] = field(default_factory=dict)


class URLNormalizer:
    """Handles request path normalization."""

    @staticmethod
    def normalize_request(path: str, query_string: str = '', default_status: int = DEFAULT_STATUS) -> NormalizedRequest:
        """
        Extract the optional status segment and parse the query string.

        "/400/hello" -> status 400, path "/hello"
        "/hello"     -> status 200, path "/hello"

        Args:
            path: Request path (URL-decoded)
            query_string: Raw query string without the leading "?"
            default_status: Status used when the path carries none

        Returns:
            NormalizedRequest
        """
        original = path or '/'
        status, remaining = URLNormalizer.split_status_prefix(original)

        return NormalizedRequest(
            original_path=original,
            path=remaining,
            status=status if status is not None else default_status,
            status_from_path=status is not None,
            query=URLNormalizer.parse_query(query_string)
        )

    @staticmethod
    def split_status_prefix(path: str) -> Tuple[Optional[int], str]:
        """
        Split a leading all-digit segment off the path.

        Returns:
            (status, remaining path); status is None when the first segment
            is not a non-negative integer. Segments with more than three
            significant digits give OVERSIZED_STATUS, which no response
            declares.
        """
        stripped = path.lstrip('/')
        first, sep, rest = stripped.partition('/')

        if first and first.isascii() and first.isdigit():
            digits = first.lstrip('0') or '0'
            if len(digits) > 3:
                return OVERSIZED_STATUS, '/' + rest
            return int(digits), '/' + rest

        return None, path

    @staticmethod
    def parse_query(query_string: str) -> Dict[str, List[str]]:
        """Parse a query string keeping blank values."""
        if not query_string:
            return {}
        return parse_qs(query_string, keep_blank_values=True)

    @staticmethod
    def split_segments(path: str) -> List[str]:
        """
        Split a path into segments for matching.

        Trailing slashes are ignored, so "/pets/" and "/pets" have the same
        segments. The root path has no segments.
        """
        trimmed = path.strip('/')
        if not trimmed:
            return []
        return trimmed.split('/')
