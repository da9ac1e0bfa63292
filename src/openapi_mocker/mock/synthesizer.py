"""
OpenAPI Mocker Response Synthesizer

Turns a MatchResult into the status, headers and body written back to the
client.

- Resolved examples are serialized for their content type (compact JSON for
  JSON media types)
- Misses (no route, no response, no example) become a 404 with a short JSON
  diagnostic
- Examples that cannot be rendered in their content type become a 500
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import quote

from ..common.utils import is_json_media_type
from .matcher import MatchResult
from .selector import Outcome


DIAGNOSTIC_CONTENT_TYPE = 'application/json'

# Statuses that never carry a body
BODILESS_STATUSES = {204, 205, 304}

# Characters left as-is in debug header values; anything else is percent-encoded
HEADER_SAFE = "/{}:=&?,;@!$'()*+"


class SerializationError(ValueError):
    """Raised when an example can't be represented in its content type."""


MISS_MESSAGES = {
    Outcome.NO_ROUTE: "No route matches the request",
    Outcome.NO_RESPONSE: "No response declared for the requested status",
    Outcome.NO_EXAMPLE: "No example matches the request",
}


@dataclass
class SynthesizedResponse:
    """Transport-independent HTTP response."""

    status_code: int
    body: bytes = b''
    content_type: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)


def serialize_example(value: Any, content_type: str) -> bytes:
    """
    Serialize an example value for a content type.

    JSON media types get compact JSON. Other types accept strings (sent
    as-is), bytes (sent raw) and scalars (sent as their JSON text).

    Raises:
        SerializationError: If the value can't be represented
    """
    if is_json_media_type(content_type):
        try:
            text = json.dumps(value, separators=(',', ':'), ensure_ascii=False, allow_nan=False)
            return text.encode('utf-8')
        except UnicodeEncodeError as e:
            raise SerializationError(f"Example text is not valid UTF-8 for {content_type}: {e}") from e
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Example is not valid JSON for {content_type}: {e}") from e

    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        try:
            return value.encode('utf-8')
        except UnicodeEncodeError as e:
            raise SerializationError(f"Example text is not valid UTF-8 for {content_type}: {e}") from e
    if value is None or isinstance(value, (bool, int, float)):
        try:
            return json.dumps(value, allow_nan=False).encode('utf-8')
        except ValueError as e:
            raise SerializationError(f"Example can't be rendered as {content_type}: {e}") from e

    raise SerializationError(
        f"Example of type {type(value).__name__} can't be rendered as {content_type}"
    )


class ResponseSynthesizer:
    """
    Builds responses from match results.

    Example:
        synthesizer = ResponseSynthesizer()
        response = synthesizer.synthesize(matcher.find_match('GET', '/pets'))
        print(response.status_code, response.body)
    """

    def __init__(self, fallback_status: int = 404, debug_headers: bool = True):
        """
        Initialize response synthesizer.

        Args:
            fallback_status: Status for unresolved requests
            debug_headers: Add X-Mock-* headers describing the match
        """
        self.fallback_status = fallback_status
        self.debug_headers = debug_headers

    def synthesize(self, result: MatchResult) -> SynthesizedResponse:
        """
        Build the response for a match result.

        Never raises for a well-formed MatchResult: serialization problems
        are reported as a 500 response.
        """
        if not result.matched:
            return self._miss(result)

        selection = result.selection
        headers = self._debug_headers(result)

        if not selection.has_body or selection.status_code in BODILESS_STATUSES:
            return SynthesizedResponse(status_code=selection.status_code, headers=headers)

        try:
            body = serialize_example(selection.value, selection.content_type)
        except SerializationError as e:
            return self._error(result, str(e))

        return SynthesizedResponse(
            status_code=selection.status_code,
            body=body,
            content_type=selection.content_type,
            headers=headers
        )

    def _miss(self, result: MatchResult) -> SynthesizedResponse:
        content = {
            'error': MISS_MESSAGES.get(result.outcome, "No match"),
            'reason': result.outcome.value,
            'detail': result.reason,
            'request': {
                'method': result.method,
                'path': result.request.original_path,
                'status': result.request.status
            }
        }
        if result.template:
            content['route'] = result.template

        headers = {'X-Mock-Matched': 'false'} if self.debug_headers else {}
        return SynthesizedResponse(
            status_code=self.fallback_status,
            body=json.dumps(content).encode('utf-8'),
            content_type=DIAGNOSTIC_CONTENT_TYPE,
            headers=headers
        )

    def _error(self, result: MatchResult, message: str) -> SynthesizedResponse:
        content = {
            'error': "Example cannot be serialized",
            'detail': message,
            'route': result.template,
            'example': result.selection.example_key
        }
        return SynthesizedResponse(
            status_code=500,
            body=json.dumps(content).encode('utf-8'),
            content_type=DIAGNOSTIC_CONTENT_TYPE,
            headers=self._debug_headers(result)
        )

    def _debug_headers(self, result: MatchResult) -> Dict[str, str]:
        if not self.debug_headers:
            return {}

        headers = {'X-Mock-Matched': 'true'}
        if result.template:
            headers['X-Mock-Route'] = quote(result.template, safe=HEADER_SAFE)
        if result.selection and result.selection.example_key:
            headers['X-Mock-Example'] = quote(result.selection.example_key, safe=HEADER_SAFE)
        return headers
