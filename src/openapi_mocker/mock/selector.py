"""
OpenAPI Mocker Example Selector

Chooses the one example served for a matched operation.

Resolution order:
1. Response for the desired status, else the "default" response
2. Media type named by the Accept header, else the first declared
3. Example keys by kind: exact path -> query selector -> header selector.
   Within a kind the key with the most clauses wins, then the earliest declared.
4. The "default" example, else the legacy single example

Selection is a pure function of the operation and the request context.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..common.utils import media_type_essence, parse_accept_header
from ..contract.models import (
    DEFAULT_KEY,
    Example,
    ExampleKey,
    ExampleSet,
    KeyKind,
    MediaType,
    Operation,
    ResponseDef,
)


# Key kinds in the order they are tried
KEY_PRIORITY = (KeyKind.EXACT_PATH, KeyKind.QUERY, KeyKind.HEADER)

MIN_STATUS = 100
MAX_STATUS = 599


class Outcome(str, Enum):
    """How a request was resolved."""

    RESOLVED = 'resolved'
    NO_ROUTE = 'no_route'
    NO_RESPONSE = 'no_response'
    NO_EXAMPLE = 'no_example'


@dataclass(frozen=True)
class RequestContext:
    """
    Request data examples are selected against.

    Attributes:
        original_path: Path as received, status segment included
        path: Path with the status segment removed
        query: Query parameter name -> values
        headers: Lower-cased header name -> values
    """

    original_path: str
    path: str
    query: Dict[str, List[str]] = field(default_factory=dict)
    headers: Dict[str, List[str]] = field(default_factory=dict)

    def header(self, name: str) -> Optional[str]:
        """Comma-joined values of a header, or None."""
        values = self.headers.get(name.lower())
        return ', '.join(values) if values else None


@dataclass(frozen=True)
class Selection:
    """
    Result of selecting an example.

    Attributes:
        outcome: RESOLVED, NO_RESPONSE or NO_EXAMPLE
        status_code: Status to serve
        response_key: Declared response entry used ("200", "default", ...)
        content_type: Chosen content type; None for status-only responses
        example: Chosen example; None for status-only responses and misses
        reason: Human readable explanation
    """

    outcome: Outcome
    status_code: int
    response_key: Optional[str] = None
    content_type: Optional[str] = None
    example: Optional[Example] = None
    reason: str = ''

    @property
    def resolved(self) -> bool:
        return self.outcome is Outcome.RESOLVED

    @property
    def has_body(self) -> bool:
        return self.example is not None

    @property
    def value(self) -> Any:
        return self.example.value if self.example is not None else None

    @property
    def example_key(self) -> Optional[str]:
        return self.example.key.raw if self.example is not None else None


class ExampleSelector:
    """
    Selects the example served for an operation.

    Example:
        selector = ExampleSelector()
        selection = selector.select(operation, 200, context)

        if selection.resolved:
            print(selection.content_type, selection.value)
    """

    def select(self, operation: Operation, status: int, context: RequestContext) -> Selection:
        """
        Select response, media type and example for a request.

        Args:
            operation: Matched operation
            status: Desired status code
            context: Request context

        Returns:
            Selection
        """
        response_key, response = self.resolve_response(operation, status)
        if response is None:
            return Selection(
                outcome=Outcome.NO_RESPONSE,
                status_code=status,
                reason=f"No response declared for status {status}"
            )

        if not response.has_content:
            return Selection(
                outcome=Outcome.RESOLVED,
                status_code=status,
                response_key=response_key,
                reason=f"Response {response_key} declares no content"
            )

        media = self.negotiate(response.content, context.header('accept'))
        example = self.pick_example(media.examples, context)

        if example is None:
            return Selection(
                outcome=Outcome.NO_EXAMPLE,
                status_code=status,
                response_key=response_key,
                content_type=media.content_type,
                reason=f"No example for {context.original_path} in response {response_key} ({media.content_type})"
            )

        return Selection(
            outcome=Outcome.RESOLVED,
            status_code=status,
            response_key=response_key,
            content_type=media.content_type,
            example=example,
            reason=f"Example '{example.key.raw}' from response {response_key}"
        )

    def resolve_response(self, operation: Operation, status: int) -> Tuple[Optional[str], Optional[ResponseDef]]:
        """
        Find the declared response for a status.

        Returns:
            (response key, ResponseDef) or (None, None)
        """
        response = operation.get_response(str(status))
        if response is not None:
            return str(status), response

        # "default" stands in for any status, so the status must be servable
        if MIN_STATUS <= status <= MAX_STATUS:
            response = operation.get_response(DEFAULT_KEY)
            if response is not None:
                return DEFAULT_KEY, response

        return None, None

    def negotiate(self, content: Mapping[str, MediaType], accept: Optional[str]) -> MediaType:
        """
        Choose a media type.

        The most preferred Accept range naming a declared content type wins;
        wildcards and unknown types fall back to the first declared type.
        """
        if accept:
            declared = {}
            for content_type, media in content.items():
                declared.setdefault(media_type_essence(content_type), media)

            for media_range in parse_accept_header(accept):
                if media_range in declared:
                    return declared[media_range]

        return next(iter(content.values()))

    def pick_example(self, examples: ExampleSet, context: RequestContext) -> Optional[Example]:
        """
        Pick the example for a request from a media type's examples.

        Returns:
            Matching example, the fallback, or None
        """
        for kind in KEY_PRIORITY:
            candidates = [e for e in examples.entries if e.key.kind is kind]
            if not candidates:
                continue

            if kind is KeyKind.EXACT_PATH:
                best = self._match_path(candidates, context)
            else:
                best = self._most_specific(
                    e for e in candidates if self.key_matches(e.key, context)
                )

            if best is not None:
                return best

        return examples.fallback

    def key_matches(self, key: ExampleKey, context: RequestContext) -> bool:
        """Check whether every clause of a selector key holds for the request."""
        if key.kind is KeyKind.EXACT_PATH:
            return key.raw in (context.original_path, context.path)

        if key.kind is KeyKind.QUERY:
            source = context.query
        elif key.kind is KeyKind.HEADER:
            source = context.headers
        else:
            return False

        return all(value in source.get(name, ()) for name, value in key.clauses)

    def _match_path(self, candidates: List[Example], context: RequestContext) -> Optional[Example]:
        # The full path is tried before the status-stripped one
        for path in (context.original_path, context.path):
            for example in candidates:
                if example.key.raw == path:
                    return example
        return None

    @staticmethod
    def _most_specific(examples) -> Optional[Example]:
        best = None
        for example in examples:
            # Strictly greater keeps the earliest declared on ties
            if best is None or example.key.specificity > best.key.specificity:
                best = example
        return best
