"""
OpenAPI Mocker Request Matcher

Resolves an incoming request to the example it should be answered with.

Pipeline:
- Request normalization (status code prefix, query parsing)
- Path matching against the route table
- Example selection for the matched operation

The matcher holds no per-request state; the same request against the same
contract always resolves the same way.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from ..common.url_utils import DEFAULT_STATUS, NormalizedRequest, URLNormalizer
from ..common.utils import group_headers
from ..contract.models import ContractModel
from .routes import RouteMatch, RouteTable
from .selector import ExampleSelector, Outcome, RequestContext, Selection


logger = logging.getLogger("openapi_mocker.mock")


@dataclass(frozen=True)
class MatchResult:
    """Result of matching a request."""

    outcome: Outcome
    method: str
    request: NormalizedRequest
    route_match: Optional[RouteMatch] = None
    selection: Optional[Selection] = None
    reason: str = ""

    @property
    def matched(self) -> bool:
        return self.outcome is Outcome.RESOLVED

    @property
    def status_code(self) -> int:
        return self.selection.status_code if self.selection else self.request.status

    @property
    def template(self) -> Optional[str]:
        return self.route_match.route.template if self.route_match else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'matched': self.matched,
            'outcome': self.outcome.value,
            'reason': self.reason,
            'method': self.method,
            'path': self.request.original_path,
            'status': self.status_code,
            'route': self.template,
            'path_params': dict(self.route_match.params) if self.route_match else {},
            'example': self.selection.example_key if self.selection else None
        }


class RequestMatcher:
    """
    Matches requests against a contract's route table.

    Example:
        matcher = RequestMatcher(RouteTable.compile(contract))
        result = matcher.find_match('GET', '/400/hello', 'name=sansa')

        if result.matched:
            print(result.selection.status_code, result.selection.value)
    """

    def __init__(
        self,
        route_table: RouteTable,
        selector: Optional[ExampleSelector] = None,
        default_status: int = DEFAULT_STATUS
    ):
        """
        Initialize request matcher.

        Args:
            route_table: Compiled routes
            selector: Example selector (will create if None)
            default_status: Status used when the path has no status prefix
        """
        self.route_table = route_table
        self.selector = selector or ExampleSelector()
        self.default_status = default_status

    @classmethod
    def from_contract(cls, contract: ContractModel, **kwargs) -> 'RequestMatcher':
        return cls(RouteTable.compile(contract), **kwargs)

    def find_match(
        self,
        method: str,
        path: str,
        query_string: str = '',
        headers: Optional[Iterable[Tuple[str, str]]] = None
    ) -> MatchResult:
        """
        Resolve a request.

        Args:
            method: HTTP method
            path: URL-decoded request path
            query_string: Raw query string
            headers: Header (name, value) pairs

        Returns:
            MatchResult; misses carry the outcome explaining them
        """
        method = method.upper()
        request = URLNormalizer.normalize_request(path, query_string, self.default_status)

        route_match = self.route_table.match(request.path, method)
        if route_match is None:
            return MatchResult(
                outcome=Outcome.NO_ROUTE,
                method=method,
                request=request,
                reason=f"No route for {method} {request.path}"
            )

        context = RequestContext(
            original_path=request.original_path,
            path=request.path,
            query=request.query,
            headers=group_headers(headers or ())
        )
        selection = self.selector.select(route_match.operation, request.status, context)

        logger.debug(
            f"{method} {request.original_path} -> {route_match.route.template} "
            f"[{selection.outcome.value}] {selection.reason}"
        )

        return MatchResult(
            outcome=selection.outcome,
            method=method,
            request=request,
            route_match=route_match,
            selection=selection,
            reason=selection.reason
        )
