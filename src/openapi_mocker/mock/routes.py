"""
OpenAPI Mocker Route Table

Compiles the contract's path templates into ordered segment matchers and
matches incoming paths against them.

Supports templates like:
- /pets            (literal segments)
- /pets/{petId}    (named parameter, any single non-empty segment)
- /files/{name}.json  (parameter embedded in a literal segment)

When more than one template matches a path, the template declared first in
the contract wins.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..common.url_utils import URLNormalizer
from ..contract.models import ContractModel, Operation


_PLACEHOLDER = re.compile(r'\{([^{}/]+)\}')


@dataclass(frozen=True)
class Segment:
    """One compiled template segment."""

    text: str

    @property
    def is_literal(self) -> bool:
        return True

    def match(self, value: str) -> Optional[Dict[str, str]]:
        """Return bound parameters if `value` matches, else None."""
        return {} if value == self.text else None


@dataclass(frozen=True)
class ParamSegment(Segment):
    name: str = ''

    @property
    def is_literal(self) -> bool:
        return False

    def match(self, value: str) -> Optional[Dict[str, str]]:
        return {self.name: value} if value else None


@dataclass(frozen=True)
class PatternSegment(Segment):
    """Segment mixing literal text and placeholders, e.g. "{name}.json"."""

    regex: re.Pattern = None
    names: Tuple[str, ...] = ()

    @property
    def is_literal(self) -> bool:
        return False

    def match(self, value: str) -> Optional[Dict[str, str]]:
        m = self.regex.fullmatch(value)
        if not m:
            return None
        return dict(zip(self.names, m.groups()))


def compile_segment(text: str) -> Segment:
    """Compile a single template segment."""
    placeholders = _PLACEHOLDER.findall(text)
    if not placeholders:
        return Segment(text=text)

    if len(placeholders) == 1 and text == f'{{{placeholders[0]}}}':
        return ParamSegment(text=text, name=placeholders[0].strip())

    # Escape the literal parts and turn each placeholder into a capture group
    pattern = ''
    last = 0
    for m in _PLACEHOLDER.finditer(text):
        pattern += re.escape(text[last:m.start()]) + '(.+?)'
        last = m.end()
    pattern += re.escape(text[last:])

    return PatternSegment(
        text=text,
        regex=re.compile(pattern),
        names=tuple(name.strip() for name in placeholders)
    )


def compile_template(template: str) -> Tuple[Segment, ...]:
    """Compile a path template into its ordered segment matchers."""
    return tuple(compile_segment(s) for s in URLNormalizer.split_segments(template))


@dataclass(frozen=True)
class Route:
    """A compiled (template, method) pair."""

    template: str
    method: str
    operation: Operation
    segments: Tuple[Segment, ...]
    index: int = 0

    def match(self, segments: List[str]) -> Optional[Dict[str, str]]:
        """
        Match concrete path segments against this route.

        Returns:
            Bound path parameters, or None if the path doesn't match
        """
        if len(segments) != len(self.segments):
            return None

        params: Dict[str, str] = {}
        for compiled, value in zip(self.segments, segments):
            bound = compiled.match(value)
            if bound is None:
                return None
            params.update(bound)

        return params

    def to_dict(self) -> Dict[str, object]:
        """Convert to dictionary."""
        return {
            'index': self.index,
            'method': self.method.upper(),
            'path': self.template,
            'operation_id': self.operation.operation_id,
            'summary': self.operation.summary,
            'statuses': list(self.operation.responses.keys())
        }


@dataclass(frozen=True)
class RouteMatch:
    """Result of matching a path against the route table."""

    route: Route
    params: Dict[str, str] = field(default_factory=dict)

    @property
    def operation(self) -> Operation:
        return self.route.operation


class RouteTable:
    """
    Ordered collection of compiled routes.

    Built once from the contract and only read afterwards.

    Example:
        table = RouteTable.compile(contract)
        match = table.match('/pets/2', 'GET')

        if match:
            print(match.route.template, match.params)  # /pets/{petId} {'petId': '2'}
    """

    def __init__(self, routes: List[Route]):
        self._routes = tuple(routes)

        # Per-method view keeps declaration order for the tie-break
        by_method: Dict[str, List[Route]] = {}
        for route in self._routes:
            by_method.setdefault(route.method, []).append(route)
        self._by_method = {method: tuple(routes) for method, routes in by_method.items()}

    @classmethod
    def compile(cls, contract: ContractModel) -> 'RouteTable':
        """Compile every (template, method) pair in document order."""
        routes = []
        for template, item in contract.paths.items():
            segments = compile_template(template)
            for method, operation in item.operations.items():
                routes.append(Route(
                    template=template,
                    method=method,
                    operation=operation,
                    segments=segments,
                    index=len(routes)
                ))
        return cls(routes)

    @property
    def routes(self) -> Tuple[Route, ...]:
        return self._routes

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self):
        return iter(self._routes)

    def match(self, path: str, method: str) -> Optional[RouteMatch]:
        """
        Find the first declared route matching the path and method.

        Args:
            path: Normalized request path (status prefix removed)
            method: HTTP method, any case

        Returns:
            RouteMatch, or None when no route matches
        """
        segments = URLNormalizer.split_segments(path)

        for route in self._by_method.get(method.lower(), ()):
            params = route.match(segments)
            if params is not None:
                return RouteMatch(route=route, params=params)

        return None
