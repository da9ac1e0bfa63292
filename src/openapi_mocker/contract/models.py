"""
OpenAPI Mocker Contract Model

Read-only, in-memory representation of an OpenAPI contract.

The model is built once by the ContractLoader and shared by every request
handler for the lifetime of the process. All entities are frozen dataclasses
and every mapping is exposed through a read-only proxy.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import unquote


HTTP_METHODS = ('get', 'put', 'post', 'delete', 'options', 'head', 'patch', 'trace')

DEFAULT_KEY = 'default'


def frozen_mapping(mapping: Optional[Dict[str, Any]] = None) -> Mapping[str, Any]:
    """Wrap a dict in a read-only proxy."""
    return MappingProxyType(dict(mapping or {}))


class KeyKind(str, Enum):
    """Classification of an example key."""

    DEFAULT = 'default'
    EXACT_PATH = 'exact_path'
    QUERY = 'query'
    HEADER = 'header'


@dataclass(frozen=True)
class ExampleKey:
    """
    Parsed example key.

    Keys are classified once when the contract is loaded:
    - "default" is the fallback example
    - "query:<name>=<value>[&<name>=<value>...]" constrains query parameters
    - "header:<name>=<value>[&...]" constrains request headers
    - anything else is compared to the request path verbatim

    Attributes:
        raw: Key as written in the contract
        kind: KeyKind classification
        clauses: (name, value) constraints for query/header keys; header
            names are lower-cased
    """

    raw: str
    kind: KeyKind
    clauses: Tuple[Tuple[str, str], ...] = ()

    @property
    def specificity(self) -> int:
        """Number of constraints the key expresses."""
        return len(self.clauses) if self.clauses else 1

    @classmethod
    def parse(cls, raw: str) -> 'ExampleKey':
        """Classify a raw example key."""
        if raw == DEFAULT_KEY:
            return cls(raw=raw, kind=KeyKind.DEFAULT)

        for prefix, kind in (('query:', KeyKind.QUERY), ('header:', KeyKind.HEADER)):
            if raw.startswith(prefix):
                clauses = _parse_clauses(raw[len(prefix):], lower_names=kind is KeyKind.HEADER)
                if clauses is None:
                    break
                return cls(raw=raw, kind=kind, clauses=clauses)

        return cls(raw=raw, kind=KeyKind.EXACT_PATH)


def _parse_clauses(text: str, lower_names: bool) -> Optional[Tuple[Tuple[str, str], ...]]:
    """Parse "a=1&b=2" into clauses, or None if any clause is malformed."""
    if not text:
        return None

    clauses = []
    for part in text.split('&'):
        name, sep, value = part.partition('=')
        name = unquote(name).strip()
        if not sep or not name:
            return None
        if lower_names:
            name = name.lower()
        clauses.append((name, unquote(value)))

    return tuple(clauses)


@dataclass(frozen=True)
class Example:
    """A single authored example value and the key it was declared under."""

    key: ExampleKey
    value: Any
    summary: str = ''


# Key reported for the legacy single `example` field
LEGACY_KEY = ExampleKey(raw='example', kind=KeyKind.DEFAULT)


class ExampleSetKind(str, Enum):
    """Shape of the examples declared on a media type."""

    NONE = 'none'
    SINGLE = 'single'
    KEYED = 'keyed'


@dataclass(frozen=True)
class ExampleSet:
    """
    Examples declared on a media type.

    A media type may carry a legacy single `example`, a keyed `examples`
    map, or both. The three shapes share one representation: keyed entries
    in declaration order (without the "default" key) plus an optional
    fallback, which is the "default" entry if declared and the single
    example otherwise.
    """

    kind: ExampleSetKind = ExampleSetKind.NONE
    entries: Tuple[Example, ...] = ()
    fallback: Optional[Example] = None

    @classmethod
    def empty(cls) -> 'ExampleSet':
        return cls()

    @classmethod
    def single(cls, value: Any) -> 'ExampleSet':
        return cls(
            kind=ExampleSetKind.SINGLE,
            fallback=Example(key=LEGACY_KEY, value=value)
        )

    @classmethod
    def keyed(cls, examples: List[Example], single: Optional[Example] = None) -> 'ExampleSet':
        """
        Build a keyed set from examples in declaration order.

        Args:
            examples: Parsed examples, "default" included
            single: Legacy single example, used when no "default" key exists
        """
        fallback = next((e for e in examples if e.key.kind is KeyKind.DEFAULT), single)
        entries = tuple(e for e in examples if e.key.kind is not KeyKind.DEFAULT)
        return cls(kind=ExampleSetKind.KEYED, entries=entries, fallback=fallback)

    @property
    def has_fallback(self) -> bool:
        return self.fallback is not None

    def keys(self) -> List[str]:
        """Declared keys in order, fallback last."""
        keys = [e.key.raw for e in self.entries]
        if self.fallback is not None:
            keys.append(self.fallback.key.raw)
        return keys


@dataclass(frozen=True)
class MediaType:
    content_type: str
    examples: ExampleSet = field(default_factory=ExampleSet.empty)


@dataclass(frozen=True)
class ResponseDef:
    """Declared response for one status code."""

    status: str
    description: str = ''
    content: Mapping[str, MediaType] = field(default_factory=frozen_mapping)

    @property
    def has_content(self) -> bool:
        return bool(self.content)


@dataclass(frozen=True)
class Parameter:
    name: str
    location: str  # path / query / header / cookie
    required: bool = False


@dataclass(frozen=True)
class Operation:
    """A single method on a path template."""

    method: str
    path: str
    operation_id: Optional[str] = None
    summary: str = ''
    parameters: Tuple[Parameter, ...] = ()
    responses: Mapping[str, ResponseDef] = field(default_factory=frozen_mapping)

    def get_response(self, status: str) -> Optional[ResponseDef]:
        return self.responses.get(status)


@dataclass(frozen=True)
class PathItem:
    template: str
    operations: Mapping[str, Operation] = field(default_factory=frozen_mapping)


@dataclass(frozen=True)
class ContractModel:
    """
    Root of the contract model.

    Attributes:
        openapi: Declared OpenAPI version string
        title: info.title
        version: info.version
        paths: Path template -> PathItem, in document order
    """

    openapi: str
    title: str = ''
    version: str = ''
    paths: Mapping[str, PathItem] = field(default_factory=frozen_mapping)

    def operations(self) -> List[Operation]:
        """All operations in document order."""
        return [op for item in self.paths.values() for op in item.operations.values()]

    def get_operation(self, template: str, method: str) -> Optional[Operation]:
        item = self.paths.get(template)
        if item is None:
            return None
        return item.operations.get(method.lower())
