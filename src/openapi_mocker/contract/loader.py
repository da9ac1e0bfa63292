"""
OpenAPI Mocker Contract Loader

Reads an OpenAPI 3 document (YAML or JSON) and builds the read-only
ContractModel served by the mock server.

Handles:
- YAML and JSON input (JSON is parsed as YAML)
- openapi version check (3.x only)
- Local $ref resolution (#/components/...) with cycle detection
- Path-level parameters merged into each operation
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

import yaml

from .models import (
    HTTP_METHODS,
    LEGACY_KEY,
    ContractModel,
    Example,
    ExampleKey,
    ExampleSet,
    MediaType,
    Operation,
    Parameter,
    PathItem,
    ResponseDef,
    frozen_mapping,
)


logger = logging.getLogger("openapi_mocker.contract")


class ContractError(ValueError):
    """Raised when a contract document cannot be turned into a ContractModel."""


class ContractLoader:
    """
    Loader for OpenAPI contract files.

    Example:
        loader = ContractLoader("petstore.yaml")
        contract = loader.load()

        for operation in contract.operations():
            print(operation.method, operation.path)
    """

    def __init__(self, file_path: str):
        """
        Initialize contract loader.

        Args:
            file_path: Path to the OpenAPI document
        """
        self.file_path = Path(file_path)

    def load(self) -> ContractModel:
        """
        Load and build the contract.

        Returns:
            ContractModel

        Raises:
            FileNotFoundError: If the contract file doesn't exist
            ContractError: If the document is not a usable OpenAPI 3 contract
        """
        if not self.file_path.exists():
            raise FileNotFoundError(f"Contract file not found: {self.file_path}")

        with open(self.file_path, 'r', encoding='utf-8') as f:
            try:
                document = yaml.safe_load(f)
            except (yaml.YAMLError, UnicodeDecodeError) as e:
                raise ContractError(f"Failed to parse {self.file_path}: {e}") from e

        contract = build_contract(document, source=str(self.file_path))
        logger.info(
            f"Loaded contract '{contract.title}' from {self.file_path} "
            f"({len(contract.paths)} paths, {len(contract.operations())} operations)"
        )
        return contract

    @staticmethod
    def load_from_file(file_path: str) -> ContractModel:
        """
        Convenience method to load a contract in one call.

        Example:
            contract = ContractLoader.load_from_file("petstore.yaml")
        """
        return ContractLoader(file_path).load()


def build_contract(document: Any, source: str = "<document>") -> ContractModel:
    """
    Build a ContractModel from an already parsed OpenAPI document.

    Args:
        document: Parsed document (dict)
        source: Name used in error messages

    Returns:
        ContractModel
    """
    if not isinstance(document, dict):
        raise ContractError(
            f"Unexpected document format in {source}. "
            f"Expected a mapping, got {type(document).__name__}"
        )

    version = str(document.get('openapi', ''))
    if not version.startswith('3.'):
        raise ContractError(
            f"Unsupported contract in {source}: expected 'openapi: 3.x', "
            f"got {version or 'no openapi field'}"
        )

    paths = document.get('paths') or {}
    if not isinstance(paths, dict):
        raise ContractError(f"'paths' in {source} must be a mapping")

    resolver = RefResolver(document, source)
    info = document.get('info') or {}
    if not isinstance(info, dict):
        raise ContractError(f"'info' in {source} must be a mapping")

    path_items = {}
    for template, raw_item in paths.items():
        template = str(template)
        item = resolver.resolve(raw_item)
        if not isinstance(item, dict):
            raise ContractError(f"Path item '{template}' in {source} must be a mapping")
        path_items[template] = _build_path_item(template, item, resolver)

    return ContractModel(
        openapi=version,
        title=str(info.get('title', '')),
        version=str(info.get('version', '')),
        paths=frozen_mapping(path_items)
    )


class RefResolver:
    """Resolves local JSON pointer references ("#/components/...")."""

    def __init__(self, document: Dict[str, Any], source: str):
        self.document = document
        self.source = source

    def resolve(self, node: Any, seen: Optional[Set[str]] = None) -> Any:
        """
        Follow $ref pointers until a concrete node is reached.

        Only the top level of `node` is resolved; nested references are
        resolved by the caller as it walks the tree.
        """
        seen = set() if seen is None else seen

        while isinstance(node, dict) and '$ref' in node:
            ref = node['$ref']
            if not isinstance(ref, str) or not ref.startswith('#/'):
                raise ContractError(f"Unsupported $ref '{ref}' in {self.source} (only local refs)")
            if ref in seen:
                raise ContractError(f"Circular $ref '{ref}' in {self.source}")
            seen.add(ref)
            node = self._lookup(ref)

        return node

    def _lookup(self, ref: str) -> Any:
        node: Any = self.document
        for token in ref[2:].split('/'):
            token = token.replace('~1', '/').replace('~0', '~')
            if isinstance(node, dict) and token in node:
                node = node[token]
            elif isinstance(node, list) and token.isdigit() and int(token) < len(node):
                node = node[int(token)]
            else:
                raise ContractError(f"Unresolvable $ref '{ref}' in {self.source}")
        return node


def _build_path_item(template: str, item: Dict[str, Any], resolver: RefResolver) -> PathItem:
    shared_params = _build_parameters(item.get('parameters') or [], resolver)

    operations = {}
    for method, raw_op in item.items():
        method = str(method).lower()
        if method not in HTTP_METHODS:
            continue
        op = resolver.resolve(raw_op)
        if not isinstance(op, dict):
            raise ContractError(f"Operation {method.upper()} {template} must be a mapping")
        operations[method] = _build_operation(template, method, op, shared_params, resolver)

    return PathItem(template=template, operations=frozen_mapping(operations))


def _build_operation(
    template: str,
    method: str,
    op: Dict[str, Any],
    shared_params: List[Parameter],
    resolver: RefResolver
) -> Operation:
    own_params = _build_parameters(op.get('parameters') or [], resolver)

    # Operation-level parameters override path-level ones with the same name and location
    own_keys = {(p.name, p.location) for p in own_params}
    params = [p for p in shared_params if (p.name, p.location) not in own_keys] + own_params

    responses = {}
    raw_responses = resolver.resolve(op.get('responses') or {})
    if isinstance(raw_responses, dict):
        for status, raw_response in raw_responses.items():
            status = str(status)
            responses[status] = _build_response(status, resolver.resolve(raw_response), resolver)

    if not responses:
        logger.debug(f"{method.upper()} {template} declares no responses")

    return Operation(
        method=method,
        path=template,
        operation_id=op.get('operationId'),
        summary=str(op.get('summary') or ''),
        parameters=tuple(params),
        responses=frozen_mapping(responses)
    )


def _build_parameters(raw_params: List[Any], resolver: RefResolver) -> List[Parameter]:
    if not isinstance(raw_params, list):
        raise ContractError(f"'parameters' in {resolver.source} must be a list")

    params = []
    for raw in raw_params:
        p = resolver.resolve(raw)
        if not isinstance(p, dict) or 'name' not in p:
            continue
        location = str(p.get('in', 'query'))
        params.append(Parameter(
            name=str(p['name']),
            location=location,
            required=bool(p.get('required', location == 'path'))
        ))
    return params


def _build_response(status: str, response: Any, resolver: RefResolver) -> ResponseDef:
    if not isinstance(response, dict):
        return ResponseDef(status=status)

    raw_content = resolver.resolve(response.get('content')) or {}
    if not isinstance(raw_content, dict):
        raise ContractError(f"'content' of response {status} in {resolver.source} must be a mapping")

    content = {}
    for content_type, raw_media in raw_content.items():
        media = resolver.resolve(raw_media) or {}
        if not isinstance(media, dict):
            raise ContractError(
                f"Media type '{content_type}' of response {status} in {resolver.source} must be a mapping"
            )
        content[str(content_type)] = _build_media_type(str(content_type), media, resolver)

    return ResponseDef(
        status=status,
        description=str(response.get('description') or ''),
        content=frozen_mapping(content)
    )


def _build_media_type(content_type: str, media: Dict[str, Any], resolver: RefResolver) -> MediaType:
    single = _single_example(media, resolver)
    raw_examples = resolver.resolve(media.get('examples'))

    if isinstance(raw_examples, dict) and raw_examples:
        examples = _build_examples(raw_examples, resolver)
        fallback = Example(key=LEGACY_KEY, value=single[1]) if single else None
        example_set = ExampleSet.keyed(examples, single=fallback)
    elif single:
        example_set = ExampleSet.single(single[1])
    else:
        example_set = ExampleSet.empty()

    return MediaType(content_type=content_type, examples=example_set)


def _single_example(media: Dict[str, Any], resolver: RefResolver) -> Optional[Tuple[bool, Any]]:
    """
    Find the legacy single example.

    The media type's own `example` wins; otherwise the schema's `example`
    is used. Returns (True, value) so that a null example is still an example.
    """
    if 'example' in media:
        return True, media['example']

    schema = resolver.resolve(media.get('schema'))
    if isinstance(schema, dict) and 'example' in schema:
        return True, schema['example']

    return None


def _build_examples(raw_examples: Dict[str, Any], resolver: RefResolver) -> List[Example]:
    examples = []
    for raw_key, raw_example in raw_examples.items():
        example = resolver.resolve(raw_example)
        if not isinstance(example, dict) or 'value' not in example:
            logger.debug(f"Skipping example '{raw_key}' without an inline value")
            continue
        examples.append(Example(
            key=ExampleKey.parse(str(raw_key)),
            value=example['value'],
            summary=str(example.get('summary') or '')
        ))
    return examples
