"""
OpenAPI Mocker Contract Module

Loading and modelling of OpenAPI 3 contracts.

This module provides:
- YAML/JSON contract loading with local $ref resolution
- Read-only contract model (paths, operations, responses, examples)
- Example key parsing (exact path, query and header selectors)
"""

from .loader import ContractLoader, ContractError, RefResolver, build_contract
from .models import (
    ContractModel,
    PathItem,
    Operation,
    Parameter,
    ResponseDef,
    MediaType,
    Example,
    ExampleKey,
    ExampleSet,
    ExampleSetKind,
    KeyKind,
)

__all__ = [
    # Loader
    'ContractLoader',
    'ContractError',
    'RefResolver',
    'build_contract',

    # Model
    'ContractModel',
    'PathItem',
    'Operation',
    'Parameter',
    'ResponseDef',
    'MediaType',
    'Example',
    'ExampleKey',
    'ExampleSet',
    'ExampleSetKind',
    'KeyKind',
]
