"""
OpenAPI Mocker Mock Server Module

Mock HTTP server functionality for serving contract examples.

This module provides:
- FastAPI-based mock server
- Route table compiled from path templates
- Example selection engine
- Response synthesis and contract checks
"""

from .server import MockServer, MockConfig, MockMetrics, create_mock_server
from .routes import Route, RouteMatch, RouteTable
from .selector import ExampleSelector, Outcome, RequestContext, Selection
from .matcher import RequestMatcher, MatchResult
from .synthesizer import ResponseSynthesizer, SynthesizedResponse, SerializationError
from .checks import ContractWarning, check_contract

__all__ = [
    # Server
    'MockServer',
    'MockConfig',
    'MockMetrics',
    'create_mock_server',

    # Routing
    'Route',
    'RouteMatch',
    'RouteTable',

    # Selection
    'ExampleSelector',
    'Outcome',
    'RequestContext',
    'Selection',

    # Matcher
    'RequestMatcher',
    'MatchResult',

    # Responses
    'ResponseSynthesizer',
    'SynthesizedResponse',
    'SerializationError',

    # Checks
    'ContractWarning',
    'check_contract',
]

__version__ = '1.0.0'
