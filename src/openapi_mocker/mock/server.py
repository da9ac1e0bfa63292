"""
OpenAPI Mocker Server

FastAPI-based HTTP mock server that answers requests with the examples
authored in an OpenAPI contract.

Features:
- Routing driven entirely by the contract's path templates
- Status code selection with a leading path segment (/400/pets)
- Example selection by exact path, query and header keys
- Admin API for metrics, routes and configuration
- Debug headers describing how each request was resolved
"""

from __future__ import annotations  # Enable forward references for type hints

import logging
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

try:
    from fastapi import FastAPI, Request, Response
    from fastapi.responses import JSONResponse
    import uvicorn
    FASTAPI_AVAILABLE = True
except ImportError:
    FASTAPI_AVAILABLE = False

from ..contract import ContractLoader, ContractModel
from .checks import ContractWarning, check_contract
from .matcher import MatchResult, RequestMatcher
from .routes import RouteTable
from .selector import Outcome
from .synthesizer import ResponseSynthesizer, SynthesizedResponse


SERVED_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS", "TRACE"]


@dataclass
class MockConfig:
    """Configuration for mock server behavior."""

    # Resolution
    default_status: int = 200  # Status used when the path has no status segment
    fallback_status: int = 404  # Status for requests that don't resolve

    # Response decoration
    debug_headers: bool = True  # Add X-Mock-* headers to responses

    # Server options
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "info"
    verbose_mode: bool = False  # Print each request and its resolution to the console

    # Admin API
    admin_enabled: bool = True
    admin_prefix: str = "/__admin__"


@dataclass
class MockMetrics:
    """Track mock server metrics."""

    total_requests: int = 0
    matched_requests: int = 0
    unmatched_requests: int = 0
    serialization_errors: int = 0
    outcomes: Dict[str, int] = field(default_factory=dict)
    start_time: str = field(default_factory=lambda: datetime.now().isoformat())

    def record(self, result: MatchResult, status_code: int):
        """Count one handled request."""
        self.total_requests += 1
        self.outcomes[result.outcome.value] = self.outcomes.get(result.outcome.value, 0) + 1

        if result.matched:
            self.matched_requests += 1
            if status_code == 500:
                self.serialization_errors += 1
        else:
            self.unmatched_requests += 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        uptime_seconds = (datetime.now() - datetime.fromisoformat(self.start_time)).total_seconds()
        return {
            'total_requests': self.total_requests,
            'matched_requests': self.matched_requests,
            'unmatched_requests': self.unmatched_requests,
            'serialization_errors': self.serialization_errors,
            'outcomes': dict(self.outcomes),
            'match_rate': round((self.matched_requests / self.total_requests * 100) if self.total_requests > 0 else 0, 2),
            'uptime_seconds': round(uptime_seconds, 2),
            'start_time': self.start_time
        }


class MockServer:
    """
    FastAPI-based mock server for an OpenAPI contract.

    Loads the contract once, compiles its route table and serves the
    authored examples for incoming requests.

    Example:
        # Load a contract and start the server
        server = MockServer('petstore.yaml')
        server.start(port=8080)

        # With custom config
        config = MockConfig(port=9090, debug_headers=False, admin_enabled=False)
        server = MockServer('petstore.yaml', config=config)
        server.start()
    """

    def __init__(
        self,
        contract_file: Optional[str] = None,
        config: Optional[MockConfig] = None,
        contract: Optional[ContractModel] = None,
        request_matcher: Optional[RequestMatcher] = None,
        response_synthesizer: Optional[ResponseSynthesizer] = None
    ):
        """
        Initialize mock server.

        Args:
            contract_file: Path to the OpenAPI contract (YAML or JSON)
            config: Optional MockConfig for server behavior
            contract: Already loaded contract, used instead of contract_file
            request_matcher: Optional RequestMatcher instance (will create if None)
            response_synthesizer: Optional ResponseSynthesizer instance (will create if None)
        """
        if not FASTAPI_AVAILABLE:
            raise ImportError("FastAPI is required for mock server. Install with: pip install fastapi uvicorn")

        if contract is None and contract_file is None:
            raise ValueError("Either contract_file or contract is required")

        self.contract_file = Path(contract_file) if contract_file else None
        self.config = config or MockConfig()
        self.metrics = MockMetrics()

        # Setup logging first (before loading the contract)
        self.logger = logging.getLogger("openapi_mocker.mock")
        self.logger.setLevel(getattr(logging, self.config.log_level.upper()))

        # Contract and route table are built once and only read afterwards
        self.contract = contract or self._load_contract()
        self.route_table = RouteTable.compile(self.contract)
        self.logger.info(f"Compiled {len(self.route_table)} routes")
        self.warnings = self._check_contract()

        self.matcher = request_matcher or RequestMatcher(
            self.route_table,
            default_status=self.config.default_status
        )
        self.synthesizer = response_synthesizer or ResponseSynthesizer(
            fallback_status=self.config.fallback_status,
            debug_headers=self.config.debug_headers
        )

        # Setup FastAPI app
        self.app = self._create_app()

    def _load_contract(self) -> ContractModel:
        """Load the contract file."""
        return ContractLoader(str(self.contract_file)).load()

    def _check_contract(self) -> List[ContractWarning]:
        warnings = check_contract(self.contract, self.route_table)
        for warning in warnings:
            self.logger.warning(f"Contract: {warning}")
        return warnings

    def _create_app(self) -> FastAPI:
        """Create FastAPI application with routes."""
        app = FastAPI(
            title=f"OpenAPI Mock: {self.contract.title or 'contract'}",
            description="Mock HTTP server serving examples from an OpenAPI contract",
            version=self.contract.version or "1.0.0",
            docs_url=None,
            redoc_url=None,
            openapi_url=None
        )

        # Admin API routes
        if self.config.admin_enabled:
            @app.get(f"{self.config.admin_prefix}/metrics")
            async def get_metrics():
                """Get server metrics."""
                return JSONResponse(content=self.metrics.to_dict())

            @app.get(f"{self.config.admin_prefix}/routes")
            async def list_routes():
                """List compiled routes in match order."""
                return JSONResponse(content={
                    'title': self.contract.title,
                    'version': self.contract.version,
                    'total': len(self.route_table),
                    'routes': [route.to_dict() for route in self.route_table],
                    'warnings': [w.to_dict() for w in self.warnings]
                })

            @app.get(f"{self.config.admin_prefix}/config")
            async def get_config():
                """Get current configuration."""
                return JSONResponse(content={
                    **asdict(self.config),
                    'contract_file': str(self.contract_file) if self.contract_file else None,
                    'total_routes': len(self.route_table)
                })

            @app.post(f"{self.config.admin_prefix}/reset")
            async def reset_metrics():
                """Reset metrics."""
                self.metrics = MockMetrics()
                return JSONResponse(content={'status': 'reset'})

        # Main catch-all route for mocking
        @app.api_route("/{path:path}", methods=SERVED_METHODS)
        async def mock_request(request: Request, path: str):
            """Handle incoming requests and serve mock responses."""
            return await self._handle_request(request)

        return app

    async def _handle_request(self, request: Request) -> Response:
        """
        Handle incoming request and serve mock response.

        Args:
            request: FastAPI Request object

        Returns:
            FastAPI Response with the selected example
        """
        start_time = time.time()

        method = request.method
        path = request.url.path
        query = request.url.query

        self.logger.debug(f"Incoming: {method} {path}{'?' + query if query else ''}")

        result = self.matcher.find_match(method, path, query, request.headers.items())
        synthesized = self.synthesizer.synthesize(result)
        self.metrics.record(result, synthesized.status_code)

        if result.outcome is not Outcome.RESOLVED:
            self.logger.warning(f"No match for {method} {path}: {result.reason}")
        elif synthesized.status_code == 500:
            self.logger.warning(f"Serialization failed for {method} {path}: {synthesized.body.decode('utf-8', 'replace')}")

        if self.config.verbose_mode:
            self._print_resolution(result, synthesized, (time.time() - start_time) * 1000)

        return self._to_response(synthesized)

    def _to_response(self, synthesized: SynthesizedResponse) -> Response:
        """Convert a synthesized response into a FastAPI Response."""
        return Response(
            content=synthesized.body,
            status_code=synthesized.status_code,
            headers=synthesized.headers,
            media_type=synthesized.content_type
        )

    def _print_resolution(self, result: MatchResult, synthesized: SynthesizedResponse, elapsed_ms: float):
        timestamp = datetime.now().strftime("%H:%M:%S")
        print(f"[{timestamp}] {result.method} {result.request.original_path}")

        if result.route_match:
            params = result.route_match.params
            print(f"[{timestamp}]   Route: {result.template}" + (f" {params}" if params else ""))
        print(f"[{timestamp}]   {result.outcome.value}: {result.reason}")
        print(f"[{timestamp}]   Response: {synthesized.status_code} ({elapsed_ms:.1f}ms)")

    def start(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        access_log: bool = True
    ):
        """
        Start the mock server.

        Args:
            host: Host to bind to (overrides config)
            port: Port to bind to (overrides config)
            access_log: Enable access logging
        """
        actual_host = host or self.config.host
        actual_port = port or self.config.port

        print(f"OpenAPI Mock Server starting...")
        print(f"   Contract: {self.contract.title or self.contract_file} (OpenAPI {self.contract.openapi})")
        print(f"   Host: {actual_host}:{actual_port}")
        print(f"   Routes: {len(self.route_table)}")

        if self.warnings:
            print(f"   Contract warnings: {len(self.warnings)} (see log)")

        if self.config.admin_enabled:
            print(f"   Admin API: http://{actual_host}:{actual_port}{self.config.admin_prefix}/routes")

        print()

        uvicorn.run(
            self.app,
            host=actual_host,
            port=actual_port,
            log_level=self.config.log_level,
            access_log=access_log
        )

    def get_app(self) -> FastAPI:
        """
        Get the FastAPI app instance for testing or custom deployment.

        Returns:
            FastAPI application instance
        """
        return self.app


def create_mock_server(
    contract_file: str,
    host: str = "0.0.0.0",
    port: int = 8080,
    debug_headers: bool = True,
    admin_enabled: bool = True,
    log_level: str = "info",
    verbose_mode: bool = False
) -> MockServer:
    """
    Convenience function to create and configure a mock server.

    Args:
        contract_file: Path to the OpenAPI contract
        host: Host to bind to
        port: Port to bind to
        debug_headers: Add X-Mock-* headers to responses
        admin_enabled: Serve the admin API
        log_level: Log level (debug, info, warning, error)
        verbose_mode: Print each resolution to the console

    Returns:
        Configured MockServer instance

    Example:
        server = create_mock_server('petstore.yaml', port=8080)
        server.start()
    """
    config = MockConfig(
        host=host,
        port=port,
        debug_headers=debug_headers,
        admin_enabled=admin_enabled,
        log_level=log_level,
        verbose_mode=verbose_mode
    )

    return MockServer(contract_file, config=config)
