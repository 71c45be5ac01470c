"""
PactMock Mock Service

FastAPI-based mock provider for consumer-driven contract tests.

Features:
- Control endpoints (startup poll, identify, verify, register, clear)
- Interaction replay with mismatch diagnostics
- Ambiguous interaction detection
- Preloading interactions from a JSON/YAML file
"""

from __future__ import annotations  # Enable forward references for type hints

from dataclasses import dataclass
from typing import List, Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
import uvicorn

from ..common.utils import configure_logger, InteractionLoader
from .errors import AmbiguousInteractionError
from .handlers import (
    Handler,
    MockMetrics,
    StartupPoll,
    Identify,
    VerificationGet,
    InteractionPost,
    InteractionDelete,
    InteractionReplay
)
from .matcher import InteractionMatcher
from .matching import MatchingCapability
from .registry import ExpectedInteraction, InteractionRegistry
from .request import RawRequest
from .response import MockResponse

AMBIGUOUS_STATUS = 409
ERROR_HEADER = 'X-Pact-Mock-Error'


@dataclass
class MockConfig:
    """Configuration for the mock service."""

    name: str = "MockService"

    # Server options
    host: str = "127.0.0.1"
    port: int = 1234
    log_level: str = "info"
    log_file: Optional[str] = None  # Log to stdout when unset

    # Interactions registered at startup
    interactions_file: Optional[str] = None


class MockService:
    """
    Mock provider serving registered interactions.

    A test registers interactions through POST /interactions, exercises the
    code under test against the service, then asks GET /verify whether every
    interaction was used.

    Example:
        service = MockService(MockConfig(name='Animal Service', port=1234))
        service.start()

        # Or in-process, without a socket
        response = service.handle(RawRequest('GET', '/verify'))
    """

    def __init__(
        self,
        config: Optional[MockConfig] = None,
        registry: Optional[InteractionRegistry] = None,
        matching: Optional[MatchingCapability] = None
    ):
        """
        Initialize mock service.

        Args:
            config: Optional MockConfig for service behavior
            registry: Optional InteractionRegistry (a fresh one is created if None)
            matching: Optional matching capability (PactMatching if None)
        """
        self.config = config or MockConfig()
        self.name = self.config.name
        self.identifier = str(id(self))

        self.logger = configure_logger(
            f"pactmock.mock.{self.name}",
            level=self.config.log_level,
            log_file=self.config.log_file
        )

        self.registry = registry if registry is not None else InteractionRegistry()
        self.metrics = MockMetrics()
        self.matcher = InteractionMatcher(self.registry, matching)

        # Order matters: the replay handler matches everything
        self.handlers: List[Handler] = [
            StartupPoll(self.name, self.logger, self.registry),
            Identify(self.name, self.logger, self.registry, self.identifier),
            VerificationGet(self.name, self.logger, self.registry, self.metrics),
            InteractionPost(self.name, self.logger, self.registry),
            InteractionDelete(self.name, self.logger, self.registry),
            InteractionReplay(self.name, self.logger, self.registry, self.matcher, self.metrics)
        ]

        if self.config.interactions_file:
            self._load_interactions(self.config.interactions_file)

        self.app = self._create_app()

    def _load_interactions(self, file_path: str):
        """Register interactions from a JSON or YAML file."""
        loader = InteractionLoader(file_path)
        interactions = [ExpectedInteraction.from_dict(data) for data in loader.load()]
        self.registry.register_all(interactions)
        self.logger.info(f"Loaded {len(interactions)} interactions from {file_path}")

    def handle(self, request: RawRequest) -> MockResponse:
        """
        Route a transport request to the first handler that accepts it.

        Args:
            request: Transport-level request

        Returns:
            MockResponse with status, headers and body

        Raises:
            AmbiguousInteractionError: If several interactions match the request
        """
        try:
            handler = next(h for h in self.handlers if h.matches(request))
            return handler.respond(request)
        except Exception:
            self.logger.exception(f"Error occurred in {self.name} handling {request.method} {request.path}")
            raise

    def _create_app(self) -> FastAPI:
        """Create FastAPI application with routes."""
        # Docs routes would shadow mocked paths
        app = FastAPI(
            title=f"PactMock - {self.name}",
            description="Mock provider for consumer-driven contract tests",
            version="1.0.0",
            docs_url=None,
            redoc_url=None,
            openapi_url=None
        )

        @app.exception_handler(AmbiguousInteractionError)
        async def ambiguous_interaction(request: Request, exc: AmbiguousInteractionError):
            """Refuse to guess between overlapping interactions."""
            return JSONResponse(
                status_code=AMBIGUOUS_STATUS,
                headers={ERROR_HEADER: 'ambiguous-interactions'},
                content={
                    'message': f"Multiple interactions found for {exc.request.path}",
                    'interactions': [i.as_json() for i in exc.interactions]
                }
            )

        @app.api_route("/{path:path}", methods=["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"])
        async def mock_request(request: Request, path: str):
            """Hand every request to the dispatcher."""
            body = await request.body()
            raw = RawRequest(
                method=request.method,
                path=request.url.path,
                query_string=request.url.query,
                headers=list(request.headers.items()),
                body=body
            )
            return self._to_response(self.handle(raw))

        return app

    @staticmethod
    def _to_response(response: MockResponse) -> Response:
        """Convert a MockResponse to a FastAPI Response."""
        # Starlette computes these itself
        headers_to_skip = {'content-length', 'transfer-encoding', 'connection'}
        headers = {
            k: v for k, v in response.headers.items()
            if k.lower() not in headers_to_skip
        }
        return Response(content=response.body, status_code=response.status, headers=headers)

    def start(self, host: Optional[str] = None, port: Optional[int] = None, access_log: bool = True):
        """
        Start the mock service (blocking).

        Args:
            host: Host to bind to (overrides config)
            port: Port to bind to (overrides config)
            access_log: Enable uvicorn access logging
        """
        actual_host = host or self.config.host
        actual_port = port or self.config.port

        print(f"PactMock service '{self.name}' starting...")
        print(f"   Host: {actual_host}:{actual_port}")
        print(f"   Interactions loaded: {len(self.registry)}")
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

    def __str__(self):
        return f"{self.name} {self.identifier}"


def create_mock_service(
    name: str = "MockService",
    host: str = "127.0.0.1",
    port: int = 1234,
    log_level: str = "info",
    log_file: Optional[str] = None,
    interactions_file: Optional[str] = None
) -> MockService:
    """
    Convenience function to create and configure a mock service.

    Args:
        name: Service name used in log lines
        host: Host to bind to
        port: Port to bind to
        log_level: Log level (debug, info, warning, error)
        log_file: Log to this file instead of stdout
        interactions_file: JSON/YAML file of interactions to register at startup

    Returns:
        Configured MockService instance

    Example:
        service = create_mock_service(name='Animal Service', port=1234)
        service.start()
    """
    config = MockConfig(
        name=name,
        host=host,
        port=port,
        log_level=log_level,
        log_file=log_file,
        interactions_file=interactions_file
    )

    return MockService(config=config)
