"""
PactMock Mock Service Module

Mock HTTP provider for consumer-driven contract tests.

This module provides:
- FastAPI-based mock service with control endpoints
- Interaction registry with matched/unmatched tracking
- Request matching engine with flexible matchers and diffs
- Canned response rendering
"""

from .server import MockService, MockConfig, create_mock_service
from .handlers import MockMetrics
from .registry import ExpectedInteraction, InteractionRegistry, VerificationResult
from .matcher import InteractionMatcher, MatchOutcome, NoMatch, SingleMatch, Ambiguous
from .matching import MatchingCapability, PactMatching
from .matchers import Term, SomethingLike, EachLike
from .request import RawRequest, ActualRequest, ExpectedRequest
from .response import ResponseSpec, MockResponse, render
from .errors import PactMockError, AmbiguousInteractionError, InvalidInteractionError

__all__ = [
    # Service
    'MockService',
    'MockConfig',
    'MockMetrics',
    'create_mock_service',

    # Registry
    'ExpectedInteraction',
    'InteractionRegistry',
    'VerificationResult',

    # Matching
    'InteractionMatcher',
    'MatchOutcome',
    'NoMatch',
    'SingleMatch',
    'Ambiguous',
    'MatchingCapability',
    'PactMatching',
    'Term',
    'SomethingLike',
    'EachLike',

    # Requests and responses
    'RawRequest',
    'ActualRequest',
    'ExpectedRequest',
    'ResponseSpec',
    'MockResponse',
    'render',

    # Errors
    'PactMockError',
    'AmbiguousInteractionError',
    'InvalidInteractionError',
]
