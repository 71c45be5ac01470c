"""
PactMock Request Handlers

The dispatcher's handler chain. Each handler answers ``matches(request)``
without side effects; ``respond(request)`` does the work. Control handlers
match an exact method and path; InteractionReplay matches everything and
must come last.
"""

import json
import logging
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List

from ..common.utils import pretty_json
from .errors import AmbiguousInteractionError, InvalidInteractionError
from .matcher import Ambiguous, InteractionMatcher, NoMatch
from .registry import ExpectedInteraction, InteractionRegistry
from .request import ActualRequest, RawRequest
from .response import MockResponse, render


@dataclass
class MockMetrics:
    """Track replayed request counts."""

    total_requests: int = 0
    matched_requests: int = 0
    unmatched_requests: int = 0
    ambiguous_requests: int = 0
    start_time: str = field(default_factory=lambda: datetime.now().isoformat())
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    def increment(self, counter: str):
        """Add one to ``counter`` (e.g. 'matched_requests')."""
        with self._lock:
            setattr(self, counter, getattr(self, counter) + 1)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        with self._lock:
            return {
                'total_requests': self.total_requests,
                'matched_requests': self.matched_requests,
                'unmatched_requests': self.unmatched_requests,
                'ambiguous_requests': self.ambiguous_requests,
                'start_time': self.start_time
            }


class Handler:
    """Base handler bound to a service name, logger and registry."""

    method = ''
    path = ''

    def __init__(self, name: str, logger: logging.Logger, registry: InteractionRegistry):
        self.name = name
        self.logger = logger
        self.registry = registry

    def matches(self, request: RawRequest) -> bool:
        return request.method.upper() == self.method and request.path == self.path

    def respond(self, request: RawRequest) -> MockResponse:
        raise NotImplementedError


class StartupPoll(Handler):
    """Liveness probe used by test harnesses to wait for the service."""

    method = 'GET'
    path = '/index.html'

    def respond(self, request: RawRequest) -> MockResponse:
        self.logger.info(f"{self.name} started up")
        return MockResponse(200, {}, 'Started up fine')


class Identify(Handler):
    """Returns an identifier that is stable for the life of the service."""

    method = 'GET'
    path = '/__identify__'

    def __init__(self, name: str, logger: logging.Logger, registry: InteractionRegistry, identifier: str):
        super().__init__(name, logger, registry)
        self.identifier = identifier

    def respond(self, request: RawRequest) -> MockResponse:
        return MockResponse(200, {}, self.identifier)


class VerificationGet(Handler):
    """Reports whether every registered interaction was exercised."""

    method = 'GET'
    path = '/verify'

    def __init__(self, name: str, logger: logging.Logger, registry: InteractionRegistry, metrics: MockMetrics):
        super().__init__(name, logger, registry)
        self.metrics = metrics

    def respond(self, request: RawRequest) -> MockResponse:
        result = self.registry.verify()

        if result.all_matched:
            self.logger.info(f"{self.name} verifying - interactions matched")
            return MockResponse(200, {}, 'Interactions matched')

        self.logger.warning(
            f"{self.name} verifying - actual interactions do not match expected interactions "
            f"({self.metrics.matched_requests} of {self.metrics.total_requests} requests matched). "
            f"Missing interactions:"
        )
        self.logger.warning(pretty_json([i.as_json() for i in result.unmatched]))

        lines = ['Actual interactions do not match expected interactions', '', 'Missing requests:']
        lines.extend(f"\t{interaction}" for interaction in result.unmatched)
        return MockResponse(500, {}, '\n'.join(lines))


class InteractionPost(Handler):
    """Registers interactions from a JSON array (or a single object)."""

    method = 'POST'
    path = '/interactions'

    def respond(self, request: RawRequest) -> MockResponse:
        try:
            interactions = self._parse(request.body)
        except InvalidInteractionError as e:
            self.logger.warning(f"{self.name} rejected interactions: {e}")
            return MockResponse(400, {}, str(e))

        self.registry.register_all(interactions)
        self.logger.info(f"Added {len(interactions)} interaction(s) to {self.name}")
        self.logger.info(pretty_json([i.as_json() for i in interactions]))
        return MockResponse(200, {}, 'Added interactions')

    @staticmethod
    def _parse(body: bytes) -> List[ExpectedInteraction]:
        try:
            data = json.loads(body.decode('utf-8') if body else '')
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidInteractionError(f"Interactions must be valid JSON: {e}") from e

        if isinstance(data, dict):
            data = data.get('interactions', [data])
        if not isinstance(data, list):
            raise InvalidInteractionError(f"Expected a list of interactions, got {type(data).__name__}")

        return [ExpectedInteraction.from_dict(item) for item in data]


class InteractionDelete(Handler):
    """Clears all registered interactions."""

    method = 'DELETE'
    path = '/interactions'

    def respond(self, request: RawRequest) -> MockResponse:
        self.registry.clear()
        self.logger.info(f"Cleared interactions on {self.name}")
        return MockResponse(200, {}, 'Deleted interactions')


class InteractionReplay(Handler):
    """
    Catch-all handler serving canned responses.

    Raises:
        AmbiguousInteractionError: If several interactions fully match
    """

    def __init__(
        self,
        name: str,
        logger: logging.Logger,
        registry: InteractionRegistry,
        matcher: InteractionMatcher,
        metrics: MockMetrics
    ):
        super().__init__(name, logger, registry)
        self.matcher = matcher
        self.metrics = metrics

    def matches(self, request: RawRequest) -> bool:
        return True

    def respond(self, request: RawRequest) -> MockResponse:
        actual = ActualRequest.from_raw(request)
        self.metrics.increment('total_requests')

        self.logger.info(f"{self.name} received request")
        self.logger.info(pretty_json(actual.as_json()))

        outcome = self.matcher.resolve(actual)

        if isinstance(outcome, Ambiguous):
            self.metrics.increment('ambiguous_requests')
            self.logger.error(f"Multiple interactions found on {self.name}:")
            self.logger.error(pretty_json([i.as_json() for i in outcome.matches]))
            raise AmbiguousInteractionError(actual, outcome.matches)

        if isinstance(outcome, NoMatch):
            self.metrics.increment('unmatched_requests')
            return self._unrecognised_request(actual, outcome)

        self.metrics.increment('matched_requests')
        response = render(outcome.interaction.response)
        self.logger.info(f"Found matching response on {self.name}: {outcome.interaction}")
        self.logger.info(pretty_json(asdict(response)))
        return response

    def _unrecognised_request(self, actual: ActualRequest, outcome: NoMatch) -> MockResponse:
        interaction_diff = self.matcher.diffs(outcome.candidates, actual)

        self.logger.warning(f"No interaction found on {self.name} for {actual.method.upper()} {actual.path}")
        self.logger.warning('Interaction diffs for that route:')
        self.logger.warning(pretty_json(interaction_diff))

        body = {
            'message': f"No interaction found for {actual.path}",
            'interaction_diff': interaction_diff
        }
        return MockResponse(500, {'Content-Type': 'application/json'}, json.dumps(body))
