"""
PactMock Interaction Registry

Ordered store of expected interactions plus the subset that has been
matched by an incoming request. One lock guards both, so every operation
is atomic with respect to concurrent requests.
"""

import itertools
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from .errors import InvalidInteractionError
from .request import ExpectedRequest
from .response import ResponseSpec

_interaction_ids = itertools.count(1)


@dataclass(frozen=True, eq=False)
class ExpectedInteraction:
    """
    A registered pair of expected request and canned response.

    Equality and hashing are by identity: two interactions registered
    separately are distinct even when their contents are identical.
    """

    request: ExpectedRequest
    response: ResponseSpec
    description: str = ''
    provider_state: Optional[str] = None
    id: int = field(default_factory=lambda: next(_interaction_ids))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ExpectedInteraction':
        """
        Create an interaction from its JSON representation.

        Raises:
            InvalidInteractionError: If the payload is not a valid interaction
        """
        if not isinstance(data, dict):
            raise InvalidInteractionError(f"Interaction must be an object, got {type(data).__name__}")
        if 'request' not in data:
            raise InvalidInteractionError("Interaction is missing 'request'")

        try:
            request = ExpectedRequest.from_dict(data['request'])
            response = ResponseSpec.from_dict(data.get('response') or {})
        except (ValueError, TypeError) as e:
            raise InvalidInteractionError(f"Invalid interaction: {e}") from e

        return cls(
            request=request,
            response=response,
            description=data.get('description', ''),
            provider_state=data.get('provider_state') or data.get('providerState')
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.description:
            data['description'] = self.description
        if self.provider_state:
            data['provider_state'] = self.provider_state
        data['request'] = self.request.to_dict()
        data['response'] = self.response.to_dict()
        return data

    def as_json(self) -> Dict[str, Any]:
        """Readable form for logs and verification reports."""
        data = self.to_dict()
        data['request'] = self.request.as_json()
        return data

    def __str__(self):
        label = f" ({self.description})" if self.description else ''
        return f"#{self.id} {self.request}{label}"


@dataclass
class VerificationResult:
    """Outcome of comparing registered against matched interactions."""

    all_matched: bool
    unmatched: List[ExpectedInteraction] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'all_matched': self.all_matched,
            'unmatched': [i.as_json() for i in self.unmatched]
        }


class InteractionRegistry:
    """
    Registered interactions and the ones matched so far.

    Example:
        registry = InteractionRegistry()
        registry.register(interaction)
        ...
        if not registry.all_matched():
            print(registry.unmatched())
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._interactions: List[ExpectedInteraction] = []
        # interaction -> number of requests it served
        self._matched: Dict[ExpectedInteraction, int] = {}

    def register(self, interaction: ExpectedInteraction):
        with self._lock:
            self._interactions.append(interaction)

    def register_all(self, interactions: Iterable[ExpectedInteraction]):
        interactions = list(interactions)
        with self._lock:
            self._interactions.extend(interactions)

    def clear(self):
        with self._lock:
            self._interactions.clear()
            self._matched.clear()

    def mark_matched(self, interaction: ExpectedInteraction):
        """
        Record that ``interaction`` served a request.

        Interactions no longer registered (e.g. after a concurrent clear)
        are ignored so matched stays a subset of registered.
        """
        with self._lock:
            if not any(i is interaction for i in self._interactions):
                return
            self._matched[interaction] = self._matched.get(interaction, 0) + 1

    def interactions(self) -> List[ExpectedInteraction]:
        """Snapshot of registered interactions in registration order."""
        with self._lock:
            return list(self._interactions)

    def unmatched(self) -> List[ExpectedInteraction]:
        with self._lock:
            return [i for i in self._interactions if i not in self._matched]

    def all_matched(self) -> bool:
        return not self.unmatched()

    def match_count(self, interaction: ExpectedInteraction) -> int:
        with self._lock:
            return self._matched.get(interaction, 0)

    def verify(self) -> VerificationResult:
        unmatched = self.unmatched()
        return VerificationResult(all_matched=not unmatched, unmatched=unmatched)

    def __len__(self):
        with self._lock:
            return len(self._interactions)
