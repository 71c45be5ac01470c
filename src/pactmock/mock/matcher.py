"""
PactMock Interaction Matcher

Finds the registered interaction an incoming request belongs to.

Every registered interaction is checked twice:
- route match (method + path): collected as candidates for diagnostics
- full match (everything, honoring flexible matchers): collected as matches

Exactly one full match is served and marked matched. No full match yields
the route candidates so the mismatch diff is shown against requests that
at least hit the right endpoint. More than one full match is ambiguous.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .matching import MatchingCapability, PactMatching
from .registry import ExpectedInteraction, InteractionRegistry
from .request import ActualRequest, ExpectedRequest


@dataclass
class NoMatch:
    """No interaction fully matched; candidates share the route."""

    candidates: List[ExpectedRequest] = field(default_factory=list)


@dataclass
class SingleMatch:
    """Exactly one interaction fully matched."""

    interaction: ExpectedInteraction


@dataclass
class Ambiguous:
    """Two or more interactions fully matched."""

    matches: List[ExpectedInteraction]


MatchOutcome = Union[NoMatch, SingleMatch, Ambiguous]


class InteractionMatcher:
    """
    Resolve actual requests against an InteractionRegistry.

    Example:
        matcher = InteractionMatcher(registry)
        outcome = matcher.resolve(actual)

        if isinstance(outcome, SingleMatch):
            response = render(outcome.interaction.response)
    """

    def __init__(self, registry: InteractionRegistry, matching: Optional[MatchingCapability] = None):
        """
        Initialize interaction matcher.

        Args:
            registry: Registry holding the expected interactions
            matching: Matching capability (defaults to PactMatching)
        """
        self.registry = registry
        self.matching = matching or PactMatching()

    def resolve(self, actual: ActualRequest) -> MatchOutcome:
        """
        Resolve an actual request.

        Args:
            actual: Normalized incoming request

        Returns:
            NoMatch, SingleMatch or Ambiguous
        """
        candidates: List[ExpectedRequest] = []
        matches: List[ExpectedInteraction] = []

        for interaction in self.registry.interactions():
            expected = interaction.request
            if self.matching.route_matches(expected, actual):
                candidates.append(expected)
            if self.matching.fully_matches(expected, actual):
                matches.append(interaction)

        if len(matches) > 1:
            return Ambiguous(matches)

        if not matches:
            return NoMatch(candidates)

        self.registry.mark_matched(matches[0])
        return SingleMatch(matches[0])

    def diffs(self, candidates: List[ExpectedRequest], actual: ActualRequest) -> List[Dict[str, Any]]:
        """Diff each candidate against the actual request."""
        return [self.matching.diff(candidate, actual) for candidate in candidates]
