"""
Tests for PactMock Interaction Matcher

Tests resolving requests against registered interactions:
- Single match (served and marked matched)
- No match with route candidates
- Ambiguous matches
- Pluggable matching capability
"""

import pytest
from unittest.mock import Mock

from pactmock.mock.matcher import InteractionMatcher, NoMatch, SingleMatch, Ambiguous
from pactmock.mock.matching import MatchingCapability, PactMatching
from pactmock.mock.registry import ExpectedInteraction, InteractionRegistry
from pactmock.mock.request import ActualRequest


@pytest.fixture
def registry():
    """Empty registry."""
    return InteractionRegistry()


@pytest.fixture
def matcher(registry):
    """Matcher over the registry."""
    return InteractionMatcher(registry)


def interaction(method='get', path='/things', **request):
    request.update({'method': method, 'path': path})
    return ExpectedInteraction.from_dict({'request': request, 'response': {'status': 200}})


class TestInteractionMatcher:
    """Test InteractionMatcher.resolve."""

    def test_default_matching(self, matcher):
        """Test PactMatching is used by default."""
        assert isinstance(matcher.matching, PactMatching)

    def test_single_match(self, registry, matcher):
        """Test a single full match is returned and marked."""
        things = interaction()
        registry.register_all([things, interaction(path='/other')])

        outcome = matcher.resolve(ActualRequest(method='get', path='/things'))

        assert isinstance(outcome, SingleMatch)
        assert outcome.interaction is things
        assert registry.match_count(things) == 1

    def test_no_match_empty_registry(self, matcher):
        """Test empty registry yields no candidates."""
        outcome = matcher.resolve(ActualRequest(method='get', path='/unknown'))

        assert isinstance(outcome, NoMatch)
        assert outcome.candidates == []

    def test_no_match_route_candidates(self, registry, matcher):
        """Test only route-compatible requests become candidates."""
        by_query = interaction(query='a=1')
        by_header = interaction(headers={'X-Token': 'abc'})
        other_route = interaction(path='/other')
        registry.register_all([by_query, by_header, other_route])

        outcome = matcher.resolve(ActualRequest(method='get', path='/things', query='a=2'))

        assert isinstance(outcome, NoMatch)
        assert outcome.candidates == [by_query.request, by_header.request]
        assert registry.all_matched() is False
        assert registry.match_count(by_query) == 0

    def test_ambiguous(self, registry, matcher):
        """Test two full matches are ambiguous and not marked."""
        first, second = interaction(), interaction()
        registry.register_all([first, second])

        outcome = matcher.resolve(ActualRequest(method='get', path='/things'))

        assert isinstance(outcome, Ambiguous)
        assert outcome.matches == [first, second]
        assert registry.unmatched() == [first, second]

    def test_broad_pattern_matched_twice(self, registry, matcher):
        """Test one interaction serving two different requests."""
        broad = interaction()
        registry.register(broad)

        matcher.resolve(ActualRequest(method='get', path='/things', query='a=1'))
        matcher.resolve(ActualRequest(method='get', path='/things', query='a=2'))

        assert registry.unmatched() == []
        assert registry.match_count(broad) == 2

    def test_diffs(self, registry, matcher):
        """Test diffs for candidates."""
        registry.register(interaction(path='/search', query='q=foo'))
        request = ActualRequest(method='get', path='/search', query='q=bar')

        outcome = matcher.resolve(request)
        diffs = matcher.diffs(outcome.candidates, request)

        assert len(diffs) == 1
        assert diffs[0] == {'query': {'q': {0: {'expected': 'foo', 'actual': 'bar'}}}}


class TestPluggableMatching:
    """Test a custom matching capability."""

    def test_route_and_full_checked_independently(self, registry):
        """Test candidates and matches come from separate checks."""
        first, second = interaction(path='/1'), interaction(path='/2')
        registry.register_all([first, second])

        matching = Mock(spec=MatchingCapability)
        matching.route_matches.return_value = True
        matching.fully_matches.side_effect = lambda expected, actual: expected is second.request

        outcome = InteractionMatcher(registry, matching).resolve(ActualRequest(method='get', path='/x'))

        assert isinstance(outcome, SingleMatch)
        assert outcome.interaction is second
        assert matching.route_matches.call_count == 2
        assert matching.fully_matches.call_count == 2
