"""
Tests for PactMock Interaction Registry

Tests the registry including:
- Registration order
- Identity-based matched tracking
- Clearing
- Verification results
- Concurrent access
"""

import threading

import pytest

from pactmock.mock.errors import InvalidInteractionError
from pactmock.mock.registry import ExpectedInteraction, InteractionRegistry, VerificationResult


@pytest.fixture
def interaction_data():
    """Registration JSON for a single interaction."""
    return {
        'description': 'a request for things',
        'provider_state': 'things exist',
        'request': {'method': 'GET', 'path': '/things'},
        'response': {'status': 200, 'body': {'foo': 'bar'}}
    }


@pytest.fixture
def registry():
    """Empty registry."""
    return InteractionRegistry()


def make_interaction(path='/things'):
    return ExpectedInteraction.from_dict({'request': {'method': 'get', 'path': path}})


class TestExpectedInteraction:
    """Test ExpectedInteraction construction."""

    def test_from_dict(self, interaction_data):
        """Test building from registration JSON."""
        interaction = ExpectedInteraction.from_dict(interaction_data)

        assert interaction.description == 'a request for things'
        assert interaction.provider_state == 'things exist'
        assert interaction.request.method == 'get'
        assert interaction.response.status == 200
        assert interaction.response.body == {'foo': 'bar'}

    def test_provider_state_camel_case(self):
        """Test providerState spelling is accepted."""
        interaction = ExpectedInteraction.from_dict({
            'providerState': 'a dog exists',
            'request': {'method': 'get', 'path': '/dogs/1'}
        })

        assert interaction.provider_state == 'a dog exists'

    def test_response_defaults(self):
        """Test missing response defaults to 200 with no body."""
        interaction = make_interaction()

        assert interaction.response.status == 200
        assert interaction.response.headers == {}

    def test_identity_not_structure(self, interaction_data):
        """Test identical registrations are distinct interactions."""
        first = ExpectedInteraction.from_dict(interaction_data)
        second = ExpectedInteraction.from_dict(interaction_data)

        assert first != second
        assert first.id != second.id
        assert len({first, second}) == 2

    def test_missing_request(self):
        """Test request is required."""
        with pytest.raises(InvalidInteractionError):
            ExpectedInteraction.from_dict({'response': {'status': 200}})

    def test_invalid_request(self):
        """Test invalid request is rejected."""
        with pytest.raises(InvalidInteractionError):
            ExpectedInteraction.from_dict({'request': {'path': '/no-method'}})

    def test_invalid_status(self):
        """Test non-numeric status is rejected."""
        with pytest.raises(InvalidInteractionError):
            ExpectedInteraction.from_dict({
                'request': {'method': 'get', 'path': '/'},
                'response': {'status': 'ok'}
            })

    def test_not_an_object(self):
        """Test interaction must be an object."""
        with pytest.raises(InvalidInteractionError):
            ExpectedInteraction.from_dict('GET /things')

    def test_to_dict(self, interaction_data):
        """Test wire form."""
        data = ExpectedInteraction.from_dict(interaction_data).to_dict()

        assert data == {
            'description': 'a request for things',
            'provider_state': 'things exist',
            'request': {'method': 'get', 'path': '/things'},
            'response': {'status': 200, 'body': {'foo': 'bar'}}
        }

    def test_str(self, interaction_data):
        """Test readable label."""
        interaction = ExpectedInteraction.from_dict(interaction_data)

        assert str(interaction).endswith('GET /things (a request for things)')


class TestInteractionRegistry:
    """Test InteractionRegistry operations."""

    def test_empty_registry_all_matched(self, registry):
        """Test an empty registry verifies vacuously."""
        assert registry.all_matched() is True
        assert registry.unmatched() == []
        assert len(registry) == 0

    def test_register_preserves_order(self, registry):
        """Test registration order is kept."""
        first, second, third = make_interaction('/1'), make_interaction('/2'), make_interaction('/3')

        registry.register(first)
        registry.register_all([second, third])

        assert registry.interactions() == [first, second, third]

    def test_interactions_is_snapshot(self, registry):
        """Test mutating the returned list does not touch the registry."""
        registry.register(make_interaction())

        snapshot = registry.interactions()
        snapshot.clear()

        assert len(registry) == 1

    def test_mark_matched(self, registry):
        """Test matched interactions leave the unmatched list."""
        first, second = make_interaction('/1'), make_interaction('/2')
        registry.register_all([first, second])

        registry.mark_matched(first)

        assert registry.unmatched() == [second]
        assert registry.all_matched() is False

    def test_mark_matched_idempotent(self, registry):
        """Test matching twice removes it once and counts both."""
        first, second = make_interaction('/1'), make_interaction('/2')
        registry.register_all([first, second])

        registry.mark_matched(first)
        registry.mark_matched(first)

        assert registry.unmatched() == [second]
        assert registry.match_count(first) == 2
        assert registry.match_count(second) == 0

    def test_identical_interactions_tracked_separately(self, registry, interaction_data):
        """Test matching one of two identical interactions leaves the other."""
        first = ExpectedInteraction.from_dict(interaction_data)
        second = ExpectedInteraction.from_dict(interaction_data)
        registry.register_all([first, second])

        registry.mark_matched(first)

        assert registry.unmatched() == [second]

    def test_unmatched_order_independent_of_match_order(self, registry):
        """Test unmatched stays in registration order."""
        interactions = [make_interaction(f'/{i}') for i in range(5)]
        registry.register_all(interactions)

        registry.mark_matched(interactions[3])
        registry.mark_matched(interactions[0])

        assert registry.unmatched() == [interactions[1], interactions[2], interactions[4]]

    def test_mark_unregistered_ignored(self, registry):
        """Test marking an unregistered interaction keeps matched within registered."""
        registry.register(make_interaction('/1'))
        stranger = make_interaction('/2')

        registry.mark_matched(stranger)

        assert registry.match_count(stranger) == 0
        assert len(registry.unmatched()) == 1

    def test_clear(self, registry):
        """Test clear empties registered and matched state."""
        interaction = make_interaction()
        registry.register(interaction)
        registry.mark_matched(interaction)

        registry.clear()

        assert len(registry) == 0
        assert registry.match_count(interaction) == 0
        assert registry.all_matched() is True

    def test_verify(self, registry):
        """Test verification result."""
        first, second = make_interaction('/1'), make_interaction('/2')
        registry.register_all([first, second])
        registry.mark_matched(second)

        result = registry.verify()

        assert isinstance(result, VerificationResult)
        assert result.all_matched is False
        assert result.unmatched == [first]
        assert result.to_dict()['unmatched'][0]['request'] == {'method': 'get', 'path': '/1'}

    def test_verify_does_not_mutate(self, registry):
        """Test verify is a pure read."""
        registry.register(make_interaction())

        registry.verify()
        registry.verify()

        assert len(registry) == 1
        assert len(registry.unmatched()) == 1


class TestRegistryConcurrency:
    """Test concurrent registry access."""

    def test_concurrent_register_and_match(self, registry):
        """Test parallel registration loses nothing."""
        per_thread = 100

        def worker():
            for _ in range(per_thread):
                interaction = make_interaction()
                registry.register(interaction)
                registry.mark_matched(interaction)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(registry) == 8 * per_thread
        assert registry.all_matched() is True
