"""
PactMock Errors
"""

from typing import Any, List


class PactMockError(Exception):
    """Base class for mock service errors."""


class InvalidInteractionError(PactMockError, ValueError):
    """Registration payload could not be turned into interactions."""


class AmbiguousInteractionError(PactMockError):
    """
    More than one registered interaction fully matches a request.

    This is a fault in the test's interaction setup, not in the request:
    two expectations cannot be told apart.
    """

    def __init__(self, request: Any, interactions: List[Any]):
        self.request = request
        self.interactions = list(interactions)
        super().__init__(
            f"Multiple interactions found for {request.path}: "
            f"{', '.join(str(i) for i in self.interactions)}"
        )
