"""
PactMock Common Utilities

Shared utilities and helpers used across PactMock modules.
"""

from .utils import configure_logger, pretty_json, InteractionLoader

__all__ = [
    'configure_logger',
    'pretty_json',
    'InteractionLoader'
]
