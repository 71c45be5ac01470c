"""
PactMock

Mock provider for consumer-driven contract testing.
"""

__version__ = '1.0.0'
