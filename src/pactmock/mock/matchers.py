"""
PactMock Flexible Matchers

Placeholder values that can appear inside an expected request or a canned
response in place of a concrete value.

Supported placeholders:
- Term: string must match a regular expression
- SomethingLike: value must have the same JSON type as the example
- EachLike: list whose every element is like the example

Placeholders travel over the wire in the JSON form used by Pact consumer
libraries (``json_class`` markers) and are decoded by ``from_json``.
"""

import re
from typing import Any, Dict, Optional


class Matcher:
    """Base class for flexible matchers."""

    json_class = ''

    def generate(self) -> Any:
        """Return the example value served in place of this matcher."""
        raise NotImplementedError

    def to_json(self) -> Dict[str, Any]:
        """Return the wire representation of this matcher."""
        raise NotImplementedError

    def describe(self) -> Any:
        """Return a JSON-serializable description used in diffs."""
        return self.to_json()


class Term(Matcher):
    """
    Regular expression matcher.

    Example:
        Term(r'\\d{4}-\\d{2}-\\d{2}', generate='2024-01-31')
    """

    json_class = 'Pact::Term'

    def __init__(self, matcher: str, generate: Optional[str] = None):
        self.pattern = matcher
        try:
            self.regex = re.compile(matcher)
        except (re.error, TypeError) as e:
            raise ValueError(f"Invalid regular expression {matcher!r}: {e}") from e
        self.example = generate

    def generate(self) -> Any:
        return self.example

    def matches(self, value: Any) -> bool:
        return isinstance(value, str) and self.regex.search(value) is not None

    def to_json(self) -> Dict[str, Any]:
        return {
            'json_class': self.json_class,
            'data': {
                'generate': self.example,
                'matcher': {'json_class': 'Regexp', 'o': 0, 's': self.pattern}
            }
        }

    def describe(self) -> Any:
        return f"/{self.pattern}/"

    def __repr__(self):
        return f"Term({self.pattern!r}, generate={self.example!r})"


class SomethingLike(Matcher):
    """Type matcher: any value with the same JSON type as ``contents``."""

    json_class = 'Pact::SomethingLike'

    def __init__(self, contents: Any):
        self.contents = contents

    def generate(self) -> Any:
        return reify(self.contents)

    def to_json(self) -> Dict[str, Any]:
        return {'json_class': self.json_class, 'contents': to_wire(self.contents)}

    def describe(self) -> Any:
        return {'like': describe(self.contents)}

    def __repr__(self):
        return f"SomethingLike({self.contents!r})"


class EachLike(Matcher):
    """Array matcher: a list of at least ``minimum`` elements, each like ``contents``."""

    json_class = 'Pact::ArrayLike'

    def __init__(self, contents: Any, minimum: int = 1):
        if isinstance(minimum, bool) or not isinstance(minimum, int) or minimum < 0:
            raise ValueError(f"Minimum must be a non-negative integer, got {minimum!r}")
        self.contents = contents
        self.minimum = minimum

    def generate(self) -> Any:
        return [reify(self.contents) for _ in range(max(self.minimum, 1))]

    def to_json(self) -> Dict[str, Any]:
        return {
            'json_class': self.json_class,
            'contents': to_wire(self.contents),
            'min': self.minimum
        }

    def describe(self) -> Any:
        return {'each_like': describe(self.contents), 'min': self.minimum}

    def __repr__(self):
        return f"EachLike({self.contents!r}, minimum={self.minimum})"


def from_json(value: Any) -> Any:
    """
    Decode matcher placeholders from their wire form, recursively.

    Args:
        value: Parsed JSON value (dict, list or scalar)

    Returns:
        The same structure with ``json_class`` objects replaced by matchers

    Raises:
        ValueError: If a ``json_class`` object is malformed
    """
    if isinstance(value, dict):
        json_class = value.get('json_class')
        if json_class == Term.json_class:
            data = value.get('data')
            if not isinstance(data, dict):
                raise ValueError("Pact::Term requires a 'data' object")
            regexp = data.get('matcher')
            pattern = regexp.get('s') if isinstance(regexp, dict) else regexp
            if not isinstance(pattern, str):
                raise ValueError("Pact::Term requires a regular expression string in 'data.matcher'")
            return Term(pattern, generate=data.get('generate'))
        if json_class == SomethingLike.json_class:
            return SomethingLike(from_json(value.get('contents')))
        if json_class == EachLike.json_class:
            return EachLike(from_json(value.get('contents')), minimum=value.get('min', 1))
        return {k: from_json(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_json(item) for item in value]
    return value


def to_wire(value: Any) -> Any:
    """Inverse of ``from_json``."""
    if isinstance(value, Matcher):
        return value.to_json()
    if isinstance(value, dict):
        return {k: to_wire(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_wire(item) for item in value]
    return value


def reify(value: Any) -> Any:
    """Replace every matcher in ``value`` with its example value."""
    if isinstance(value, Matcher):
        return value.generate()
    if isinstance(value, dict):
        return {k: reify(v) for k, v in value.items()}
    if isinstance(value, list):
        return [reify(item) for item in value]
    return value


def describe(value: Any) -> Any:
    """Render ``value`` for diagnostics, describing matchers readably."""
    if isinstance(value, Matcher):
        return value.describe()
    if isinstance(value, dict):
        return {k: describe(v) for k, v in value.items()}
    if isinstance(value, list):
        return [describe(item) for item in value]
    return value


def json_type_name(value: Any) -> str:
    """Name of the JSON type of a Python value."""
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, (int, float)):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, list):
        return 'array'
    if isinstance(value, dict):
        return 'object'
    return type(value).__name__
