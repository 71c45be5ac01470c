"""
PactMock Matching Capability

Decides whether an actual request matches an expected request pattern and
renders a structural diff between the two.

Two levels of matching:
- Route match: method and path only
- Full match: method, path, query, headers and body, honoring flexible matchers

The diff is a nested dict containing only the parts that disagree. Each
leaf is {"expected": ..., "actual": ...}. An empty diff means a full match.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List
from urllib.parse import parse_qs

from .matchers import Matcher, Term, SomethingLike, EachLike, describe, json_type_name
from .request import ABSENT, ActualRequest, ExpectedRequest, standardise_header

KEY_NOT_FOUND = '<key not found>'
UNEXPECTED_KEY = '<key not to exist>'
INDEX_NOT_FOUND = '<item not found>'
UNEXPECTED_INDEX = '<item not to exist>'
BODY_NOT_FOUND = '<body not found>'


class MatchingCapability(ABC):
    """Interface the interaction matcher relies on."""

    @abstractmethod
    def route_matches(self, expected: ExpectedRequest, actual: ActualRequest) -> bool:
        """True if method and path agree."""

    @abstractmethod
    def fully_matches(self, expected: ExpectedRequest, actual: ActualRequest) -> bool:
        """True if the whole request shape agrees."""

    @abstractmethod
    def diff(self, expected: ExpectedRequest, actual: ActualRequest) -> Dict[str, Any]:
        """Structural diff between expected and actual (empty when they match)."""


class PactMatching(MatchingCapability):
    """
    Exact-value matching with Term / SomethingLike / EachLike placeholders.

    Rules:
    - method compared case-insensitively
    - path exact, or regex when it is a Term
    - query compared as a parsed multi-dict (parameter order ignored),
      or as a regex over the raw query string when it is a Term
    - headers: every expected header must be present (names are
      case-insensitive); extra actual headers are fine
    - body: structural; unexpected object keys are a mismatch
    - any unspecified field accepts anything

    Example:
        matching = PactMatching()
        if not matching.fully_matches(expected, actual):
            print(matching.diff(expected, actual))
    """

    def __init__(self, allow_unexpected_body_keys: bool = False):
        self.allow_unexpected_body_keys = allow_unexpected_body_keys

    def route_matches(self, expected: ExpectedRequest, actual: ActualRequest) -> bool:
        return not self._route_diff(expected, actual)

    def fully_matches(self, expected: ExpectedRequest, actual: ActualRequest) -> bool:
        return not self.diff(expected, actual)

    def diff(self, expected: ExpectedRequest, actual: ActualRequest) -> Dict[str, Any]:
        result = self._route_diff(expected, actual)

        if expected.query is not ABSENT:
            query_diff = self._query_diff(expected.query, actual.query)
            if query_diff:
                result['query'] = query_diff

        if expected.headers is not ABSENT:
            header_diff = self._header_diff(expected.headers, actual.headers)
            if header_diff:
                result['headers'] = header_diff

        if expected.body is not ABSENT:
            if actual.body is ABSENT:
                result['body'] = {'expected': describe(expected.body), 'actual': BODY_NOT_FOUND}
            else:
                body_diff = self.diff_values(expected.body, actual.body, self.allow_unexpected_body_keys)
                if body_diff:
                    result['body'] = body_diff

        return result

    def _route_diff(self, expected: ExpectedRequest, actual: ActualRequest) -> Dict[str, Any]:
        result: Dict[str, Any] = {}

        if expected.method.lower() != actual.method.lower():
            result['method'] = {'expected': expected.method.lower(), 'actual': actual.method.lower()}

        path_diff = self.diff_values(expected.path, actual.path)
        if path_diff:
            result['path'] = path_diff

        return result

    def _query_diff(self, expected: Any, actual_query: str) -> Any:
        if isinstance(expected, Term):
            return self.diff_values(expected, actual_query)

        actual_params = parse_qs(actual_query or '', keep_blank_values=True)

        if expected is None or expected == '':
            expected_params: Dict[str, Any] = {}
        elif isinstance(expected, str):
            expected_params = parse_qs(expected, keep_blank_values=True)
        elif isinstance(expected, dict):
            expected_params = {
                key: value if isinstance(value, list) else [value]
                for key, value in expected.items()
            }
        else:
            return {'expected': describe(expected), 'actual': actual_query}

        return self.diff_values(expected_params, actual_params)

    def _header_diff(self, expected: Dict[str, Any], actual: Dict[str, str]) -> Dict[str, Any]:
        canonical_actual = {standardise_header(k): v for k, v in actual.items()}
        result: Dict[str, Any] = {}

        for name, expected_value in expected.items():
            name = standardise_header(name)
            if name not in canonical_actual:
                result[name] = {'expected': describe(expected_value), 'actual': KEY_NOT_FOUND}
                continue
            value_diff = self.diff_values(expected_value, canonical_actual[name])
            if value_diff:
                result[name] = value_diff

        return result

    def diff_values(self, expected: Any, actual: Any, allow_unexpected_keys: bool = False) -> Any:
        """
        Diff two JSON values, honoring flexible matchers in ``expected``.

        Args:
            expected: Expected value (may contain matchers)
            actual: Actual value
            allow_unexpected_keys: Accept object keys missing from expected

        Returns:
            Empty dict when they match, otherwise a diff node
        """
        if isinstance(expected, Term):
            if expected.matches(actual):
                return {}
            return {'expected': expected.describe(), 'actual': actual}

        if isinstance(expected, SomethingLike):
            return self._type_diff(expected.contents, actual, allow_unexpected_keys)

        if isinstance(expected, EachLike):
            if not isinstance(actual, list):
                return {'expected': expected.describe(), 'actual': actual}
            if len(actual) < expected.minimum:
                return {
                    'expected': expected.describe(),
                    'actual': actual,
                    'message': f"Expected at least {expected.minimum} item(s), got {len(actual)}"
                }
            result = {}
            for index, item in enumerate(actual):
                item_diff = self._type_diff(expected.contents, item, allow_unexpected_keys)
                if item_diff:
                    result[index] = item_diff
            return result

        if isinstance(expected, dict):
            if not isinstance(actual, dict):
                return {'expected': describe(expected), 'actual': actual}
            return self._dict_diff(expected, actual, allow_unexpected_keys, self.diff_values)

        if isinstance(expected, list):
            if not isinstance(actual, list):
                return {'expected': describe(expected), 'actual': actual}
            return self._list_diff(expected, actual, allow_unexpected_keys, self.diff_values)

        if self._scalars_equal(expected, actual):
            return {}
        return {'expected': expected, 'actual': actual}

    def _type_diff(self, example: Any, actual: Any, allow_unexpected_keys: bool) -> Any:
        """Diff by JSON type only (SomethingLike semantics)."""
        if isinstance(example, Matcher):
            return self.diff_values(example, actual, allow_unexpected_keys)

        if isinstance(example, dict) and isinstance(actual, dict):
            return self._dict_diff(example, actual, allow_unexpected_keys, self._type_diff)

        if isinstance(example, list) and isinstance(actual, list):
            return self._list_diff(example, actual, allow_unexpected_keys, self._type_diff)

        if json_type_name(example) == json_type_name(actual):
            return {}

        return {
            'expected': {'class': json_type_name(example), 'eg': describe(example)},
            'actual': {'class': json_type_name(actual), 'value': actual}
        }

    @staticmethod
    def _dict_diff(expected: Dict[str, Any], actual: Dict[str, Any], allow_unexpected_keys: bool, differ) -> Dict[str, Any]:
        result: Dict[str, Any] = {}

        for key, expected_value in expected.items():
            if key not in actual:
                result[key] = {'expected': describe(expected_value), 'actual': KEY_NOT_FOUND}
                continue
            value_diff = differ(expected_value, actual[key], allow_unexpected_keys)
            if value_diff:
                result[key] = value_diff

        if not allow_unexpected_keys:
            for key, actual_value in actual.items():
                if key not in expected:
                    result[key] = {'expected': UNEXPECTED_KEY, 'actual': actual_value}

        return result

    @staticmethod
    def _list_diff(expected: List[Any], actual: List[Any], allow_unexpected_keys: bool, differ) -> Dict[int, Any]:
        result: Dict[int, Any] = {}

        for index, expected_item in enumerate(expected):
            if index >= len(actual):
                result[index] = {'expected': describe(expected_item), 'actual': INDEX_NOT_FOUND}
                continue
            item_diff = differ(expected_item, actual[index], allow_unexpected_keys)
            if item_diff:
                result[index] = item_diff

        for index in range(len(expected), len(actual)):
            result[index] = {'expected': UNEXPECTED_INDEX, 'actual': actual[index]}

        return result

    @staticmethod
    def _scalars_equal(expected: Any, actual: Any) -> bool:
        # True == 1 in Python but not in JSON
        if isinstance(expected, bool) or isinstance(actual, bool):
            return type(expected) is type(actual) and expected == actual
        return expected == actual
