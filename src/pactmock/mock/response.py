"""
PactMock Response Synthesizer

Turns the canned response of a matched interaction into the
(status, headers, body) triple served by the transport.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from .matchers import from_json, to_wire, reify
from .request import ABSENT


@dataclass(frozen=True, eq=False)
class ResponseSpec:
    """Canned response stored with an interaction."""

    status: int = 200
    headers: Dict[str, Any] = field(default_factory=dict)
    body: Any = ABSENT

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ResponseSpec':
        """Create ResponseSpec from its JSON representation."""
        if not isinstance(data, dict):
            raise ValueError(f"Response must be an object, got {type(data).__name__}")

        headers = from_json(data.get('headers') or {})
        if not isinstance(headers, dict):
            raise ValueError(f"Response headers must be an object, got {type(data['headers']).__name__}")

        return cls(
            status=int(data.get('status', 200)),
            headers=headers,
            body=from_json(data['body']) if data.get('body') is not None else ABSENT
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'status': self.status}
        if self.headers:
            data['headers'] = to_wire(self.headers)
        if self.body is not ABSENT:
            data['body'] = to_wire(self.body)
        return data


@dataclass
class MockResponse:
    """Transport-level response."""

    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ''

    def as_tuple(self) -> Tuple[int, Dict[str, str], str]:
        return self.status, self.headers, self.body


def render_body(body: Any) -> str:
    """
    Render a response body.

    Absent bodies become empty, strings pass through unchanged, anything
    else is serialized as compact JSON after matchers are replaced with
    their example values.
    """
    if body is ABSENT or body is None:
        return ''
    if isinstance(body, str):
        return body
    return json.dumps(reify(body), separators=(',', ':'))


def render(spec: ResponseSpec) -> MockResponse:
    """Render a ResponseSpec into a MockResponse."""
    headers = {str(k): str(v) for k, v in reify(spec.headers or {}).items()}
    return MockResponse(status=spec.status, headers=headers, body=render_body(spec.body))
