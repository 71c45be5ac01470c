"""
PactMock Request Model

Typed request shapes used by the matching engine:
- RawRequest: what the transport hands us (method, path, query, header pairs, body bytes)
- ActualRequest: normalized incoming request
- ExpectedRequest: registered request pattern (may contain flexible matchers)
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .matchers import from_json, to_wire, describe


class _Absent:
    """Marker for a request field that was not specified."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return 'ABSENT'


ABSENT = _Absent()


def standardise_header(name: str) -> str:
    """
    Canonicalize a header name.

    'content-type', 'CONTENT_TYPE' and 'HTTP_CONTENT_TYPE' all become
    'Content-Type'.
    """
    if name.upper().startswith('HTTP_'):
        name = name[5:]
    words = name.replace('_', '-').split('-')
    return '-'.join(word[:1].upper() + word[1:].lower() for word in words)


def parse_body(raw_body: bytes, content_type: Optional[str]) -> Any:
    """
    Parse a raw request body.

    Args:
        raw_body: Body bytes as read from the transport
        content_type: Content-Type header value, if any

    Returns:
        ABSENT for an empty body, parsed JSON when the content type says
        JSON, otherwise the body decoded as a UTF-8 string
    """
    if not raw_body:
        return ABSENT

    body_str = raw_body.decode('utf-8', errors='replace') if isinstance(raw_body, bytes) else str(raw_body)

    if content_type and 'json' in content_type.lower():
        try:
            return json.loads(body_str)
        except json.JSONDecodeError:
            return body_str

    return body_str


@dataclass(frozen=True)
class RawRequest:
    """Transport-level request handed to MockService.handle."""

    method: str
    path: str
    query_string: str = ''
    headers: List[Tuple[str, str]] = field(default_factory=list)
    body: bytes = b''

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup (first occurrence)."""
        wanted = standardise_header(name)
        for key, value in self.headers:
            if standardise_header(key) == wanted:
                return value
        return None


@dataclass(frozen=True)
class ActualRequest:
    """Normalized incoming request."""

    method: str
    path: str
    query: str = ''
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = ABSENT

    @classmethod
    def from_raw(cls, raw: RawRequest) -> 'ActualRequest':
        """Normalize a transport request."""
        headers: Dict[str, str] = {}
        for key, value in raw.headers:
            name = standardise_header(key)
            # Repeated headers are folded the way HTTP allows
            headers[name] = f"{headers[name]}, {value}" if name in headers else value

        return cls(
            method=raw.method.lower(),
            path=raw.path,
            query=raw.query_string or '',
            headers=headers,
            body=parse_body(raw.body, headers.get('Content-Type'))
        )

    def as_json(self) -> Dict[str, Any]:
        """Dictionary form used in diffs and logs."""
        data: Dict[str, Any] = {
            'method': self.method,
            'path': self.path,
            'query': self.query,
            'headers': dict(self.headers),
        }
        if self.body is not ABSENT:
            data['body'] = self.body
        return data


@dataclass(frozen=True, eq=False)
class ExpectedRequest:
    """
    Registered request pattern.

    Fields left ABSENT accept any actual value. Any field may hold a
    flexible matcher (see matchers.py).
    """

    method: str
    path: Any
    query: Any = ABSENT
    headers: Any = ABSENT
    body: Any = ABSENT

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ExpectedRequest':
        """Create ExpectedRequest from its JSON representation."""
        if not isinstance(data, dict):
            raise ValueError(f"Request must be an object, got {type(data).__name__}")
        if 'method' not in data or 'path' not in data:
            raise ValueError("Request must have 'method' and 'path'")

        # null headers mean "not specified"
        headers = data.get('headers')
        if headers is None:
            headers = ABSENT
        else:
            headers = from_json(headers)
            if not isinstance(headers, dict):
                raise ValueError(f"Request headers must be an object, got {type(data['headers']).__name__}")
            headers = {standardise_header(k): v for k, v in headers.items()}

        return cls(
            method=str(data['method']).lower(),
            path=from_json(data['path']),
            query=from_json(data['query']) if 'query' in data else ABSENT,
            headers=headers,
            body=from_json(data['body']) if 'body' in data else ABSENT
        )

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation (matchers in json_class form)."""
        return self._render(to_wire)

    def as_json(self) -> Dict[str, Any]:
        """Readable representation used in diffs and logs."""
        return self._render(describe)

    def _render(self, render) -> Dict[str, Any]:
        data: Dict[str, Any] = {'method': self.method, 'path': render(self.path)}
        for name in ('query', 'headers', 'body'):
            value = getattr(self, name)
            if value is not ABSENT:
                data[name] = render(value)
        return data

    def __str__(self):
        return f"{self.method.upper()} {describe(self.path)}"
