"""
PactMock Client

Helper for test harnesses talking to a running mock service: wait for it
to start, register and clear interactions, and verify at the end of a test.
"""

import json
import time
from typing import Any, Dict, List, Tuple, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .mock.registry import ExpectedInteraction

CLIENT_HEADERS = {
    'X-Pact-Mock-Service': 'true',
    'Content-Type': 'application/json'
}


class MockServiceClient:
    """
    Control-plane client for a mock service.

    Example:
        client = MockServiceClient('http://localhost:1234')
        client.wait_for_startup()
        client.clear_interactions()
        client.add_interactions([interaction])

        ...  # exercise the code under test

        matched, report = client.verification()
        assert matched, report
    """

    def __init__(self, base_uri: str, timeout: int = 10, max_retries: int = 3):
        """
        Initialize client.

        Args:
            base_uri: Mock service base URL (e.g., http://localhost:1234)
            timeout: Request timeout in seconds
            max_retries: Connection retries per request
        """
        self.base_uri = base_uri.rstrip('/')
        self.timeout = timeout
        self.max_retries = max_retries
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        """Create HTTP session retrying connection failures only."""
        session = requests.Session()
        session.headers.update(CLIENT_HEADERS)

        # /verify answers 500 on purpose, so statuses are never retried
        retry_strategy = Retry(
            total=self.max_retries,
            connect=self.max_retries,
            read=0,
            status=0,
            backoff_factor=0.2,
            allowed_methods=["GET", "POST", "DELETE"]
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        return session

    def _url(self, path: str) -> str:
        return f"{self.base_uri}{path}"

    def wait_for_startup(self, timeout: float = 10.0, interval: float = 0.1) -> bool:
        """
        Poll the startup endpoint until the service answers.

        Returns:
            True once the service is up, False if ``timeout`` elapsed first
        """
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            try:
                response = self.session.get(self._url('/index.html'), timeout=self.timeout)
                if response.status_code == 200:
                    return True
            except requests.ConnectionError:
                pass
            time.sleep(interval)
        return False

    def identify(self) -> str:
        response = self.session.get(self._url('/__identify__'), timeout=self.timeout)
        response.raise_for_status()
        return response.text

    def add_interactions(self, interactions: List[Union[ExpectedInteraction, Dict[str, Any]]]):
        """
        Register interactions.

        Args:
            interactions: ExpectedInteraction objects or their dict form

        Raises:
            requests.HTTPError: If the service rejects the payload
        """
        payload = [
            i.to_dict() if isinstance(i, ExpectedInteraction) else i
            for i in interactions
        ]
        response = self.session.post(
            self._url('/interactions'),
            data=json.dumps(payload),
            timeout=self.timeout
        )
        response.raise_for_status()

    def clear_interactions(self):
        response = self.session.delete(self._url('/interactions'), timeout=self.timeout)
        response.raise_for_status()

    def verification(self) -> Tuple[bool, str]:
        """
        Ask the service whether every registered interaction was exercised.

        Returns:
            (matched, report text) taken from a single /verify response
        """
        response = self.session.get(self._url('/verify'), timeout=self.timeout)
        return response.status_code == 200, response.text

    def verification_text(self) -> str:
        return self.verification()[1]

    def verify(self) -> bool:
        """True if every registered interaction was exercised."""
        return self.verification()[0]

    def close(self):
        self.session.close()
