"""
Tests for PactMock Common Utilities

Tests shared helpers including:
- Interaction file loading (JSON and YAML)
- Logger configuration
- JSON helpers
"""

import json
import logging
from datetime import datetime

import pytest
import yaml

from pactmock.common.utils import (
    InteractionLoader,
    configure_logger,
    pretty_json
)


@pytest.fixture
def interactions():
    """Raw interaction dictionaries."""
    return [
        {'request': {'method': 'get', 'path': '/things'}, 'response': {'status': 200}},
        {'request': {'method': 'post', 'path': '/things'}, 'response': {'status': 201}}
    ]


class TestInteractionLoader:
    """Test InteractionLoader."""

    def test_load_json_list(self, tmp_path, interactions):
        """Test a JSON list."""
        path = tmp_path / 'interactions.json'
        path.write_text(json.dumps(interactions))

        assert InteractionLoader(str(path)).load() == interactions

    def test_load_json_wrapped(self, tmp_path, interactions):
        """Test a pact-style wrapped file."""
        path = tmp_path / 'pact.json'
        path.write_text(json.dumps({'consumer': {'name': 'web'}, 'interactions': interactions}))

        assert InteractionLoader(str(path)).load() == interactions

    def test_load_yaml(self, tmp_path, interactions):
        """Test a YAML file."""
        path = tmp_path / 'interactions.yml'
        path.write_text(yaml.safe_dump({'interactions': interactions}))

        assert InteractionLoader(str(path)).load() == interactions

    def test_missing_file(self, tmp_path):
        """Test missing file."""
        with pytest.raises(FileNotFoundError):
            InteractionLoader(str(tmp_path / 'missing.json')).load()

    def test_unexpected_mapping(self, tmp_path):
        """Test a mapping without interactions."""
        path = tmp_path / 'bad.json'
        path.write_text(json.dumps({'requests': []}))

        with pytest.raises(ValueError, match='interactions'):
            InteractionLoader(str(path)).load()

    def test_invalid_yaml(self, tmp_path):
        """Test a YAML syntax error."""
        path = tmp_path / 'broken.yaml'
        path.write_text('interactions: [\n  - {request: \n')

        with pytest.raises(ValueError, match='Invalid YAML'):
            InteractionLoader(str(path)).load()

    def test_unexpected_scalar(self, tmp_path):
        """Test a scalar document."""
        path = tmp_path / 'bad.yaml'
        path.write_text('just a string\n')

        with pytest.raises(ValueError):
            InteractionLoader(str(path)).load()


class TestConfigureLogger:
    """Test configure_logger."""

    def test_level(self):
        """Test level is applied."""
        logger = configure_logger('pactmock.test.level', level='debug')

        assert logger.level == logging.DEBUG

    def test_no_duplicate_handlers(self):
        """Test configuring twice adds one handler."""
        configure_logger('pactmock.test.dupes')
        logger = configure_logger('pactmock.test.dupes')

        assert len(logger.handlers) == 1

    def test_file_handler(self, tmp_path):
        """Test file logging."""
        log_file = tmp_path / 'out.log'
        logger = configure_logger('pactmock.test.file', log_file=str(log_file))
        configure_logger('pactmock.test.file', log_file=str(log_file))

        logger.info('hello file')

        assert len(logger.handlers) == 1
        assert 'hello file' in log_file.read_text()


class TestJsonHelpers:
    """Test JSON helpers."""

    def test_pretty_json(self):
        """Test indented output."""
        text = pretty_json({'a': 'b'})

        assert text == '{\n  "a": "b"\n}'

    def test_pretty_json_unknown_type(self):
        """Test non-JSON values fall back to str()."""
        text = pretty_json({'when': datetime(2024, 1, 31)})

        assert '2024-01-31 00:00:00' in text
