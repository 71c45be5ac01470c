"""
PactMock Common Utilities

Shared helpers for logging and loading interaction files.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


def pretty_json(value: Any) -> str:
    """Indented JSON for log output; unknown objects fall back to str()."""
    return json.dumps(value, indent=2, default=str)


def configure_logger(name: str, level: str = 'info', log_file: Optional[str] = None) -> logging.Logger:
    """
    Get a named logger writing to ``log_file`` or stdout.

    Calling this again for the same name and target does not add a second
    handler.

    Args:
        name: Logger name
        level: Level name (debug, info, warning, error)
        log_file: Optional path of a file to append log lines to

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    if log_file:
        target = str(Path(log_file).resolve())
        if not any(getattr(h, 'baseFilename', None) == target for h in logger.handlers):
            handler: logging.Handler = logging.FileHandler(target, encoding='utf-8')
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(handler)
    elif not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger


class InteractionLoader:
    """
    Loader for interaction files.

    Handles JSON and YAML files in two layouts:
    - Format 1: {"interactions": [...]}  (wrapped format, as in pact files)
    - Format 2: [...]                    (direct list format)

    Example:
        loader = InteractionLoader("interactions.yaml")
        for data in loader.load():
            registry.register(ExpectedInteraction.from_dict(data))
    """

    def __init__(self, file_path: str):
        """
        Initialize interaction loader.

        Args:
            file_path: Path to a .json, .yaml or .yml file
        """
        self.file_path = Path(file_path)

    def load(self) -> List[Dict[str, Any]]:
        """
        Load raw interaction dictionaries.

        Returns:
            List of interaction dictionaries

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file can't be parsed or its layout is unrecognized
        """
        if not self.file_path.exists():
            raise FileNotFoundError(f"Interaction file not found: {self.file_path}")

        with open(self.file_path, 'r', encoding='utf-8') as f:
            if self.file_path.suffix.lower() in ('.yaml', '.yml'):
                try:
                    data = yaml.safe_load(f)
                except yaml.YAMLError as e:
                    raise ValueError(f"Invalid YAML in {self.file_path}: {e}") from e
            else:
                data = json.load(f)

        if isinstance(data, dict):
            if 'interactions' in data:
                return data['interactions']
            raise ValueError(
                f"Unexpected format in {self.file_path}. "
                f"Expected a list or a mapping with an 'interactions' key. "
                f"Found keys: {list(data.keys())}"
            )
        if isinstance(data, list):
            return data
        raise ValueError(f"Unexpected format in {self.file_path}: {type(data).__name__}")
