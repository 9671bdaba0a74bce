"""
Registry backends - Durable storage for the album registry document.

A backend loads and saves one document of the form {"albums": {id: album}}.
"""

import copy
import json
import logging
import os
import stat
import tempfile
from typing import Optional

from retrying import retry

DEFAULT_FILE_MODE = 0o644


def empty_document() -> dict:
    return {'albums': {}}


def _normalize(data) -> dict:
    if not isinstance(data, dict):
        return empty_document()
    if not isinstance(data.get('albums'), dict):
        data['albums'] = {}
    return data


class MemoryBackend:
    """Keeps the registry document in process memory."""

    def __init__(self, data: Optional[dict] = None):
        self._data = _normalize(copy.deepcopy(data)) if data else empty_document()

    def load(self) -> dict:
        return copy.deepcopy(self._data)

    def save(self, data: dict) -> None:
        self._data = copy.deepcopy(data)


class JsonFileBackend:
    """
    Stores the registry document as a single JSON file.

    Saves are atomic: the document is written to a temporary file in the
    same directory, flushed to disk, then moved over the previous version.
    """

    def __init__(self, path: str, logger: Optional[logging.Logger] = None):
        self.path = os.path.abspath(path)
        self.logger = logger or logging.getLogger(__name__)

    def load(self) -> dict:
        """Read the current document; a missing or empty file is an empty registry."""
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                raw = f.read()
        except FileNotFoundError:
            return empty_document()

        if not raw.strip():
            return empty_document()
        try:
            return _normalize(json.loads(raw))
        except ValueError as e:
            self.logger.error(f"Registry file {self.path} is not valid JSON: {e}")
            raise

    def save(self, data: dict) -> None:
        directory = os.path.dirname(self.path)
        os.makedirs(directory, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.albums_', suffix='.json')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            # mkstemp creates files as 0600
            os.chmod(tmp_path, self._file_mode())
            self._replace(tmp_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def _file_mode(self) -> int:
        """Mode of the current registry file, or 0644 for a new one."""
        try:
            return stat.S_IMODE(os.stat(self.path).st_mode)
        except FileNotFoundError:
            return DEFAULT_FILE_MODE

    @retry(retry_on_exception=lambda e: isinstance(e, PermissionError), stop_max_attempt_number=5, wait_exponential_multiplier=50, wait_exponential_max=1000)
    def _replace(self, tmp_path: str) -> None:
        os.replace(tmp_path, self.path)
