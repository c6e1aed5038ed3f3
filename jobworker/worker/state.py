"""JSON persistence for the worker's opaque state blob."""

import json
from pathlib import Path
from typing import Any

from loguru import logger

from jobworker.errors import FilesystemError, ParseError


class StateFile:
    """Loads and saves one JSON value at ``path``.

    The value is never interpreted; whatever was last saved is what loads.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def load(self) -> Any:
        """Read the stored value, creating ``{}`` on disk if nothing is there yet.

        Raises:
            FilesystemError: the directory or file could not be created or read.
            ParseError: the file exists but does not hold valid JSON.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"Cannot create state directory {self.path.parent}: {e}") from e

        if not self.path.exists():
            logger.info(f"No state file at {self.path}, starting empty")
            data: dict[str, Any] = {}
            self.save(data)
            return data

        try:
            raw = self.path.read_bytes()
        except OSError as e:
            raise FilesystemError(f"Cannot read state file {self.path}: {e}") from e

        try:
            return json.loads(raw.decode("utf-8"))
        except ValueError as e:  # includes UnicodeDecodeError
            raise ParseError(f"State file {self.path} is not valid JSON: {e}") from e

    def save(self, data: Any) -> None:
        """Overwrite the file with ``data`` serialized as compact JSON.

        Serialization happens before the file is opened, so a value that
        can't be encoded leaves the previous file intact.
        """
        try:
            payload = json.dumps(data, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as e:  # includes UnicodeEncodeError
            raise ParseError(f"State is not JSON-serializable: {e}") from e

        try:
            self.path.write_bytes(payload)
        except OSError as e:
            raise FilesystemError(f"Cannot write state file {self.path}: {e}") from e
