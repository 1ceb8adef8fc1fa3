"""Credential storage and persistence."""

import json
import logging
import os
import tempfile
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from fatsecret_client.config import default_credentials_path
from fatsecret_client.models.auth import PersistedState

logger = logging.getLogger(__name__)

_RECORD_FIELDS = ("consumer_key", "consumer_secret", "access_token", "access_token_secret")


class CredentialStore:
    """Persistent storage for consumer credentials and the user access token.

    Stores one JSON record, owner read/write only. Updates are
    read-modify-write: keys not named in an update survive it, and the new
    record replaces the old one in a single rename so a reader never sees a
    half-written file.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or default_credentials_path()
        self._lock = threading.Lock()

    def _read_record(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open() as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable credential file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed credential file %s", self.path)
            return {}
        return data

    def _write_record(self, record: Mapping[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".config-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(record, f, indent=2)
            # Set restrictive permissions (owner read/write only)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    @contextmanager
    def transaction(self) -> Iterator[dict[str, Any]]:
        """Hold the record for a read-modify-write.

        The yielded dict is written back when the block exits normally;
        nothing is written if the block raises.
        """
        with self._lock:
            record = self._read_record()
            yield record
            self._write_record(record)

    def load(self) -> PersistedState:
        """Load the persisted record.

        A missing file is not an error and yields an empty state.
        """
        record = self._read_record()
        return PersistedState(
            **{k: record[k] for k in _RECORD_FIELDS if isinstance(record.get(k), str)}
        )

    def save(self, update: Mapping[str, Any]) -> None:
        """Merge `update` into the stored record.

        A value of None removes that key.
        """
        with self.transaction() as record:
            for key, value in update.items():
                if value is None:
                    record.pop(key, None)
                else:
                    record[key] = value
        logger.debug("Saved credential fields %s to %s", sorted(update), self.path)

    def resolve(self, overrides: Mapping[str, str | None]) -> PersistedState:
        """Persisted record as the base, non-empty runtime overrides on top."""
        merged = self.load().model_dump()
        merged.update({k: v for k, v in overrides.items() if v})
        return PersistedState(**merged)

    def clear(self) -> None:
        """Remove the stored record."""
        with self._lock:
            self.path.unlink(missing_ok=True)

    def exists(self) -> bool:
        return self.path.exists()
