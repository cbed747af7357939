"""Record store capability and its JSON file implementation.

Records are plain dicts namespaced by kind:
- bench:           ~/.local/share/bench/benches/<name>.json
- tool:            ~/.local/share/bench/tools/<name>.json
- assembled-bench: ~/.local/share/bench/assembled-benches/<name>.json
- assembled-tool:  ~/.local/share/bench/assembled-tools/<name>.json

Names are percent-encoded into file names. Scalars (the active bench
marker) are single-line text files in the data directory root.
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List
from urllib.parse import quote, unquote

from .errors import NotFoundError, ParseError

logger = logging.getLogger("bench.store")

BENCH = "bench"
TOOL = "tool"
ASSEMBLED_BENCH = "assembled-bench"
ASSEMBLED_TOOL = "assembled-tool"

RECORD_DIRS = {
    BENCH: "benches",
    TOOL: "tools",
    ASSEMBLED_BENCH: "assembled-benches",
    ASSEMBLED_TOOL: "assembled-tools",
}


class Store(ABC):
    """Durable storage of named records and scalars."""

    @abstractmethod
    def read_record(self, kind: str, name: str) -> Dict[str, Any]:
        """Read a record. Raises NotFoundError if absent."""

    @abstractmethod
    def write_record(self, kind: str, name: str, record: Dict[str, Any]) -> None:
        """Create or replace a record."""

    @abstractmethod
    def delete_record(self, kind: str, name: str) -> bool:
        """Delete a record. Returns False if it did not exist."""

    @abstractmethod
    def list_names(self, kind: str) -> List[str]:
        """Sorted record names of a kind."""

    @abstractmethod
    def read_scalar(self, key: str) -> str:
        """Read a scalar. Raises NotFoundError if absent or empty."""

    @abstractmethod
    def write_scalar(self, key: str, value: str) -> None:
        """Create or replace a scalar."""

    @abstractmethod
    def clear_scalar(self, key: str) -> None:
        """Remove a scalar if present."""

    def has_record(self, kind: str, name: str) -> bool:
        try:
            self.read_record(kind, name)
        except NotFoundError:
            return False
        return True


def encode_name(name: str) -> str:
    """Percent-encode a record name into a file name stem.

    The encoding is reversible, so distinct names never share a file.

    Examples:
        >>> encode_name("work/web")
        'work%2Fweb'
        >>> decode_name(encode_name("work/web"))
        'work/web'
    """
    return quote(name, safe="")


def decode_name(stem: str) -> str:
    return unquote(stem)


def _check_kind(kind: str) -> str:
    if kind not in RECORD_DIRS:
        raise ValueError(f"Unknown record kind: {kind}")
    return RECORD_DIRS[kind]


def atomic_write(path: Path, text: str) -> None:
    """Write a file via temp file + fsync + rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, path)
    except Exception:
        if Path(temp_path).exists():
            os.unlink(temp_path)
        raise


class JsonFileStore(Store):
    """Store backed by one JSON file per record."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    def record_path(self, kind: str, name: str) -> Path:
        return self.data_dir / _check_kind(kind) / f"{encode_name(name)}.json"

    def scalar_path(self, key: str) -> Path:
        return self.data_dir / encode_name(key)

    def read_record(self, kind: str, name: str) -> Dict[str, Any]:
        path = self.record_path(kind, name)
        if not path.exists():
            raise NotFoundError(f"{kind} '{name}' not found", subject=name)
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(f"Failed to parse {kind} '{name}' ({path}): {e}", subject=name)
        if not isinstance(data, dict):
            raise ParseError(f"{kind} '{name}' ({path}) is not a JSON object", subject=name)
        return data

    def write_record(self, kind: str, name: str, record: Dict[str, Any]) -> None:
        path = self.record_path(kind, name)
        atomic_write(path, json.dumps(record, indent=2, default=str) + "\n")
        logger.debug(f"Wrote {kind} '{name}' to {path}")

    def delete_record(self, kind: str, name: str) -> bool:
        path = self.record_path(kind, name)
        if not path.exists():
            return False
        path.unlink()
        logger.debug(f"Deleted {kind} '{name}'")
        return True

    def list_names(self, kind: str) -> List[str]:
        directory = self.data_dir / _check_kind(kind)
        if not directory.exists():
            return []
        return sorted(decode_name(p.stem) for p in directory.glob("*.json"))

    def read_scalar(self, key: str) -> str:
        path = self.scalar_path(key)
        if not path.exists():
            raise NotFoundError(f"'{key}' is not set", subject=key)
        try:
            value = path.read_text(encoding="utf-8").strip()
        except UnicodeDecodeError as e:
            raise ParseError(f"Failed to read '{key}' ({path}): {e}", subject=key)
        if not value:
            raise NotFoundError(f"'{key}' is not set", subject=key)
        return value

    def write_scalar(self, key: str, value: str) -> None:
        atomic_write(self.scalar_path(key), value)

    def clear_scalar(self, key: str) -> None:
        path = self.scalar_path(key)
        if path.exists():
            path.unlink()
