"""
Lock file persistence.

The lock file is a JSON document mapping each registry-installed slug to its
installed version and timestamp::

    {
      "version": 1,
      "skills": {
        "weather": {"installed_version": "2.0.1", "installed_at": "2026-10-18T09:12:44+00:00"}
      }
    }

It is always rewritten in full through a temp file and ``os.replace``, so
readers see either the old complete map or the new one. Only the install
pipeline writes it; there is no cross-process lock, a single installer at a
time is assumed.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from skillhub.errors import FilesystemError, ParseError
from skillhub.hub.types import LockEntry, LockFile
from skillhub.logging import get_logger

logger = get_logger("hub.lockfile")

LOCKFILE_FORMAT_VERSION = 1


def read_lockfile(path: str | Path) -> LockFile:
    """
    Load the lock file at ``path``.

    A missing file is an empty lock file, not an error.

    Raises:
        ParseError: If the file is not valid JSON or has the wrong structure
        FilesystemError: If the file exists but cannot be read
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return LockFile()
    except UnicodeDecodeError as e:
        raise ParseError(f"Lock file {path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise FilesystemError(f"Failed to read lock file {path}: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Lock file {path} is not valid JSON: {e}") from e

    return _decode(data, path)


def _decode(data: Any, path: Path) -> LockFile:
    if not isinstance(data, dict):
        raise ParseError(f"Lock file {path} must contain a JSON object")

    raw_skills = data.get("skills", {})
    if not isinstance(raw_skills, dict):
        raise ParseError(f"Lock file {path}: 'skills' must be an object")

    lock = LockFile()
    for slug, raw_entry in raw_skills.items():
        if not isinstance(raw_entry, dict):
            raise ParseError(f"Lock file {path}: entry '{slug}' must be an object")
        try:
            lock.skills[slug] = LockEntry.from_dict(raw_entry)
        except (KeyError, TypeError, ValueError) as e:
            raise ParseError(f"Lock file {path}: invalid entry '{slug}': {e!r}") from e
    return lock


def write_lockfile(path: str | Path, lock: LockFile) -> None:
    """
    Atomically replace the lock file with the full contents of ``lock``.

    Raises:
        FilesystemError: If the temp file cannot be written or renamed
    """
    path = Path(path)
    payload = {
        "version": LOCKFILE_FORMAT_VERSION,
        "skills": {slug: entry.to_dict() for slug, entry in sorted(lock.skills.items())},
    }

    tmp_path: Path | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_path = Path(tmp.name)
            json.dump(payload, tmp, indent=2)
            tmp.write("\n")
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
        raise FilesystemError(f"Failed to write lock file {path}: {e}") from e

    logger.debug("Wrote lock file %s (%d skills)", path, len(lock))
