"""
Skill archive inspection and staged extraction.

Archives are zip files holding a ``SKILL.md`` either at the root or inside a
single top-level folder. Extraction never writes into ``skills_dir/<slug>``
directly: files land in a hidden staging directory next to it and are
swapped into place with renames, so the live directory is always either the
previous install or the complete new one.
"""

from __future__ import annotations

import io
import os
import re
import shutil
import tempfile
import uuid
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from skillhub.errors import FilesystemError
from skillhub.logging import get_logger
from skillhub.models import SKILL_FILE

logger = get_logger("hub.archive")

_DRIVE_PATTERN = re.compile(r"^[A-Za-z]:")
_IGNORED_PREFIXES = ("__MACOSX/",)

# What zipfile raises on damaged, encrypted or unsupported members
ARCHIVE_ERRORS = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    zlib.error,
    EOFError,
    RuntimeError,
    NotImplementedError,
)


@dataclass
class SkillPackage:
    """What a downloaded archive contains, read without touching disk."""

    files: list[str] = field(default_factory=list)  # Member names, directories excluded
    root: str = ""  # Top-level folder stripped on extraction
    skill_md: str | None = None  # SKILL.md text, if present and decodable
    problems: list[str] = field(default_factory=list)  # Structural defects

    @property
    def is_valid(self) -> bool:
        return not self.problems


def is_unsafe_member(name: str) -> bool:
    """Whether a member name could escape the extraction directory."""
    normalized = name.replace("\\", "/")
    if normalized.startswith("/") or _DRIVE_PATTERN.match(normalized):
        return True
    return ".." in PurePosixPath(normalized).parts


def read_package(data: bytes) -> SkillPackage:
    """Inspect archive bytes and collect structural problems."""
    package = SkillPackage()
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            infos = [
                info
                for info in zf.infolist()
                if not info.is_dir() and not info.filename.startswith(_IGNORED_PREFIXES)
            ]
            package.files = [info.filename for info in infos]

            unsafe = [name for name in package.files if is_unsafe_member(name)]
            if unsafe:
                package.problems.append(f"Archive contains unsafe paths: {', '.join(unsafe)}")

            if not package.files:
                package.problems.append("Archive is empty")
                return package

            skill_member = _locate_skill_file(package.files)
            if skill_member is None:
                package.problems.append(f"Archive has no {SKILL_FILE}")
                return package

            package.root = skill_member[: -len(SKILL_FILE)].rstrip("/")
            try:
                package.skill_md = zf.read(skill_member).decode("utf-8")
            except UnicodeDecodeError:
                package.problems.append(f"{SKILL_FILE} is not valid UTF-8")

            corrupt = zf.testzip()
            if corrupt is not None:
                package.problems.append(f"Archive member is corrupt: {corrupt}")
    except ARCHIVE_ERRORS as e:
        package.problems.append(f"Not a valid zip archive: {e}")
    return package


def _locate_skill_file(files: list[str]) -> str | None:
    if SKILL_FILE in files:
        return SKILL_FILE
    tops = {name.split("/", 1)[0] for name in files}
    if len(tops) == 1 and all("/" in name for name in files):
        candidate = f"{tops.pop()}/{SKILL_FILE}"
        if candidate in files:
            return candidate
    return None


def extract_archive(data: bytes, target_dir: Path, root: str = "") -> list[Path]:
    """
    Extract archive bytes into ``target_dir`` with path traversal protection.

    Args:
        data: Zip archive bytes
        target_dir: Existing, empty directory to extract into
        root: Top-level folder inside the archive to strip

    Returns:
        Paths of the written files

    Raises:
        FilesystemError: On unsafe members, corrupt archives or I/O errors
    """
    target_resolved = target_dir.resolve()
    prefix = f"{root}/" if root else ""
    written: list[Path] = []

    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            for info in zf.infolist():
                member = info.filename
                if info.is_dir() or member.startswith(_IGNORED_PREFIXES):
                    continue
                if is_unsafe_member(member):
                    raise FilesystemError(f"Path traversal detected in archive: {member}")
                if prefix and not member.startswith(prefix):
                    continue
                relative = member[len(prefix) :]

                target_path = target_dir / relative
                try:
                    target_path.resolve().relative_to(target_resolved)
                except ValueError:
                    raise FilesystemError(
                        f"Archive extraction would escape target directory: {member}"
                    ) from None

                target_path.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as source, open(target_path, "wb") as dest:
                    shutil.copyfileobj(source, dest)
                written.append(target_path)
    except ARCHIVE_ERRORS as e:
        raise FilesystemError(f"Failed to extract archive: {e}") from e
    except OSError as e:
        raise FilesystemError(f"Failed to extract archive: {e}") from e

    return written


class StagedInstall:
    """
    A skill extracted next to its final location, not yet live.

    Lifecycle: :meth:`stage` → :meth:`activate` → :meth:`finalize`, or
    :meth:`rollback` at any point to restore what was there before.
    """

    def __init__(self, skills_dir: Path, slug: str) -> None:
        self.skills_dir = skills_dir
        self.slug = slug
        self.target = skills_dir / slug
        self.staging: Path | None = None
        self.backup: Path | None = None
        self.active = False

    def stage(self, data: bytes, root: str = "") -> None:
        """Extract into a hidden staging directory inside ``skills_dir``."""
        try:
            self.skills_dir.mkdir(parents=True, exist_ok=True)
            self.staging = Path(
                tempfile.mkdtemp(prefix=f".{self.slug}.staging-", dir=self.skills_dir)
            )
        except OSError as e:
            raise FilesystemError(f"Cannot create staging directory in {self.skills_dir}: {e}") from e

        try:
            files = extract_archive(data, self.staging, root)
        except BaseException:
            self._discard(self.staging)
            self.staging = None
            raise
        logger.debug("Staged %d files for %s in %s", len(files), self.slug, self.staging)

    def activate(self) -> None:
        """Swap the staged directory into ``skills_dir/<slug>``."""
        if self.staging is None:
            raise FilesystemError(f"Nothing staged for {self.slug}")
        try:
            if self.target.exists():
                backup = self.skills_dir / f".{self.slug}.previous-{uuid.uuid4().hex[:8]}"
                os.replace(self.target, backup)
                self.backup = backup
            os.replace(self.staging, self.target)
        except OSError as e:
            self.rollback()
            raise FilesystemError(f"Failed to move {self.slug} into place: {e}") from e
        self.staging = None
        self.active = True

    def finalize(self) -> None:
        """Drop the previous version once the new one is committed."""
        if self.backup is not None:
            self._discard(self.backup)
            self.backup = None

    def rollback(self) -> None:
        """Remove new files and put the previous version back."""
        if self.active:
            self._discard(self.target)
            self.active = False
        if self.backup is not None and not self.target.exists():
            try:
                os.replace(self.backup, self.target)
                self.backup = None
            except OSError as e:
                logger.error("Failed to restore previous %s from %s: %s", self.slug, self.backup, e)
        if self.staging is not None:
            self._discard(self.staging)
            self.staging = None

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            shutil.rmtree(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Failed to clean up %s: %s", path, e)
