"""
Skills present on disk.

Backs the ``available`` command: scans the skills directory, attributes
each skill to its origin, and reports eligibility on this host.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from skillhub.builtin import builtin_skill_names
from skillhub.config import HubConfig
from skillhub.errors import SkillHubError
from skillhub.filters import DefaultSkillFilter, FilterContext, SkillFilter
from skillhub.hub.lockfile import read_lockfile
from skillhub.hub.types import LockFile
from skillhub.loaders import MarkdownSkillLoader, SkillLoader
from skillhub.logging import get_logger
from skillhub.models import Skill, SkillEntry, SkillSource

logger = get_logger("local")


@dataclass
class SkillStatus:
    """One local skill and whether it can be used here."""

    skill: Skill
    eligible: bool
    reason: str | None = None  # Why it is ineligible, or the load error
    installed_version: str | None = None  # From the lock file, registry skills only


class LocalSkills:
    """Read-only view over ``skills_dir``."""

    def __init__(
        self,
        skills_dir: Path,
        lockfile_path: Path | None = None,
        config: HubConfig | None = None,
        loader: SkillLoader | None = None,
        skill_filter: SkillFilter | None = None,
        context: FilterContext | None = None,
    ) -> None:
        self.skills_dir = Path(skills_dir)
        self.lockfile_path = lockfile_path
        self.config = config
        self.loader = loader or MarkdownSkillLoader()
        self.filter = skill_filter or DefaultSkillFilter()
        self.context = context or FilterContext.current()

    @classmethod
    def from_config(cls, config: HubConfig) -> LocalSkills:
        return cls(config.skills_dir, config.lockfile_path, config)

    def _lock_snapshot(self) -> LockFile:
        if self.lockfile_path is None:
            return LockFile()
        try:
            return read_lockfile(self.lockfile_path)
        except SkillHubError as e:
            # Listing still works without versions
            logger.warning("Ignoring unreadable lock file: %s", e)
            return LockFile()

    def load_skills(self, lock: LockFile | None = None) -> list[SkillEntry]:
        """Load every skill directory, tagging each with its origin."""
        if lock is None:
            lock = self._lock_snapshot()
        builtins = builtin_skill_names()

        entries = self.loader.load_directory(self.skills_dir, SkillSource.LOCAL)
        for entry in entries:
            dir_name = entry.skill.base_dir.name
            if dir_name in lock:
                entry.skill.source = SkillSource.REGISTRY
            elif dir_name in builtins:
                entry.skill.source = SkillSource.BUILTIN
        return entries

    def check_skills(self) -> list[SkillStatus]:
        """Eligibility for every skill, including broken ones."""
        lock = self._lock_snapshot()
        statuses: list[SkillStatus] = []
        for entry in self.load_skills(lock):
            lock_entry = lock.get(entry.skill.base_dir.name)
            version = lock_entry.installed_version if lock_entry else None
            if entry.load_error:
                statuses.append(
                    SkillStatus(entry.skill, eligible=False, reason=entry.load_error, installed_version=version)
                )
                continue
            result = self.filter.filter(entry.skill, self.context, self.config)
            statuses.append(SkillStatus(entry.skill, result.eligible, result.reason, version))
        return statuses
