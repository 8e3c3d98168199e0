"""
Base skill loader interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from skillhub.models import SKILL_FILE, SkillEntry, SkillSource


class SkillLoader(ABC):
    """
    Abstract base class for skill loaders.

    Implement this interface to support loading skills from different
    file formats.
    """

    @abstractmethod
    def can_load(self, path: Path) -> bool:
        """Check if this loader can handle the given file."""
        pass

    @abstractmethod
    def load_skill(self, path: Path, source: SkillSource) -> SkillEntry:
        """Load a skill from a file."""
        pass

    def load_directory(self, directory: Path, source: SkillSource) -> list[SkillEntry]:
        """
        Load every ``<name>/SKILL.md`` found directly below ``directory``.

        Hidden directories (staging areas, backups) are skipped.

        Args:
            directory: Directory to scan
            source: Origin assigned to the loaded skills

        Returns:
            Loaded skill entries, sorted by directory name
        """
        if not directory.is_dir():
            return []

        entries: list[SkillEntry] = []
        for skill_dir in sorted(directory.iterdir()):
            if not skill_dir.is_dir() or skill_dir.name.startswith("."):
                continue
            skill_file = skill_dir / SKILL_FILE
            if self.can_load(skill_file):
                entries.append(self.load_skill(skill_file, source))
        return entries
