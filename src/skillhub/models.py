"""
Data models for skills as they exist on disk.

A skill is a directory holding a ``SKILL.md`` file with YAML frontmatter.
These models describe what the loader extracts from that file; registry
records live in :mod:`skillhub.hub.types`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

SKILL_FILE = "SKILL.md"


class SkillSource(str, Enum):
    """Origin of an installed skill."""

    BUILTIN = "builtin"  # Shipped with skillhub and seeded on init
    REGISTRY = "registry"  # Installed from the registry (tracked in the lock file)
    LOCAL = "local"  # Dropped into the skills dir by hand


@dataclass
class SkillRequirements:
    """Requirements that must be satisfied for a skill to be eligible."""

    bins: list[str] = field(default_factory=list)  # All must exist
    any_bins: list[str] = field(default_factory=list)  # At least one must exist
    env: list[str] = field(default_factory=list)  # Required env vars
    os: list[str] = field(default_factory=list)  # Supported platforms


@dataclass
class SkillMetadata:
    """Extended metadata for a skill."""

    always: bool = False  # Always eligible (override requirement checks)
    emoji: str | None = None
    version: str | None = None
    requires: SkillRequirements = field(default_factory=SkillRequirements)


@dataclass
class Skill:
    """A skill definition loaded from a SKILL.md file."""

    name: str  # Unique identifier
    description: str  # One-line description for the agent
    content: str  # Instructions body (frontmatter stripped)
    file_path: Path  # Full path to SKILL.md
    base_dir: Path  # Skill directory
    source: SkillSource = SkillSource.LOCAL
    metadata: SkillMetadata = field(default_factory=SkillMetadata)

    def __hash__(self) -> int:
        return hash(self.name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Skill):
            return False
        return self.name == other.name


@dataclass
class SkillEntry:
    """
    A skill as loaded from disk.

    ``load_error`` is set instead of raising when the file could not be read,
    so one broken skill does not hide the others.
    """

    skill: Skill
    load_error: str | None = None
