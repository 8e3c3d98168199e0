"""
Markdown skill loader with YAML frontmatter support.

Skill files follow this format:

```markdown
---
name: weather
description: "Current conditions and forecasts"
metadata:
  emoji: "🌦"
  os: ["darwin", "linux"]
  requires:
    bins: ["curl"]
    env: ["WEATHER_API_KEY"]
---

# Weather

Instructions for the agent...
```
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml

from skillhub.loaders.base import SkillLoader
from skillhub.models import (
    SKILL_FILE,
    Skill,
    SkillEntry,
    SkillMetadata,
    SkillRequirements,
    SkillSource,
)

# Regex to match YAML frontmatter
FRONTMATTER_PATTERN = re.compile(
    r"^---\s*\n(.*?)\n---\s*\n",
    re.DOTALL,
)


class MarkdownSkillLoader(SkillLoader):
    """Loads skills from ``<skill-name>/SKILL.md`` files."""

    def can_load(self, path: Path) -> bool:
        if not path.exists():
            return False
        return path.name == SKILL_FILE

    def load_skill(self, path: Path, source: SkillSource) -> SkillEntry:
        try:
            content = path.read_text(encoding="utf-8")
            return self.parse(content, path, source)
        except (OSError, UnicodeDecodeError) as e:
            return SkillEntry(
                skill=Skill(
                    name=path.parent.name,
                    description="",
                    content="",
                    file_path=path,
                    base_dir=path.parent,
                    source=source,
                ),
                load_error=str(e),
            )

    def parse(
        self,
        content: str,
        path: Path,
        source: SkillSource = SkillSource.LOCAL,
    ) -> SkillEntry:
        """Parse SKILL.md text.

        ``path`` does not have to exist; the install gate parses the copy
        inside a downloaded archive before anything is written to disk.
        """
        frontmatter: dict[str, Any] = {}
        body = content

        match = FRONTMATTER_PATTERN.match(content)
        if match:
            try:
                loaded = yaml.safe_load(match.group(1))
            except yaml.YAMLError:
                loaded = None
            frontmatter = loaded if isinstance(loaded, dict) else {}
            body = content[match.end() :]

        name = frontmatter.get("name") or path.parent.name or path.stem

        description = frontmatter.get("description", "")
        if not description:
            # Fall back to the first paragraph
            for line in body.strip().split("\n"):
                line = line.strip()
                if line and not line.startswith("#"):
                    description = line[:200]
                    break

        skill = Skill(
            name=str(name),
            description=str(description),
            content=body.strip(),
            file_path=path,
            base_dir=path.parent,
            source=source,
            metadata=self._parse_metadata(frontmatter),
        )
        return SkillEntry(skill=skill)

    def _parse_metadata(self, frontmatter: dict[str, Any]) -> SkillMetadata:
        raw_metadata = frontmatter.get("metadata", {})

        if isinstance(raw_metadata, str):
            try:
                raw_metadata = yaml.safe_load(raw_metadata) or {}
            except yaml.YAMLError:
                raw_metadata = {}
        if not isinstance(raw_metadata, dict):
            raw_metadata = {}

        # Registry-published skills nest their manifest under a vendor key
        for key in ("clawdbot", "openclaw", "manifest"):
            if isinstance(raw_metadata.get(key), dict):
                raw_metadata = raw_metadata[key]
                break

        requires_raw = raw_metadata.get("requires", {})
        if not isinstance(requires_raw, dict):
            requires_raw = {}
        any_bins_raw = requires_raw.get("anyBins", requires_raw.get("any_bins", []))
        requires = SkillRequirements(
            bins=self._ensure_list(requires_raw.get("bins", [])),
            any_bins=self._ensure_list(any_bins_raw),
            env=self._ensure_list(requires_raw.get("env", [])),
            os=self._ensure_list(raw_metadata.get("os", requires_raw.get("os", []))),
        )

        version = raw_metadata.get("version", frontmatter.get("version"))
        return SkillMetadata(
            always=bool(raw_metadata.get("always", False)),
            emoji=raw_metadata.get("emoji"),
            version=str(version) if version is not None else None,
            requires=requires,
        )

    @staticmethod
    def _ensure_list(value: Any) -> list[str]:
        """Ensure value is a list of strings."""
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if isinstance(value, list):
            return [str(v) for v in value]
        return []
