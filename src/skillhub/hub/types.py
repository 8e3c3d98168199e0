"""Registry and install records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def _first(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key; the registry uses camelCase in places."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass
class ScanStatus:
    """VirusTotal scan summary reported by the registry."""

    status: str
    report_count: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScanStatus:
        return cls(
            status=str(data["status"]),
            report_count=int(_first(data, "report_count", "reportCount", default=0)),
        )

    @classmethod
    def from_optional(cls, data: Any) -> ScanStatus | None:
        if not isinstance(data, dict) or "status" not in data:
            return None
        return cls.from_dict(data)


@dataclass
class SearchResult:
    """One hit from the registry search endpoint. Never persisted."""

    slug: str
    name: str
    description: str = ""
    install_count: int = 0
    virustotal: ScanStatus | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SearchResult:
        slug = str(data["slug"])
        return cls(
            slug=slug,
            name=str(_first(data, "name", "displayName", "display_name", default=slug)),
            description=str(_first(data, "description", "summary", default="")),
            install_count=int(_first(data, "install_count", "installCount", "installs", default=0)),
            virustotal=ScanStatus.from_optional(data.get("virustotal")),
        )


@dataclass
class SkillVersion:
    """A published version. Ordering is whatever the registry returns."""

    version: str
    latest: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SkillVersion:
        return cls(version=str(data["version"]), latest=bool(data.get("latest", False)))


@dataclass
class SkillMeta:
    """Registry metadata for one skill, fetched on demand."""

    slug: str
    name: str
    description: str = ""
    versions: list[SkillVersion] = field(default_factory=list)
    virustotal: ScanStatus | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SkillMeta:
        """Decode ``GET /api/v1/skills/<slug>``.

        Accepts the flat document or a ``{"skill": {...}, "versions": [...]}``
        envelope.
        """
        skill = data.get("skill") if isinstance(data.get("skill"), dict) else data
        raw_versions = _first(skill, "versions", default=None)
        if raw_versions is None:
            raw_versions = data.get("versions", [])
        virustotal = skill.get("virustotal", data.get("virustotal"))

        slug = str(skill["slug"])
        return cls(
            slug=slug,
            name=str(_first(skill, "name", "displayName", "display_name", default=slug)),
            description=str(_first(skill, "description", "summary", default="")),
            versions=[SkillVersion.from_dict(v) for v in raw_versions],
            virustotal=ScanStatus.from_optional(virustotal),
        )

    @property
    def latest_version(self) -> SkillVersion | None:
        """The entry the registry flags as latest.

        Falls back to the first listed version when nothing is flagged;
        versions are never sorted locally.
        """
        for version in self.versions:
            if version.latest:
                return version
        return self.versions[0] if self.versions else None

    def has_version(self, version: str) -> bool:
        return any(v.version == version for v in self.versions)


@dataclass
class LockEntry:
    """Installed version of one registry skill."""

    installed_version: str
    installed_at: datetime

    def __post_init__(self) -> None:
        # Naive timestamps are taken as UTC
        if self.installed_at.tzinfo is None:
            self.installed_at = self.installed_at.replace(tzinfo=timezone.utc)

    @classmethod
    def now(cls, version: str) -> LockEntry:
        return cls(installed_version=version, installed_at=datetime.now(timezone.utc))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LockEntry:
        return cls(
            installed_version=str(data["installed_version"]),
            installed_at=datetime.fromisoformat(str(data["installed_at"])),
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "installed_version": self.installed_version,
            "installed_at": self.installed_at.isoformat(),
        }


@dataclass
class LockFile:
    """Slug -> installed version. At most one entry per slug."""

    skills: dict[str, LockEntry] = field(default_factory=dict)

    def get(self, slug: str) -> LockEntry | None:
        return self.skills.get(slug)

    def set(self, slug: str, version: str) -> LockEntry:
        entry = LockEntry.now(version)
        self.skills[slug] = entry
        return entry

    def __contains__(self, slug: object) -> bool:
        return slug in self.skills

    def __len__(self) -> int:
        return len(self.skills)


@dataclass
class InstallOptions:
    """Per-call install flags. Not persisted."""

    force: bool = False  # Reinstall even when already at the target version
    skip_gates: bool = False  # Bypass every gate (local/offline workflows)
    skip_security: bool = False  # Bypass scan-status checks only


@dataclass
class InstallResult:
    """Outcome of one install invocation."""

    message: str
    requires_restart: bool
    version: str | None = None
    warnings: list[str] = field(default_factory=list)
