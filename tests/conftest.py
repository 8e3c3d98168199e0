"""Shared pytest fixtures for skillhub tests."""

from __future__ import annotations

import io
import struct
import zipfile
from pathlib import Path
from textwrap import dedent

import pytest

from skillhub.errors import RegistryError
from skillhub.filters import FilterContext
from skillhub.hub.client import Registry
from skillhub.hub.types import ScanStatus, SearchResult, SkillMeta, SkillVersion

WEATHER_SKILL_MD = dedent("""
    ---
    name: weather
    description: "Current conditions and forecasts"
    metadata:
      emoji: "🌦"
    ---
    # Weather

    Use wttr.in for forecasts.
""").lstrip()


def make_archive(files: dict[str, str | bytes], compression: int = zipfile.ZIP_STORED) -> bytes:
    """Build zip bytes from ``{member name: content}``."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression) as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buf.getvalue()


def corrupt_archive(files: dict[str, str | bytes], member: str) -> bytes:
    """A deflated archive whose ``member`` has scrambled compressed bytes.

    The central directory stays intact, so the archive opens and lists
    normally and only fails once ``member`` is decompressed.
    """
    data = bytearray(make_archive(files, zipfile.ZIP_DEFLATED))
    with zipfile.ZipFile(io.BytesIO(bytes(data))) as zf:
        info = zf.getinfo(member)
    # Local header: 30 fixed bytes, then the name and extra field
    offset = info.header_offset
    name_len, extra_len = struct.unpack("<HH", data[offset + 26 : offset + 30])
    start = offset + 30 + name_len + extra_len
    for i in range(start, start + info.compress_size):
        data[i] ^= 0xFF
    return bytes(data)


def skill_archive(version: str = "2.0.1", skill_md: str = WEATHER_SKILL_MD) -> bytes:
    """A well-formed skill archive whose README records the version."""
    return make_archive({"SKILL.md": skill_md, "README.md": f"version {version}\n"})


class FakeRegistry(Registry):
    """In-memory registry with call counters."""

    def __init__(self) -> None:
        self.skills: dict[str, SkillMeta] = {}
        self.archives: dict[tuple[str, str], bytes] = {}
        self.calls: list[tuple[str, str]] = []
        self.download_errors: list[Exception] = []

    def publish(
        self,
        slug: str,
        versions: list[str],
        latest: str | None = None,
        scan: ScanStatus | None = ScanStatus("clean", 0),
        archive: bytes | None = None,
    ) -> SkillMeta:
        latest = latest or versions[-1]
        meta = SkillMeta(
            slug=slug,
            name=slug.title(),
            description=f"The {slug} skill",
            versions=[SkillVersion(v, latest=(v == latest)) for v in versions],
            virustotal=scan,
        )
        self.skills[slug] = meta
        for version in versions:
            self.archives[(slug, version)] = archive if archive is not None else skill_archive(version)
        return meta

    async def search(self, query: str, limit: int = 10, sort: str = "trending") -> list[SearchResult]:
        self.calls.append(("search", query))
        hits = [
            SearchResult(slug=m.slug, name=m.name, description=m.description, virustotal=m.virustotal)
            for m in self.skills.values()
            if query in m.slug
        ]
        return hits[:limit]

    async def get_skill(self, slug: str) -> SkillMeta:
        self.calls.append(("get_skill", slug))
        if slug not in self.skills:
            raise RegistryError(f"Registry returned HTTP 404 for {slug}", status_code=404)
        return self.skills[slug]

    async def get_versions(self, slug: str) -> list[SkillVersion]:
        self.calls.append(("get_versions", slug))
        return list(self.skills[slug].versions)

    async def download_skill(self, slug: str, version: str) -> bytes:
        self.calls.append(("download_skill", f"{slug}@{version}"))
        if self.download_errors:
            raise self.download_errors.pop(0)
        return self.archives[(slug, version)]

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)


@pytest.fixture
def registry() -> FakeRegistry:
    reg = FakeRegistry()
    reg.publish("weather", ["1.0.0", "2.0.1"], latest="2.0.1")
    return reg


@pytest.fixture
def skills_dir(tmp_path: Path) -> Path:
    return tmp_path / "skills"


@pytest.fixture
def lockfile_path(tmp_path: Path) -> Path:
    return tmp_path / "lock.json"


@pytest.fixture
def linux_context() -> FilterContext:
    """A Linux host with a couple of binaries and no env vars."""
    return FilterContext(platform="linux", available_bins={"git", "curl"}, env_vars=set())


@pytest.fixture
def local_skills_dir(tmp_path: Path) -> Path:
    """A skills directory holding a mix of eligible and ineligible skills."""
    root = tmp_path / "local-skills"
    root.mkdir()

    simple = root / "simple-skill"
    simple.mkdir()
    (simple / "SKILL.md").write_text(dedent("""
        ---
        name: simple-skill
        description: "A simple test skill"
        metadata:
          emoji: "🔧"
        ---
        # Simple Skill
    """).strip())

    needs_env = root / "requires-env"
    needs_env.mkdir()
    (needs_env / "SKILL.md").write_text(dedent("""
        ---
        name: requires-env
        description: "Requires API key"
        metadata:
          requires:
            env:
              - MY_API_KEY
        ---
        # Env Skill
    """).strip())

    mac_only = root / "mac-only"
    mac_only.mkdir()
    (mac_only / "SKILL.md").write_text(dedent("""
        ---
        name: mac-only
        description: "Apple Notes"
        metadata:
          os: ["darwin"]
        ---
        # Notes
    """).strip())

    # Staging leftovers are never listed
    hidden = root / ".weather.staging-abc"
    hidden.mkdir()
    (hidden / "SKILL.md").write_text("# hidden")

    return root
