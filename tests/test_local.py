"""Tests for the local skill view behind ``available``."""

from __future__ import annotations

from pathlib import Path

import pytest

from skillhub.config import HubConfig
from skillhub.filters import FilterContext
from skillhub.hub.lockfile import write_lockfile
from skillhub.hub.types import LockFile
from skillhub.local import LocalSkills
from skillhub.models import SkillSource


@pytest.fixture
def context() -> FilterContext:
    return FilterContext(platform="linux", available_bins=set(), env_vars=set())


class TestLocalSkills:
    def test_check_skills_reports_every_skill(self, local_skills_dir: Path, context: FilterContext) -> None:
        """Should report eligibility and a reason for each skill on disk."""
        statuses = LocalSkills(local_skills_dir, context=context).check_skills()

        by_name = {s.skill.name: s for s in statuses}
        assert set(by_name) == {"simple-skill", "requires-env", "mac-only"}
        assert by_name["simple-skill"].eligible
        assert not by_name["requires-env"].eligible
        assert "MY_API_KEY" in (by_name["requires-env"].reason or "")
        assert not by_name["mac-only"].eligible

    def test_only_unconstrained_skill_is_eligible(self, local_skills_dir: Path, context: FilterContext) -> None:
        """Should mark only skills whose requirements are met as eligible."""
        statuses = LocalSkills(local_skills_dir, context=context).check_skills()

        assert [s.skill.name for s in statuses if s.eligible] == ["simple-skill"]

    def test_disabled_skills_from_config(self, local_skills_dir: Path, context: FilterContext) -> None:
        """Should mark skills disabled in config as ineligible."""
        config = HubConfig(disabled_skills=["simple-skill"])

        statuses = LocalSkills(local_skills_dir, config=config, context=context).check_skills()

        by_name = {s.skill.name: s for s in statuses}
        assert not any(s.eligible for s in statuses)
        assert "disabled" in (by_name["simple-skill"].reason or "")

    def test_registry_skills_carry_installed_version(
        self,
        local_skills_dir: Path,
        tmp_path: Path,
        context: FilterContext,
    ) -> None:
        """Should tag lock file entries as registry skills with their version."""
        lockfile_path = tmp_path / "lock.json"
        lock = LockFile()
        lock.set("simple-skill", "1.3.0")
        write_lockfile(lockfile_path, lock)

        statuses = LocalSkills(local_skills_dir, lockfile_path, context=context).check_skills()

        by_name = {s.skill.name: s for s in statuses}
        assert by_name["simple-skill"].skill.source == SkillSource.REGISTRY
        assert by_name["simple-skill"].installed_version == "1.3.0"
        assert by_name["mac-only"].skill.source == SkillSource.LOCAL
        assert by_name["mac-only"].installed_version is None

    def test_builtin_skills_tagged(self, tmp_path: Path, context: FilterContext) -> None:
        """Should tag the shipped skills as built-in."""
        skill_dir = tmp_path / "find-skills"
        skill_dir.mkdir()
        (skill_dir / "SKILL.md").write_text("---\nname: find-skills\n---\n# Find\n")

        entries = LocalSkills(tmp_path, context=context).load_skills()

        assert entries[0].skill.source == SkillSource.BUILTIN

    def test_unreadable_lockfile_still_lists(
        self,
        local_skills_dir: Path,
        tmp_path: Path,
        context: FilterContext,
    ) -> None:
        """Should still list skills when the lock file cannot be parsed."""
        lockfile_path = tmp_path / "lock.json"
        lockfile_path.write_text("{broken")

        statuses = LocalSkills(local_skills_dir, lockfile_path, context=context).check_skills()

        assert len(statuses) == 3
        assert all(s.installed_version is None for s in statuses)

    def test_broken_skill_is_ineligible(self, tmp_path: Path, context: FilterContext) -> None:
        """Should report an unreadable SKILL.md as ineligible."""
        skill_dir = tmp_path / "broken"
        skill_dir.mkdir()
        (skill_dir / "SKILL.md").write_bytes(b"\xff\xfe")

        statuses = LocalSkills(tmp_path, context=context).check_skills()

        assert len(statuses) == 1
        assert not statuses[0].eligible
        assert statuses[0].reason

    def test_missing_skills_dir(self, tmp_path: Path, context: FilterContext) -> None:
        """Should return nothing when the skills directory does not exist."""
        assert LocalSkills(tmp_path / "nope", context=context).check_skills() == []

    def test_from_config(self, tmp_path: Path) -> None:
        """Should derive paths from the config data dir."""
        config = HubConfig(data_dir=tmp_path)

        local = LocalSkills.from_config(config)

        assert local.skills_dir == tmp_path / "skills"
        assert local.lockfile_path == tmp_path / "skills-lock.json"
        assert local.config is config
