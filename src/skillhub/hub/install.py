"""
Install pipeline.

One :class:`InstallPipeline` run installs or upgrades a single skill::

    RESOLVE_VERSION -> DOWNLOAD -> GATE -> EXTRACT -> COMMIT_LOCK -> DONE

Any step can end the run in ``FAILED``; the error that caused it is
re-raised unchanged. Nothing is written before ``EXTRACT``, and extraction
is staged, so a failed run leaves the previous install and its lock entry
exactly as they were.

Transient registry failures are not retried here; wrap the call in
:func:`skillhub.hub.retry.retry_async` at the call site.
"""

from __future__ import annotations

import asyncio
import re
from enum import Enum
from pathlib import Path

from skillhub.errors import (
    GateDeniedError,
    NotFoundError,
    RegistryError,
    SkillHubError,
)
from skillhub.filters import FilterContext
from skillhub.hub.archive import StagedInstall, read_package
from skillhub.hub.client import Registry
from skillhub.hub.gate import evaluate_gate
from skillhub.hub.lockfile import read_lockfile, write_lockfile
from skillhub.hub.types import InstallOptions, InstallResult, SkillMeta
from skillhub.logging import get_logger

logger = get_logger("hub.install")

# A slug becomes a directory name, so it must be a single safe path component
SLUG_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class InstallStage(str, Enum):
    """Steps of an install run."""

    RESOLVE_VERSION = "resolve_version"
    DOWNLOAD = "download"
    GATE = "gate"
    EXTRACT = "extract"
    COMMIT_LOCK = "commit_lock"
    DONE = "done"
    FAILED = "failed"


class InstallPipeline:
    """Installs one skill from a :class:`Registry` into ``skills_dir``."""

    def __init__(
        self,
        registry: Registry,
        skills_dir: Path,
        lockfile_path: Path,
        options: InstallOptions | None = None,
        context: FilterContext | None = None,
    ) -> None:
        self.registry = registry
        self.skills_dir = Path(skills_dir)
        self.lockfile_path = Path(lockfile_path)
        self.options = options or InstallOptions()
        self.context = context
        self.stage = InstallStage.RESOLVE_VERSION
        self.failed_stage: InstallStage | None = None

    def _enter(self, stage: InstallStage) -> None:
        logger.debug("Install stage: %s", stage.value)
        self.stage = stage

    async def run(self, slug: str, version: str | None = None) -> InstallResult:
        """Run the pipeline. Raises the first error encountered."""
        try:
            return await self._run(slug, version)
        except (SkillHubError, asyncio.CancelledError) as e:
            self.failed_stage = self.stage
            self.stage = InstallStage.FAILED
            logger.warning("Install of %s failed during %s: %s", slug, self.failed_stage.value, e)
            raise

    async def _run(self, slug: str, version: str | None) -> InstallResult:
        if not SLUG_PATTERN.match(slug):
            raise NotFoundError(f"Invalid skill slug: {slug!r}")

        self._enter(InstallStage.RESOLVE_VERSION)
        meta = await self._fetch_meta(slug)
        resolved = self._resolve_version(meta, version)

        loop = asyncio.get_running_loop()
        lock = await loop.run_in_executor(None, read_lockfile, self.lockfile_path)
        previous = lock.get(slug)
        previous_version = previous.installed_version if previous else None
        was_present = (self.skills_dir / slug).is_dir()

        if previous_version == resolved and was_present and not self.options.force:
            self._enter(InstallStage.DONE)
            return InstallResult(
                message=f"{slug} is already up to date (v{resolved})",
                requires_restart=False,
                version=resolved,
            )

        self._enter(InstallStage.DOWNLOAD)
        data = await self.registry.download_skill(slug, resolved)

        self._enter(InstallStage.GATE)
        package = read_package(data)
        decision = evaluate_gate(meta, package, self.options, self.context)
        if not decision.allowed:
            raise GateDeniedError(f"Install of '{slug}' blocked: {decision.reason}")
        for warning in decision.warnings:
            logger.info("Gate warning for %s: %s", slug, warning)

        # Once extraction starts it runs to completion even if the caller
        # gives up waiting.
        await asyncio.shield(
            loop.run_in_executor(None, self._extract_and_commit, slug, resolved, data, package.root)
        )
        self._enter(InstallStage.DONE)

        target = self.skills_dir / slug
        if previous_version is None:
            message = f"Installed {slug} v{resolved} to {target}"
        elif previous_version != resolved:
            message = f"Updated {slug} from v{previous_version} to v{resolved}"
        else:
            message = f"Reinstalled {slug} v{resolved}"
        logger.info("%s", message)

        return InstallResult(
            message=message,
            requires_restart=previous_version != resolved or not was_present,
            version=resolved,
            warnings=decision.warnings,
        )

    async def _fetch_meta(self, slug: str) -> SkillMeta:
        try:
            return await self.registry.get_skill(slug)
        except RegistryError as e:
            if e.is_not_found:
                raise NotFoundError(f"Skill '{slug}' not found in registry") from e
            raise

    @staticmethod
    def _resolve_version(meta: SkillMeta, requested: str | None) -> str:
        if requested:
            if meta.versions and not meta.has_version(requested):
                raise NotFoundError(f"Version {requested} of '{meta.slug}' not found")
            return requested
        latest = meta.latest_version
        if latest is None:
            raise NotFoundError(f"'{meta.slug}' has no published versions")
        return latest.version

    def _extract_and_commit(self, slug: str, version: str, data: bytes, root: str) -> None:
        """Runs in a worker thread."""
        staged = StagedInstall(self.skills_dir, slug)

        self._enter(InstallStage.EXTRACT)
        staged.stage(data, root)
        try:
            staged.activate()

            self._enter(InstallStage.COMMIT_LOCK)
            lock = read_lockfile(self.lockfile_path)
            lock.set(slug, version)
            write_lockfile(self.lockfile_path, lock)
        except BaseException:
            # The lock entry and the live directory must always agree
            staged.rollback()
            raise
        staged.finalize()


async def install_skill(
    registry: Registry,
    slug: str,
    version: str | None,
    skills_dir: Path,
    lockfile_path: Path,
    options: InstallOptions | None = None,
    context: FilterContext | None = None,
) -> InstallResult:
    """Install ``slug`` (latest version unless ``version`` is given)."""
    pipeline = InstallPipeline(registry, skills_dir, lockfile_path, options, context)
    return await pipeline.run(slug, version)
