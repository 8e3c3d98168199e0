"""
Gateway used by the CLI and by channel command handlers.

It is the narrow surface the rest of the host process sees: search,
inspect, install and lock file reads. Everything else stays inside
:mod:`skillhub.hub`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from skillhub.config import HubConfig
from skillhub.hub.client import Registry, RegistryClient
from skillhub.hub.install import install_skill
from skillhub.hub.lockfile import read_lockfile
from skillhub.hub.types import InstallOptions, InstallResult, LockFile, SearchResult, SkillMeta


class SkillHubGateway(ABC):
    """Operations exposed to callers outside the package manager."""

    @abstractmethod
    async def search(self, query: str, limit: int = 10, sort: str = "trending") -> list[SearchResult]:
        pass

    @abstractmethod
    async def get_skill(self, slug: str) -> SkillMeta:
        pass

    @abstractmethod
    async def install(
        self,
        slug: str,
        version: str | None,
        skills_dir: Path,
        lockfile_path: Path,
        options: InstallOptions,
    ) -> InstallResult:
        pass

    @abstractmethod
    def read_lockfile(self, path: Path) -> LockFile:
        pass

    async def aclose(self) -> None:
        """Release network resources."""


class RegistrySkillHubGateway(SkillHubGateway):
    """Gateway backed by a :class:`Registry` (the HTTP client by default)."""

    def __init__(self, registry: Registry) -> None:
        self.registry = registry

    @classmethod
    def from_config(cls, config: HubConfig) -> RegistrySkillHubGateway:
        return cls(
            RegistryClient(
                config.registry,
                token=config.token,
                timeout=config.timeout,
                download_timeout=config.download_timeout,
            )
        )

    async def __aenter__(self) -> RegistrySkillHubGateway:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if isinstance(self.registry, RegistryClient):
            await self.registry.aclose()

    async def search(self, query: str, limit: int = 10, sort: str = "trending") -> list[SearchResult]:
        return await self.registry.search(query, limit, sort)

    async def get_skill(self, slug: str) -> SkillMeta:
        return await self.registry.get_skill(slug)

    async def install(
        self,
        slug: str,
        version: str | None,
        skills_dir: Path,
        lockfile_path: Path,
        options: InstallOptions,
    ) -> InstallResult:
        return await install_skill(self.registry, slug, version, skills_dir, lockfile_path, options)

    def read_lockfile(self, path: Path) -> LockFile:
        # Fresh snapshot per call; never cached
        return read_lockfile(path)
