"""
skillhub - install versioned skill packages from a remote registry.

Example:
    import asyncio
    from pathlib import Path

    from skillhub import HubConfig, InstallOptions, RegistrySkillHubGateway

    async def main() -> None:
        config = HubConfig.load()
        async with RegistrySkillHubGateway.from_config(config) as gateway:
            result = await gateway.install(
                "weather", None, config.skills_dir, config.lockfile_path, InstallOptions()
            )
            print(result.message)

    asyncio.run(main())
"""

from skillhub.builtin import ensure_builtin_skills
from skillhub.config import HubConfig
from skillhub.errors import (
    FilesystemError,
    GateDeniedError,
    NotFoundError,
    ParseError,
    RegistryError,
    SkillHubError,
)
from skillhub.hub import (
    GateDecision,
    InstallOptions,
    InstallPipeline,
    InstallResult,
    InstallStage,
    LockEntry,
    LockFile,
    Registry,
    RegistryClient,
    RegistrySkillHubGateway,
    ScanStatus,
    SearchResult,
    SkillHubGateway,
    SkillMeta,
    SkillVersion,
    evaluate_gate,
    install_skill,
    read_lockfile,
    retry_async,
    write_lockfile,
)
from skillhub.local import LocalSkills, SkillStatus
from skillhub.models import Skill, SkillEntry, SkillMetadata, SkillRequirements, SkillSource

__version__ = "0.1.0"

__all__ = [
    # Config
    "HubConfig",
    # Errors
    "SkillHubError",
    "RegistryError",
    "NotFoundError",
    "GateDeniedError",
    "FilesystemError",
    "ParseError",
    # Registry
    "Registry",
    "RegistryClient",
    "SearchResult",
    "SkillMeta",
    "SkillVersion",
    "ScanStatus",
    # Install
    "InstallOptions",
    "InstallResult",
    "InstallPipeline",
    "InstallStage",
    "install_skill",
    "GateDecision",
    "evaluate_gate",
    "retry_async",
    # Lock file
    "LockEntry",
    "LockFile",
    "read_lockfile",
    "write_lockfile",
    # Gateway
    "SkillHubGateway",
    "RegistrySkillHubGateway",
    # Local skills
    "LocalSkills",
    "SkillStatus",
    "Skill",
    "SkillEntry",
    "SkillMetadata",
    "SkillRequirements",
    "SkillSource",
    "ensure_builtin_skills",
]
