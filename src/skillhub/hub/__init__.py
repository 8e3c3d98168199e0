"""Registry client, install pipeline and lock file for registry skills."""
from __future__ import annotations

from skillhub.hub.client import Registry, RegistryClient
from skillhub.hub.gate import GateDecision, evaluate_gate
from skillhub.hub.gateway import RegistrySkillHubGateway, SkillHubGateway
from skillhub.hub.install import InstallPipeline, InstallStage, install_skill
from skillhub.hub.lockfile import read_lockfile, write_lockfile
from skillhub.hub.retry import retry_async
from skillhub.hub.types import (
    InstallOptions,
    InstallResult,
    LockEntry,
    LockFile,
    ScanStatus,
    SearchResult,
    SkillMeta,
    SkillVersion,
)

__all__ = [
    "Registry",
    "RegistryClient",
    "GateDecision",
    "evaluate_gate",
    "SkillHubGateway",
    "RegistrySkillHubGateway",
    "InstallPipeline",
    "InstallStage",
    "install_skill",
    "read_lockfile",
    "write_lockfile",
    "retry_async",
    "InstallOptions",
    "InstallResult",
    "LockEntry",
    "LockFile",
    "ScanStatus",
    "SearchResult",
    "SkillMeta",
    "SkillVersion",
]
