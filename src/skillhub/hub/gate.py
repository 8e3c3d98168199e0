"""
Install gate: decides whether a downloaded package may be written to disk.

The decision depends only on the registry metadata, the archive contents
and the caller's flags. It performs no I/O of its own.

Checks, in order (all skipped with ``skip_gates``):
1. Archive structure (valid zip, SKILL.md present, no unsafe paths)
2. Scan status (skipped with ``skip_security``)
3. Eligibility of the packaged SKILL.md on this host
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from skillhub.filters import DefaultSkillFilter, FilterContext, SkillFilter
from skillhub.hub.archive import SkillPackage
from skillhub.hub.types import InstallOptions, SkillMeta
from skillhub.loaders import MarkdownSkillLoader
from skillhub.models import SKILL_FILE, SkillSource

# VirusTotal verdicts, lowercased
CLEAN_STATUSES = frozenset({"clean", "benign", "harmless", "undetected"})
BLOCKED_STATUSES = frozenset({"malicious", "suspicious"})


@dataclass
class GateDecision:
    """Outcome of :func:`evaluate_gate`."""

    allowed: bool
    reason: str | None = None  # Why the install was denied
    warnings: list[str] = field(default_factory=list)  # Allowed, but worth telling the operator

    @classmethod
    def deny(cls, reason: str, warnings: list[str] | None = None) -> GateDecision:
        return cls(allowed=False, reason=reason, warnings=list(warnings or []))


def evaluate_gate(
    meta: SkillMeta,
    package: SkillPackage,
    options: InstallOptions,
    context: FilterContext | None = None,
    skill_filter: SkillFilter | None = None,
) -> GateDecision:
    """
    Evaluate every gate for one package.

    Args:
        meta: Registry metadata fetched for the skill
        package: Inspected archive contents
        options: Caller flags (``skip_gates``, ``skip_security``)
        context: Host description for eligibility; defaults to this process
        skill_filter: Eligibility filter; defaults to :class:`DefaultSkillFilter`

    Returns:
        GateDecision with ``allowed`` set and any warnings collected
    """
    if options.skip_gates:
        return GateDecision(allowed=True)

    warnings: list[str] = []

    if not package.is_valid:
        return GateDecision.deny("; ".join(package.problems))

    if not options.skip_security:
        scan = meta.virustotal
        if scan is None:
            warnings.append(f"'{meta.slug}' has no security scan results yet")
        else:
            status = scan.status.strip().lower()
            if status in BLOCKED_STATUSES:
                return GateDecision.deny(
                    f"'{meta.slug}' is flagged as {status} by VirusTotal "
                    f"({scan.report_count} reports)",
                    warnings,
                )
            if status not in CLEAN_STATUSES:
                warnings.append(f"'{meta.slug}' scan status is {status} ({scan.report_count} reports)")

    if package.skill_md is not None:
        entry = MarkdownSkillLoader().parse(
            package.skill_md,
            Path(meta.slug) / SKILL_FILE,
            SkillSource.REGISTRY,
        )
        result = (skill_filter or DefaultSkillFilter()).filter(
            entry.skill,
            context or FilterContext.current(),
        )
        if not result.eligible:
            if result.check == "os":
                return GateDecision.deny(result.reason or "Unsupported OS", warnings)
            warnings.append(f"{result.reason}; the skill stays inactive until this is resolved")

    return GateDecision(allowed=True, warnings=warnings)
