"""
Default skill filter implementation.

Checks, in order:
1. Always-include override
2. Disabled in config
3. OS requirements
4. Required binaries
5. Any-of binaries
6. Required environment variables
"""

from __future__ import annotations

import shutil
import sys

from skillhub.config import HubConfig
from skillhub.filters.base import FilterContext, FilterResult, SkillFilter
from skillhub.models import Skill


class DefaultSkillFilter(SkillFilter):
    """
    Default implementation of skill filtering.

    Checks multiple criteria in order and returns the first failure reason.
    """

    def filter(
        self,
        skill: Skill,
        context: FilterContext,
        config: HubConfig | None = None,
    ) -> FilterResult:
        if skill.metadata.always:
            return FilterResult(skill=skill, eligible=True)

        if config is not None and skill.name in config.disabled_skills:
            return FilterResult(
                skill=skill,
                eligible=False,
                reason=f"Skill '{skill.name}' is disabled in config",
                check="disabled",
            )

        requires = skill.metadata.requires
        if requires.os:
            platform = context.platform or sys.platform
            if platform not in requires.os:
                return FilterResult(
                    skill=skill,
                    eligible=False,
                    reason=f"Skill requires OS {requires.os}, current is {platform}",
                    check="os",
                )

        # ALL must exist
        for bin_name in requires.bins:
            if not self._has_binary(bin_name, context):
                return FilterResult(
                    skill=skill,
                    eligible=False,
                    reason=f"Required binary '{bin_name}' not found",
                    check="bins",
                )

        # At least ONE must exist
        if requires.any_bins:
            if not any(self._has_binary(b, context) for b in requires.any_bins):
                return FilterResult(
                    skill=skill,
                    eligible=False,
                    reason=f"None of required binaries found: {requires.any_bins}",
                    check="any_bins",
                )

        for env_name in requires.env:
            if env_name not in context.env_vars:
                return FilterResult(
                    skill=skill,
                    eligible=False,
                    reason=f"Required env var '{env_name}' not set",
                    check="env",
                )

        return FilterResult(skill=skill, eligible=True)

    def _has_binary(self, name: str, context: FilterContext) -> bool:
        if name in context.available_bins:
            return True
        return shutil.which(name) is not None
