"""
Base skill filter interface.
"""

from __future__ import annotations

import os
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from skillhub.config import HubConfig
from skillhub.models import Skill


@dataclass
class FilterContext:
    """Context for skill filtering decisions."""

    platform: str = ""  # Current platform (linux, darwin, win32)
    available_bins: set[str] = field(default_factory=set)  # Known-present binaries
    env_vars: set[str] = field(default_factory=set)  # Known-present env vars

    @classmethod
    def current(cls) -> FilterContext:
        """Context describing the running process."""
        return cls(platform=sys.platform, env_vars=set(os.environ))


@dataclass
class FilterResult:
    """Result of filtering a skill."""

    skill: Skill
    eligible: bool
    reason: str | None = None  # Reason for ineligibility
    check: str | None = None  # Name of the failed check ("os", "bins", ...)


class SkillFilter(ABC):
    """
    Abstract base class for skill filters.

    Implement this interface to customize skill eligibility logic.
    """

    @abstractmethod
    def filter(
        self,
        skill: Skill,
        context: FilterContext,
        config: HubConfig | None = None,
    ) -> FilterResult:
        """
        Determine if a skill is eligible.

        Args:
            skill: The skill to check
            context: Runtime context (platform, available bins, etc.)
            config: Optional config carrying the disabled-skill list

        Returns:
            FilterResult indicating eligibility
        """
        pass
