"""Skill eligibility filters."""

from skillhub.filters.base import FilterContext, FilterResult, SkillFilter
from skillhub.filters.default import DefaultSkillFilter

__all__ = ["FilterContext", "FilterResult", "SkillFilter", "DefaultSkillFilter"]
