"""Skill loaders."""

from skillhub.loaders.base import SkillLoader
from skillhub.loaders.markdown import MarkdownSkillLoader

__all__ = ["SkillLoader", "MarkdownSkillLoader"]
