"""Built-in skills shipped inside the package."""

from __future__ import annotations

import shutil
from pathlib import Path

from skillhub.errors import FilesystemError
from skillhub.logging import get_logger

logger = get_logger("builtin")

BUILTIN_SKILLS_DIR = Path(__file__).parent / "builtin_skills"


def builtin_skill_names(source: Path = BUILTIN_SKILLS_DIR) -> set[str]:
    """Names of the bundled skill directories."""
    if not source.is_dir():
        return set()
    return {p.name for p in source.iterdir() if p.is_dir() and not p.name.startswith(("_", "."))}


def ensure_builtin_skills(skills_root: Path, source: Path = BUILTIN_SKILLS_DIR) -> list[Path]:
    """
    Copy bundled skills into ``skills_root``.

    Only missing files are written; anything already present, including
    local edits to a built-in skill, is left alone.

    Returns:
        Paths of the files that were created
    """
    created: list[Path] = []
    try:
        skills_root.mkdir(parents=True, exist_ok=True)
        for name in sorted(builtin_skill_names(source)):
            for src in sorted((source / name).rglob("*")):
                if not src.is_file() or "__pycache__" in src.parts:
                    continue
                dest = skills_root / src.relative_to(source)
                if dest.exists():
                    continue
                dest.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(src, dest)
                created.append(dest)
    except OSError as e:
        raise FilesystemError(f"Failed to seed built-in skills into {skills_root}: {e}") from e

    if created:
        logger.info("Seeded %d built-in skill files into %s", len(created), skills_root)
    return created
