"""
Error taxonomy for the skill package manager.

Only :class:`RegistryError` is considered transient; everything else is
surfaced to the operator as-is.
"""

from __future__ import annotations


class SkillHubError(Exception):
    """Base class for all package manager errors.

    ``category`` is a short label the CLI prints next to the message.
    """

    category = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class RegistryError(SkillHubError):
    """Network, transport, HTTP or decode failure talking to the registry."""

    category = "registry"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class NotFoundError(SkillHubError):
    """The requested slug or version does not exist in the registry."""

    category = "not found"


class GateDeniedError(SkillHubError):
    """The security gate rejected the package."""

    category = "blocked by security gate"


class FilesystemError(SkillHubError):
    """Extraction or lockfile I/O failed."""

    category = "filesystem"


class ParseError(SkillHubError):
    """A lockfile or config document is malformed."""

    category = "parse"


# Errors the retry wrapper is allowed to retry
RETRYABLE_ERRORS: tuple[type[SkillHubError], ...] = (RegistryError,)
