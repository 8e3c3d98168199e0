"""Async HTTP client for the skill registry REST API."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import httpx

from skillhub.errors import RegistryError
from skillhub.hub.types import SearchResult, SkillMeta, SkillVersion
from skillhub.logging import get_logger

logger = get_logger("hub.client")

PRODUCTION_REGISTRY_HOST = "clawhub.ai"
# Download endpoint of the hosted registry before it moved behind clawhub.ai.
# Older published links still resolve here.
LEGACY_DOWNLOAD_URL = "https://wry-manatee-359.convex.site/api/v1/download"

# (url, query params)
Candidate = tuple[str, dict[str, str]]


class Registry(ABC):
    """
    Capability set shared by every registry implementation.

    The install pipeline and the CLI only talk to this interface, so an
    offline or in-memory registry can stand in for the HTTP client.
    """

    @abstractmethod
    async def search(self, query: str, limit: int = 10, sort: str = "trending") -> list[SearchResult]:
        """Search skills by free-text query."""

    @abstractmethod
    async def get_skill(self, slug: str) -> SkillMeta:
        """Fetch metadata for one skill."""

    @abstractmethod
    async def get_versions(self, slug: str) -> list[SkillVersion]:
        """List every published version of a skill."""

    @abstractmethod
    async def download_skill(self, slug: str, version: str) -> bytes:
        """Download the packaged archive for ``slug`` at ``version``."""


class RegistryClient(Registry):
    """Thin async wrapper around the registry REST API.

    Every public method raises :class:`~skillhub.errors.RegistryError` on
    transport errors, non-success statuses, and bodies that do not decode
    into the expected schema.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
        download_timeout: float = 120.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.download_timeout = download_timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
        )

    async def __aenter__(self) -> RegistryClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    @property
    def is_production(self) -> bool:
        """Whether the configured registry is the hosted production registry."""
        host = httpx.URL(self.base_url).host
        return host == PRODUCTION_REGISTRY_HOST or host.endswith("." + PRODUCTION_REGISTRY_HOST)

    # ------------------------------------------------------------------
    # JSON endpoints
    # ------------------------------------------------------------------

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("GET %s params=%s", url, params)
        try:
            resp = await self._client.get(url, params=params, headers=self._headers())
        except httpx.HTTPError as exc:
            raise RegistryError(f"Registry request failed: {exc}", url=url) from exc

        if not resp.is_success:
            raise RegistryError(
                f"Registry returned HTTP {resp.status_code} for {url}",
                status_code=resp.status_code,
                url=url,
            )

        try:
            return resp.json()
        except ValueError as exc:
            raise RegistryError(f"Registry returned invalid JSON for {url}: {exc}", url=url) from exc

    async def search(self, query: str, limit: int = 10, sort: str = "trending") -> list[SearchResult]:
        """Search the registry.

        ``sort`` is part of the interface but the search endpoint ranks by
        relevance, so it is not sent.
        """
        limit = max(0, limit)
        data = await self._get_json("/api/v1/search", {"q": query, "limit": limit})
        try:
            results = [SearchResult.from_dict(item) for item in data["results"]]
        except (KeyError, TypeError, ValueError) as exc:
            raise RegistryError(f"Failed to parse search results: {exc!r}") from exc
        # The server already filters; truncate in case it ignored the limit
        return results[:limit]

    async def get_skill(self, slug: str) -> SkillMeta:
        data = await self._get_json(f"/api/v1/skills/{slug}")
        try:
            return SkillMeta.from_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise RegistryError(f"Failed to parse skill metadata for '{slug}': {exc!r}") from exc

    async def get_versions(self, slug: str) -> list[SkillVersion]:
        data = await self._get_json(f"/api/v1/skills/{slug}/versions")
        if isinstance(data, dict):
            data = data.get("versions")
        try:
            return [SkillVersion.from_dict(v) for v in data]
        except (KeyError, TypeError, ValueError) as exc:
            raise RegistryError(f"Failed to parse versions for '{slug}': {exc!r}") from exc

    # ------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------

    def download_candidates(self, slug: str, version: str) -> list[Candidate]:
        """Equivalent download endpoints, in the order they are tried."""
        candidates: list[Candidate] = [
            (f"{self.base_url}/api/v1/download", {"slug": slug, "version": version}),
            (f"{self.base_url}/api/v1/skills/{slug}/download", {"version": version}),
        ]
        if self.is_production:
            candidates.append((LEGACY_DOWNLOAD_URL, {"slug": slug, "version": version}))
        return candidates

    async def _attempt_download(
        self,
        url: str,
        params: dict[str, str],
    ) -> tuple[bytes | None, RegistryError | None]:
        """Try one candidate. Returns ``(body, None)`` or ``(None, error)``."""
        try:
            async with self._client.stream(
                "GET",
                url,
                params=params,
                headers=self._headers(),
                timeout=self.download_timeout,
            ) as resp:
                if not resp.is_success:
                    return None, RegistryError(
                        f"Download HTTP error at {url}: {resp.status_code}",
                        status_code=resp.status_code,
                        url=url,
                    )
                try:
                    body = await resp.aread()
                except httpx.HTTPError as exc:
                    return None, RegistryError(f"Failed to read download from {url}: {exc}", url=url)
        except httpx.HTTPError as exc:
            return None, RegistryError(f"Download failed at {url}: {exc}", url=url)
        return body, None

    async def download_skill(self, slug: str, version: str) -> bytes:
        """Download an archive, falling through the candidate endpoints.

        Raises the error from the last candidate when all of them fail.
        """
        last_error: RegistryError | None = None
        for url, params in self.download_candidates(slug, version):
            body, error = await self._attempt_download(url, params)
            if error is None:
                logger.debug("Downloaded %s@%s from %s (%d bytes)", slug, version, url, len(body or b""))
                return body or b""
            logger.warning("Download candidate failed: %s", error)
            last_error = error

        raise last_error or RegistryError("Download failed: no usable endpoint")
