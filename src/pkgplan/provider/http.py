"""HTTP metadata provider backed by ``httpx.AsyncClient``.

Queries ``<base_url>/<name>.json`` and parses the body with the same schema
as a registry file entry (see ``PackageInfo.from_dict``). A 404 is a
not-found answer; every other failure raises ``MetadataProviderError``.

Usage::

    provider = HttpMetadataProvider("https://packages.example.com/meta")
    result = PackageResolver(provider).resolve(["App"])
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from pkgplan.core.dependency.models import PackageInfo
from pkgplan.exceptions import MetadataProviderError
from pkgplan.provider.base import MetadataProvider

logger = logging.getLogger(__name__)

# Timeout for all metadata HTTP requests (seconds).
DEFAULT_TIMEOUT: float = 30.0

# User-Agent sent with every request.
USER_AGENT: str = "pkgplan-metadata/0.1"


def _ensure_httpx() -> Any:  # noqa: ANN401
    """Lazily import httpx and raise a friendly error if missing.

    Raises:
        SystemExit: If httpx is not installed.
    """
    try:
        import httpx  # noqa: F811

        return httpx
    except ImportError:
        raise SystemExit(
            "httpx is required for remote metadata lookups.\n"
            "Install it with: pip install pkgplan[registry]"
        )


class HttpMetadataProvider(MetadataProvider):
    """Fetch package metadata from a static JSON HTTP index.

    Args:
        base_url: Index root; ``/<name>.json`` is appended per lookup.
        timeout: Request timeout in seconds.
        client: Optional pre-built ``httpx.AsyncClient``. When given, the
            caller owns its lifecycle (useful for connection reuse and for
            mock transports in tests).
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: Any = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client

    @property
    def name(self) -> str:
        return f"http:{self._base_url}"

    def url_for(self, name: str) -> str:
        """Return the metadata URL for a package name."""
        return f"{self._base_url}/{quote(name, safe='')}.json"

    async def get_package_info(self, name: str) -> PackageInfo | None:
        httpx = _ensure_httpx()
        url = self.url_for(name)
        try:
            if self._client is not None:
                resp = await self._client.get(url)
            else:
                async with httpx.AsyncClient(
                    timeout=self._timeout,
                    headers={"User-Agent": USER_AGENT},
                    follow_redirects=True,
                ) as client:
                    resp = await client.get(url)
            if resp.status_code == 404:
                logger.debug("Package %s not found at %s", name, url)
                return None
            resp.raise_for_status()
            payload = resp.json()
        except httpx.TimeoutException as exc:
            logger.warning("Timeout fetching %s", url)
            raise MetadataProviderError(f"Timeout fetching metadata for {name!r}") from exc
        except httpx.HTTPStatusError as exc:
            logger.warning("HTTP %d from %s", exc.response.status_code, url)
            raise MetadataProviderError(
                f"HTTP {exc.response.status_code} fetching metadata for {name!r}"
            ) from exc
        except (httpx.RequestError, ValueError) as exc:
            logger.warning("Request error for %s: %s", url, exc)
            raise MetadataProviderError(
                f"Cannot fetch metadata for {name!r}: {exc}"
            ) from exc

        try:
            return PackageInfo.from_dict(name, payload)
        except ValueError as exc:
            raise MetadataProviderError(
                f"Malformed metadata for {name!r}: {exc}"
            ) from exc
