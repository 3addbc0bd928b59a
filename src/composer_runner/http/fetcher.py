"""HTTP download of the Composer bootstrap installer."""

from __future__ import annotations

import logging

import httpx

from composer_runner.errors import DownloadFailed

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_USER_AGENT = "composer-runner/1.0 (+https://getcomposer.org/download/)"


class InstallerFetcher:
    """HTTP client wrapper returning the raw installer bytes.

    Transport retries are disabled: a failed download is reported once and
    the caller falls back to ``BinaryNotFound``.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._timeout = httpx.Timeout(timeout_seconds, connect=10.0)
        self._client = httpx.Client(
            timeout=self._timeout,
            headers={"User-Agent": user_agent},
            transport=transport or httpx.HTTPTransport(retries=0),
            follow_redirects=True,
        )

    def fetch(self, url: str) -> bytes:
        """Fetch URL content, raising ``DownloadFailed`` on any transport or HTTP error."""

        try:
            response = self._client.get(url)
        except httpx.TimeoutException as exc:
            logger.warning("Timeout fetching %s", url)
            raise DownloadFailed(f"Timeout fetching {url}") from exc
        except httpx.HTTPError as exc:
            logger.warning("HTTP error fetching %s: %s", url, exc)
            raise DownloadFailed(f"HTTP error fetching {url}: {exc}") from exc

        if not response.is_success:
            raise DownloadFailed(f"HTTP {response.status_code} fetching {url}")
        if not response.content:
            raise DownloadFailed(f"Empty response body from {url}")
        logger.info("Downloaded %d bytes from %s", len(response.content), url)
        return response.content

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> InstallerFetcher:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
