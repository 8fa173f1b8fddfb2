"""Fetch archive pages through public CORS relay proxies."""
import json
import logging
from typing import Optional
from urllib.parse import quote

import httpx

from backend import config
from backend.scraper.errors import FetchError

logger = logging.getLogger(__name__)

MIN_BODY_LENGTH = 100

REQUEST_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36"
}


class ProxyFetcher:
    """Retrieve raw HTML via a primary relay, falling back once to a JSON relay."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        primary_url: str = config.PRIMARY_PROXY_URL,
        backup_url: str = config.BACKUP_PROXY_URL,
        timeout: float = config.FETCH_TIMEOUT,
    ):
        self.client = client
        self.primary_url = primary_url
        self.backup_url = backup_url
        self.timeout = timeout

    def _is_valid_html(self, html: Optional[str]) -> bool:
        """Interstitial and error pages are short even when served with 200 OK."""
        return bool(html) and len(html) >= MIN_BODY_LENGTH

    async def _get(self, url: str) -> httpx.Response:
        if self.client is not None:
            return await self.client.get(url, headers=REQUEST_HEADERS, timeout=self.timeout, follow_redirects=True)
        async with httpx.AsyncClient(follow_redirects=True) as client:
            return await client.get(url, headers=REQUEST_HEADERS, timeout=self.timeout, follow_redirects=True)

    async def _fetch_primary(self, url: str) -> str:
        resp = await self._get(self.primary_url + quote(url, safe=""))
        if not resp.is_success:
            raise FetchError(f"Primary proxy error: {resp.status_code}")
        if not self._is_valid_html(resp.text):
            raise FetchError("Primary proxy returned empty contents")
        return resp.text

    async def _fetch_backup(self, url: str) -> str:
        resp = await self._get(self.backup_url + quote(url, safe=""))
        if not resp.is_success:
            raise FetchError(f"Backup proxy error: {resp.status_code}")
        try:
            contents = resp.json().get("contents")
        except (json.JSONDecodeError, AttributeError) as exc:
            raise FetchError("Backup proxy returned malformed JSON") from exc
        if not contents:
            raise FetchError("Backup proxy returned empty contents")
        return contents

    async def fetch(self, url: str) -> str:
        """Return the page HTML for ``url`` or raise FetchError."""
        try:
            return await self._fetch_primary(url)
        except (FetchError, httpx.HTTPError) as primary_exc:
            logger.debug("Primary proxy failed for %s: %s", url, primary_exc)
            try:
                return await self._fetch_backup(url)
            except (FetchError, httpx.HTTPError) as backup_exc:
                logger.warning("Both proxies failed for %s", url)
                raise FetchError(
                    f"Both proxies failed for {url}: {primary_exc}; {backup_exc}"
                ) from backup_exc
