"""
Minimal asynchronous HTTP GET client used by the page and REST sources.
"""

import asyncio
from typing import Dict, Optional

import aiohttp

from marketcompat.config import config as default_config
from marketcompat.utils.error_handling import NetworkError
from marketcompat.utils.logging_config import logger

DEFAULT_HEADERS = {
    "Accept": "application/json, text/html, */*",
    "Accept-Language": "en-US,en;q=0.9",
}


class HttpClient:
    """
    Thin wrapper around one ``aiohttp.ClientSession``.

    The session is created lazily and reused until ``close`` is called, so a
    batch pays for one connection pool. Use as an async context manager.
    """

    def __init__(self, config=None, session: Optional[aiohttp.ClientSession] = None):
        self.config = config or default_config
        self.timeout = self.config.get("HTTP_TIMEOUT", 30)
        self.max_redirects = self.config.get("HTTP_MAX_REDIRECTS", 10)
        self.user_agent = self.config.get("USER_AGENT")
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "HttpClient":
        await self._create_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _create_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            headers = dict(DEFAULT_HEADERS)
            if self.user_agent:
                headers["User-Agent"] = self.user_agent
            self.session = aiohttp.ClientSession(
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
            self._owns_session = True
        return self.session

    async def close(self) -> None:
        if self._owns_session and self.session is not None and not self.session.closed:
            await self.session.close()
        self.session = None

    async def get_text(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        """
        GET ``url`` and return the decoded body.

        Redirects are followed up to ``HTTP_MAX_REDIRECTS``.

        Raises:
            NetworkError: On timeouts, transport errors or any non-200 status
        """
        session = await self._create_session()
        logger.debug(f"GET {url}")
        try:
            async with session.get(
                url,
                headers=headers,
                allow_redirects=True,
                max_redirects=self.max_redirects,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if response.status != 200:
                    raise NetworkError(f"HTTP {response.status}", url=url)
                return await response.text(encoding="utf-8", errors="replace")
        except asyncio.TimeoutError as e:
            raise NetworkError("Timeout", url=url, cause=e)
        except aiohttp.TooManyRedirects as e:
            raise NetworkError("Too many redirects", url=url, cause=e)
        except aiohttp.ClientError as e:
            raise NetworkError(f"{type(e).__name__}: {e}", url=url, cause=e)
