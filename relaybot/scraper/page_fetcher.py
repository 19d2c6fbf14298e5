# relaybot/scraper/page_fetcher.py
import asyncio
import html
import re
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import aiohttp
from readability import Document
from readability.readability import Unparseable

from relaybot.core.exceptions import FetchError
from relaybot.utils.logger import get_logger

logger = get_logger(__name__)

_SCRIPT_RE = re.compile(r"<script[\s\S]*?</script>", re.I)
_STYLE_RE = re.compile(r"<style[\s\S]*?</style>", re.I)
_BLOCK_RE = re.compile(r"</?(p|div|br|li|h[1-6]|tr|section|article)\b[^>]*>", re.I)
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"[ \t\r\f\v]+")
_NL_RE = re.compile(r"\n\s*\n+")

# readability's title() placeholder for pages without one
_NO_TITLE = "[no-title]"


def strip_html(markup: str) -> str:
    """Remove tags and decode entities, keeping block boundaries as line breaks"""
    text = _SCRIPT_RE.sub("", markup)
    text = _STYLE_RE.sub("", text)
    text = _BLOCK_RE.sub("\n", text)
    text = _TAG_RE.sub("", text)
    text = html.unescape(text)
    text = _WS_RE.sub(" ", text)
    lines = [line.strip() for line in text.split("\n")]
    return _NL_RE.sub("\n\n", "\n".join(lines)).strip()


def extract_text(markup: str) -> str:
    """Main article text of an HTML page, headed by its title"""
    doc = Document(markup)
    body = strip_html(doc.summary(html_partial=True))
    if not body:
        return ""
    title = doc.title().strip()
    return f"{title}\n\n{body}" if title and title != _NO_TITLE else body


class PageFetcher:
    def __init__(self, fetch_config: Dict[str, Any], session: Optional[aiohttp.ClientSession] = None):
        """Initialize fetcher; the session is created on first fetch when not given"""
        self.timeout = fetch_config.get('timeout', 30.0)
        self.headers = {
            'User-Agent': fetch_config.get('user_agent', ''),
            'Accept': 'text/html,application/xhtml+xml,text/plain;q=0.9,*/*;q=0.8'
        }
        self._session = session

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers=self.headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    async def fetch(self, url: str) -> str:
        """Return the text of the page at ``url`` or raise FetchError"""
        parsed = urlparse(url)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            raise FetchError(url, "Only absolute http/https URLs can be fetched")

        try:
            async with self._get_session().get(url, allow_redirects=True) as response:
                if response.status != 200:
                    raise FetchError(url, f"HTTP {response.status}")
                body = await response.text(errors='replace')
                content_type = response.headers.get('Content-Type', '')
        except FetchError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FetchError(url, "Request failed", e) from e

        if 'html' in content_type or body.lstrip().startswith('<'):
            try:
                text = extract_text(body)
            except Unparseable as e:
                raise FetchError(url, "Page could not be parsed", e) from e
        else:
            text = body.strip()

        if not text:
            raise FetchError(url, "Page contains no text")

        logger.info(f"Fetched {len(text)} characters from {url}")
        return text

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
