"""
Single-attempt HTTP fetch of a page, returning serialized HTML or a classified error.
"""

import asyncio
import re
import time
from typing import Optional

import httpx
import structlog
from lxml import etree, html

from scanner.config import DEFAULT_USER_AGENT

logger = structlog.get_logger(__name__)

_META_CHARSET = re.compile(rb'<meta[^>]+charset\s*=\s*["\']?\s*([a-zA-Z0-9_\-]+)', re.IGNORECASE)


def _describe(error: Exception) -> str:
    return str(error) or type(error).__name__


def normalize_url(url: str) -> str:
    """Prepend http:// when the URL carries neither an http nor an https scheme."""
    url = url.strip()
    lowered = url.lower()
    if not lowered.startswith('http://') and not lowered.startswith('https://'):
        url = 'http://' + url
    return url


class FetchResult:
    def __init__(
        self,
        url: str,
        status_code: int = 0,
        content: str = '',
        final_url: str = None,
        fetch_time: float = 0.0,
        error: str = None,
    ):
        """Initialize a FetchResult with page content or a classified error."""
        self.url = url
        self.status_code = status_code
        self.content = content
        self.final_url = final_url or url
        self.fetch_time = fetch_time
        self.error = error

    @property
    def success(self) -> bool:
        """Check if the fetch produced usable content (no error and status 200)."""
        return self.error is None and self.status_code == 200

    def __repr__(self) -> str:
        return (
            f"FetchResult(url={self.url!r}, status_code={self.status_code}, "
            f"error={self.error!r}, size={len(self.content)})"
        )


class HTTPFetcher:
    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
        max_redirects: int = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the HTTP fetcher with one shared client.

        Args:
            timeout: Total seconds allowed for a single fetch, body included.
            user_agent: Value sent as the User-Agent header.
            max_redirects: Redirect hops followed before giving up.
            transport: Optional httpx transport, used to stub the network in tests.
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self.max_redirects = max_redirects

        headers = {
            'User-Agent': self.user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.5',
        }
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            max_redirects=self.max_redirects,
            headers=headers,
            transport=transport,
        )

    async def __aenter__(self) -> "HTTPFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch(self, url: str) -> FetchResult:
        """Fetch a URL once and return its serialized HTML or a classified error."""
        target = normalize_url(url)
        start_time = time.monotonic()

        try:
            request = self._client.build_request('GET', target)
        except (httpx.InvalidURL, ValueError, TypeError) as e:
            error = f"Failed to build request: {e}"
            logger.warning("request_build_failed", url=target, error=error)
            return FetchResult(url=target, error=error)

        try:
            response = await asyncio.wait_for(self._client.send(request), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            error = f"Request timed out after {self.timeout:g}s"
            logger.warning("request_timeout", url=target, timeout_seconds=self.timeout)
            return self._failed(target, start_time, error)
        except httpx.HTTPError as e:
            error = f"Request failed: {_describe(e)}"
            logger.warning("request_failed", url=target, error=error)
            return self._failed(target, start_time, error)
        except Exception as e:
            error = f"Unexpected error: {_describe(e)}"
            logger.error("request_error", url=target, error=error, exc_info=True)
            return self._failed(target, start_time, error)

        fetch_time = time.monotonic() - start_time
        final_url = str(response.url)

        if response.status_code != 200:
            error = f"Unexpected status code: {response.status_code}"
            logger.warning("unexpected_status", url=target, status_code=response.status_code)
            return FetchResult(
                url=target,
                status_code=response.status_code,
                final_url=final_url,
                fetch_time=fetch_time,
                error=error,
            )

        try:
            encoding = self._extract_encoding(response.charset_encoding, response.content)
            content = self._serialize_html(response.content, encoding)
        except (etree.LxmlError, ValueError) as e:
            error = f"Failed to parse HTML: {_describe(e)}"
            logger.warning("html_parse_failed", url=target, error=error)
            return FetchResult(
                url=target,
                status_code=response.status_code,
                final_url=final_url,
                fetch_time=fetch_time,
                error=error,
            )

        return FetchResult(
            url=target,
            status_code=response.status_code,
            content=content,
            final_url=final_url,
            fetch_time=fetch_time,
        )

    def _failed(self, url: str, start_time: float, error: str) -> FetchResult:
        return FetchResult(url=url, fetch_time=time.monotonic() - start_time, error=error)

    def _extract_encoding(self, header_charset: Optional[str], content: bytes) -> str:
        """Pick the charset from the Content-Type header, then a <meta> declaration, else utf-8."""
        if header_charset:
            return header_charset

        match = _META_CHARSET.search(content[:2048])
        if match:
            return match.group(1).decode('ascii', errors='ignore')

        return 'utf-8'

    def _serialize_html(self, body: bytes, encoding: Optional[str]) -> str:
        """Parse the body with lxml and serialize the whole document back to text."""
        if not body or not body.strip():
            return ''

        encoding = encoding or 'utf-8'
        try:
            parser = html.HTMLParser(encoding=encoding)
        except LookupError:
            encoding = 'utf-8'
            parser = html.HTMLParser(encoding=encoding)

        try:
            document = html.document_fromstring(body, parser=parser)
        except etree.ParserError:
            # Comment- or doctype-only pages have no element tree.
            try:
                return body.decode(encoding, errors='replace')
            except LookupError:
                return body.decode('utf-8', errors='replace')
        return html.tostring(document, encoding='unicode')
