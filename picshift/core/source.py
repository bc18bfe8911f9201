"""Source resolution: turn an item reference into raw image bytes.

Items starting with ``http://`` or ``https://`` are fetched over HTTP;
everything else is read from the local filesystem.
"""

import re
from collections.abc import Mapping

import anyio
import httpx

from picshift.config.constants import DEFAULT_HTTP_TIMEOUT, DEFAULT_USER_AGENT
from picshift.exceptions import FetchError, NotAnImageError
from picshift.services.protocols import PipelineLogger
from picshift.utils.logging import StructlogPipelineLogger

# Case-sensitive, anchored at the start of the reference
_REMOTE_PATTERN = re.compile(r"^https?://")


def is_remote(item: str) -> bool:
    """Check whether ``item`` should be fetched over HTTP."""
    return _REMOTE_PATTERN.match(item) is not None


def assert_image(url: str, headers: Mapping[str, str], logger: PipelineLogger) -> None:
    """Reject a response whose content type does not declare an image.

    A missing content-type header is treated as a rejection.

    Raises:
        NotAnImageError: if the content type is absent or lacks ``image``
    """
    content_type = headers.get("content-type")
    if not content_type or "image" not in content_type:
        logger.error(
            f"ContentType header of request from url: {url} is {content_type}, "
            "is not a image contentType."
        )
        raise NotAnImageError(url, content_type)


class SourceResolver:
    """Fetch remote items with httpx and read local items with anyio.

    One resolver (and its connection pool) is shared by every item of a batch.
    Use it as an async context manager, or call ``aclose()`` when done.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        follow_redirects: bool = True,
        user_agent: str = DEFAULT_USER_AGENT,
        logger: PipelineLogger | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            client: Optional pre-configured client; the resolver does not close it
            timeout: Request timeout in seconds for the owned client
            follow_redirects: Follow HTTP redirects with the owned client
            user_agent: User-Agent header for the owned client
            logger: Pipeline logger for guard rejections
        """
        self._client = client
        self._owns_client = client is None
        self.timeout = timeout
        self.follow_redirects = follow_redirects
        self.user_agent = user_agent
        self.logger = logger or StructlogPipelineLogger(__name__)

    async def __aenter__(self) -> "SourceResolver":
        self._get_client()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=self.follow_redirects,
                headers={"User-Agent": self.user_agent},
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if this resolver created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def resolve(self, item: str) -> bytes:
        """Return the raw bytes behind ``item``.

        Raises:
            FetchError: on network failure, non-2xx status or file read failure
            NotAnImageError: if a remote response is not an image
        """
        if is_remote(item):
            return await self.fetch(item)
        return await self.read_local(item)

    async def fetch(self, url: str) -> bytes:
        """GET ``url`` and return the body.

        Headers are checked before the body is read, so a non-image payload
        is never downloaded in full.
        """
        client = self._get_client()
        try:
            async with client.stream("GET", url) as response:
                if not response.is_success:
                    raise FetchError(url, f"HTTP {response.status_code}")
                assert_image(url, response.headers, self.logger)
                return await response.aread()
        except httpx.HTTPError as e:
            raise FetchError(url, str(e) or type(e).__name__, cause=e) from e

    async def read_local(self, path: str) -> bytes:
        """Read a local file in full."""
        try:
            return await anyio.Path(path).read_bytes()
        except OSError as e:
            raise FetchError(path, e.strerror or str(e), cause=e) from e
