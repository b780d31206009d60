"""Vector asset loading.

The loader resolves an Entry to its asset path, fetches the raw markup
from an HTTP(S) base URL or a local directory, and returns a sanitized
VectorDocument.

Fetch failures are errors (NetworkError); unparseable markup is not: the
loader logs it and hands back an empty document so the rendering path
never sees a parse exception.

Example:
    Load strokes for a normalized entry::

        from kanji_lib.assets.loader import AssetLoader

        loader = AssetLoader('https://example.org/static/')
        strokes = loader.load_strokes(entry)
        print(f"{entry.chu}: {len(strokes)} strokes")
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from urllib.parse import urljoin

import requests

from ..config import HTTP_BASE_DELAY, HTTP_MAX_RETRIES, HTTP_TIMEOUT
from ..domain.document import StrokePath, VectorDocument
from ..domain.entry import Entry, codepoint_hex, default_asset_path
from ..errors import ConfigurationError, NetworkError, ParseError
from .extractor import extract_strokes
from .sanitize import parse_document

logger = logging.getLogger(__name__)

SVG_ACCEPT = 'image/svg+xml,application/xml;q=0.9,*/*;q=0.5'


def resolve_asset_path(target: Entry | str) -> str:
    """Resolve the relative asset path for an entry or an explicit path.

    The entry's explicit ``svg.path`` wins, then the path derived from
    ``svg.codepoint_hex``, then the path derived from the character.

    Raises:
        ConfigurationError: If no path can be resolved.
    """
    if isinstance(target, str):
        path = target.strip()
    else:
        path = (target.svg.path
                or default_asset_path(target.svg.codepoint_hex)
                or default_asset_path(codepoint_hex(target.chu)))
    if not path:
        raise ConfigurationError("no asset path for entry without a character")
    return path


def _is_url(base: str) -> bool:
    return base.startswith(('http://', 'https://'))


class AssetLoader:
    """Fetch and sanitize per-character vector assets.

    Attributes:
        base: HTTP(S) base URL or local directory the asset paths are
            relative to.
        timeout: Seconds before an HTTP request times out.
        max_retries: Attempts for 429/5xx responses and connection errors.
        base_delay: Base delay in seconds for exponential backoff.
        session: requests.Session used for HTTP fetches.
    """

    def __init__(self, base: str | Path, session: requests.Session | None = None,
                 timeout: float = HTTP_TIMEOUT, max_retries: int = HTTP_MAX_RETRIES,
                 base_delay: float = HTTP_BASE_DELAY):
        self.base = str(base)
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.base_delay = base_delay
        if session is None:
            session = requests.Session()
            session.headers['Accept'] = SVG_ACCEPT
        self.session = session

    @property
    def is_remote(self) -> bool:
        return _is_url(self.base)

    def locate(self, target: Entry | str) -> str:
        """Full URL or filesystem path of the asset for ``target``."""
        rel = resolve_asset_path(target)
        if _is_url(rel):
            return rel
        if self.is_remote:
            base = self.base if self.base.endswith('/') else self.base + '/'
            return urljoin(base, rel.lstrip('/'))
        return str(Path(self.base) / rel.lstrip('/'))

    def _get_with_retry(self, url: str) -> requests.Response:
        last_exception = None
        for attempt in range(self.max_retries):
            try:
                response = self.session.get(url, timeout=self.timeout)
            except (requests.ConnectionError, requests.Timeout) as e:
                last_exception = e
                logger.warning("Connection error on %s: %s (attempt %d/%d)",
                               url, e, attempt + 1, self.max_retries)
            else:
                if response.status_code != 429 and response.status_code < 500:
                    return response
                last_exception = None
                logger.warning("HTTP %d on %s (attempt %d/%d)",
                               response.status_code, url, attempt + 1, self.max_retries)
                if attempt == self.max_retries - 1:
                    return response
            if attempt < self.max_retries - 1:
                time.sleep(self.base_delay * (2 ** attempt))
        raise NetworkError(f"Load SVG failed: {last_exception}", cause=last_exception, url=url)

    def fetch_markup(self, target: Entry | str) -> str:
        """Fetch the raw markup for an entry or asset path.

        Raises:
            ConfigurationError: If no asset path can be resolved.
            NetworkError: On transport failure or a non-success status.
        """
        location = self.locate(target)
        if self.is_remote or _is_url(location):
            try:
                response = self._get_with_retry(location)
            except requests.RequestException as e:
                raise NetworkError(f"Load SVG failed: {e}", cause=e, url=location) from e
            if not response.ok:
                raise NetworkError(f"Load SVG failed: HTTP {response.status_code}",
                                   status=response.status_code, url=location)
            return response.content.decode('utf-8', errors='replace')

        try:
            return Path(location).read_text(encoding='utf-8')
        except FileNotFoundError as e:
            raise NetworkError(f"Load SVG failed: {location} not found",
                               status=404, cause=e, url=location) from e
        except OSError as e:
            raise NetworkError(f"Load SVG failed: {e}", cause=e, url=location) from e

    def load_asset(self, target: Entry | str) -> VectorDocument:
        """Fetch and sanitize an asset, degrading to an empty document on bad markup.

        Raises:
            ConfigurationError: If no asset path can be resolved.
            NetworkError: If the fetch fails.
        """
        markup = self.fetch_markup(target)
        try:
            return parse_document(markup)
        except ParseError as e:
            logger.warning("Unusable vector markup for %s: %s", resolve_asset_path(target), e)
            return VectorDocument.empty()

    def load_strokes(self, entry: Entry | str) -> list[StrokePath]:
        """Load an asset and extract its strokes.

        The handles point into a freshly loaded document, reachable as
        ``stroke.document``.

        Raises:
            ConfigurationError: If no asset path can be resolved.
            NetworkError: If the fetch fails.
        """
        return extract_strokes(self.load_asset(entry))

    async def load_strokes_async(self, entry: Entry | str) -> list[StrokePath]:
        """load_strokes() run off the event loop."""
        return await asyncio.to_thread(self.load_strokes, entry)
