from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

from bs4 import BeautifulSoup

from sitecrawl.domain.document import Document
from sitecrawl.exceptions import DocumentParseError, HttpStatusError

logger = logging.getLogger(__name__)


class DocumentFetcher(Protocol):
    """Turn a URL into a parsed document.

    Implementations raise `FetchError` (or a subclass) on any failure so the
    traversal can log it and move on.
    """

    def fetch(self, url: str) -> Document: ...


class HttpDocumentFetcher:
    """Fetch over HTTP and parse the body with BeautifulSoup.

    The document carries the final URL after redirects, which is also the
    base for resolving relative links later.
    """

    def __init__(self, http_service, soup_factory: Optional[Callable[[str], BeautifulSoup]] = None):
        self._http_service = http_service
        self._soup_factory = soup_factory or (lambda html: BeautifulSoup(html, "html.parser"))

    def fetch(self, url: str) -> Document:
        response = self._http_service.fetch(url)

        sc = int(response.status_code)
        if sc < 200 or sc >= 300:
            raise HttpStatusError(url, sc)

        try:
            soup = self._soup_factory(response.text or "")
        except Exception as e:
            raise DocumentParseError(url, e) from e

        location = response.url or url
        logger.debug("Parsed %s (%s, %s)", location, sc, response.content_type)
        return Document(location, soup, status_code=sc)
