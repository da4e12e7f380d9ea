import logging
from typing import Dict, List
from urllib.parse import urldefrag, urljoin, urlparse

from sitecrawl.domain.document import Document

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = ("http", "https")


def strip_fragment(url: str) -> str:
    """Drop the `#...` suffix; it only points inside the same page."""
    return urldefrag(url)[0]


def is_well_formed(url: str) -> bool:
    """Check that `url` is an absolute http(s) URL that parses cleanly."""
    if not url or any(ch.isspace() for ch in url):
        return False
    try:
        parsed = urlparse(url)
        # Accessing .port validates the netloc's port part.
        parsed.port
    except ValueError:
        return False
    return parsed.scheme in _ALLOWED_SCHEMES and bool(parsed.hostname)


class LinkExtractor:
    """Collect the same-site links of a document.

    Same-site means the absolute, fragment-free URL starts with the root URL.
    Anything else is dropped silently: it is a filtering rule, not an error.
    """

    def __init__(self, root_url: str):
        self.root_url = root_url

    def _base_url(self, document: Document) -> str:
        base = document.soup.find("base", href=True)
        if base is not None:
            return urljoin(document.url, base.get("href").strip())
        return document.url

    def is_same_site(self, url: str) -> bool:
        return url.startswith(self.root_url)

    def extract_links(self, document: Document) -> List[str]:
        """Return the distinct same-site links in the order they appear on the page."""
        base_url = self._base_url(document)
        urls: Dict[str, None] = {}
        for a in document.soup.find_all("a", href=True):
            href = a.get("href").strip()
            try:
                abs_url = strip_fragment(urljoin(base_url, href))
            except ValueError:
                logger.debug("Skipping (malformed) %r on %s", href, document.url)
                continue
            if not is_well_formed(abs_url):
                logger.debug("Skipping (malformed) %s on %s", abs_url, document.url)
                continue
            if not self.is_same_site(abs_url):
                logger.debug("Skipping (external) %s -> not under %s", abs_url, self.root_url)
                continue
            urls.setdefault(abs_url, None)
        return list(urls)
