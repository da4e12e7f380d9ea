import logging
from typing import Any, Callable, Dict, Optional, Protocol

from bs4 import BeautifulSoup

from sitecrawl.domain.document import Document

logger = logging.getLogger(__name__)


class SiteProcessor(Protocol):
    """Inspect a document and return a record, or None if it holds nothing of interest.

    One instance is given to each worker; implementations should not rely on
    state carried between calls.
    """

    def process(self, document: Document) -> Optional[Dict[str, Any]]: ...


class ArticleProcessor:
    """Pull a news-style article out of a page.

    A page counts as an article when it has an `<article>` element or
    declares `og:type` = `article`. The record holds the title, the first
    headline, the publication time if one is marked up, and the article text
    with navigation and boilerplate removed.
    """

    # Elements that never carry article content
    UNWANTED_TAGS = [
        'script', 'style', 'noscript',
        'nav', 'header', 'footer',
        'aside', 'form', 'button',
        'iframe', 'embed', 'object',
        'svg', 'canvas',
    ]

    # class/id fragments of navigation and boilerplate blocks
    UNWANTED_PATTERNS = [
        'nav', 'menu', 'sidebar', 'advertisement', 'banner', 'popup',
        'breadcrumb', 'social', 'share', 'cookie', 'related', 'promo',
    ]

    def __init__(
        self,
        min_text_length: int = 1,
        soup_factory: Optional[Callable[[str], BeautifulSoup]] = None,
    ):
        self.min_text_length = min_text_length
        self._soup_factory = soup_factory or (lambda html: BeautifulSoup(html, "html.parser"))

    def _is_article(self, soup: BeautifulSoup) -> bool:
        if soup.find("article") is not None:
            return True
        og_type = soup.find("meta", attrs={"property": "og:type"})
        return og_type is not None and (og_type.get("content") or "").strip().lower() == "article"

    def _published(self, soup: BeautifulSoup) -> Optional[str]:
        meta = soup.find("meta", attrs={"property": "article:published_time"})
        if meta is not None and meta.get("content"):
            return meta.get("content").strip()
        time_tag = soup.find("time", datetime=True)
        if time_tag is not None:
            return time_tag.get("datetime").strip()
        return None

    def _content_text(self, soup: BeautifulSoup) -> str:
        # Work on a copy so the shared document tree is never mutated
        soup = self._soup_factory(str(soup.find("article") or soup.body or soup))

        for tag in self.UNWANTED_TAGS:
            for element in soup.find_all(tag):
                element.decompose()

        for pattern in self.UNWANTED_PATTERNS:
            for element in soup.find_all(class_=lambda x: x and pattern in x.lower()):
                element.decompose()
            for element in soup.find_all(id=lambda x: x and pattern in x.lower()):
                element.decompose()

        return soup.get_text(separator="\n", strip=True)

    def process(self, document: Document) -> Optional[Dict[str, Any]]:
        soup = document.soup
        if not self._is_article(soup):
            return None

        text = self._content_text(soup)
        if len(text) < self.min_text_length:
            logger.debug("Article on %s is too short (%d chars)", document.url, len(text))
            return None

        title = soup.title.get_text(strip=True) if soup.title else None
        h1 = soup.find("h1")
        return {
            "title": title,
            "headline": h1.get_text(strip=True) if h1 else title,
            "published": self._published(soup),
            "text": text,
        }
