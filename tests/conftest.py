import threading

import pytest

from sitecrawl.domain.config import CrawlerConfig
from sitecrawl.domain.document import Document
from sitecrawl.exceptions import HttpStatusError


def page_html(links=(), article=True, title="Page"):
    anchors = "".join(f'<a href="{href}">link</a>' for href in links)
    body = f"<article><h1>{title}</h1><p>Body of {title}</p></article>" if article else "<p>no article</p>"
    return f"<html><head><title>{title}</title></head><body>{body}{anchors}</body></html>"


class FakeFetcher:
    """In-memory site: URL -> HTML. Unknown URLs fail like a 404."""

    def __init__(self, pages):
        self.pages = dict(pages)
        self.calls = []
        self._lock = threading.Lock()

    def fetch(self, url):
        with self._lock:
            self.calls.append(url)
        if url not in self.pages:
            raise HttpStatusError(url, 404)
        return Document.from_html(url, self.pages[url], status_code=200)


class RecordingProcessor:
    """Returns a record for every page and remembers what it saw."""

    def __init__(self, seen=None, lock=None, result=True):
        self.seen = seen if seen is not None else []
        self.lock = lock or threading.Lock()
        self.result = result

    def process(self, document):
        with self.lock:
            self.seen.append(document.url)
        if not self.result:
            return None
        return {"title": document.soup.title.get_text() if document.soup.title else None}


@pytest.fixture
def make_config(tmp_path):
    def _make(root_url="http://site.test/", max_depth=2, dump_period=100, **kwargs):
        kwargs.setdefault("politeness_delay", 0)
        kwargs.setdefault("worker_backoff", 0.001)
        kwargs.setdefault("output_dir", str(tmp_path))
        return CrawlerConfig(root_url=root_url, max_depth=max_depth, dump_period=dump_period, **kwargs)
    return _make


@pytest.fixture
def recording_processors():
    def _make(count=3, result=True):
        seen = []
        lock = threading.Lock()
        return [RecordingProcessor(seen, lock, result) for _ in range(count)], seen
    return _make


@pytest.fixture
def fake_site():
    """Build a FakeFetcher from {url: [hrefs]}; URLs left out of the map fail to fetch."""
    def _make(links_by_url, articles=True):
        return FakeFetcher({url: page_html(links, article=articles, title=url) for url, links in links_by_url.items()})
    return _make
