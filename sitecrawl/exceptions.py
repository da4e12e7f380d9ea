"""Custom exceptions for SiteCrawl."""


class ConfigError(Exception):
    """Raised when crawl settings are missing or out of range."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid config '{field}': {reason}")


class CrawlStateError(Exception):
    """Raised when a crawl operation is invoked in the wrong lifecycle state."""


class FetchError(Exception):
    """Base class for every failure to turn a URL into a document."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(reason)


class HttpFetchError(FetchError):
    """Raised when an HTTP fetch fails due to network/transport errors."""

    def __init__(self, url: str, original: Exception):
        self.original = original
        super().__init__(url, f"HTTP fetch failed for {url}: {original}")


class HttpStatusError(FetchError):
    """Raised when the server answers with a non-2xx status."""

    def __init__(self, url: str, status_code: int):
        self.status_code = status_code
        super().__init__(url, f"Non-success status for {url}: {status_code}")


class DocumentParseError(FetchError):
    """Raised when a response body cannot be parsed into a document."""

    def __init__(self, url: str, original: Exception):
        self.original = original
        super().__init__(url, f"Could not parse {url}: {original}")
