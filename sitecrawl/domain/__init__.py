"""Domain objects for SiteCrawl - explicit re-exports to satisfy linters."""
from .config import CrawlerConfig as CrawlerConfig
from .crawl_result import CrawlResult as CrawlResult
from .crawl_state import CrawlState as CrawlState
from .document import Document as Document
from .frontier import Frontier as Frontier
from .mailbox import DocumentMailbox as DocumentMailbox
from .result_log import ResultLog as ResultLog

__all__ = ["CrawlerConfig", "CrawlResult", "CrawlState", "Document", "Frontier", "DocumentMailbox", "ResultLog"]
