"""Crawl result data model."""
from datetime import datetime
from pathlib import Path
from typing import NamedTuple, Optional


class CrawlResult(NamedTuple):
    """Result of a crawl operation.

    Lets callers log what happened without re-reading the results file.
    """
    pages_crawled: int
    """Number of pages successfully fetched and handed to the workers"""

    records_collected: int
    """Number of records accepted from the workers"""

    crawled_sites: int
    """Number of URLs claimed by the frontier (fetched or failed)"""

    started_at: datetime
    finished_at: datetime

    results_path: Optional[Path] = None
    """Path of the final results file, None if it could not be written"""
