from enum import Enum


class CrawlState(str, Enum):
    """Lifecycle of a single crawl. Transitions only move forward."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    TERMINATING = "terminating"
    FINISHED = "finished"
