from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sitecrawl.exceptions import ConfigError


@dataclass(frozen=True)
class CrawlerConfig:
    """Settings for one crawl.

    `root_url` doubles as the same-site prefix: only links starting with it
    are followed. `dump_period` is the number of accepted records between
    periodic snapshots.
    """

    root_url: str
    max_depth: int
    dump_period: int
    worker_count: int = 1
    politeness_delay: float = 0.01
    worker_backoff: float = 0.01
    output_dir: str = "."
    config_path: Optional[str] = None

    def __post_init__(self):
        if self.root_url is None or not str(self.root_url).strip():
            raise ConfigError("root_url", "is required")
        if int(self.max_depth) < 0:
            raise ConfigError("max_depth", f"must be >= 0, got {self.max_depth}")
        if int(self.dump_period) <= 0:
            raise ConfigError("dump_period", f"must be > 0, got {self.dump_period}")
        if int(self.worker_count) < 0:
            raise ConfigError("worker_count", f"must be >= 0, got {self.worker_count}")
        if float(self.politeness_delay) < 0:
            raise ConfigError("politeness_delay", "must not be negative")
        if float(self.worker_backoff) < 0:
            raise ConfigError("worker_backoff", "must not be negative")

    def __repr__(self):
        return f"<CrawlerConfig root={self.root_url} depth={self.max_depth} dump_period={self.dump_period}>"
