"""Dependency injection container for the application."""
from dependency_injector import containers, providers
import requests

from sitecrawl import config as env
from sitecrawl.services.checkpoint_writer import CheckpointWriter
from sitecrawl.services.crawl_coordinator import CrawlCoordinator
from sitecrawl.services.crawler_config_parser import CrawlerConfigParser
from sitecrawl.services.fetcher import HttpDocumentFetcher
from sitecrawl.services.http_service import HttpService
from sitecrawl.services.site_processor import ArticleProcessor


# Environment variables used by the container (read via `sitecrawl.config` helpers).
#
# SITECRAWL_ROOT_URL (str | optional)
#   URL the crawl starts from; also the same-site prefix for followed links.
#
# SITECRAWL_MAX_DEPTH (int, default: 10)
#   Number of link hops followed from the root. 0 fetches only the root.
#
# SITECRAWL_DUMP_PERIOD (int, default: 200)
#   A full snapshot is written every time this many records have been accepted.
#
# SITECRAWL_WORKER_COUNT (int, default: 10)
#   Number of worker threads (one site processor each).
#
# SITECRAWL_POLITENESS_DELAY (float seconds, default: 0.01)
#   Pause before every page fetch.
#
# SITECRAWL_WORKER_BACKOFF (float seconds, default: 0.01)
#   Pause of an idle worker before asking for a document again.
#
# SITECRAWL_OUTPUT_DIR (str, default: ".")
#   Directory receiving crawl-dump-*.json and crawl-results.json.
#
# USER_AGENT (str, default: "SiteCrawl/0.1")
#   User-Agent header for outbound HTTP requests.
#
# HTTP_TIMEOUT (int seconds, default: 10)
#   Timeout for outbound HTTP requests; a hanging fetch stalls the traversal
#   for at most this long.
ENV = {
    "ROOT_URL": env.root_url(),
    "MAX_DEPTH": env.DEFAULT_MAX_DEPTH,
    "DUMP_PERIOD": env.DEFAULT_DUMP_PERIOD,
    "WORKER_COUNT": env.DEFAULT_WORKER_COUNT,
    "POLITENESS_DELAY": env.POLITENESS_DELAY,
    "WORKER_BACKOFF": env.WORKER_BACKOFF,
    "OUTPUT_DIR": env.output_dir(),
    "USER_AGENT": env.USER_AGENT,
    "HTTP_TIMEOUT": env.HTTP_TIMEOUT,
}


class Container(containers.DeclarativeContainer):
    """Dependency injection container for SiteCrawl."""

    # Configuration
    config = providers.Configuration(default=ENV)

    # Services - Singleton instances
    http_service = providers.Singleton(
        HttpService,
        user_agent=config.USER_AGENT.as_(str),
        http_client=providers.Object(requests.get),
        timeout=config.HTTP_TIMEOUT.as_(int)
    )

    document_fetcher = providers.Singleton(
        HttpDocumentFetcher,
        http_service=http_service,
    )

    config_parser = providers.Singleton(
        CrawlerConfigParser
    )

    # One processor per worker, so a fresh instance on every call
    site_processor = providers.Factory(
        ArticleProcessor
    )

    checkpoint_writer = providers.Factory(
        CheckpointWriter
    )

    # Per-crawl object; callers supply config= and processors=
    crawl_coordinator = providers.Factory(
        CrawlCoordinator,
        fetcher=document_fetcher,
    )


def crawl_defaults(container: Container) -> dict:
    """Crawl settings from the environment, keyed like CrawlerConfig fields."""
    cfg = container.config
    return {
        "root_url": cfg.ROOT_URL(),
        "max_depth": cfg.MAX_DEPTH(),
        "dump_period": cfg.DUMP_PERIOD(),
        "worker_count": cfg.WORKER_COUNT(),
        "politeness_delay": cfg.POLITENESS_DELAY(),
        "worker_backoff": cfg.WORKER_BACKOFF(),
        "output_dir": cfg.OUTPUT_DIR(),
    }
