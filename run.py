import argparse
import logging
from typing import List, Optional

from sitecrawl import config
from sitecrawl.configs import load_crawl_file
from sitecrawl.container import Container, crawl_defaults
from sitecrawl.exceptions import ConfigError

logger = logging.getLogger("sitecrawl")


def _parse_args(argv: Optional[List[str]]):
    parser = argparse.ArgumentParser(description="Crawl a site and extract records from its pages.")
    parser.add_argument("config_file", nargs="?", default=None,
                        help="YAML crawl file; its values override SITECRAWL_* environment settings")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None, container: Optional[Container] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, config.log_level(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s",
    )

    container = container or Container()
    try:
        data = load_crawl_file(args.config_file) if args.config_file else {}
        crawl_config = container.config_parser().parse(
            data=data,
            defaults=crawl_defaults(container),
            config_path=args.config_file,
        )
    except ConfigError as e:
        logger.error("Cannot start crawl: %s", e)
        return 2

    processors = [container.site_processor() for _ in range(crawl_config.worker_count)]
    coordinator = container.crawl_coordinator(
        config=crawl_config,
        processors=processors,
        checkpoint_writer=container.checkpoint_writer(output_dir=crawl_config.output_dir),
    )
    result = coordinator.crawl()
    logger.info(
        "Crawled %d pages of %s, collected %d records -> %s",
        result.pages_crawled,
        crawl_config.root_url,
        result.records_collected,
        result.results_path,
    )
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
