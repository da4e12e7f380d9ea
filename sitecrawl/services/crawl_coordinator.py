import logging
import threading
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Tuple

from sitecrawl.domain.config import CrawlerConfig
from sitecrawl.domain.crawl_result import CrawlResult
from sitecrawl.domain.crawl_state import CrawlState
from sitecrawl.domain.document import Document
from sitecrawl.domain.frontier import Frontier
from sitecrawl.domain.mailbox import DocumentMailbox
from sitecrawl.domain.result_log import Record, ResultLog
from sitecrawl.exceptions import CrawlStateError, FetchError
from sitecrawl.services.checkpoint_writer import CheckpointWriter
from sitecrawl.services.crawl_worker import CrawlWorker
from sitecrawl.services.link_extractor import LinkExtractor

logger = logging.getLogger(__name__)

# (remaining links of a page, depth of that page)
_Frame = Tuple[Iterator[str], int]


class CrawlCoordinator:
    """Runs one crawl: traversal on the calling thread, extraction on a worker pool.

    The coordinator exclusively owns the frontier, the document mailbox and the
    result log for the lifetime of one crawl. Workers only reach them through
    `take_document()`, `submit_record()` and `is_finished()`. Create a new
    coordinator for every crawl.
    """

    def __init__(
        self,
        config: CrawlerConfig,
        fetcher,
        processors: List,
        *,
        link_extractor: Optional[LinkExtractor] = None,
        checkpoint_writer: Optional[CheckpointWriter] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.config = config
        self.fetcher = fetcher
        self.link_extractor = link_extractor or LinkExtractor(config.root_url)
        self.checkpoint_writer = checkpoint_writer or CheckpointWriter(config.output_dir)
        self._clock = clock

        self.frontier = Frontier()
        self.mailbox = DocumentMailbox()
        self.result_log = ResultLog()

        self._state = CrawlState.NOT_STARTED
        self._state_lock = threading.Lock()
        self._results_lock = threading.Lock()
        self._traversal_complete = threading.Event()
        self._started_at: Optional[datetime] = None
        self._finished_at: Optional[datetime] = None
        self._pages_crawled = 0

        self.workers = self._init_workers(processors)
        self._threads: List[threading.Thread] = []

    @property
    def root_url(self) -> str:
        return self.config.root_url

    @property
    def state(self) -> CrawlState:
        with self._state_lock:
            return self._state

    @property
    def started_at(self) -> Optional[datetime]:
        return self._started_at

    @property
    def finished_at(self) -> Optional[datetime]:
        return self._finished_at

    def _set_state(self, state: CrawlState) -> None:
        with self._state_lock:
            self._state = state
        logger.debug("Crawl of %s is now %s", self.root_url, state.value)

    def _init_workers(self, processors) -> List[CrawlWorker]:
        workers = []
        worker_id = 1
        for processor in processors or []:
            if processor is None:
                continue
            workers.append(CrawlWorker(worker_id, processor, self, backoff_seconds=self.config.worker_backoff))
            worker_id += 1
        if not workers:
            logger.warning("No site processors given; fetched pages of %s will not be processed", self.root_url)
        return workers

    def _start_workers(self) -> None:
        for worker in self.workers:
            thread = threading.Thread(target=worker.run, name=f"crawl-worker-{worker.worker_id}", daemon=True)
            self._threads.append(thread)
            thread.start()

    def _wait_for_workers(self) -> None:
        for thread in self._threads:
            thread.join()

    def crawl(self) -> CrawlResult:
        with self._state_lock:
            if self._state is not CrawlState.NOT_STARTED:
                raise CrawlStateError(f"Crawl of {self.root_url} already {self._state.value}")
            self._state = CrawlState.RUNNING

        self._started_at = self._clock()
        self.frontier.try_claim(self.root_url)
        logger.info(
            "Starting crawl of %s (max_depth=%d, workers=%d, config=%s)",
            self.root_url,
            self.config.max_depth,
            len(self.workers),
            self.config.config_path or "environment",
        )

        self._start_workers()
        try:
            self._traverse()
        finally:
            self._terminate()
            self._wait_for_workers()

        self._set_state(CrawlState.FINISHED)
        results_path = self._store_final_results()
        logger.info(
            "Crawl of %s finished: %d pages, %d records",
            self.root_url,
            self._pages_crawled,
            len(self.result_log),
        )
        return CrawlResult(
            pages_crawled=self._pages_crawled,
            records_collected=len(self.result_log),
            crawled_sites=len(self.frontier),
            started_at=self._started_at,
            finished_at=self._finished_at,
            results_path=results_path,
        )

    def _terminate(self) -> None:
        self._set_state(CrawlState.TERMINATING)
        self._finished_at = self._clock()
        self._traversal_complete.set()

    def _apply_politeness(self) -> None:
        time.sleep(self.config.politeness_delay)

    def _visit(self, url: str, depth: int) -> Optional[Document]:
        """Fetch one claimed URL and hand the document to the workers.

        Returns None when the fetch fails; the URL stays claimed and is not
        retried.
        """
        self._apply_politeness()
        try:
            document = self.fetcher.fetch(url)
        except FetchError as e:
            logger.warning("Could not fetch %s: %s", url, e)
            return None
        except Exception as e:
            logger.error("Fetch error for %s: %s", url, e, exc_info=True)
            return None

        self.mailbox.put(document)
        self._pages_crawled += 1
        logger.info("[depth=%d] crawled %s", depth, document.url)
        return document

    def _push_links(self, stack: List[_Frame], document: Optional[Document], depth: int) -> None:
        if document is None or depth >= self.config.max_depth:
            return
        links = self.link_extractor.extract_links(document)
        stack.append((iter(links), depth))

    def _traverse(self) -> None:
        """Depth-first traversal from the root with an explicit stack.

        A link is claimed only when the previous sibling's subtree is done,
        which is the same visiting order a recursive walk produces.
        """
        stack: List[_Frame] = []
        self._push_links(stack, self._visit(self.root_url, 0), 0)

        while stack:
            links, depth = stack[-1]
            url = next(links, None)
            if url is None:
                stack.pop()
                continue
            if not self.frontier.try_claim(url):
                logger.debug("Skipping (visited) %s", url)
                continue
            document = self._visit(url, depth + 1)
            self._push_links(stack, document, depth + 1)

    def take_document(self) -> Optional[Document]:
        """Hand one pending document to a worker, or None if none is waiting."""
        return self.mailbox.take()

    def submit_record(self, worker_id: int, record: Record) -> None:
        """Accept a record from a worker; dump a snapshot every `dump_period` records."""
        with self._results_lock:
            count = self.result_log.append(record)
            logger.info("[#%d](worker: %d) has successfully processed %s", count, worker_id, record.get("url"))
            if count % self.config.dump_period == 0:
                self._dump_so_far(count)

    def is_finished(self) -> bool:
        return self._traversal_complete.is_set() and self.mailbox.is_empty()

    def _snapshot(self, finished_at: Optional[datetime]) -> dict:
        return self.checkpoint_writer.build_snapshot(
            root_url=self.root_url,
            crawled_sites=len(self.frontier),
            started_at=self._started_at,
            finished_at=finished_at,
            records=self.result_log.records(),
        )

    def _dump_so_far(self, count: int) -> Optional[Path]:
        # Caller holds _results_lock.
        now = self._clock()
        return self.checkpoint_writer.dump(self._snapshot(now), count, now)

    def _store_final_results(self) -> Optional[Path]:
        with self._results_lock:
            return self.checkpoint_writer.write_final(self._snapshot(self._finished_at))
