import logging
import time

logger = logging.getLogger(__name__)

URL_RECORD_KEY = "url"


class CrawlWorker:
    """Drains documents from the coordinator and turns them into records.

    A worker only knows its id, its site processor and the coordinator; all
    shared state stays behind the coordinator's operations. `run()` is meant
    to be the target of a thread.
    """

    def __init__(self, worker_id: int, processor, coordinator, backoff_seconds: float = 0.01):
        self.worker_id = worker_id
        self.processor = processor
        self.coordinator = coordinator
        self.backoff_seconds = backoff_seconds
        self.documents_processed = 0

    def process_document(self, document) -> None:
        try:
            record = self.processor.process(document)
        except Exception as e:
            logger.error("Worker %d failed to process %s: %s", self.worker_id, document.url, e, exc_info=True)
            return
        finally:
            self.documents_processed += 1

        if record is None:
            logger.debug("Worker %d found nothing on %s", self.worker_id, document.url)
            return

        record[URL_RECORD_KEY] = document.url
        self.coordinator.submit_record(self.worker_id, record)

    def run(self) -> None:
        logger.debug("Worker %d started", self.worker_id)
        while not self.coordinator.is_finished():
            document = self.coordinator.take_document()
            if document is None:
                time.sleep(self.backoff_seconds)
                continue
            self.process_document(document)
        logger.debug("Worker %d stopped after %d documents", self.worker_id, self.documents_processed)
