import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DUMP_FILENAME = "crawl-dump-{count}-{timestamp}.json"
FINAL_RESULTS_FILENAME = "crawl-results.json"


def _json_default(value: Any):
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class CheckpointWriter:
    """Serialize crawl snapshots to JSON files.

    Every snapshot is complete: a periodic dump repeats all records accepted
    so far rather than only the ones since the previous dump. Writes are best
    effort; failures are logged and reported as a None path.
    """

    def __init__(self, output_dir: str = "."):
        self.output_dir = Path(output_dir)

    @staticmethod
    def build_snapshot(
        root_url: str,
        crawled_sites: int,
        started_at: Optional[datetime],
        finished_at: Optional[datetime],
        records: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        # "stated_at" is the established key name of the results format.
        return {
            "root_url": root_url,
            "crawled_sites": crawled_sites,
            "stated_at": started_at,
            "finished_at": finished_at,
            "data": records,
        }

    def dump_path(self, record_count: int, timestamp: datetime) -> Path:
        return self.output_dir / DUMP_FILENAME.format(count=record_count, timestamp=timestamp.isoformat())

    def final_path(self) -> Path:
        return self.output_dir / FINAL_RESULTS_FILENAME

    def dump(self, snapshot: Dict[str, Any], record_count: int, timestamp: datetime) -> Optional[Path]:
        """Write a periodic snapshot named after the record count and time."""
        path = self._write(self.dump_path(record_count, timestamp), snapshot)
        if path is not None:
            logger.info("Created a dump of %d records at %s", record_count, path)
        return path

    def write_final(self, snapshot: Dict[str, Any]) -> Optional[Path]:
        path = self._write(self.final_path(), snapshot)
        if path is not None:
            logger.info("Stored %d records in %s", len(snapshot.get("data") or []), path)
        return path

    def _write(self, path: Path, snapshot: Dict[str, Any]) -> Optional[Path]:
        try:
            payload = json.dumps(snapshot, default=_json_default, ensure_ascii=False)
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(payload)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Could not write snapshot %s: %s", path, e, exc_info=True)
            return None
        return path
