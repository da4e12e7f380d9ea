import json
import logging
from collections import Counter
from unittest.mock import MagicMock

import pytest

from sitecrawl.domain.crawl_state import CrawlState
from sitecrawl.domain.document import Document
from sitecrawl.exceptions import CrawlStateError
from sitecrawl.services.checkpoint_writer import CheckpointWriter
from sitecrawl.services.crawl_coordinator import CrawlCoordinator

R = "http://site.test/"
A = "http://site.test/a"
B = "http://site.test/b"
C = "http://site.test/c"
D = "http://site.test/d"


def _dumps(path):
    return sorted(path.glob("crawl-dump-*.json"))


def _load(path):
    return json.loads(path.read_text(encoding="utf-8"))


def test_scenario_depth_one_with_back_link(make_config, fake_site, recording_processors):
    fetcher = fake_site({R: ["/a", "/b"], A: ["/", "/c"], B: [], C: []})
    processors, _ = recording_processors(2)
    coordinator = CrawlCoordinator(make_config(max_depth=1), fetcher, processors)

    result = coordinator.crawl()

    assert sorted(fetcher.calls) == sorted([R, A, B])
    assert len(coordinator.frontier) == 3
    assert result.crawled_sites == 3
    assert result.pages_crawled == 3


def test_url_reachable_twice_is_fetched_once(make_config, fake_site, recording_processors):
    fetcher = fake_site({R: ["/a", "/b"], A: ["/d"], B: ["/d"], D: []})
    processors, _ = recording_processors(2)
    CrawlCoordinator(make_config(max_depth=2), fetcher, processors).crawl()

    assert Counter(fetcher.calls)[D] == 1
    assert sorted(fetcher.calls) == sorted([R, A, B, D])


def test_fragments_are_the_same_url(make_config, fake_site, recording_processors):
    fetcher = fake_site({R: ["/a#one", "/a#two", "/a"], A: []})
    processors, _ = recording_processors(1)
    CrawlCoordinator(make_config(max_depth=3), fetcher, processors).crawl()

    assert fetcher.calls == [R, A]


def test_max_depth_zero_fetches_only_root(make_config, fake_site, recording_processors):
    fetcher = fake_site({R: ["/a", "/b"], A: [], B: []})
    processors, _ = recording_processors(1)
    result = CrawlCoordinator(make_config(max_depth=0), fetcher, processors).crawl()

    assert fetcher.calls == [R]
    assert result.crawled_sites == 1


def test_pages_beyond_max_depth_are_not_fetched(make_config, fake_site, recording_processors):
    fetcher = fake_site({R: ["/a"], A: ["/b"], B: ["/c"], C: ["/d"], D: []})
    processors, _ = recording_processors(1)
    CrawlCoordinator(make_config(max_depth=2), fetcher, processors).crawl()

    assert fetcher.calls == [R, A, B]


def test_traversal_is_depth_first(make_config, fake_site, recording_processors):
    fetcher = fake_site({R: ["/a", "/b"], A: ["/c"], B: [], C: []})
    processors, _ = recording_processors(1)
    CrawlCoordinator(make_config(max_depth=2), fetcher, processors).crawl()

    assert fetcher.calls == [R, A, C, B]


def test_off_site_links_are_never_fetched(make_config, fake_site, recording_processors):
    root = "http://site.test/news/"
    fetcher = fake_site({
        root: ["/news/a", "/weather", "http://other.test/news/"],
        "http://site.test/news/a": [],
        "http://site.test/weather": [],
        "http://other.test/news/": [],
    })
    processors, _ = recording_processors(1)
    coordinator = CrawlCoordinator(make_config(root_url=root, max_depth=2), fetcher, processors)
    coordinator.crawl()

    assert fetcher.calls == [root, "http://site.test/news/a"]
    assert "http://site.test/weather" not in coordinator.frontier


def test_failed_fetch_is_not_retried_and_not_expanded(make_config, fake_site, recording_processors, caplog):
    # A is missing from the site, so every fetch of it fails
    fetcher = fake_site({R: ["/a", "/b"], B: ["/a"]})
    processors, seen = recording_processors(1)
    coordinator = CrawlCoordinator(make_config(max_depth=3), fetcher, processors)

    caplog.set_level(logging.WARNING)
    result = coordinator.crawl()

    assert Counter(fetcher.calls)[A] == 1
    assert A in coordinator.frontier
    assert result.pages_crawled == 2
    assert sorted(seen) == sorted([R, B])
    assert "Could not fetch http://site.test/a" in caplog.text


def test_unexpected_fetcher_exception_does_not_stop_crawl(make_config, fake_site, recording_processors):
    fetcher = fake_site({R: ["/a", "/b"], B: []})
    original = fetcher.fetch

    def fetch(url):
        if url == A:
            raise RuntimeError("boom")
        return original(url)

    fetcher.fetch = fetch
    processors, _ = recording_processors(1)
    result = CrawlCoordinator(make_config(max_depth=1), fetcher, processors).crawl()

    assert result.pages_crawled == 2


def test_every_document_processed_exactly_once(make_config, fake_site, recording_processors):
    pages = {R: [f"/p{i}" for i in range(40)]}
    for i in range(40):
        pages[f"http://site.test/p{i}"] = [f"/p{(i + 1) % 40}", "/"]
    fetcher = fake_site(pages)
    processors, seen = recording_processors(5)

    coordinator = CrawlCoordinator(make_config(max_depth=2), fetcher, processors)
    result = coordinator.crawl()

    assert result.pages_crawled == 41
    assert len(seen) == 41
    assert sorted(seen) == sorted(set(fetcher.calls))
    assert result.records_collected == 41
    assert coordinator.mailbox.is_empty()


def test_records_carry_source_url(make_config, fake_site, recording_processors, tmp_path):
    fetcher = fake_site({R: ["/a"], A: []})
    processors, _ = recording_processors(1)
    result = CrawlCoordinator(make_config(max_depth=1), fetcher, processors).crawl()

    data = _load(result.results_path)
    assert sorted(r["url"] for r in data["data"]) == [R, A]
    assert data["root_url"] == R
    assert data["crawled_sites"] == 2
    assert data["stated_at"] is not None
    assert data["finished_at"] is not None


def test_dump_period_two_with_three_records(make_config, fake_site, recording_processors, tmp_path):
    fetcher = fake_site({R: ["/a", "/b"], A: [], B: []})
    processors, _ = recording_processors(2)
    result = CrawlCoordinator(make_config(max_depth=1, dump_period=2), fetcher, processors).crawl()

    dumps = _dumps(tmp_path)
    assert len(dumps) == 1
    assert dumps[0].name.startswith("crawl-dump-2-")
    assert len(_load(dumps[0])["data"]) == 2
    assert result.records_collected == 3
    assert len(_load(tmp_path / "crawl-results.json")["data"]) == 3


def test_dump_every_record_holds_full_history(make_config, fake_site, recording_processors, tmp_path):
    fetcher = fake_site({R: ["/a", "/b", "/c"], A: [], B: [], C: []})
    processors, _ = recording_processors(3)
    CrawlCoordinator(make_config(max_depth=1, dump_period=1), fetcher, processors).crawl()

    sizes = sorted(len(_load(p)["data"]) for p in _dumps(tmp_path))
    assert sizes == [1, 2, 3, 4]


def test_no_records_means_no_dumps(make_config, fake_site, recording_processors, tmp_path):
    fetcher = fake_site({R: ["/a", "/b"], A: [], B: []})
    processors, seen = recording_processors(2, result=False)
    result = CrawlCoordinator(make_config(max_depth=1, dump_period=1), fetcher, processors).crawl()

    assert len(seen) == 3
    assert _dumps(tmp_path) == []
    assert result.records_collected == 0
    assert _load(tmp_path / "crawl-results.json")["data"] == []


def test_submit_record_dumps_on_exact_multiples(make_config, tmp_path):
    coordinator = CrawlCoordinator(make_config(dump_period=2), MagicMock(), [])
    for i in range(3):
        coordinator.submit_record(1, {"url": f"http://site.test/{i}"})

    dumps = _dumps(tmp_path)
    assert len(dumps) == 1
    assert [r["url"] for r in _load(dumps[0])["data"]] == ["http://site.test/0", "http://site.test/1"]
    assert len(coordinator.result_log) == 3


def test_checkpoint_failures_do_not_abort_crawl(make_config, fake_site, recording_processors, tmp_path):
    blocker = tmp_path / "blocked"
    blocker.write_text("x")
    fetcher = fake_site({R: ["/a"], A: []})
    processors, _ = recording_processors(1)
    coordinator = CrawlCoordinator(
        make_config(max_depth=1, dump_period=1),
        fetcher,
        processors,
        checkpoint_writer=CheckpointWriter(str(blocker)),
    )

    result = coordinator.crawl()

    assert result.records_collected == 2
    assert result.results_path is None
    assert coordinator.state is CrawlState.FINISHED


def test_not_finished_while_documents_wait(make_config):
    coordinator = CrawlCoordinator(make_config(), MagicMock(), [])
    assert not coordinator.is_finished()

    coordinator.mailbox.put(Document.from_html(R, "<html></html>"))
    coordinator._terminate()
    assert not coordinator.is_finished()

    assert coordinator.take_document() is not None
    assert coordinator.is_finished()


def test_state_transitions_and_timestamps(make_config, fake_site, recording_processors):
    fetcher = fake_site({R: []})
    processors, _ = recording_processors(1)
    coordinator = CrawlCoordinator(make_config(), fetcher, processors)
    assert coordinator.state is CrawlState.NOT_STARTED
    assert coordinator.finished_at is None

    result = coordinator.crawl()

    assert coordinator.state is CrawlState.FINISHED
    assert coordinator.is_finished()
    assert coordinator.started_at <= coordinator.finished_at
    assert result.finished_at == coordinator.finished_at


def test_crawl_cannot_run_twice(make_config, fake_site, recording_processors):
    fetcher = fake_site({R: []})
    processors, _ = recording_processors(1)
    coordinator = CrawlCoordinator(make_config(), fetcher, processors)
    coordinator.crawl()

    with pytest.raises(CrawlStateError):
        coordinator.crawl()


def test_none_processors_are_skipped(make_config, recording_processors):
    processors, _ = recording_processors(2)
    coordinator = CrawlCoordinator(make_config(), MagicMock(), [None, processors[0], None, processors[1]])
    assert [w.worker_id for w in coordinator.workers] == [1, 2]


def test_crawl_without_workers_still_completes(make_config, fake_site, tmp_path):
    fetcher = fake_site({R: ["/a"], A: []})
    coordinator = CrawlCoordinator(make_config(max_depth=1), fetcher, [])

    result = coordinator.crawl()

    assert result.pages_crawled == 2
    assert result.records_collected == 0
    assert len(coordinator.mailbox) == 2
    assert (tmp_path / "crawl-results.json").exists()


def test_links_are_followed_in_page_order(make_config, fake_site, recording_processors):
    Z = "http://site.test/z"
    fetcher = fake_site({R: ["/z", "/a"], Z: ["/a"], A: ["/b"], B: []})
    processors, _ = recording_processors(1)
    CrawlCoordinator(make_config(max_depth=2), fetcher, processors).crawl()

    # /a is first claimed under /z at the depth bound, so /b is never reached
    assert fetcher.calls == [R, Z, A]


class _FirstDumpFailsWriter(CheckpointWriter):
    def __init__(self, output_dir, blocked_dir):
        super().__init__(output_dir)
        self.blocked_dir = blocked_dir
        self.dump_attempts = 0

    def dump_path(self, record_count, timestamp):
        self.dump_attempts += 1
        path = super().dump_path(record_count, timestamp)
        if self.dump_attempts == 1:
            return self.blocked_dir / path.name
        return path


def test_failed_dump_does_not_affect_later_snapshots(make_config, fake_site, recording_processors, tmp_path, caplog):
    blocker = tmp_path / "blocked"
    blocker.write_text("x")
    out = tmp_path / "out"
    writer = _FirstDumpFailsWriter(str(out), blocker)
    fetcher = fake_site({R: ["/a", "/b"], A: [], B: []})
    processors, _ = recording_processors(2)
    coordinator = CrawlCoordinator(
        make_config(max_depth=1, dump_period=1),
        fetcher,
        processors,
        checkpoint_writer=writer,
    )

    caplog.set_level(logging.ERROR)
    result = coordinator.crawl()

    assert writer.dump_attempts == 3
    assert "Could not write snapshot" in caplog.text
    sizes = sorted(len(_load(p)["data"]) for p in _dumps(out))
    assert sizes == [2, 3]
    assert result.results_path == out / "crawl-results.json"
    final = _load(result.results_path)
    assert len(final["data"]) == 3
    assert final["crawled_sites"] == 3


def test_start_log_names_config_source(make_config, fake_site, recording_processors, caplog):
    processors, _ = recording_processors(1)
    caplog.set_level(logging.INFO)

    CrawlCoordinator(make_config(config_path="news.yml"), fake_site({R: []}), processors).crawl()
    assert "config=news.yml" in caplog.text

    caplog.clear()
    CrawlCoordinator(make_config(), fake_site({R: []}), processors).crawl()
    assert "config=environment" in caplog.text
