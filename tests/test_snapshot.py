"""Tests for writing and loading the offline snapshot file."""

import json
import os
import tempfile
import unittest

from forum_watch.errors import StateStoreError
from forum_watch.models import BoardResult, CrawlResult, HeadlineItem, Post, StateSnapshot
from forum_watch.snapshot import load_snapshot, write_snapshot
from tests.fakes import MemoryStore


def _result():
    return CrawlResult(
        headlines=(HeadlineItem(title="頭條", url="https://portal.example/1"),),
        boards=(
            BoardResult(
                name="明日方舟",
                posts=(Post(title="a", url="A", time="剛剛"), Post(title="b", url="B", time="3 分前")),
            ),
        ),
        generated_at="2026/10/19 08:00:00",
    )


class TestSnapshotFile(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "public", "daily-news.json")

    def tearDown(self):
        self.tmp.cleanup()

    def test_write_keeps_data_shape_and_unicode(self):
        write_snapshot(_result(), self.path)
        with open(self.path, encoding="utf-8") as f:
            raw = f.read()
        self.assertIn("明日方舟", raw)
        data = json.loads(raw)
        self.assertEqual(set(data), {"headlines", "boards", "generatedAt"})

    def test_load_reconciles_against_store(self):
        write_snapshot(_result(), self.path)
        store = MemoryStore(StateSnapshot(read_urls=frozenset({"A"}), deleted_urls=frozenset({"B"})))
        loaded = load_snapshot(self.path, store)
        posts = loaded.boards[0].posts
        self.assertEqual([p.url for p in posts], ["A"])
        self.assertTrue(posts[0].is_read)
        self.assertEqual(loaded.generated_at, "2026/10/19 08:00:00")

    def test_load_with_store_failure_applies_no_state(self):
        write_snapshot(_result(), self.path)
        with self.assertLogs("forum_watch.snapshot", level="ERROR"):
            loaded = load_snapshot(self.path, MemoryStore(error=StateStoreError("down")))
        self.assertEqual(len(loaded.boards[0].posts), 2)


if __name__ == "__main__":
    unittest.main()
