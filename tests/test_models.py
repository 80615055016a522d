"""Tests for data model classes."""

import unittest
from datetime import datetime, timezone

from forum_watch.models import (
    BoardResult,
    CrawlResponse,
    CrawlResult,
    HeadlineItem,
    Post,
    StateRecord,
    Status,
)


class TestPost(unittest.TestCase):
    """Verify Post defaults, immutability and serialisation."""

    def test_create_post_with_defaults(self):
        """Post should default brief to empty and is_read to False."""
        post = Post(title="t", url="C.php?bsn=1", time="剛剛")
        self.assertEqual(post.brief, "")
        self.assertFalse(post.is_read)

    def test_post_is_immutable(self):
        """Frozen dataclass should raise on attribute assignment."""
        post = Post(title="t", url="u", time="剛剛")
        with self.assertRaises(AttributeError):
            post.url = "other"

    def test_mark_returns_copy(self):
        """mark() should not modify the original post."""
        post = Post(title="t", url="u", time="剛剛")
        marked = post.mark(True)
        self.assertTrue(marked.is_read)
        self.assertFalse(post.is_read)

    def test_to_dict_uses_is_read_camel_case(self):
        """Serialised posts use the isRead key expected by the display surface."""
        data = Post(title="t", url="u", time="3 分前", brief="b").to_dict()
        self.assertEqual(data, {"title": "t", "url": "u", "time": "3 分前", "brief": "b", "isRead": False})


class TestBoardResult(unittest.TestCase):
    """Verify placeholder naming."""

    def test_error_placeholder(self):
        """Error boards carry an annotated placeholder name and no posts."""
        board = BoardResult.error("看板", "123")
        self.assertEqual(board.name, "看板 123 (Error)")
        self.assertEqual(board.posts, ())


class TestCrawlResult(unittest.TestCase):
    """Verify the crawl data shape."""

    def test_to_dict_and_back(self):
        """from_dict(to_dict()) keeps headlines, boards and generatedAt."""
        result = CrawlResult(
            headlines=(HeadlineItem(title="h", url="https://x/1"),),
            boards=(BoardResult(name="b", posts=(Post(title="p", url="u", time="剛剛", is_read=True),)),),
            generated_at="2026/10/19 12:00:00",
        )
        data = result.to_dict()
        self.assertEqual(set(data), {"headlines", "boards", "generatedAt"})
        self.assertEqual(CrawlResult.from_dict(data), result)


class TestCrawlResponse(unittest.TestCase):
    """Verify the success / failure envelope."""

    def test_failure_envelope(self):
        """Failures carry only success=False and the error message."""
        self.assertEqual(CrawlResponse.failure("boom").to_dict(), {"success": False, "error": "boom"})

    def test_success_envelope(self):
        """Successes wrap the crawl data."""
        result = CrawlResult(headlines=(), boards=(), generated_at="now")
        self.assertEqual(
            CrawlResponse.ok(result).to_dict(),
            {"success": True, "data": {"headlines": [], "boards": [], "generatedAt": "now"}},
        )


class TestStatus(unittest.TestCase):
    """Verify the action -> status mapping."""

    def test_actions_map_to_statuses(self):
        self.assertIs(Status.from_action("read"), Status.READ)
        self.assertIs(Status.from_action("delete"), Status.DELETED)

    def test_unknown_action_raises(self):
        with self.assertRaises(ValueError) as ctx:
            Status.from_action("archive")
        self.assertIn("archive", str(ctx.exception))


class TestStateRecord(unittest.TestCase):

    def test_to_row(self):
        """Row carries the status value and an ISO-8601 created_at."""
        ts = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)
        row = StateRecord(url="A", status=Status.READ, timestamp=ts).to_row()
        self.assertEqual(row, {"url": "A", "status": "read", "created_at": "2026-10-01T12:00:00+00:00"})


if __name__ == "__main__":
    unittest.main()
