"""Tests for reconcile()."""

import unittest

from forum_watch.models import BoardResult, Post, StateSnapshot
from forum_watch.reconciler import reconcile


def _post(url):
    return Post(title=url, url=url, time="剛剛")


class TestReconcile(unittest.TestCase):
    """Verify delete filtering, read flagging and ordering."""

    def test_drops_deleted_and_flags_read(self):
        boards = [BoardResult(name="b", posts=(_post("A"), _post("B")))]
        snapshot = StateSnapshot(read_urls=frozenset({"A"}), deleted_urls=frozenset({"B"}))
        result = reconcile(boards, snapshot)
        self.assertEqual([p.to_dict()["url"] for p in result[0].posts], ["A"])
        self.assertTrue(result[0].posts[0].is_read)

    def test_delete_takes_precedence_over_read(self):
        boards = [BoardResult(name="b", posts=(_post("A"),))]
        snapshot = StateSnapshot(read_urls=frozenset({"A"}), deleted_urls=frozenset({"A"}))
        self.assertEqual(reconcile(boards, snapshot)[0].posts, ())

    def test_unmarked_posts_are_unread(self):
        boards = [BoardResult(name="b", posts=(_post("A"),))]
        self.assertFalse(reconcile(boards, StateSnapshot.empty())[0].posts[0].is_read)

    def test_order_of_boards_and_posts_preserved(self):
        boards = [
            BoardResult(name="first", posts=(_post("1"), _post("2"), _post("3"))),
            BoardResult(name="second", posts=(_post("4"), _post("5"))),
        ]
        snapshot = StateSnapshot(read_urls=frozenset({"3"}), deleted_urls=frozenset({"2", "4"}))
        result = reconcile(boards, snapshot)
        self.assertEqual([b.name for b in result], ["first", "second"])
        self.assertEqual([p.url for p in result[0].posts], ["1", "3"])
        self.assertEqual([p.url for p in result[1].posts], ["5"])

    def test_error_placeholder_passes_through(self):
        boards = [BoardResult.error("看板", "9")]
        self.assertEqual(reconcile(boards, StateSnapshot.empty()), boards)


if __name__ == "__main__":
    unittest.main()
