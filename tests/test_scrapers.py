"""Tests for HeadlineScraper and BoardScraper against fake pages."""

import unittest

from forum_watch.backoff import BackoffStrategy
from forum_watch.metrics import MetricsCollector
from forum_watch.obstacles import ObstacleHandler
from forum_watch.scrapers import BoardScraper, HeadlineScraper
from tests.fakes import FakeDocument, FakePage, board_html, headlines_html, make_config, row

BOARD_URL = "https://forum.example/B.php?bsn=100"
PORTAL_URL = "https://portal.example/"


def _deps(config):
    return dict(
        obstacles=ObstacleHandler.from_config(config.obstacles, config.timeouts),
        backoff=BackoffStrategy(0.0, 0.0, sleep=lambda s: None),
        metrics=MetricsCollector(),
    )


class TestBoardScraper(unittest.TestCase):
    """Verify board scraping end to end on canned markup."""

    def setUp(self):
        self.config = make_config()
        self.scraper = BoardScraper(self.config, **_deps(self.config))

    def test_scrape_board_filters_rows(self):
        html = board_html(
            [
                row("pinned", "剛剛", href="S", sticky=True),
                row("keep 1", "剛剛", href="A"),
                row("公告 banned", "剛剛", href="X"),
                row("stale", "2024/01/01", href="Y"),
                row("keep 2", "5 分前", href="B"),
            ],
            name="測試看板",
        )
        page = FakePage({BOARD_URL: FakeDocument(html=html, title="測試看板")})
        board = self.scraper.scrape(page, "100")
        self.assertEqual(board.name, "測試看板")
        self.assertEqual([p.url for p in board.posts], ["A", "B"])
        self.assertEqual(page.visited, [BOARD_URL])

    def test_selector_timeout_yields_error_placeholder(self):
        page = FakePage({BOARD_URL: FakeDocument(missing=[self.config.selectors.board_row])})
        with self.assertLogs("forum_watch.base", level="ERROR"):
            board = self.scraper.scrape(page, "100")
        self.assertEqual(board.name, "看板 100 (Error)")
        self.assertEqual(board.posts, ())

    def test_unresolved_challenge_yields_error_placeholder(self):
        page = FakePage({BOARD_URL: FakeDocument(title="Just a moment...")})
        with self.assertLogs("forum_watch.base", level="ERROR"):
            board = self.scraper.scrape(page, "100")
        self.assertEqual(board.name, "看板 100 (Error)")

    def test_consent_gate_clicked_before_extraction(self):
        html = board_html([row("keep", "剛剛", href="A")])
        page = FakePage({BOARD_URL: FakeDocument(html=html, present=["text=我已滿18歲"])})
        board = self.scraper.scrape(page, "100")
        self.assertEqual(page.clicked, ["text=我已滿18歲"])
        self.assertEqual(len(board.posts), 1)

    def test_empty_board_id_yields_placeholder(self):
        with self.assertLogs("forum_watch.base", level="ERROR"):
            board = self.scraper.scrape(FakePage({}), "")
        self.assertEqual(board.posts, ())


class TestHeadlineScraper(unittest.TestCase):
    """Verify headline scraping is best-effort."""

    def setUp(self):
        self.config = make_config()
        self.scraper = HeadlineScraper(self.config, **_deps(self.config))

    def test_scrape_headlines(self):
        html = headlines_html([("One", "/a"), ("Two", "/b")])
        page = FakePage({PORTAL_URL: FakeDocument(html=html)})
        items = self.scraper.scrape(page)
        self.assertEqual([i.url for i in items], ["https://portal.example/a", "https://portal.example/b"])

    def test_missing_wrapper_is_tolerated(self):
        page = FakePage({PORTAL_URL: FakeDocument(missing=[self.config.selectors.headline_wrapper])})
        self.assertEqual(self.scraper.scrape(page), [])

    def test_navigation_failure_returns_empty(self):
        page = FakePage({PORTAL_URL: FakeDocument(goto_error=TimeoutError("page load"))})
        with self.assertLogs("forum_watch.base", level="ERROR"):
            self.assertEqual(self.scraper.scrape(page), [])


if __name__ == "__main__":
    unittest.main()
