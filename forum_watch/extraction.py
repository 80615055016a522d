from __future__ import annotations

from typing import Iterable, List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from .config import SelectorConfig
from .models import BoardResult, HeadlineItem, Post

DEFAULT_SELECTORS = SelectorConfig()


def _text(el: Optional[Tag]) -> str:
    return el.get_text().strip() if el is not None else ""


def _is_sticky(row: Tag, sticky_class: str) -> bool:
    return sticky_class in (row.get("class") or [])


def _contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(k in text for k in keywords)


def extract_board(
    html: str,
    board_id: str,
    limit: int,
    exclude_keywords: Iterable[str],
    freshness_keywords: Iterable[str],
    selectors: SelectorConfig = DEFAULT_SELECTORS,
    label: str = "看板",
) -> BoardResult:
    """Turn a rendered board page into a BoardResult.

    Rows are scanned in document order. Sticky rows and rows without a title
    or time element are skipped. A row is dropped when its title contains an
    exclude keyword, or when its time text contains none of the freshness
    keywords. Scanning stops once ``limit`` posts have been collected.
    """
    soup = BeautifulSoup(html, "lxml")
    exclude = tuple(exclude_keywords)
    fresh = tuple(freshness_keywords)

    name = _text(soup.select_one(selectors.board_name)) or BoardResult.placeholder_name(label, board_id)

    posts: List[Post] = []
    for row in soup.select(selectors.board_row):
        if len(posts) >= limit:
            break
        if _is_sticky(row, selectors.sticky_class):
            continue

        title_el = row.select_one(selectors.post_title)
        time_el = row.select_one(selectors.post_time)
        if title_el is None or time_el is None:
            continue

        title = _text(title_el)
        time_text = _text(time_el)
        if _contains_any(title, exclude):
            continue
        if not _contains_any(time_text, fresh):
            continue

        posts.append(
            Post(
                title=title,
                url=title_el.get("href") or "",
                time=time_text,
                brief=_text(row.select_one(selectors.post_brief)),
            )
        )

    return BoardResult(name=name, posts=tuple(posts))


def extract_headlines(
    html: str,
    base_url: str,
    selectors: SelectorConfig = DEFAULT_SELECTORS,
) -> List[HeadlineItem]:
    """Collect the portal headline carousel; links are resolved to absolute URLs."""
    soup = BeautifulSoup(html, "lxml")
    items: List[HeadlineItem] = []
    for node in soup.select(selectors.headline_item):
        title = _text(node.select_one(selectors.headline_title))
        link = node.select_one(selectors.headline_link)
        href = link.get("href") if link is not None else None
        if title and href:
            items.append(HeadlineItem(title=title, url=urljoin(base_url, href)))
    return items
