from __future__ import annotations

from typing import Iterable, List

from .models import BoardResult, StateSnapshot


def reconcile(boards: Iterable[BoardResult], snapshot: StateSnapshot) -> List[BoardResult]:
    """Apply user state to freshly scraped boards.

    A post whose url has a live deleted record is dropped, even when the url
    also has a live read record. Every other post gets ``is_read`` set from
    the read set. Board order and post order are preserved.
    """
    reconciled: List[BoardResult] = []
    for board in boards:
        posts = tuple(
            post.mark(post.url in snapshot.read_urls)
            for post in board.posts
            if post.url not in snapshot.deleted_urls
        )
        reconciled.append(BoardResult(name=board.name, posts=posts))
    return reconciled
