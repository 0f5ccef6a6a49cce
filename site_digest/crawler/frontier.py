"""
Frontier queue and visited-set gate for a single crawl.

Both containers live inside one event loop. Methods never await, so every
call runs to completion before another coroutine can observe the state.
"""
from __future__ import annotations

from collections import deque
from typing import Deque, Iterable, List, Set


class Frontier:
    """FIFO of URLs waiting for a visit."""

    def __init__(self, seed: Iterable[str] = ()) -> None:
        self._queue: Deque[str] = deque(seed)

    def push(self, url: str) -> None:
        self._queue.append(url)

    def extend(self, urls: Iterable[str]) -> None:
        self._queue.extend(urls)

    def take(self, n: int) -> List[str]:
        """Remove and return up to *n* URLs from the front."""
        batch: List[str] = []
        while self._queue and len(batch) < n:
            batch.append(self._queue.popleft())
        return batch

    def __len__(self) -> int:
        return len(self._queue)

    def __bool__(self) -> bool:
        return bool(self._queue)


class VisitedSet:
    """URLs already claimed for fetching in the current crawl."""

    def __init__(self) -> None:
        self._seen: Set[str] = set()

    def claim(self, url: str) -> bool:
        """Insert *url*; return True only for the first caller."""
        if url in self._seen:
            return False
        self._seen.add(url)
        return True

    def __contains__(self, url: object) -> bool:
        return url in self._seen

    def __len__(self) -> int:
        return len(self._seen)
