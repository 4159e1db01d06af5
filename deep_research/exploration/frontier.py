"""Priority frontier of pending exploration nodes."""

import itertools
from typing import Iterator, Optional

from ..models import ExplorationNode


class Frontier:
    """
    Pending nodes ordered by descending relevance score.

    Ties are broken by insertion order. Scores may change after a node is
    pushed (a parent's score is only known once it has been explored), so
    the ordering is recomputed on every pop rather than fixed at push time.
    """

    def __init__(self):
        self._entries: list[tuple[int, ExplorationNode]] = []
        self._sequence = itertools.count()
        self._enqueued: set[int] = set()

    def push(self, node: ExplorationNode) -> None:
        """Add a node. Each node may be enqueued once, and only before it is explored."""
        if node.explored:
            raise ValueError(f"Cannot enqueue explored node: {node.query!r}")
        if id(node) in self._enqueued:
            raise ValueError(f"Node already enqueued: {node.query!r}")
        self._enqueued.add(id(node))
        self._entries.append((next(self._sequence), node))

    def pop_highest(self) -> Optional[ExplorationNode]:
        """Remove and return the highest-scoring node, or ``None`` when empty."""
        if not self._entries:
            return None
        self._entries.sort(key=lambda entry: (-entry[1].relevance_score, entry[0]))
        _, node = self._entries.pop(0)
        return node

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __iter__(self) -> Iterator[ExplorationNode]:
        return (node for _, node in self._entries)
