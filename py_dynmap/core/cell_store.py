"""
Memoized access to generated cell sets.

A CellStore owns the only mutable state in the engine: a small LRU map
from seed string to the finished, immutable tuple of cells. Generation for
a seed runs at most once at a time; the entry is published only after the
tuple is complete, so readers never see a partial set. A miss recomputes
the same result, so correctness never depends on what is cached.
"""

import threading
from collections import OrderedDict
from typing import Callable, Dict, List, Optional, Tuple

import structlog

from .. import config
from .generator import generate_cells
from .models import Cell

logger = structlog.get_logger()

CellSet = Tuple[Cell, ...]


class CellStore:
    """Seed-keyed cache of generated planets."""

    def __init__(
        self,
        max_seeds: int = 1,
        generate: Optional[Callable[[str], CellSet]] = None,
    ):
        """
        Initialize an empty store.

        Args:
            max_seeds: Seeds kept before the least recently used is evicted
            generate: Generation function, ``generate_cells`` by default
        """
        self.max_seeds = max(1, int(max_seeds))
        self._generate = generate or generate_cells
        self._entries: "OrderedDict[str, CellSet]" = OrderedDict()
        self._lock = threading.Lock()
        self._seed_locks: Dict[str, threading.Lock] = {}

    def _lookup(self, seed: str) -> Optional[CellSet]:
        cells = self._entries.get(seed)
        if cells is not None:
            self._entries.move_to_end(seed)
        return cells

    def get(self, seed: str) -> CellSet:
        """All cells for ``seed``, generating them on a miss."""
        seed = "" if seed is None else str(seed)
        with self._lock:
            cells = self._lookup(seed)
            if cells is not None:
                logger.debug("Cell store hit", seed=seed)
                return cells
            seed_lock = self._seed_locks.setdefault(seed, threading.Lock())

        with seed_lock:
            try:
                # Another thread may have published while we waited
                with self._lock:
                    cells = self._lookup(seed)
                if cells is not None:
                    return cells

                logger.debug("Cell store miss", seed=seed)
                cells = tuple(self._generate(seed))

                with self._lock:
                    self._entries[seed] = cells
                    self._entries.move_to_end(seed)
                    while len(self._entries) > self.max_seeds:
                        evicted, _ = self._entries.popitem(last=False)
                        logger.debug("Cell store evicted seed", seed=evicted)
                return cells
            finally:
                with self._lock:
                    if self._seed_locks.get(seed) is seed_lock:
                        del self._seed_locks[seed]

    def slice(self, seed: str, start: int, end: int) -> CellSet:
        """
        Cells with ids ``start..end`` inclusive (1-based).

        Out-of-range bounds are clipped; an inverted range is empty.
        """
        cells = self.get(seed)
        if end < start:
            return ()
        return cells[max(start, 1) - 1:max(end, 0)]

    def get_cell(self, seed: str, cell_id: int) -> Optional[Cell]:
        cells = self.get(seed)
        if 1 <= cell_id <= len(cells):
            return cells[cell_id - 1]
        return None

    def cached_seeds(self) -> List[str]:
        """Cached seeds, least recently used first."""
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


_default_store: Optional[CellStore] = None
_default_store_lock = threading.Lock()


def get_default_store() -> CellStore:
    """Process-wide store configured from settings."""
    global _default_store
    with _default_store_lock:
        if _default_store is None:
            def generate(seed: str) -> CellSet:
                return generate_cells(
                    seed,
                    workers=config.settings.generation_workers,
                    chunk_size=config.settings.generation_chunk_size,
                )

            _default_store = CellStore(max_seeds=config.settings.cache_max_seeds, generate=generate)
        return _default_store


def generate_all_cells_rebalanced(seed: str) -> CellSet:
    """Every cell of the planet for ``seed``, memoized by the default store."""
    return get_default_store().get(seed)
