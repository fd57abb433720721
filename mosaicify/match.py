# mosaicify/match.py
from __future__ import annotations

"""
Nearest-tile search.

Score = sum over pixels of the Euclidean norm of the per-pixel feature
difference (not averaged, not squared). Lower is better. Ties go to the
lowest tile index so results do not depend on worker count.
"""

from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Optional, Set

import numpy as np

from .core_types import FeatureMap, Match, assert_same_shape
from .errors import InvariantViolation
from .library import TileLibrary
from .utils import split_range


def distance_score(block_features: FeatureMap, tile_features: FeatureMap) -> float:
    """Sum of per-pixel L2 distances between two (H, W, C) feature maps."""
    assert_same_shape(block_features, tile_features, "feature map")
    diff = block_features.astype(np.float32, copy=False) - tile_features
    per_pixel = np.sqrt(np.sum(diff * diff, axis=-1))
    return float(per_pixel.sum(dtype=np.float64))


def _score_stack(block_features: FeatureMap, stack: np.ndarray) -> np.ndarray:
    """Scores for a (K, H, W, C) slice of the library. Returns float64 [K]."""
    diff = stack - block_features[None, ...]
    per_pixel = np.sqrt(np.sum(diff * diff, axis=-1))
    return per_pixel.reshape(per_pixel.shape[0], -1).sum(axis=1, dtype=np.float64)


def score_library(
    block_features: FeatureMap,
    library: TileLibrary,
    workers: int = 1,
    pool: Optional[Executor] = None,
) -> np.ndarray:
    """
    Score every tile against one block.

    The library is split into contiguous index chunks scored concurrently.
    Workers only read the block and the library.

    Returns:
      float64 array [N], index-aligned with the library
    """
    stack = library.features
    assert_same_shape(block_features, stack[0], "block/tile feature map")
    block = np.ascontiguousarray(block_features, dtype=np.float32)
    n = stack.shape[0]

    if workers <= 1 or n < 2 * workers:
        return _score_stack(block, stack)

    chunks = split_range(n, workers)
    scores = np.empty((n,), dtype=np.float64)
    own_pool = pool is None
    ex = pool if pool is not None else ThreadPoolExecutor(max_workers=workers)
    try:
        futures = [(s, e, ex.submit(_score_stack, block, stack[s:e])) for s, e in chunks]
        for s, e, fu in futures:
            scores[s:e] = fu.result()
    finally:
        if own_pool:
            ex.shutdown(wait=True)
    return scores


class Matcher:
    """
    Picks the best tile per block and tracks which tiles are used.

    With avoid_duplicates, a tile is not reused until every tile has been
    placed once; the used set is then cleared before the next search.
    """

    def __init__(
        self,
        library: TileLibrary,
        avoid_duplicates: bool = False,
        workers: int = 1,
        pool: Optional[Executor] = None,
    ) -> None:
        self.library = library
        self.avoid_duplicates = avoid_duplicates
        self.workers = workers
        self.pool = pool
        self.used: Set[int] = set()

    def match(self, block_features: FeatureMap) -> Match:
        reset = False
        if self.avoid_duplicates and len(self.used) == len(self.library):
            self.used.clear()
            reset = True

        scores = score_library(block_features, self.library, self.workers, self.pool)
        if self.avoid_duplicates and self.used:
            scores[list(self.used)] = np.inf

        # argmin returns the first minimum: lowest index wins ties
        best = int(np.argmin(scores))
        best_score = float(scores[best])
        if not np.isfinite(best_score):
            raise InvariantViolation(
                f"no eligible tile ({len(self.used)}/{len(self.library)} used)"
            )

        if self.avoid_duplicates:
            self.used.add(best)
        return Match(tile_index=best, score=best_score, reset=reset)


__all__ = ["distance_score", "score_library", "Matcher"]
