"""Path simplification: drop points closer than a minimum separation."""

import logging

import numpy as np

logger = logging.getLogger(__name__)


def simplify_indices(positions: np.ndarray, min_separation: float) -> np.ndarray:
    """Indices of the points kept when enforcing ``min_separation`` (meters).

    A point is accepted once it lies at least ``min_separation`` from the last
    accepted point. The first and last points are always kept; accepted
    interior points that sit too close to the final point give way to it, so
    consecutive outputs stay at least ``min_separation`` apart whenever more
    than the two endpoints survive. Order is never changed.
    """
    positions = np.asarray(positions, dtype=float)
    n = len(positions)
    if n < 2 or min_separation <= 0:
        return np.arange(n)

    kept = [0]
    last = positions[0]
    for i in range(1, n):
        if np.linalg.norm(positions[i] - last) >= min_separation:
            kept.append(i)
            last = positions[i]

    final = n - 1
    if kept[-1] != final:
        while len(kept) > 1 and np.linalg.norm(positions[final] - positions[kept[-1]]) < min_separation:
            kept.pop()
        kept.append(final)

    return np.array(kept, dtype=int)


def simplify_path(positions: np.ndarray, min_separation: float) -> np.ndarray:
    """Reduced copy of ``positions`` (N, 3) honoring ``min_separation``."""
    positions = np.asarray(positions, dtype=float)
    if len(positions) < 2 or min_separation <= 0:
        return positions
    indices = simplify_indices(positions, min_separation)
    logger.info("Path simplified from %d to %d points", len(positions), len(indices))
    return positions[indices]
