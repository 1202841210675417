"""
Connectivity policy and visited-grid states for the BFS segmenters.
Coordinates are (x, y) pairs; grids are indexed [y, x].
"""

from enum import IntEnum

import numpy as np

# Visited grid states. Anything other than UNVISITED is monotonic.
UNVISITED = 0
QUEUED = 1
ASSIGNED = 2
REJECTED = 3

# Orthogonal moves first, diagonals after
ORTHOGONAL_OFFSETS = ((1, 0), (-1, 0), (0, 1), (0, -1))
DIAGONAL_OFFSETS = ((1, 1), (-1, -1), (1, -1), (-1, 1))


class Connectivity(IntEnum):
    FOUR = 4
    EIGHT = 8

    @property
    def offsets(self):
        if self is Connectivity.FOUR:
            return ORTHOGONAL_OFFSETS
        return ORTHOGONAL_OFFSETS + DIAGONAL_OFFSETS


def is_diagonal(dx, dy):
    return dx != 0 and dy != 0


def bridge_neighbors(x, y, dx, dy):
    """The two orthogonal pixels sharing an edge with both (x, y) and (x+dx, y+dy)."""
    return (x + dx, y), (x, y + dy)


def in_bounds(x, y, width, height):
    return 0 <= x < width and 0 <= y < height


def new_state_grid(shape):
    return np.full(shape[:2], UNVISITED, dtype=np.uint8)


def image_center(shape):
    height, width = shape[:2]
    return width // 2, height // 2
