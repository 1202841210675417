"""
Run parameters for the segmenters.

A ParameterSet is an immutable snapshot held by the caller. Algorithms read
it once at call time, so changing the caller's configuration only affects
later runs. Callers sharing one configuration across threads must
serialize their updates or snapshot it before invoking.
"""

from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .connectivity import Connectivity

# Defaults carried over from the desktop tool this library was extracted from
DEFAULT_THRESHOLD = 128
REGION_GROWING_TOLERANCE = 30
ACTIVE_CONTOURS_ITERATIONS = 100
ACTIVE_CONTOURS_ALPHA = 0.1
ACTIVE_CONTOURS_BETA = 0.2
ACTIVE_CONTOURS_GAMMA = 0.4
KMEANS_CLUSTERS = 2
KMEANS_MAX_ITER = 10
KMEANS_EPSILON = 1.0
GRAPH_CUT_ITERATIONS = 5
SEED_GRID_SIZE = 3


class Preprocess(str, Enum):
    NONE = "none"
    BLUR = "blur"
    BILATERAL = "bilateral"


class Postprocess(str, Enum):
    NONE = "none"
    CLOSE = "close"              # 5x5 ellipse
    CLOSE_LIGHT = "close_light"  # 3x3 rect


@dataclass(frozen=True)
class ParameterSet:
    """Every tunable of every algorithm; each algorithm reads only its own fields."""
    connectivity: Connectivity = Connectivity.FOUR
    preprocess: Preprocess = Preprocess.NONE
    threshold: int = DEFAULT_THRESHOLD
    postprocess: Postprocess = Postprocess.NONE
    seed: Optional[Tuple[int, int]] = None
    tolerance: int = REGION_GROWING_TOLERANCE
    grid_size: int = SEED_GRID_SIZE
    intensity_tolerance: float = DEFAULT_THRESHOLD
    gradient_tolerance: float = DEFAULT_THRESHOLD
    edge_ceiling: float = DEFAULT_THRESHOLD
    iterations: int = ACTIVE_CONTOURS_ITERATIONS
    alpha: float = ACTIVE_CONTOURS_ALPHA
    beta: float = ACTIVE_CONTOURS_BETA
    gamma: float = ACTIVE_CONTOURS_GAMMA
    clusters: int = KMEANS_CLUSTERS

    def __post_init__(self):
        # Accept plain values (4, "blur", ...) as well as the enum members
        object.__setattr__(self, "connectivity", Connectivity(int(self.connectivity)))
        object.__setattr__(self, "preprocess", Preprocess(self.preprocess))
        object.__setattr__(self, "postprocess", Postprocess(self.postprocess))
        if self.seed is not None:
            object.__setattr__(self, "seed", (int(self.seed[0]), int(self.seed[1])))
        self.validate()

    def validate(self) -> None:
        if not 0 <= self.threshold <= 255:
            raise ValueError(f"threshold must be in 0..255, got {self.threshold}")
        if self.tolerance < 0:
            raise ValueError(f"tolerance must be non-negative, got {self.tolerance}")
        if not 2 <= self.grid_size <= 8:
            raise ValueError(f"grid_size must be in 2..8, got {self.grid_size}")
        for name in ("intensity_tolerance", "gradient_tolerance", "edge_ceiling"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")
        if self.iterations < 0:
            raise ValueError(f"iterations must be non-negative, got {self.iterations}")
        if self.clusters < 2:
            raise ValueError(f"clusters must be at least 2, got {self.clusters}")

    def with_updates(self, **changes: Any) -> "ParameterSet":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["connectivity"] = int(self.connectivity)
        data["preprocess"] = self.preprocess.value
        data["postprocess"] = self.postprocess.value
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ParameterSet":
        """Build from a loose mapping, ignoring keys that are not parameters."""
        if not data:
            return cls()
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)
