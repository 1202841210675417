"""
Region segmentation by pixel traversal: flood fill, seeded and edge-aware
region growing, and active-contour relaxation.
"""

from .active_contour import relax
from .connectivity import Connectivity
from .contours import ScoredContour, confidence_score
from .errors import EmptyInput, NoInitialContour, SeedOutOfBounds, SegmentationError, UnknownAlgorithm
from .flood_fill import REGION_MARKER, flood_fill
from .params import ParameterSet, Postprocess, Preprocess
from .presets import get_preset
from .region_growing import MultiRegionResult, grow, grow_multi, seed_grid
from .segmentation import Algorithm, SegmentationResult, run_segmentation

__version__ = "0.1.0"
