"""
Segmentation dispatch.
Maps a closed set of algorithm tags onto the segmenters and wraps their
output in a uniform SegmentationResult.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Dict, List, Optional, Union

import cv2
import numpy as np

from . import collaborators
from .active_contour import relax
from .contours import ScoredContour
from .errors import UnknownAlgorithm
from .flood_fill import REGION_MARKER, flood_fill
from .image_processing import check_image
from .params import ParameterSet
from .presets import apply_variant
from .region_growing import grow, grow_multi

logger = logging.getLogger(__name__)


class Algorithm(str, Enum):
    FLOOD_FILL = "flood_fill"
    FLOOD_FILL_8 = "flood_fill_8"
    FLOOD_FILL_DENOISED = "flood_fill_denoised"
    FLOOD_FILL_BILATERAL = "flood_fill_bilateral"
    REGION_GROWING = "region_growing"
    EDGE_ENHANCED = "edge_enhanced"
    ACTIVE_CONTOUR = "active_contour"
    KMEANS = "kmeans"
    OTSU = "otsu"
    WATERSHED = "watershed"
    GRAPH_CUT = "graph_cut"


@dataclass
class SegmentationResult:
    """Data class for segmentation results."""
    algorithm: Algorithm
    labels: Optional[np.ndarray]
    contours: List[ScoredContour] = field(default_factory=list)
    snake: Optional[np.ndarray] = None
    stats: Dict = field(default_factory=dict)


def run_segmentation(
    image: np.ndarray,
    algorithm: Union[Algorithm, str],
    params: Optional[Union[ParameterSet, Dict]] = None,
) -> SegmentationResult:
    """
    Run image segmentation using the specified algorithm.

    Args:
        image: BGR or grayscale image
        algorithm: Algorithm tag or its string value
        params: ParameterSet, or a plain dict of its fields

    Returns:
        SegmentationResult with the label grid (or snake) and statistics

    Raises:
        UnknownAlgorithm: if the tag is not recognized
        EmptyInput: if the image has no pixels
    """
    try:
        algorithm = Algorithm(algorithm)
    except ValueError:
        raise UnknownAlgorithm(f"Unknown segmentation algorithm: {algorithm}") from None

    if not isinstance(params, ParameterSet):
        params = ParameterSet.from_dict(params)

    method_map = {
        Algorithm.FLOOD_FILL: partial(_run_flood_fill, variant="basic"),
        Algorithm.FLOOD_FILL_8: partial(_run_flood_fill, variant="eight_connected"),
        Algorithm.FLOOD_FILL_DENOISED: partial(_run_flood_fill, variant="noise_reduced"),
        Algorithm.FLOOD_FILL_BILATERAL: partial(_run_flood_fill, variant="bilateral"),
        Algorithm.REGION_GROWING: _run_region_growing,
        Algorithm.EDGE_ENHANCED: _run_edge_enhanced,
        Algorithm.ACTIVE_CONTOUR: _run_active_contour,
        Algorithm.KMEANS: partial(_run_collaborator, segment=collaborators.segment_kmeans),
        Algorithm.OTSU: partial(_run_collaborator, segment=collaborators.segment_otsu),
        Algorithm.WATERSHED: partial(_run_collaborator, segment=collaborators.segment_watershed),
        Algorithm.GRAPH_CUT: partial(_run_collaborator, segment=collaborators.segment_graph_cut),
    }

    # The snake reports its own failure for degenerate input
    if algorithm is not Algorithm.ACTIVE_CONTOUR:
        check_image(image)

    logger.info("Running %s segmentation", algorithm.value)
    labels, extras = method_map[algorithm](image, params)
    return SegmentationResult(algorithm, labels, **extras)


def _run_flood_fill(image, params, variant):
    params = apply_variant(params, variant)
    labels = flood_fill(image, params)
    stats = _calculate_stats(labels == REGION_MARKER, {
        "num_regions": 1,
        "method_specific": f"flood_fill_{int(params.connectivity)}dir",
        "threshold": params.threshold,
        "connectivity": int(params.connectivity),
        "preprocess": params.preprocess.value,
        "postprocess": params.postprocess.value,
    })
    return labels, {"stats": stats}


def _run_region_growing(image, params):
    mask = grow(image, params.seed, params.tolerance)
    stats = _calculate_stats(mask > 0, {
        "num_regions": 1,
        "method_specific": "region_growing",
        "tolerance": params.tolerance,
        "seed": list(params.seed) if params.seed else "center",
    })
    return mask, {"stats": stats}


def _run_edge_enhanced(image, params):
    grown = grow_multi(
        image,
        grid_size=params.grid_size,
        intensity_tol=params.intensity_tolerance,
        gradient_tol=params.gradient_tolerance,
        edge_ceiling=params.edge_ceiling,
    )
    stats = _calculate_stats(grown.labels > 0, {
        "num_regions": len(grown.regions),
        "method_specific": "edge_enhanced_region_growing",
        "grid_size": params.grid_size,
        "seeds_used": len(np.unique(grown.labels[grown.labels > 0])),
        "confidences": [round(r.confidence, 4) for r in grown.regions],
    })
    return grown.labels, {"contours": grown.regions, "stats": stats}


def _run_active_contour(image, params):
    snake = relax(image, params.iterations, params.alpha, params.gamma, params.beta)
    enclosed = cv2.contourArea(snake.astype(np.float32))
    return None, {"snake": snake, "stats": {
        "num_regions": 1,
        "method_specific": "active_contour_snake",
        "num_points": int(len(snake)),
        "enclosed_area": round(float(enclosed), 2),
        "iterations": params.iterations,
        "alpha": params.alpha,
        "beta": params.beta,
        "gamma": params.gamma,
    }}


def _run_collaborator(image, params, segment):
    labels, method_stats = segment(image, params)
    return labels, {"stats": _calculate_stats(labels > 0, method_stats)}


def _calculate_stats(foreground: np.ndarray, method_stats: Dict) -> Dict:
    """Calculate final statistics for the segmentation result."""
    foreground_pixels = int(np.count_nonzero(foreground))
    total_pixels = foreground.size

    foreground_ratio = foreground_pixels / total_pixels if total_pixels > 0 else 0

    # Count regions
    contours, _ = cv2.findContours(foreground.astype(np.uint8), cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)

    return {
        "num_regions": method_stats.get("num_regions", len(contours)),
        "area_pixels": foreground_pixels,
        "foreground_ratio": round(foreground_ratio, 4),
        **method_stats,
    }
