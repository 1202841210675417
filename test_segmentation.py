"""
Tests for algorithm dispatch and the uniform result shape.
"""

import cv2
import numpy as np
import pytest

from segmenter import (
    Algorithm, EmptyInput, NoInitialContour, ParameterSet, SegmentationResult,
    UnknownAlgorithm, run_segmentation,
)
from segmenter.flood_fill import REGION_MARKER


def create_test_image():
    """Bright rectangle and a darker disc on a dark background."""
    img = np.zeros((120, 160, 3), dtype=np.uint8)
    img[:] = (50, 50, 50)
    cv2.rectangle(img, (30, 30), (130, 90), (220, 220, 220), -1)
    cv2.circle(img, (80, 60), 12, (120, 120, 120), -1)
    return img


@pytest.mark.parametrize("algorithm", list(Algorithm))
def test_every_algorithm_returns_a_result(algorithm):
    image = create_test_image()

    result = run_segmentation(image, algorithm)

    assert isinstance(result, SegmentationResult)
    assert result.algorithm is algorithm
    assert "num_regions" in result.stats
    if algorithm is Algorithm.ACTIVE_CONTOUR:
        assert result.labels is None
        assert result.snake.ndim == 2 and result.snake.shape[1] == 2
    else:
        assert result.labels.shape == image.shape[:2]
        assert 0.0 <= result.stats["foreground_ratio"] <= 1.0


def test_string_tags_are_accepted():
    result = run_segmentation(create_test_image(), "region_growing")
    assert result.algorithm is Algorithm.REGION_GROWING


def test_unknown_tag_is_rejected():
    with pytest.raises(UnknownAlgorithm):
        run_segmentation(create_test_image(), "mean_shift")

    # Still a ValueError for callers that only guard against bad input
    with pytest.raises(ValueError):
        run_segmentation(create_test_image(), "mean_shift")


def test_empty_input_is_reported_before_running():
    with pytest.raises(EmptyInput):
        run_segmentation(np.zeros((0, 0, 3), dtype=np.uint8), Algorithm.FLOOD_FILL)


def test_snake_on_degenerate_image_reports_missing_contour():
    with pytest.raises(NoInitialContour):
        run_segmentation(np.zeros((0, 0), dtype=np.uint8), Algorithm.ACTIVE_CONTOUR)


def test_flood_fill_variants_impose_their_structure():
    image = create_test_image()
    params = ParameterSet(threshold=100)

    basic = run_segmentation(image, Algorithm.FLOOD_FILL, params)
    eight = run_segmentation(image, Algorithm.FLOOD_FILL_8, params)
    denoised = run_segmentation(image, Algorithm.FLOOD_FILL_DENOISED, params)
    bilateral = run_segmentation(image, Algorithm.FLOOD_FILL_BILATERAL, params)

    assert basic.stats["connectivity"] == 4
    assert eight.stats["connectivity"] == 8
    assert denoised.stats["preprocess"] == "blur"
    assert bilateral.stats["preprocess"] == "bilateral"
    assert bilateral.stats["postprocess"] == "close"
    for result in (basic, eight, denoised, bilateral):
        assert result.stats["threshold"] == 100


def test_flood_fill_stats_count_absorbed_pixels():
    image = create_test_image()
    result = run_segmentation(image, Algorithm.FLOOD_FILL, {"threshold": 100})

    # Center lies on the disc (120), which clears the threshold with the rectangle
    assert result.stats["area_pixels"] == int(np.count_nonzero(result.labels == REGION_MARKER))
    assert result.labels[60, 80] == REGION_MARKER
    assert result.labels[60, 40] == REGION_MARKER
    assert result.labels[5, 5] == 0


def test_dict_params_ignore_unknown_keys():
    result = run_segmentation(create_test_image(), Algorithm.REGION_GROWING,
                              {"tolerance": 0, "canny_low": 20})
    assert result.stats["area_pixels"] == 1


def test_edge_enhanced_reports_contour_confidences():
    result = run_segmentation(create_test_image(), Algorithm.EDGE_ENHANCED,
                              ParameterSet(intensity_tolerance=60, gradient_tolerance=60, edge_ceiling=60))

    assert result.stats["num_regions"] == len(result.contours)
    assert result.stats["confidences"] == [round(c.confidence, 4) for c in result.contours]


def test_otsu_reports_threshold():
    result = run_segmentation(create_test_image(), Algorithm.OTSU)
    assert 50 <= result.stats["computed_threshold"] < 220
