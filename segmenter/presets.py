"""
Named parameter sets for the segmenters, plus image-driven preset suggestion.
"""

import cv2
import numpy as np

from . import image_processing as ip
from .connectivity import Connectivity
from .params import ParameterSet, Postprocess, Preprocess

# Structural fields that define a flood-fill variant
VARIANT_FIELDS = ("connectivity", "preprocess", "postprocess")

PRESETS = {
    "basic": ParameterSet(
        connectivity=Connectivity.FOUR,
        preprocess=Preprocess.NONE,
        postprocess=Postprocess.NONE,
    ),
    "eight_connected": ParameterSet(
        connectivity=Connectivity.EIGHT,
        preprocess=Preprocess.NONE,
        postprocess=Postprocess.NONE,
    ),
    "noise_reduced": ParameterSet(
        connectivity=Connectivity.EIGHT,
        preprocess=Preprocess.BLUR,
        postprocess=Postprocess.CLOSE_LIGHT,
    ),
    "bilateral": ParameterSet(
        connectivity=Connectivity.FOUR,
        preprocess=Preprocess.BILATERAL,
        postprocess=Postprocess.CLOSE,
    ),
    "region_growing": ParameterSet(tolerance=30),
    "edge_enhanced": ParameterSet(grid_size=3, intensity_tolerance=128,
                                  gradient_tolerance=128, edge_ceiling=128),
    "active_contour": ParameterSet(iterations=100, alpha=0.1, beta=0.2, gamma=0.4),
}

FLOOD_FILL_VARIANTS = ("basic", "eight_connected", "noise_reduced", "bilateral")


def get_preset(name: str) -> ParameterSet:
    key = name.lower()
    if key not in PRESETS:
        raise ValueError(f"Unknown preset: {name}")
    return PRESETS[key]


def apply_variant(params: ParameterSet, name: str) -> ParameterSet:
    """Impose a flood-fill variant's structure on the caller's parameters, keeping the rest."""
    variant = get_preset(name)
    return params.with_updates(**{f: getattr(variant, f) for f in VARIANT_FIELDS})


def analyze_image(image):
    gray = ip.to_gray(image)
    mean_intensity = float(np.mean(gray))
    std_intensity = float(np.std(gray))
    # Sharpness via variance of Laplacian
    lap = cv2.Laplacian(gray, cv2.CV_64F)
    sharpness = float(lap.var())
    # Contrast proxy via percentile spread
    p5, p95 = np.percentile(gray, [5, 95])
    dynamic_range = float(p95 - p5)
    return {
        "mean": round(mean_intensity, 2),
        "std": round(std_intensity, 2),
        "sharpness": round(sharpness, 2),
        "dynamic_range": round(dynamic_range, 2),
    }


def suggest_preset(metrics) -> str:
    """Pick a flood-fill variant from analyze_image() metrics."""
    sharp = metrics["sharpness"]
    std_v = metrics["std"]
    dyn = metrics["dynamic_range"]

    # Very high Laplacian variance on a low-contrast image is mostly noise
    if sharp > 1000 and dyn < 120:
        return "bilateral"
    if sharp > 500:
        return "noise_reduced"
    if std_v > 60 and dyn > 120:
        return "eight_connected"
    return "basic"
