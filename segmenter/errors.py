"""
Typed failures raised by the segmentation algorithms.
All of them are ValueError subclasses so callers that already guard
against bad input with ``except ValueError`` keep working.
"""


class SegmentationError(ValueError):
    """Base class for segmentation failures."""


class EmptyInput(SegmentationError):
    """The raster has no pixels to process."""


class NoInitialContour(SegmentationError):
    """Snake initialization found no closed edge contour."""


class SeedOutOfBounds(SegmentationError):
    """A caller-supplied seed lies outside the raster."""

    def __init__(self, seed, shape):
        self.seed = seed
        self.shape = shape
        super().__init__(
            f"Seed point {seed} is outside image bounds ({shape[1]}x{shape[0]})"
        )


class UnknownAlgorithm(SegmentationError):
    """The dispatcher was given a tag it does not know."""
