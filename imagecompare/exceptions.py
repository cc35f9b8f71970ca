"""Error types raised by the comparison pipeline.

Structural problems (mismatched grids, empty volumes, bad options) are
exceptions.  Tolerance violations are not: they come back as a failed
``Verdict``.
"""


class ImageCompareError(Exception):
    """Base class for all structural comparison errors."""


class GeometryMismatch(ImageCompareError, ValueError):
    """Two inputs that must share an extent do not."""

    def __init__(self, first, second, first_extent, second_extent):
        self.first = first
        self.second = second
        self.first_extent = tuple(first_extent)
        self.second_extent = tuple(second_extent)
        super().__init__(
            f"Image sizes differ for {first} {self.first_extent} "
            f"and {second} {self.second_extent}"
        )


class EmptyVolume(ImageCompareError, ValueError):
    """A zero-voxel volume reached the statistics aggregator."""

    def __init__(self, extent):
        self.extent = tuple(extent)
        super().__init__(
            f"Cannot summarize an empty volume (extent {self.extent})"
        )


class InvalidConfiguration(ImageCompareError, ValueError):
    """Options or inputs that make the comparison meaningless."""
