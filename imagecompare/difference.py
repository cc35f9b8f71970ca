"""Voxel-wise absolute difference."""

import numpy as np

from imagecompare.geometry import check_congruent


def difference(a, b):
    """Return |a - b| as a new volume on a's grid.

    Commutative; raises GeometryMismatch if the extents differ.
    """
    check_congruent(a, b, "image A", "image B")
    return a.derive(np.abs(a.data - b.data))
